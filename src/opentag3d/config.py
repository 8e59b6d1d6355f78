"""
OpenTag3D Configuration
=======================

Defaults for the command-line tools. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (which always win)

Environment variables (all optional):
    OPENTAG3D_TAG_TYPE:   Default tag type (NTAG213, NTAG215, NTAG216)
    OPENTAG3D_OUTPUT_DIR: Where `ot3d encode` writes its files
    OPENTAG3D_PREFIX:     File name prefix for written artifacts
    OPENTAG3D_STRICT:     "1"/"true"/"yes" to fail on any diagnostic

Copyright (c) 2026 OpenTag3D Contributors
"""

from dataclasses import dataclass, field
from pathlib import Path
import os

from opentag3d.errors import TagTypeError
from opentag3d.image.fields import TagType
from opentag3d.image.report import DEFAULT_PREFIX

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class EncoderConfig:
    """
    Settings shared by the `ot3d` commands.

    Attributes:
        default_tag_type: Tag type used when none is given (default: NTAG213)
        output_dir: Directory for written artifacts (default: current directory)
        filename_prefix: Prefix of artifact file names (default: "opentag3d")
        strict: Treat any diagnostic as a failure (default: False)
    """
    default_tag_type: TagType = TagType.NTAG213
    output_dir: Path = field(default_factory=lambda: Path("."))
    filename_prefix: str = DEFAULT_PREFIX
    strict: bool = False

    @classmethod
    def from_env(cls) -> "EncoderConfig":
        """
        Create EncoderConfig from environment variables.

        Invalid values are ignored and the default is kept.

        Returns:
            EncoderConfig with values from environment variables
        """
        config = cls()

        if tag_type := os.environ.get("OPENTAG3D_TAG_TYPE"):
            try:
                config.default_tag_type = TagType.from_name(tag_type)
            except TagTypeError:
                pass  # Keep the default

        if output_dir := os.environ.get("OPENTAG3D_OUTPUT_DIR"):
            config.output_dir = Path(output_dir)

        if prefix := os.environ.get("OPENTAG3D_PREFIX"):
            config.filename_prefix = prefix

        if strict := os.environ.get("OPENTAG3D_STRICT"):
            if strict.lower() in TRUE_VALUES:
                config.strict = True
            elif strict.lower() in FALSE_VALUES:
                config.strict = False

        return config

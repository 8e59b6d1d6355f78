"""
OpenTag3D Error Hierarchy
=========================

This module defines the exception hierarchy for the OpenTag3D toolkit.
All exceptions inherit from OpenTag3DError, allowing callers to catch all
toolkit-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
OpenTag3DError (base)
├── CatalogError - the static field table is inconsistent
├── UnknownFieldError - a key outside the field catalog was addressed
├── TagTypeError - an unknown NTAG type name was given
├── ImageFormatError - a binary tag image cannot be parsed
└── ValuesFileError - a values file is not a JSON object of scalars

Encoding Problems Are Not Exceptions
------------------------------------
Bad field values (a malformed date, an out-of-range temperature, a URL
with non-ASCII characters) never raise. The encoder always returns a
best-effort image together with a list of human-readable diagnostics.
The exceptions below are reserved for programming and input-file errors
that make it impossible to produce a result at all.

Copyright (c) 2026 OpenTag3D Contributors
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class OpenTag3DError(Exception):
    """
    Base exception for all OpenTag3D errors.

    All exceptions in the toolkit inherit from this class, allowing callers
    to catch every toolkit error with a single except clause:

        try:
            image = TagImageParser.from_file("spool.bin")
        except OpenTag3DError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Catalog and Lookup Exceptions
# =============================================================================

class CatalogError(OpenTag3DError):
    """
    The field catalog failed its layout check.

    Raised at import time when the static field table contains duplicate
    keys, overlapping byte ranges, or fields outside their region. Seeing
    this error means the table itself was edited incorrectly.

    Attributes:
        problems: Every layout problem that was found
    """

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        details = "; ".join(self.problems)
        super().__init__(f"Invalid field catalog: {details}")


class UnknownFieldError(OpenTag3DError, KeyError):
    """
    A field key that is not part of the catalog was addressed.

    Attributes:
        key: The offending key
        hint: Similar known keys, when any were found
    """

    def __init__(self, key: str, hint: Optional[str] = None):
        self.key = key
        self.hint = hint
        message = f"Unknown field '{key}'"
        if hint:
            message += f" ({hint})"
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class TagTypeError(OpenTag3DError, ValueError):
    """An NTAG type name that is not one of NTAG213, NTAG215 or NTAG216."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unknown tag type '{name}'. Valid types are: NTAG213, NTAG215, NTAG216"
        )


# =============================================================================
# File Exceptions
# =============================================================================

class ImageFormatError(OpenTag3DError):
    """
    A binary tag image could not be parsed.

    Images are expected to start at address 0x10 and to be no longer than
    the addressable area of the largest supported tag.
    """
    pass


class ValuesFileError(OpenTag3DError):
    """
    A values file could not be used as encoder input.

    Values files are JSON objects mapping field keys to strings, numbers,
    or null (the explicit "unset" marker).

    Attributes:
        path: The file that was being read (optional)
    """

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)

"""
OpenTag3D Command-Line Interface
================================

This package provides the `ot3d` command-line tool, a Click-based
front end to the tag image builder:

- **encode**: Build the binary image and its JSON/CSV maps
- **dump**: Show the hex preview of an image
- **fields**: List the field catalog
- **template**: Print an example values file
- **decode**: Read a binary image back into values
"""

__all__ = ["ot3d"]

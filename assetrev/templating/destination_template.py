"""Destination path rendering for revisioned assets.

This module provides the DestinationTemplate class which renders a destination
path from a template string and a file's source directory, filename, extension
and fingerprint.

Placeholders are substituted literally, in this order:
    1. %srcdir%       - Source directory relative to the scan root (ends in /)
    2. %srcext%       - Extension including its leading dot, empty if none
    3. %srcfilename%  - Filename without extension
    4. %crc32%        - Fingerprint (%fingerprint% is accepted as an alias)

Example:
    >>> template = DestinationTemplate("%srcdir%%srcfilename%.%crc32%%srcext%")
    >>> template.render("images/", "photo", ".png", "a1b2c3d4")
    'images/photo.a1b2c3d4.png'
"""

from typing import Tuple

from assetrev.models import DEFAULT_DEST_TEMPLATE

SRCDIR = "%srcdir%"
SRCEXT = "%srcext%"
SRCFILENAME = "%srcfilename%"
CRC32 = "%crc32%"
FINGERPRINT = "%fingerprint%"

PLACEHOLDERS = (SRCDIR, SRCEXT, SRCFILENAME, CRC32, FINGERPRINT)

DEFAULT_TEMPLATE = DEFAULT_DEST_TEMPLATE


def split_filename(name: str) -> Tuple[str, str]:
    """Split a filename at its final dot.

    The extension keeps its leading dot. A name without a dot has an empty
    extension, and a dotfile such as ``.bashrc`` is all extension.

    Args:
        name: Base filename, without any directory part.

    Returns:
        Tuple of (filename without extension, extension).
    """
    index = name.rfind(".")
    if index < 0:
        return name, ""
    return name[:index], name[index:]


class DestinationTemplate:
    """Renders destination paths from a placeholder template.

    Substitution is plain string replacement. A value that itself contains
    another placeholder's text may be substituted again by a later step;
    such values are not guarded against.

    Attributes:
        template: The raw template string.
    """

    def __init__(self, template: str = DEFAULT_TEMPLATE) -> None:
        self.template = template or DEFAULT_TEMPLATE

    def render(
        self,
        source_dir: str,
        filename: str,
        extension: str,
        fingerprint: str,
    ) -> str:
        """Render the template for one file.

        Args:
            source_dir: Directory relative to the scan root, ending in a separator.
            filename: Filename without extension.
            extension: Extension including the leading dot, or empty.
            fingerprint: Hex-encoded checksum of the file content.

        Returns:
            The rendered destination path. Unrecognized placeholders are kept
            verbatim.
        """
        result = self.template
        result = result.replace(SRCDIR, source_dir)
        result = result.replace(SRCEXT, extension)
        result = result.replace(SRCFILENAME, filename)
        result = result.replace(CRC32, fingerprint)
        result = result.replace(FINGERPRINT, fingerprint)
        return result

    def render_for(self, source_dir: str, name: str, fingerprint: str) -> str:
        """Render the template for a full filename, splitting off its extension."""
        stem, extension = split_filename(name)
        return self.render(source_dir, stem, extension, fingerprint)

    def __repr__(self) -> str:
        return f"DestinationTemplate({self.template!r})"

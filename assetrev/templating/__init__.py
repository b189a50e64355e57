"""Destination template package for assetrev.

This package renders revisioned destination paths from templates such as
``%srcdir%%srcfilename%.%crc32%%srcext%``.

Example:
    >>> from assetrev.templating import DestinationTemplate
    >>> DestinationTemplate().render("/css/", "site", ".css", "0badf00d")
    '/css/site.0badf00d.css'
"""

from .destination_template import (
    DEFAULT_TEMPLATE,
    PLACEHOLDERS,
    DestinationTemplate,
    split_filename,
)

__all__ = [
    "DEFAULT_TEMPLATE",
    "PLACEHOLDERS",
    "DestinationTemplate",
    "split_filename",
]

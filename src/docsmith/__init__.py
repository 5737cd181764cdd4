"""
Docsmith

Browser-style document tools for the command line: page extraction,
page numbering, watermarking, in-place PDF editing and Word/PDF
conversion.
"""

__version__ = "1.0.0"
__license__ = "GPL-3.0-or-later"

# Package metadata
__all__ = [
    "__version__",
    "__license__",
]

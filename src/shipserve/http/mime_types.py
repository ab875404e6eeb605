"""
MIME type detection for static pages.

The static handler only distinguishes three kinds of documents:

    .css  → text/css
    .js   → text/javascript
    other → text/html

Matching is on the file name suffix and is case-sensitive, like the file
names themselves.
"""

MIME_TYPES = {
    ".css": "text/css",
    ".js": "text/javascript",
}

DEFAULT_MIME_TYPE = "text/html"


def get_mime_type(filename: str) -> str:
    """
    Get the Content-Type for a file name.

    Args:
        filename: File name or path segment, e.g. "styles.css".

    Returns:
        The MIME type string.
    """
    for extension, mime_type in MIME_TYPES.items():
        if filename.endswith(extension):
            return mime_type
    return DEFAULT_MIME_TYPE

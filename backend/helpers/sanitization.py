"""
Input sanitization for free text submitted by residents.

Report descriptions are shown verbatim in the admin dashboard, so markup is
stripped before storage.
"""

import html
from typing import Optional

import bleach


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags and surrounding whitespace.

    The result is stored and served as plain text, so the entities bleach
    escapes are turned back into characters.

    Args:
        content: Raw content from user input

    Returns:
        Plain text, or None if the input is None or blank after cleaning

    Examples:
        >>> sanitize_plain_text('<script>alert(1)</script>Scam listing')
        'alert(1)Scam listing'
        >>> sanitize_plain_text("Tom & Jerry price < 5")
        'Tom & Jerry price < 5'
        >>> sanitize_plain_text("   ")
    """
    if content is None:
        return None

    cleaned = html.unescape(bleach.clean(content, tags=[], strip=True)).strip()
    return cleaned or None

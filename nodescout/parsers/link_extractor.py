"""
Literal scan for proxy links embedded in arbitrary text.
"""

import re
from typing import List

# Scan order is significant: it fixes the order records are numbered in
LINK_PROTOCOLS = ("vmess", "vless", "ss", "ssr", "trojan")

# A scheme glued to a preceding letter or digit is part of another
# word (``ss://`` inside ``vless://``), not a link of its own
_PATTERNS = [
    (proto, re.compile(r"(?<![A-Za-z0-9])" + re.escape(proto) + r"://[^\s<>\"']+"))
    for proto in LINK_PROTOCOLS
]


def extract_links(text: str) -> List[str]:
    """All protocol links in ``text``, grouped protocol by protocol."""
    if not text:
        return []

    links: List[str] = []
    for _proto, pattern in _PATTERNS:
        links.extend(m.group(0) for m in pattern.finditer(text))
    return links

"""
Recursive Base64 unwrapping of subscription payloads.
"""

import binascii
import re

from nodescout.core.utils import bytes_to_text, safe_b64decode

MAX_DEPTH = 3
MIN_NESTED_LENGTH = 20

_STANDARD_B64 = re.compile(r"[A-Za-z0-9+/=]+")
_URLSAFE_B64 = re.compile(r"[A-Za-z0-9_-]+")
_WHITESPACE = re.compile(r"\s+")


def is_base64_shaped(text: str) -> bool:
    """True when the whitespace-stripped text is entirely Base64 alphabet."""
    clean = _WHITESPACE.sub("", text)
    return bool(_STANDARD_B64.fullmatch(clean) or _URLSAFE_B64.fullmatch(clean))


def recursive_decode(text: str, depth: int = 0) -> str:
    """Unwrap up to ``MAX_DEPTH`` nested layers of Base64.

    Text that is not Base64-shaped, or fails to decode, comes back
    unchanged. Decoded output is only unwrapped again when it is long,
    contains no ``://`` and is itself Base64-shaped. Never raises.
    """
    if depth > MAX_DEPTH:
        return text

    clean = _WHITESPACE.sub("", text)
    if not clean or not is_base64_shaped(clean):
        return text

    try:
        decoded = bytes_to_text(safe_b64decode(clean))
    except (binascii.Error, ValueError):
        return text

    if len(decoded) > MIN_NESTED_LENGTH and "://" not in decoded and is_base64_shaped(decoded):
        return recursive_decode(decoded, depth + 1)
    return decoded

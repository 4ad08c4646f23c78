"""Content fingerprinting for change detection."""

import hashlib


def compute_content_hash(text: str) -> str:
    """Compute the SHA-256 hex digest of file contents.

    Args:
        text: Decoded file contents.

    Returns:
        64-character lowercase hex digest.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()

"""SHA-256 digest and HMAC-SHA-256 primitives (lowercase hex output)."""

import hashlib
import hmac
from typing import Union

from web3dna.core.exceptions import EmptyKeyError

BytesLike = Union[str, bytes]


def _to_bytes(data: BytesLike) -> bytes:
    if isinstance(data, bytes):
        return data
    return data.encode("utf-8")


def digest(message: BytesLike) -> str:
    """Return the SHA-256 hex digest of ``message``."""
    return hashlib.sha256(_to_bytes(message)).hexdigest()


def keyed_digest(secret: BytesLike, message: BytesLike, require_key: bool = False) -> str:
    """
    Return the HMAC-SHA-256 hex digest of ``message`` keyed by ``secret``.
    
    An empty key is accepted unless ``require_key`` is set, in which case
    ``EmptyKeyError`` is raised. Callers using the result to authenticate
    anything must set ``require_key``.
    """
    key = _to_bytes(secret)
    if require_key and not key:
        raise EmptyKeyError("Keyed digest requires a non-empty secret")
    return hmac.new(key, _to_bytes(message), hashlib.sha256).hexdigest()

"""Identity binding and DNA credential generation.

Neither function validates what the identity attributes mean; callers
authenticate the underlying claims before binding them.
"""

from typing import Any, Optional, Sequence

from web3dna.core.exceptions import MissingIdentityFieldError
from web3dna.core.hashing import digest, keyed_digest
from web3dna.models.signals import to_canonical_string

FIELD_SEPARATOR = "|"


def _field_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(to_canonical_string(item) for item in value)
    return to_canonical_string(value)


def generate_identity_signature(name: str, dob: str, selfie_vector: Any, id_number: str) -> str:
    """
    Digest the asserted identity attributes into an identity hash.
    
    ``selfie_vector`` may be a string or a sequence of numbers; sequences are
    comma-joined before hashing.
    """
    fields = (("name", name), ("dob", dob), ("selfie_vector", selfie_vector), ("id_number", id_number))
    for field_name, value in fields:
        if value is None:
            raise MissingIdentityFieldError(field_name)
    
    return digest(FIELD_SEPARATOR.join(_field_text(value) for _, value in fields))


def generate_web3dna(identity_hash: str, device_hash: str, secret: Optional[str] = "",
                     use_hmac: bool = False, require_key: bool = False) -> str:
    """
    Combine an identity hash and a device fingerprint into a DNA credential.
    
    In keyed mode the secret is both the HMAC key and the last field of the
    message; credentials issued earlier depend on that layout. Unkeyed
    credentials are for deduplication and matching only.
    """
    if identity_hash is None:
        raise MissingIdentityFieldError("identity_hash")
    if device_hash is None:
        raise MissingIdentityFieldError("device_hash")
    
    secret = secret or ""
    combo = FIELD_SEPARATOR.join((identity_hash, device_hash, secret))
    if use_hmac:
        return keyed_digest(secret, combo, require_key=require_key)
    return digest(combo)

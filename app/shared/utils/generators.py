"""Access key generators for stored objects."""

import secrets

PUBLIC_KEY_BYTES = 16
PRIVATE_KEY_BYTES = 32


def generate_keys() -> tuple[str, str]:
    """Generate a (public_key, private_key) pair from the OS CSPRNG.

    The public key (32 hex chars) addresses the object for retrieval; the
    private key (64 hex chars) is the deletion capability. Collisions are
    not checked.

    Returns:
        Tuple of (public_key, private_key) as lowercase hex strings.
    """
    return secrets.token_hex(PUBLIC_KEY_BYTES), secrets.token_hex(PRIVATE_KEY_BYTES)

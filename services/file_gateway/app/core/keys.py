"""Storage key generation."""

import secrets

KEY_BYTES = 32


def generate_file_key() -> str:
    """Return a fresh random storage key.

    32 bytes from the OS CSPRNG, hex encoded to 64 characters. The key does
    not depend on the file name or content, and collisions are not checked.
    """
    return secrets.token_hex(KEY_BYTES)

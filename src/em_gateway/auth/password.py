"""Password hashing with the ``bcrypt`` library (>=4.0), no passlib wrapper.

bcrypt only looks at the first 72 bytes of input; longer passwords are
rejected up front instead of being silently truncated.
"""

import bcrypt

BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    raw = plain.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password longer than {BCRYPT_MAX_BYTES} bytes")
    return raw


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        candidate = _encode(plain)
    except ValueError:
        return False
    return bcrypt.checkpw(candidate, hashed.encode("utf-8"))

"""Unit tests for password hashing utilities."""

from src.em_gateway.auth.password import BCRYPT_MAX_BYTES, hash_password, verify_password


def test_hash_is_not_plain():
    hashed = hash_password("Seller2024")
    assert hashed != "Seller2024"
    assert hashed.startswith("$2")


def test_verify_round_trip():
    hashed = hash_password("Seller2024")
    assert verify_password("Seller2024", hashed) is True
    assert verify_password("seller2024", hashed) is False


def test_salted():
    assert hash_password("Seller2024") != hash_password("Seller2024")


def test_overlong_password_never_verifies():
    hashed = hash_password("a" * BCRYPT_MAX_BYTES)
    # would match if bcrypt silently truncated at 72 bytes
    assert verify_password("a" * (BCRYPT_MAX_BYTES + 1), hashed) is False

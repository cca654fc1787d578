"""Tests for em_policy.domain.masking."""

import pytest

from src.em_policy.domain.masking import EMAIL_PLACEHOLDER, mask_email


@pytest.mark.parametrize(
    ("email", "masked"),
    [
        ("abcdef@gmail.com", "ab****@gmail.com"),
        ("a@x.io", "a****@x.io"),
        ("first.last@sub.example.com", "fi****@sub.example.com"),
    ],
)
def test_mask_keeps_two_chars_and_domain(email: str, masked: str) -> None:
    assert mask_email(email) == masked


@pytest.mark.parametrize("email", [None, "", "not-an-email"])
def test_missing_email_uses_placeholder(email: str | None) -> None:
    assert mask_email(email) == EMAIL_PLACEHOLDER == "******@****.com"

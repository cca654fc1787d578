"""Display masking for contact emails on public listing pages.

Pure formatting, not a policy decision: the marketplace always shows the
masked form, whoever is looking.
"""

EMAIL_PLACEHOLDER = "******@****.com"


def mask_email(email: str | None) -> str:
    """'abcdef@gmail.com' -> 'ab****@gmail.com'; missing email -> placeholder."""
    if not email or "@" not in email:
        return EMAIL_PLACEHOLDER
    local, domain = email.rsplit("@", 1)
    return f"{local[:2]}****@{domain}"

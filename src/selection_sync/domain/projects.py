"""Deterministic project identifiers shared by all devices of a user."""

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _string_hash(value: str) -> str:
    """Return the signed 32-bit ``hash * 31 + unit`` digest as absolute hex."""
    encoded = value.encode("utf-16-le")
    digest = 0
    for index in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[index : index + 2], "little")
        digest = (digest * 31 + unit) & _INT32_MASK
    if digest & _INT32_SIGN:
        digest -= _INT32_MASK + 1
    return format(abs(digest), "x")


def stable_project_id(user_email: str, project_name: str = "current") -> str:
    """Return the same project id for a user and project on every device."""
    normalized = f"{user_email.lower().strip()}::{project_name.strip()}"
    return f"proj_{_string_hash(normalized)}"

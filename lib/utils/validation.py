"""Validation helpers."""

def ensure(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


def ensure_index(value, name: str) -> int:
    """Return ``value`` as a vocabulary index or raise ``ValueError``."""

    ensure(
        isinstance(value, int) and not isinstance(value, bool) and value >= 0,
        f"{name} must be a non-negative integer, got {value!r}",
    )
    return value

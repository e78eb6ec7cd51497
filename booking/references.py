import secrets
import time

_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(number: int) -> str:
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits)) or "0"


def next_reference(prefix: str = "BK") -> str:
    """Human readable code like ``BK-M2X1A9QZ-3F9A1C``: millisecond clock plus random bytes."""
    return f"{prefix}-{_base36(int(time.time() * 1000))}-{secrets.token_hex(3).upper()}"


def unique_reference(model, field: str, prefix: str) -> str:
    reference = next_reference(prefix)
    while model.objects.filter(**{field: reference}).exists():
        reference = next_reference(prefix)
    return reference

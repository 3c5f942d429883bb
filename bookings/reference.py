import secrets
import time
from typing import Optional

from core.config import REFERENCE_PREFIX

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
RANDOM_SPACE = 36 ** 6


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("base36 encoding needs a non-negative number")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_reference_code(
    prefix: str = REFERENCE_PREFIX,
    timestamp_ms: Optional[int] = None,
    random_part: Optional[int] = None,
) -> str:
    """
    Build a human-shareable booking reference: PREFIX + base36(time) + base36(random).

    Unique with overwhelming probability only; the store id remains the key.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    if random_part is None:
        random_part = secrets.randbelow(RANDOM_SPACE)
    return (prefix + to_base36(timestamp_ms) + to_base36(random_part)).upper()

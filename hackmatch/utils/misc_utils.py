# hackmatch/utils/misc_utils.py
import re
from typing import List, Optional, Sequence, Tuple

WHATSAPP_DIGITS = 10


def add_skill(skills: Sequence[str], new_skill: Optional[str]) -> List[str]:
    """Returns a copy of ``skills`` with the trimmed skill appended.

    Blank input and exact duplicates leave the list unchanged.
    """
    updated = list(skills)
    skill = (new_skill or "").strip()
    if skill and skill not in updated:
        updated.append(skill)
    return updated


def remove_skill(skills: Sequence[str], skill: str) -> List[str]:
    """Returns a copy of ``skills`` without any occurrence of ``skill``."""
    return [s for s in skills if s != skill]


def validate_whatsapp_number(value: Optional[str]) -> Tuple[bool, str]:
    """Strips non-digits; valid when empty or exactly ten digits.

    Returns the (is_valid, digits) pair so callers can store the cleaned value.
    """
    digits = re.sub(r"[^0-9]", "", value or "")
    return (not digits or len(digits) == WHATSAPP_DIGITS), digits


def initials(name: Optional[str]) -> str:
    """'Ada Lovelace' -> 'AL'."""
    return "".join(part[0] for part in (name or "").split() if part)

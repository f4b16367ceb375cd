"""
Phone number formatting applied while the user types.

US/Canada numbers (no country code, or +1) get the ``(XXX) XXX-XXXX`` mask,
filled progressively. Anything else is shown as space-separated groups.
"""
import re

from backend.services.validators import MAX_PHONE_DIGITS

_NON_DIGIT_RE = re.compile(r"[^0-9]")
NANP_COUNTRY_CODE = "1"
NANP_LENGTH = 10


def _nanp_mask(digits: str) -> str:
    if not digits:
        return ""
    if len(digits) <= 3:
        return f"({digits}"
    if len(digits) <= 6:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:NANP_LENGTH]}"


def _grouped(digits: str) -> str:
    # Groups of three; a trailing single digit joins the last group
    groups = [digits[i : i + 3] for i in range(0, len(digits), 3)]
    if len(groups) > 1 and len(groups[-1]) == 1:
        groups[-2:] = [groups[-2] + groups[-1]]
    return " ".join(groups)


def format_phone_number(raw: str) -> str:
    """
    Format a partially typed phone number.

    Args:
        raw: Whatever is currently in the input.

    Returns:
        The masked value. Formatting an already formatted value is a no-op.
    """
    if not raw:
        return ""

    international = raw.strip().startswith("+")
    digits = _NON_DIGIT_RE.sub("", raw)[:MAX_PHONE_DIGITS]
    if not digits:
        return "+" if international else ""

    if international:
        if digits[0] == NANP_COUNTRY_CODE and len(digits) <= NANP_LENGTH + 1:
            rest = _nanp_mask(digits[1:])
            return f"+1 {rest}" if rest else "+1"
        return f"+{_grouped(digits)}"

    if len(digits) <= NANP_LENGTH:
        return _nanp_mask(digits)
    if digits[0] == NANP_COUNTRY_CODE and len(digits) == NANP_LENGTH + 1:
        return f"+1 {_nanp_mask(digits[1:])}"
    return _grouped(digits)

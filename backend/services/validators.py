"""
Intake Field Validators
Sanitization and per-field validation shared by the API and the wizard client.

Each field validator has the signature ``(value, values) -> Optional[str]``:
it receives the field's value and the whole payload (for conditional rules)
and returns a human-readable reason, or ``None`` when the value is valid.
"""
import re
from typing import Any, Callable, Mapping, Optional

from backend.core.config import settings


MAX_FIELD_LENGTH = settings.max_field_length
MAX_EMAIL_LENGTH = 254
MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 16

OTHER_OPTION = "Other"

INDUSTRY_OPTIONS: tuple[str, ...] = (
    "IT Services",
    "SaaS",
    "Healthcare",
    "Fintech",
    "Manufacturing",
    OTHER_OPTION,
)

REVENUE_OPTIONS: tuple[str, ...] = (
    "<$5M",
    "$5–10M",
    "$10–25M",
    "$25–50M",
    ">$50M",
)

TIMELINE_OPTIONS: tuple[str, ...] = (
    "<6 months",
    "6–12 months",
    "12–24 months",
    ">24 months",
    "Exploring",
)

PAIN_POINT_OPTIONS: tuple[str, ...] = (
    "Legacy IT",
    "Messy Ops",
    "Pricing Clarity",
    "Revenue Concentration",
    "Cost Bloat",
    OTHER_OPTION,
)

# Top-level and country suffixes accepted by the strict (client) email check
RECOGNIZED_EMAIL_SUFFIXES: frozenset[str] = frozenset(
    """
    com org net edu gov mil int co io biz info name pro museum aero coop jobs
    travel mobi asia cat tel post geo xxx uk us ca au de fr it nl be ch at dk
    fi no se es pt ie pl cz hu ro bg hr si sk lt lv ee ru ua by md am ge az kz
    kg tj tm uz mn cn jp kr tw hk sg my th vn ph id in pk bd lk np bt mv af ir
    iq il jo lb sy tr cy eg ly tn dz ma sd ke tz ug et so dj er mw zm zw bw na
    sz ls mg mu sc km za ao mz zr cg cf td cm gq ga st gw cv sn gm gn sl lr ci
    gh tg bj ne bf ml mr eh br ar cl ec gy py pe sr uy ve bo cr sv gt hn ni pa
    bz mx cu do ht jm tt bb gd lc vc ag dm kn bs pr vi ai bm ky tc vg ms gp mq
    aw cw sx bq fk gs sh ac ta
    """.split()
)

_SCRIPT_BLOCK_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"</?[a-zA-Z!][^<>]*>")
_PHONE_FORMATTING_RE = re.compile(r"[\s\-().]")
_PHONE_RE = re.compile(r"^\+?[0-9]{%d,%d}$" % (MIN_PHONE_DIGITS, MAX_PHONE_DIGITS))
_EMAIL_SHAPE_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_EMAIL_STRICT_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)


FieldValidator = Callable[[Any, Mapping[str, Any]], Optional[str]]


# =============================================================================
# Sanitization
# =============================================================================


def strip_markup(value: str) -> str:
    """Remove script blocks and markup tags until none are left."""
    previous = None
    while previous != value:
        previous = value
        value = _SCRIPT_BLOCK_RE.sub("", value)
        value = _TAG_RE.sub("", value)
    return value


def sanitize_text(value: Optional[str], max_length: int = MAX_FIELD_LENGTH) -> str:
    """
    Sanitize a user-supplied string before any further use.

    The raw value is trimmed and capped at ``max_length`` before markup is
    stripped, so the work done never depends on how much was posted. Markup
    removal comes before the final trim and cap so that it can never leave
    untrimmed whitespace behind. Applying it twice gives the same result as
    applying it once.

    Args:
        value: Raw value, ``None`` is treated as an empty string.
        max_length: Maximum number of characters kept.

    Returns:
        The sanitized string.
    """
    if value is None:
        return ""
    bounded = str(value).strip()[:max_length]
    cleaned = strip_markup(bounded).strip()
    return cleaned[:max_length].rstrip()


# =============================================================================
# Shape checks
# =============================================================================


def normalize_phone(value: str) -> str:
    """Drop spaces, hyphens, parentheses and dots from a phone number."""
    return _PHONE_FORMATTING_RE.sub("", value or "")


def is_valid_phone(value: str) -> bool:
    return bool(_PHONE_RE.match(normalize_phone(value)))


def email_suffix(value: str) -> str:
    domain = value.rsplit("@", 1)[-1]
    return domain.rsplit(".", 1)[-1].lower()


def is_valid_email(value: str, strict: bool = False) -> bool:
    """
    Check an email address.

    The server accepts any ``local@domain.tld`` shape. The strict variant,
    used by the wizard, also requires a conventional character set and a
    recognized top-level suffix.
    """
    if not value or len(value) > MAX_EMAIL_LENGTH:
        return False
    if not _EMAIL_SHAPE_RE.match(value):
        return False
    if strict:
        return bool(_EMAIL_STRICT_RE.match(value)) and email_suffix(value) in RECOGNIZED_EMAIL_SUFFIXES
    return True


# =============================================================================
# Field validators
# =============================================================================


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _min_length(label: str, minimum: int = 2) -> FieldValidator:
    def validate(value: Any, values: Mapping[str, Any]) -> Optional[str]:
        if len(_text(value)) < minimum:
            return f"{label} must be at least {minimum} characters long"
        return None

    return validate


def _choice(missing_message: str, options: tuple[str, ...], invalid_message: str) -> FieldValidator:
    def validate(value: Any, values: Mapping[str, Any]) -> Optional[str]:
        text = _text(value)
        if not text:
            return missing_message
        if text not in options:
            return invalid_message
        return None

    return validate


def _required(message: str) -> FieldValidator:
    def validate(value: Any, values: Mapping[str, Any]) -> Optional[str]:
        return None if _text(value) else message

    return validate


validate_full_name = _min_length("Full name")
validate_company_name = _min_length("Company name")
validate_industry = _choice("Please select an industry", INDUSTRY_OPTIONS, "Please select a valid industry")
validate_revenue_range = _choice(
    "Please select a revenue range", REVENUE_OPTIONS, "Please select a valid revenue range"
)
validate_exit_timeline = _choice(
    "Please select an exit timeline", TIMELINE_OPTIONS, "Please select a valid exit timeline"
)
validate_custom_industry = _required("Please specify your industry")
validate_custom_pain_point = _required("Please specify a particular pain point")


def validate_business_email(value: Any, values: Mapping[str, Any]) -> Optional[str]:
    if not is_valid_email(_text(value)):
        return "Please provide a valid business email address"
    return None


def validate_business_email_strict(value: Any, values: Mapping[str, Any]) -> Optional[str]:
    text = _text(value)
    if not is_valid_email(text) or not _EMAIL_STRICT_RE.match(text):
        return "Please enter a valid email address"
    if email_suffix(text) not in RECOGNIZED_EMAIL_SUFFIXES:
        return "Please enter an email with a recognized domain extension"
    return None


def validate_phone_number(value: Any, values: Mapping[str, Any]) -> Optional[str]:
    if not is_valid_phone(_text(value)):
        return "Please provide a valid phone number"
    return None


def validate_pain_points(value: Any, values: Mapping[str, Any]) -> Optional[str]:
    selected = [p for p in (value or ()) if isinstance(p, str) and p.strip()]
    if not selected:
        return "Please select at least one pain point"
    if any(p.strip() not in PAIN_POINT_OPTIONS for p in selected):
        return "Please select valid pain points"
    return None


FIELD_VALIDATORS: dict[str, FieldValidator] = {
    "full_name": validate_full_name,
    "business_email": validate_business_email,
    "phone_number": validate_phone_number,
    "company_name": validate_company_name,
    "industry": validate_industry,
    "custom_industry": validate_custom_industry,
    "revenue_range": validate_revenue_range,
    "exit_timeline": validate_exit_timeline,
    "pain_points": validate_pain_points,
    "custom_pain_point": validate_custom_pain_point,
}

# The wizard applies the stricter email policy for early feedback
CLIENT_FIELD_VALIDATORS: dict[str, FieldValidator] = {
    **FIELD_VALIDATORS,
    "business_email": validate_business_email_strict,
}


def validate_field(
    name: str,
    values: Mapping[str, Any],
    strict_email: bool = False,
) -> Optional[str]:
    """Run the validator registered for ``name`` against ``values``."""
    validators = CLIENT_FIELD_VALIDATORS if strict_email else FIELD_VALIDATORS
    validator = validators.get(name)
    if validator is None:
        return None
    return validator(values.get(name), values)

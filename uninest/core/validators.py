import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Union

@dataclass
class ValidationResult:


    is_valid: bool
    error_message: str | None = None
    sanitized_value: Any = None

LEVEL_MIN = 1
LEVEL_MAX = 5

BUDGET_MIN = Decimal("0")
BUDGET_MAX = Decimal("99999999.99")

PRIORITY_MIN = 1
PRIORITY_MAX = 5

# Criterion names accepted as keys of a profile's matching priorities.
PRIORITY_KEYS = frozenset({
    "budget",
    "major",
    "interests",
    "cleanliness",
    "noise",
    "sleep_schedule",
    "study_habits",
    "smoking",
    "pets",
    "guests",
})

TAG_MAX_LENGTH = 50
TAGS_MAX_COUNT = 30

def validate_level(level: Union[int, str], label: str = "Level") -> ValidationResult:
    """
    Validate a 1-5 lifestyle level (cleanliness, noise).

    Args:
        level: The raw level value
        label: Human readable name used in the error message

    Returns:
        ValidationResult with the level as int when valid.
    """
    if isinstance(level, bool):
        return ValidationResult(
            is_valid=False,
            error_message=f"{label} must be a valid integer"
        )

    try:
        level_int = int(level)
    except (TypeError, ValueError):
        return ValidationResult(
            is_valid=False,
            error_message=f"{label} must be a valid integer"
        )

    if level_int < LEVEL_MIN or level_int > LEVEL_MAX:
        return ValidationResult(
            is_valid=False,
            error_message=f"{label} must be between {LEVEL_MIN} and {LEVEL_MAX}"
        )

    return ValidationResult(is_valid=True, sanitized_value=level_int)

def validate_budget(budget: Union[int, float, Decimal, str]) -> ValidationResult:

    try:
        budget_decimal = Decimal(str(budget))
    except (InvalidOperation, ValueError):
        return ValidationResult(
            is_valid=False,
            error_message="Budget must be a valid number"
        )

    if not budget_decimal.is_finite():
        return ValidationResult(
            is_valid=False,
            error_message="Budget must be a valid number"
        )

    if budget_decimal < BUDGET_MIN:
        return ValidationResult(
            is_valid=False,
            error_message="Budget cannot be negative"
        )

    if budget_decimal > BUDGET_MAX:
        return ValidationResult(
            is_valid=False,
            error_message=f"Budget must not exceed {BUDGET_MAX:,}"
        )

    return ValidationResult(
        is_valid=True,
        sanitized_value=budget_decimal.quantize(Decimal("0.01")),
    )

def validate_budget_range(
    min_budget: Decimal | None,
    max_budget: Decimal | None,
) -> ValidationResult:

    if min_budget is not None and max_budget is not None and min_budget > max_budget:
        return ValidationResult(
            is_valid=False,
            error_message="Minimum budget cannot be greater than maximum budget"
        )
    return ValidationResult(is_valid=True, sanitized_value=(min_budget, max_budget))

def validate_matching_priorities(priorities: Any) -> ValidationResult:
    """
    Validate per-criterion matching priorities.

    Keys must be known criterion names and values integers from 1 to 5.
    An empty mapping is normalized to None.
    """
    if priorities is None:
        return ValidationResult(is_valid=True, sanitized_value=None)

    if not isinstance(priorities, dict):
        return ValidationResult(
            is_valid=False,
            error_message="Matching priorities must be an object"
        )

    sanitized: dict[str, int] = {}
    for key, value in priorities.items():
        if key not in PRIORITY_KEYS:
            return ValidationResult(
                is_valid=False,
                error_message=f"Unknown matching priority '{key}'"
            )
        if isinstance(value, bool) or not isinstance(value, int):
            return ValidationResult(
                is_valid=False,
                error_message=f"Priority for '{key}' must be an integer"
            )
        if value < PRIORITY_MIN or value > PRIORITY_MAX:
            return ValidationResult(
                is_valid=False,
                error_message=f"Priority for '{key}' must be between {PRIORITY_MIN} and {PRIORITY_MAX}"
            )
        sanitized[key] = value

    return ValidationResult(is_valid=True, sanitized_value=sanitized or None)

HTML_TAG_PATTERN = re.compile(r'<[^>]+>', re.IGNORECASE)
SCRIPT_PATTERN = re.compile(
    r'<script[^>]*>.*?</script>|'
    r'javascript:|'
    r'on\w+\s*=|'
    r'<iframe[^>]*>.*?</iframe>|'
    r'<object[^>]*>.*?</object>|'
    r'<embed[^>]*>|'
    r'<link[^>]*>|'
    r'<style[^>]*>.*?</style>',
    re.IGNORECASE | re.DOTALL
)

def sanitize_text(text: str) -> ValidationResult:

    if not isinstance(text, str):
        return ValidationResult(
            is_valid=False,
            error_message="Text must be a string"
        )

    sanitized = SCRIPT_PATTERN.sub('', text)

    sanitized = HTML_TAG_PATTERN.sub('', sanitized)

    sanitized = ' '.join(sanitized.split())

    return ValidationResult(is_valid=True, sanitized_value=sanitized)

def sanitize_tags(tags: Any, label: str = "Tags") -> ValidationResult:
    """Clean a list of free-text tags (interests, preferred areas), keeping order."""
    if tags is None:
        return ValidationResult(is_valid=True, sanitized_value=[])

    if not isinstance(tags, (list, tuple)):
        return ValidationResult(
            is_valid=False,
            error_message=f"{label} must be a list"
        )

    if len(tags) > TAGS_MAX_COUNT:
        return ValidationResult(
            is_valid=False,
            error_message=f"{label} must not contain more than {TAGS_MAX_COUNT} items"
        )

    cleaned: list[str] = []
    for tag in tags:
        result = sanitize_text(tag)
        if not result.is_valid:
            return ValidationResult(
                is_valid=False,
                error_message=f"{label} must only contain text"
            )
        value = result.sanitized_value
        if not value:
            continue
        if len(value) > TAG_MAX_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=f"{label} items must not exceed {TAG_MAX_LENGTH} characters"
            )
        if value not in cleaned:
            cleaned.append(value)

    return ValidationResult(is_valid=True, sanitized_value=cleaned)

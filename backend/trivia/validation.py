"""Boundary validation for request payloads.

The database only enforces types and nullability; the shape rules of the
quiz domain (four choices, index range, difficulty tiers) live here.
"""

from trivia.errors import InvalidArgument

CHOICE_COUNT = 4
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
NO_ANSWER = -1


def _is_int(value) -> bool:
    # bool is an int subclass; true/false are not answer indices
    return isinstance(value, int) and not isinstance(value, bool)


def is_choice_index(value) -> bool:
    return _is_int(value) and 0 <= value < CHOICE_COUNT


def parse_id(value):
    """Return ``value`` as a row id, or None if it isn't a whole integer.

    Floats and bools are rejected rather than truncated onto a real id.
    """
    if _is_int(value):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None


def require_text(data: dict, field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f'{field} is required')
    return value.strip()


def parse_difficulty(value, field: str = 'difficulty', required: bool = False):
    """Return an int 1-5, or None when absent and not required."""
    if value is None or value == '':
        if required:
            raise InvalidArgument(f'{field} is required')
        return None
    try:
        diff = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f'{field} must be an integer between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}')
    if isinstance(value, bool) or not MIN_DIFFICULTY <= diff <= MAX_DIFFICULTY:
        raise InvalidArgument(f'{field} must be an integer between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}')
    return diff


def parse_count(value, default: int, maximum: int) -> int:
    if value is None:
        return default
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument('count must be a positive integer')
    if isinstance(value, bool) or count < 1:
        raise InvalidArgument('count must be a positive integer')
    if count > maximum:
        raise InvalidArgument(f'count may not exceed {maximum}')
    return count


def require_list(value, field: str) -> list:
    if not isinstance(value, list):
        raise InvalidArgument(f'{field} must be an array')
    return value


def normalize_answers(answers: list, length: int) -> list:
    """Fit a submitted answer array to ``length`` slots.

    Extra entries are dropped, missing ones padded, and anything that is not
    a valid choice index becomes ``NO_ANSWER``.
    """
    normalized = []
    for i in range(length):
        value = answers[i] if i < len(answers) else NO_ANSWER
        normalized.append(value if is_choice_index(value) else NO_ANSWER)
    return normalized


def validate_question_payload(data: dict, partial: bool = False) -> dict:
    """Validate a question create/update body and return the clean fields.

    With ``partial`` only the supplied fields are checked (PUT semantics).
    """
    if not isinstance(data, dict):
        raise InvalidArgument('JSON object body required')
    clean = {}

    if not partial or 'prompt' in data:
        clean['prompt'] = require_text(data, 'prompt')
    if not partial or 'category' in data:
        clean['category'] = require_text(data, 'category')
    if not partial or 'choices' in data:
        choices = data.get('choices')
        if (not isinstance(choices, list) or len(choices) != CHOICE_COUNT
                or not all(isinstance(c, str) and c.strip() for c in choices)):
            raise InvalidArgument(f'choices must be a list of exactly {CHOICE_COUNT} non-empty strings')
        clean['choices'] = [c.strip() for c in choices]
    if not partial or 'correctIndex' in data:
        idx = data.get('correctIndex')
        if not _is_int(idx) or not 0 <= idx < CHOICE_COUNT:
            raise InvalidArgument(f'correctIndex must be an integer between 0 and {CHOICE_COUNT - 1}')
        clean['correct_index'] = idx
    if not partial or 'difficulty' in data:
        clean['difficulty'] = parse_difficulty(data.get('difficulty'), required=True)
    return clean

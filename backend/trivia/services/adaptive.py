from typing import List, Optional, Sequence

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
WINDOW_SIZE = 20
RAISE_ABOVE = 0.75
LOWER_BELOW = 0.45


def clamp_difficulty(value: int) -> int:
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, int(value)))


def window_accuracy(window: Optional[Sequence[bool]]) -> Optional[float]:
    if not window:
        return None
    return sum(1 for ok in window if ok) / len(window)


def compute_next_difficulty(current: int, window: Optional[Sequence[bool]]) -> int:
    """Recommend the next difficulty from recent correctness.

    Above 75% accuracy steps up, below 45% steps down, anything in between
    (boundaries included) holds. An empty window holds too.
    """
    accuracy = window_accuracy(window)
    if accuracy is None:
        return clamp_difficulty(current)
    if accuracy > RAISE_ABOVE:
        return clamp_difficulty(current + 1)
    if accuracy < LOWER_BELOW:
        return clamp_difficulty(current - 1)
    return clamp_difficulty(current)


def push_recent(window: Optional[Sequence[bool]], outcome: bool, capacity: int = WINDOW_SIZE) -> List[bool]:
    """Append an outcome, evicting from the front past ``capacity``."""
    values = list(window or [])
    values.append(bool(outcome))
    if len(values) > capacity:
        values = values[-capacity:]
    return values

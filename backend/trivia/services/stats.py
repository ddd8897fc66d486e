from trivia.models import User

_COUNTERS = {
    'points': User.points,
    'total_answered': User.total_answered,
    'correct_answered': User.correct_answered,
    'wins': User.wins,
    'losses': User.losses,
}


def increment_user_stats(user_id: int, **deltas: int) -> None:
    """Add to a user's counters with ``col = col + n`` in SQL.

    Only adds; nothing here reads the row back, so two writers touching the
    same user cannot lose each other's increments. Caller commits.
    """
    values = {}
    for name, delta in deltas.items():
        column = _COUNTERS[name]
        if delta:
            values[column] = column + int(delta)
    if not values:
        return
    User.query.filter(User.id == user_id).update(values, synchronize_session=False)

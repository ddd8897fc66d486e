from datetime import timedelta
from flask import current_app
from trivia import db
from trivia.errors import InvalidArgument
from trivia.models import User, QuizAttempt, utcnow

RANGES = ('all', 'weekly')


def _row(user, points):
    return {
        'username': user.username if user else 'Unknown',
        'points': int(points or 0),
        'wins': (user.wins or 0) if user else 0,
        'losses': (user.losses or 0) if user else 0,
        'accuracy': user.accuracy if user else 0,
    }


def _ranked(rows):
    for rank, row in enumerate(rows, start=1):
        row['rank'] = rank
    return rows


def all_time(limit: int):
    # id breaks ties so equal points keep signup order
    users = User.query.order_by(User.points.desc(), User.id.asc()).limit(limit).all()
    return _ranked([_row(u, u.points) for u in users])


def weekly(limit: int, days: int = 7):
    """Sum solo attempt scores from the trailing window, per user.

    Only ``points`` is windowed; ``wins``, ``losses`` and ``accuracy`` on each
    row are the user's all-time figures.
    """
    since = utcnow() - timedelta(days=days)
    totals = (
        db.session.query(QuizAttempt.user_id, db.func.sum(QuizAttempt.score), db.func.min(QuizAttempt.id))
        .filter(QuizAttempt.created_at >= since)
        .group_by(QuizAttempt.user_id)
        .all()
    )
    # Stable on first appearance within the window
    totals.sort(key=lambda t: t[2])
    totals.sort(key=lambda t: t[1] or 0, reverse=True)
    totals = totals[:limit]

    users = User.query.filter(User.id.in_([t[0] for t in totals])).all() if totals else []
    by_id = {u.id: u for u in users}
    return _ranked([_row(by_id.get(uid), points) for uid, points, _ in totals])


def leaderboard(range_name=None) -> dict:
    range_name = (range_name or 'all').lower()
    if range_name not in RANGES:
        raise InvalidArgument(f"range must be one of: {', '.join(RANGES)}")
    cfg = current_app.config
    limit = int(cfg.get('LEADERBOARD_LIMIT', 50))
    if range_name == 'weekly':
        rows = weekly(limit, days=int(cfg.get('WEEKLY_WINDOW_DAYS', 7)))
    else:
        rows = all_time(limit)
    return {'rows': rows, 'range': range_name}

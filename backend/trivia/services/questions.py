from typing import List, Optional, Sequence
from trivia import db
from trivia.models import Question


def sample_questions(category: str, count: int, difficulty: Optional[int] = None) -> List[Question]:
    """Draw up to ``count`` distinct random questions from a category.

    With a difficulty the matching tier is drawn first and the rest is
    backfilled from the whole category. Returning fewer than ``count`` is
    normal when the category runs dry; callers decide whether zero is fatal.
    """
    picked: List[Question] = []
    if difficulty is not None:
        picked = (
            Question.query.filter_by(category=category, difficulty=difficulty)
            .order_by(db.func.random())
            .limit(count)
            .all()
        )
    needed = count - len(picked)
    if needed > 0:
        query = Question.query.filter_by(category=category)
        if picked:
            query = query.filter(Question.id.notin_([q.id for q in picked]))
        picked.extend(query.order_by(db.func.random()).limit(needed).all())
    return picked


def fetch_slots(question_ids: Sequence[int]) -> List[Optional[Question]]:
    """Look questions up by id, aligned positionally with ``question_ids``.

    The store returns rows in whatever order it likes; scoring and review
    are positional, so the result is rebuilt in id order with ``None`` for
    ids that no longer exist.
    """
    ids = list(question_ids or [])
    if not ids:
        return []
    rows = Question.query.filter(Question.id.in_(ids)).all()
    by_id = {q.id: q for q in rows}
    return [by_id.get(qid) for qid in ids]


def fetch_in_order(question_ids: Sequence[int]) -> List[Question]:
    return [q for q in fetch_slots(question_ids) if q is not None]


def list_categories():
    rows = (
        db.session.query(Question.category, db.func.count(Question.id))
        .group_by(Question.category)
        .order_by(Question.category)
        .all()
    )
    return [{'category': name, 'count': n} for name, n in rows]

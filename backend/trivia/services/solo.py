from flask import current_app
from trivia import db
from trivia.errors import InvalidArgument, NotFound
from trivia.models import User, QuizAttempt
from trivia.validation import NO_ANSWER, is_choice_index, parse_id
from .adaptive import compute_next_difficulty, push_recent, clamp_difficulty
from .questions import sample_questions, fetch_in_order
from .stats import increment_user_stats


def start_quiz(user: User, category: str, count: int, difficulty=None, use_adaptive: bool = False) -> dict:
    """Pick questions for a solo run.

    Adaptive mode ignores ``difficulty`` and uses the user's recommendation.
    """
    cfg = current_app.config
    if use_adaptive:
        diff = clamp_difficulty(user.preferred_difficulty or cfg.get('DEFAULT_DIFFICULTY', 2))
    else:
        diff = difficulty if difficulty is not None else cfg.get('DEFAULT_DIFFICULTY', 2)

    questions = sample_questions(category, count, difficulty=diff)
    if not questions:
        raise NotFound(f'No questions found for category {category!r}')

    current_app.logger.info(
        f"[quiz-start] user={user.id} category={category} difficulty={diff} adaptive={use_adaptive} requested={count} got={len(questions)}"
    )
    return {
        'questions': [q.to_public_dict() for q in questions],
        'difficultyUsed': diff,
        'adaptive': bool(use_adaptive),
    }


def submit_quiz(user: User, question_ids, answers) -> dict:
    if not isinstance(question_ids, list) or not isinstance(answers, list) or len(question_ids) != len(answers):
        raise InvalidArgument('questionIds and answers must be arrays of equal length')

    ids = [parse_id(qid) for qid in question_ids]
    by_id = {q.id: q for q in fetch_in_order([qid for qid in ids if qid is not None])}

    outcomes = []
    recorded = []
    for qid, answer in zip(ids, answers):
        question = by_id.get(qid)
        chosen = answer if is_choice_index(answer) else NO_ANSWER
        recorded.append(chosen)
        # Unknown ids are simply wrong
        outcomes.append(question is not None and chosen == question.correct_index)

    total = len(ids)
    correct = sum(1 for ok in outcomes if ok)
    accuracy = correct / total if total else 0

    db.session.add(QuizAttempt(
        user_id=user.id,
        mode='solo',
        question_ids=ids,
        answers=recorded,
        score=correct,
        accuracy=accuracy,
    ))
    increment_user_stats(user.id, total_answered=total, correct_answered=correct, points=correct)

    # The window and recommendation are derived state; lock the row while rebuilding them
    locked = User.query.filter_by(id=user.id).with_for_update().populate_existing().one()
    capacity = current_app.config.get('RECENT_WINDOW_SIZE', 20)
    window = list(locked.recent_answers or [])
    for ok in outcomes:
        window = push_recent(window, ok, capacity=capacity)
    locked.recent_answers = window
    locked.preferred_difficulty = compute_next_difficulty(
        locked.preferred_difficulty or current_app.config.get('DEFAULT_DIFFICULTY', 2), window
    )
    next_difficulty = locked.preferred_difficulty
    db.session.commit()

    current_app.logger.info(
        f"[quiz-submit] user={user.id} score={correct}/{total} next_difficulty={next_difficulty}"
    )
    return {
        'score': correct,
        'correct': correct,
        'total': total,
        'accuracy': accuracy,
        'nextRecommendedDifficulty': next_difficulty,
    }

"""Battle lifecycle: pending -> active -> completed.

Both players poll the same row and submit independently. Submission is
exactly-once per player and the completion transition fires exactly once per
battle; both are enforced by guarded UPDATE statements whose WHERE clause
carries the precondition, so the database decides which writer wins.
"""

from flask import current_app
from trivia import db
from trivia.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound
from trivia.models import Battle, User, utcnow
from trivia.validation import NO_ANSWER, normalize_answers
from .questions import fetch_slots, sample_questions
from .stats import increment_user_stats

PENDING = 'pending'
ACTIVE = 'active'
COMPLETED = 'completed'

MISSING_PROMPT = '(missing question)'

_ANSWER_COLUMNS = {'p1': Battle.p1_answers, 'p2': Battle.p2_answers}
_SCORE_COLUMNS = {'p1': Battle.p1_score, 'p2': Battle.p2_score}


def _get_battle(battle_id: int, lock: bool = False) -> Battle:
    query = Battle.query.filter_by(id=battle_id)
    if lock:
        query = query.with_for_update().populate_existing()
    battle = query.first()
    if not battle:
        raise NotFound('Battle not found')
    return battle


def _participant_slot(battle: Battle, user_id: int) -> str:
    slot = battle.slot_for(user_id)
    if slot is None:
        raise Forbidden('Not authorized to view this battle')
    return slot


def score_answers(questions, answers) -> int:
    """Count positions where the answer matches the question at that index.

    ``questions`` may contain ``None`` for deleted items; those never score.
    """
    correct = 0
    for i, question in enumerate(questions):
        if question is None or i >= len(answers):
            continue
        if answers[i] == question.correct_index:
            correct += 1
    return correct


def create_battle(challenger: User, opponent_username: str, category: str, count: int, difficulty=None) -> Battle:
    if not opponent_username or not category:
        raise InvalidArgument('opponentUsername and category required')

    opponent = User.query.filter_by(username=opponent_username).first()
    if not opponent:
        raise NotFound('Opponent not found')
    if opponent.id == challenger.id:
        raise InvalidArgument('Cannot challenge yourself')

    picked = sample_questions(category, count, difficulty=difficulty)
    if not picked:
        raise NotFound('No questions found for this category')

    tiers = {q.difficulty for q in picked}
    battle = Battle(
        player1_id=challenger.id,
        player2_id=opponent.id,
        category=category,
        difficulty=tiers.pop() if len(tiers) == 1 else None,
        status=PENDING,
        question_ids=[q.id for q in picked],
    )
    db.session.add(battle)
    db.session.commit()
    current_app.logger.info(
        f"[battle-create] battle={battle.id} p1={challenger.id} p2={opponent.id} category={category} questions={len(picked)}/{count}"
    )
    return battle


def accept_battle(battle_id: int, actor: User) -> Battle:
    battle = _get_battle(battle_id)
    if battle.player2_id != actor.id:
        raise Forbidden('Only the invited player can accept')
    if battle.status != PENDING:
        raise InvalidState('Battle is no longer pending')

    updated = (
        Battle.query.filter(Battle.id == battle.id, Battle.status == PENDING)
        .update({Battle.status: ACTIVE, Battle.updated_at: utcnow()}, synchronize_session=False)
    )
    if updated != 1:
        db.session.rollback()
        raise InvalidState('Battle is no longer pending')
    db.session.commit()
    db.session.refresh(battle)
    current_app.logger.info(f"[battle-accept] battle={battle.id} by={actor.id}")
    return battle


def _apply_completion_stats(battle: Battle) -> None:
    total = battle.question_count
    p1, p2 = battle.p1_score, battle.p2_score
    increment_user_stats(
        battle.player1_id,
        total_answered=total, correct_answered=p1, points=p1,
        wins=1 if p1 > p2 else 0, losses=1 if p1 < p2 else 0,
    )
    increment_user_stats(
        battle.player2_id,
        total_answered=total, correct_answered=p2, points=p2,
        wins=1 if p2 > p1 else 0, losses=1 if p2 < p1 else 0,
    )


def _complete_if_ready(battle: Battle) -> bool:
    """Flip an active battle with both slots filled to completed.

    Returns True only for the caller whose guarded UPDATE matched; that caller
    alone sets the winner and applies the stat increments. Does not commit.
    """
    matched = (
        Battle.query.filter(
            Battle.id == battle.id,
            Battle.status == ACTIVE,
            Battle.p1_answers.is_not(None),
            Battle.p2_answers.is_not(None),
        )
        .update({Battle.status: COMPLETED, Battle.completed_at: utcnow()}, synchronize_session=False)
    )
    if matched != 1:
        return False
    db.session.refresh(battle)
    if battle.p1_score > battle.p2_score:
        battle.winner_id = battle.player1_id
    elif battle.p2_score > battle.p1_score:
        battle.winner_id = battle.player2_id
    else:
        battle.winner_id = None
    _apply_completion_stats(battle)
    return True


def submit_battle(battle_id: int, actor: User, answers) -> dict:
    if not isinstance(answers, list):
        raise InvalidArgument('answers must be an array')

    battle = _get_battle(battle_id, lock=True)
    slot = _participant_slot(battle, actor.id)
    # A retry after a confirmed submission is a conflict even once completed
    if battle.answers_for(slot) is not None:
        current_app.logger.info(f"[battle-duplicate] battle={battle.id} user={actor.id}")
        raise Conflict('You have already submitted')
    if battle.status != ACTIVE:
        raise InvalidState('Battle is not active')

    stored = normalize_answers(answers, battle.question_count)
    score = score_answers(fetch_slots(battle.question_ids), stored)

    # Compare-and-swap on the answer slot: only one request per player can match
    answer_col = _ANSWER_COLUMNS[slot]
    claimed = (
        Battle.query.filter(Battle.id == battle.id, Battle.status == ACTIVE, answer_col.is_(None))
        .update({answer_col: stored, _SCORE_COLUMNS[slot]: score, Battle.updated_at: utcnow()},
                synchronize_session=False)
    )
    if claimed != 1:
        db.session.rollback()
        current_app.logger.info(f"[battle-duplicate] battle={battle.id} user={actor.id} lost race")
        raise Conflict('You have already submitted')

    completed = _complete_if_ready(battle)
    db.session.commit()
    db.session.refresh(battle)

    current_app.logger.info(f"[battle-submit] battle={battle.id} user={actor.id} score={score}/{battle.question_count}")
    if completed:
        current_app.logger.info(
            f"[battle-complete] battle={battle.id} p1={battle.p1_score} p2={battle.p2_score} winner={battle.winner_id or 'tie'}"
        )
    return {
        'yourScore': score,
        'battleStatus': battle.status,
        'message': 'Battle complete!' if battle.status == COMPLETED else 'Submitted! Waiting for opponent...',
    }


def view_battle(battle_id: int, actor: User) -> dict:
    battle = _get_battle(battle_id)
    slot = _participant_slot(battle, actor.id)
    other = 'p2' if slot == 'p1' else 'p1'

    # One entry per stored slot so answer positions line up with scoring
    questions = []
    if battle.status == ACTIVE:
        for qid, question in zip(battle.question_ids, fetch_slots(battle.question_ids)):
            if question is None:
                questions.append({'id': qid, 'prompt': MISSING_PROMPT, 'choices': [], 'missing': True})
            else:
                questions.append(question.to_public_dict())

    payload = battle.summary_for(actor.id)
    payload.update({
        'opponentSubmitted': battle.answers_for(other) is not None,
        'questions': questions,
    })
    if battle.status == COMPLETED:
        payload['resultUrl'] = f'/api/battles/{battle.id}/result'
    return payload


def battle_result(battle_id: int, actor: User) -> dict:
    battle = _get_battle(battle_id)
    slot = _participant_slot(battle, actor.id)
    if battle.status != COMPLETED:
        raise InvalidState('Battle not completed')
    other = 'p2' if slot == 'p1' else 'p1'
    your_answers = battle.answers_for(slot) or []

    review = []
    for idx, question in enumerate(fetch_slots(battle.question_ids)):
        your_answer = your_answers[idx] if idx < len(your_answers) else NO_ANSWER
        correct_index = question.correct_index if question is not None else NO_ANSWER
        review.append({
            'id': question.id if question is not None else battle.question_ids[idx],
            'prompt': question.prompt if question is not None else MISSING_PROMPT,
            'choices': list(question.choices) if question is not None else [],
            'yourAnswer': your_answer,
            'correctIndex': correct_index,
            # A deleted question can't be answered correctly
            'isCorrect': question is not None and your_answer == correct_index,
        })

    opponent = battle.opponent_of(slot)
    return {
        'id': battle.id,
        'status': battle.status,
        'category': battle.category,
        'difficulty': battle.difficulty,
        'mixedDifficulty': battle.difficulty is None,
        'yourScore': battle.score_for(slot),
        'opponentScore': battle.score_for(other),
        'winner': battle.winner.username if battle.winner else 'tie',
        'youWon': battle.winner_id == actor.id,
        'opponentUsername': opponent.username if opponent else None,
        'review': review,
    }


def battle_inbox(actor: User) -> dict:
    rows = (
        Battle.query.filter(db.or_(Battle.player1_id == actor.id, Battle.player2_id == actor.id))
        .order_by(Battle.created_at.desc(), Battle.id.desc())
        .all()
    )
    grouped = {PENDING: [], ACTIVE: [], COMPLETED: []}
    for battle in rows:
        grouped.setdefault(battle.status, []).append(battle.summary_for(actor.id))
    return grouped

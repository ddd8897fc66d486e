import pytest
from trivia import db
from trivia.errors import Conflict
from trivia.models import Battle, Question, User


@pytest.fixture()
def players(login_client):
    alice, alice_id = login_client('alice')
    bob, bob_id = login_client('bob')
    return alice, alice_id, bob, bob_id


def _create(client, opponent='bob', category='Shonen', count=10, **extra):
    body = {'opponentUsername': opponent, 'category': category, 'count': count}
    body.update(extra)
    return client.post('/api/battles/create', json=body)


def _start_battle(alice, bob, **kwargs):
    res = _create(alice, **kwargs)
    assert res.status_code == 201
    battle_id = res.get_json()['battle']['id']
    assert bob.post(f'/api/battles/{battle_id}/accept').status_code == 200
    return battle_id


def test_create_battle_is_pending(players, add_questions):
    alice, _, bob, _ = players
    add_questions(12)
    res = _create(alice)
    assert res.status_code == 201
    battle = res.get_json()['battle']
    assert battle['status'] == 'pending'
    assert battle['opponentUsername'] == 'bob'
    assert battle['questionCount'] == 10


def test_create_with_short_category_uses_what_exists(players, add_questions):
    alice, _, _, _ = players
    add_questions(5)
    res = _create(alice, count=10)
    assert res.status_code == 201
    assert res.get_json()['battle']['questionCount'] == 5


def test_create_with_empty_category_is_not_found(players, add_questions):
    alice, _, _, _ = players
    add_questions(3, category='Seinen')
    res = _create(alice)
    assert res.status_code == 404
    assert res.get_json()['kind'] == 'not_found'


def test_create_validation_errors(players, add_questions):
    alice, _, _, _ = players
    add_questions(3)
    assert _create(alice, opponent='nobody').status_code == 404
    res = _create(alice, opponent='alice')
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'invalid_argument'
    assert _create(alice, category='').status_code == 400
    assert _create(alice, opponent='').status_code == 400
    assert _create(alice, count=0).status_code == 400
    assert _create(alice, count=500).status_code == 400


def test_create_requires_login(client):
    res = _create(client)
    assert res.status_code == 401


def test_mixed_difficulty_is_null(players, add_questions, flask_app):
    alice, _, _, _ = players
    add_questions(2, difficulty=1)
    add_questions(2, difficulty=4)
    battle_id = _create(alice, count=4).get_json()['battle']['id']
    with flask_app.app_context():
        assert db.session.get(Battle, battle_id).difficulty is None

    view = alice.get(f'/api/battles/{battle_id}').get_json()
    assert view['difficulty'] is None
    assert view['mixedDifficulty'] is True


def test_single_tier_battle_records_difficulty(players, add_questions):
    alice, _, _, _ = players
    add_questions(4, difficulty=3)
    battle_id = _create(alice, count=4, difficulty=3).get_json()['battle']['id']
    view = alice.get(f'/api/battles/{battle_id}').get_json()
    assert view['difficulty'] == 3
    assert view['mixedDifficulty'] is False


def test_only_invited_player_accepts(players, add_questions, login_client):
    alice, _, bob, _ = players
    carol, _ = login_client('carol')
    add_questions(4)
    battle_id = _create(alice, count=4).get_json()['battle']['id']

    res = alice.post(f'/api/battles/{battle_id}/accept')
    assert res.status_code == 403
    assert res.get_json()['kind'] == 'forbidden'
    assert carol.post(f'/api/battles/{battle_id}/accept').status_code == 403

    res = bob.post(f'/api/battles/{battle_id}/accept')
    assert res.status_code == 200
    assert res.get_json()['battle']['status'] == 'active'

    # Already active: accepting again is an invalid transition
    res = bob.post(f'/api/battles/{battle_id}/accept')
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'invalid_state'


def test_accept_missing_battle(players):
    _, _, bob, _ = players
    assert bob.post('/api/battles/999/accept').status_code == 404


def test_pending_battle_hides_questions(players, add_questions):
    alice, _, bob, _ = players
    add_questions(4)
    battle_id = _create(alice, count=4).get_json()['battle']['id']
    view = alice.get(f'/api/battles/{battle_id}').get_json()
    assert view['status'] == 'pending'
    assert view['questions'] == []
    bob_view = bob.get(f'/api/battles/{battle_id}').get_json()
    assert bob_view['canAccept'] is True
    assert bob_view['youAre'] == 'player2'


def test_view_forbidden_for_outsiders(players, add_questions, login_client):
    alice, _, _, _ = players
    carol, _ = login_client('carol')
    add_questions(4)
    battle_id = _create(alice, count=4).get_json()['battle']['id']
    res = carol.get(f'/api/battles/{battle_id}')
    assert res.status_code == 403
    assert alice.get('/api/battles/424242').status_code == 404


def test_active_view_keeps_stored_question_order(players, add_questions, flask_app):
    alice, _, bob, _ = players
    add_questions(10)
    battle_id = _start_battle(alice, bob)
    with flask_app.app_context():
        stored = list(db.session.get(Battle, battle_id).question_ids)

    for c in (alice, bob):
        view = c.get(f'/api/battles/{battle_id}').get_json()
        assert [q['id'] for q in view['questions']] == stored
        assert all('correctIndex' not in q for q in view['questions'])


def test_submit_before_accept_is_invalid_state(players, add_questions):
    alice, _, _, _ = players
    add_questions(4)
    battle_id = _create(alice, count=4).get_json()['battle']['id']
    res = alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 0, 0]})
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'invalid_state'


def test_submit_requires_array(players, add_questions):
    alice, _, bob, _ = players
    add_questions(4)
    battle_id = _start_battle(alice, bob, count=4)
    res = alice.post(f'/api/battles/{battle_id}/submit', json={'answers': '0000'})
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'invalid_argument'


def test_submit_by_outsider_is_forbidden(players, add_questions, login_client):
    alice, _, bob, _ = players
    carol, _ = login_client('carol')
    add_questions(4)
    battle_id = _start_battle(alice, bob, count=4)
    res = carol.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 0, 0]})
    assert res.status_code == 403


def test_full_battle_scenario(players, add_questions, get_user):
    alice, alice_id, bob, bob_id = players
    add_questions(10)
    battle_id = _start_battle(alice, bob)

    res = alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0] * 7 + [1] * 3})
    assert res.status_code == 200
    body = res.get_json()
    assert body['yourScore'] == 7
    assert body['battleStatus'] == 'active'

    # Stats only move on completion
    assert get_user(alice_id)['total_answered'] == 0
    view = bob.get(f'/api/battles/{battle_id}').get_json()
    assert view['opponentSubmitted'] is True
    assert view['submitted'] is False

    res = bob.post(f'/api/battles/{battle_id}/submit', json={'answers': [0] * 5 + [2] * 5})
    assert res.status_code == 200
    body = res.get_json()
    assert body['yourScore'] == 5
    assert body['battleStatus'] == 'completed'

    a, b = get_user(alice_id), get_user(bob_id)
    assert (a['wins'], a['losses']) == (1, 0)
    assert (b['wins'], b['losses']) == (0, 1)
    assert a['total_answered'] == b['total_answered'] == 10
    assert a['correct_answered'] == 7 and b['correct_answered'] == 5
    assert a['points'] == 7 and b['points'] == 5

    result = alice.get(f'/api/battles/{battle_id}/result').get_json()
    assert result['winner'] == 'alice'
    assert result['youWon'] is True
    assert result['yourScore'] == 7
    assert result['opponentScore'] == 5

    view = alice.get(f'/api/battles/{battle_id}').get_json()
    assert view['status'] == 'completed'
    assert view['questions'] == []
    assert view['resultUrl'].endswith(f'/{battle_id}/result')


def test_duplicate_submit_is_conflict_and_keeps_score(players, add_questions, flask_app):
    alice, _, bob, _ = players
    add_questions(4)
    battle_id = _start_battle(alice, bob, count=4)

    assert alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 1, 1]}).status_code == 200
    res = alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 0, 0]})
    assert res.status_code == 409
    assert res.get_json()['kind'] == 'conflict'
    with flask_app.app_context():
        battle = db.session.get(Battle, battle_id)
        assert battle.p1_score == 2
        assert battle.p1_answers == [0, 0, 1, 1]
        assert battle.status == 'active'


def test_completion_happens_once(players, add_questions, get_user):
    alice, alice_id, bob, bob_id = players
    add_questions(3)
    battle_id = _start_battle(alice, bob, count=3)
    alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 0]})
    bob.post(f'/api/battles/{battle_id}/submit', json={'answers': [1, 1, 1]})
    # Retries after completion change nothing
    assert alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 0]}).status_code == 409
    assert bob.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 0]}).status_code == 409
    assert get_user(alice_id)['wins'] == 1
    assert get_user(alice_id)['total_answered'] == 3
    assert get_user(bob_id)['losses'] == 1


def test_tie_leaves_winner_unset(players, add_questions, get_user, flask_app):
    alice, alice_id, bob, bob_id = players
    add_questions(4)
    battle_id = _start_battle(alice, bob, count=4)
    alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 1, 1]})
    bob.post(f'/api/battles/{battle_id}/submit', json={'answers': [1, 1, 0, 0]})
    with flask_app.app_context():
        battle = db.session.get(Battle, battle_id)
        assert battle.status == 'completed'
        assert battle.winner_id is None
    result = bob.get(f'/api/battles/{battle_id}/result').get_json()
    assert result['winner'] == 'tie'
    for uid in (alice_id, bob_id):
        u = get_user(uid)
        assert (u['wins'], u['losses']) == (0, 0)
        assert u['points'] == 2


def test_short_and_invalid_answers_score_as_wrong(players, add_questions, flask_app):
    alice, _, bob, _ = players
    add_questions(4)
    battle_id = _start_battle(alice, bob, count=4)
    res = alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 'x', 9]})
    assert res.status_code == 200
    assert res.get_json()['yourScore'] == 1
    with flask_app.app_context():
        assert db.session.get(Battle, battle_id).p1_answers == [0, -1, -1, -1]


def test_empty_answer_array_counts_as_submitted(players, add_questions):
    alice, _, bob, _ = players
    add_questions(2)
    battle_id = _start_battle(alice, bob, count=2)
    assert alice.post(f'/api/battles/{battle_id}/submit', json={'answers': []}).status_code == 200
    assert alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0]}).status_code == 409


def test_result_requires_completion(players, add_questions, login_client):
    alice, _, bob, _ = players
    add_questions(2)
    battle_id = _start_battle(alice, bob, count=2)
    res = alice.get(f'/api/battles/{battle_id}/result')
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'invalid_state'

    alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0]})
    bob.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 1]})
    carol, _ = login_client('carol')
    assert carol.get(f'/api/battles/{battle_id}/result').status_code == 403


def test_review_follows_stored_order(players, add_questions, flask_app):
    alice, _, bob, _ = players
    ids = []
    for idx in range(4):
        ids += add_questions(1, correct_index=idx)
    battle_id = _start_battle(alice, bob, count=4)
    view = alice.get(f'/api/battles/{battle_id}').get_json()
    with flask_app.app_context():
        correct = {q.id: q.correct_index for q in Question.query.all()}
    answers = [correct[q['id']] for q in view['questions']]

    assert alice.post(f'/api/battles/{battle_id}/submit', json={'answers': answers}).get_json()['yourScore'] == 4
    bob.post(f'/api/battles/{battle_id}/submit', json={'answers': []})

    review = alice.get(f'/api/battles/{battle_id}/result').get_json()['review']
    assert [r['id'] for r in review] == [q['id'] for q in view['questions']]
    assert all(r['isCorrect'] for r in review)
    assert [r['yourAnswer'] for r in review] == answers

    bob_review = bob.get(f'/api/battles/{battle_id}/result').get_json()['review']
    assert all(r['yourAnswer'] == -1 and r['isCorrect'] is False for r in bob_review)


def test_review_survives_deleted_question(players, add_questions, flask_app):
    alice, _, bob, _ = players
    add_questions(3)
    battle_id = _start_battle(alice, bob, count=3)
    alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 0]})
    bob.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0, 0]})
    with flask_app.app_context():
        battle = db.session.get(Battle, battle_id)
        gone = battle.question_ids[1]
        db.session.delete(db.session.get(Question, gone))
        db.session.commit()

    res = alice.get(f'/api/battles/{battle_id}/result')
    assert res.status_code == 200
    review = res.get_json()['review']
    assert len(review) == 3
    assert review[1]['id'] == gone
    assert review[1]['prompt'] == '(missing question)'
    assert review[1]['choices'] == []
    assert review[1]['isCorrect'] is False


def test_view_keeps_slot_for_deleted_question(players, add_questions, flask_app):
    alice, _, bob, _ = players
    add_questions(3)
    battle_id = _start_battle(alice, bob, count=3)
    with flask_app.app_context():
        battle = db.session.get(Battle, battle_id)
        stored = list(battle.question_ids)
        db.session.delete(db.session.get(Question, stored[0]))
        db.session.commit()

    questions = alice.get(f'/api/battles/{battle_id}').get_json()['questions']
    assert [q['id'] for q in questions] == stored
    assert questions[0]['prompt'] == '(missing question)'
    assert questions[0]['choices'] == []
    assert questions[0]['missing'] is True

    # Answering every question shown lines up with scoring; the gap never scores
    answers = [0] * len(questions)
    res = alice.post(f'/api/battles/{battle_id}/submit', json={'answers': answers})
    assert res.get_json()['yourScore'] == 2


def test_completion_race_applies_stats_once(players, add_questions, get_user, monkeypatch):
    """When two requests both see both slots filled, only one completes the battle."""
    from trivia.services import battles as svc

    alice, alice_id, bob, bob_id = players
    add_questions(2)
    battle_id = _start_battle(alice, bob, count=2)
    assert alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0]}).status_code == 200

    real = svc._complete_if_ready
    outcomes = []

    def concurrent_completion(battle):
        # Another request reaches the completion step first
        outcomes.append(real(battle))
        outcomes.append(real(battle))
        return outcomes[-1]

    monkeypatch.setattr(svc, '_complete_if_ready', concurrent_completion)
    res = bob.post(f'/api/battles/{battle_id}/submit', json={'answers': [1, 1]})
    assert res.status_code == 200
    assert res.get_json()['battleStatus'] == 'completed'
    assert outcomes == [True, False]

    a, b = get_user(alice_id), get_user(bob_id)
    assert (a['wins'], a['losses'], a['total_answered'], a['points']) == (1, 0, 2, 2)
    assert (b['wins'], b['losses'], b['total_answered'], b['points']) == (0, 1, 2, 0)


def test_lost_submission_race_is_conflict(players, add_questions, flask_app, monkeypatch):
    """A request that read the slot as empty still loses if another wrote it first."""
    from trivia.services import battles as svc

    alice, alice_id, bob, _ = players
    add_questions(2)
    battle_id = _start_battle(alice, bob, count=2)

    with flask_app.app_context():
        live = db.session.get(Battle, battle_id)
        # Snapshot as the losing request saw it: active, no answers yet
        stale = Battle(
            id=live.id, player1_id=live.player1_id, player2_id=live.player2_id,
            category=live.category, status='active', question_ids=list(live.question_ids),
        )

    assert alice.post(f'/api/battles/{battle_id}/submit', json={'answers': [0, 0]}).status_code == 200

    monkeypatch.setattr(svc, '_get_battle', lambda battle_id, lock=False: stale)
    with flask_app.app_context():
        actor = db.session.get(User, alice_id)
        with pytest.raises(Conflict):
            svc.submit_battle(battle_id, actor, [1, 1])
        assert db.session.get(Battle, battle_id).p1_score == 2


def test_inbox_groups_by_status(players, add_questions, login_client):
    alice, _, bob, _ = players
    carol, _ = login_client('carol')
    add_questions(2)
    pending_id = _create(alice, count=2).get_json()['battle']['id']
    active_id = _start_battle(alice, bob, count=2)
    done_id = _start_battle(alice, bob, count=2)
    alice.post(f'/api/battles/{done_id}/submit', json={'answers': [0, 0]})
    bob.post(f'/api/battles/{done_id}/submit', json={'answers': [0, 0]})
    _create(carol, opponent='bob', count=2)

    inbox = alice.get('/api/battles/inbox').get_json()
    assert [b['id'] for b in inbox['pending']] == [pending_id]
    assert [b['id'] for b in inbox['active']] == [active_id]
    assert [b['id'] for b in inbox['completed']] == [done_id]
    assert inbox['pending'][0]['opponentUsername'] == 'bob'
    assert inbox['pending'][0]['canAccept'] is False

    bob_inbox = bob.get('/api/battles/inbox').get_json()
    assert len(bob_inbox['pending']) == 2
    assert all(b['canAccept'] for b in bob_inbox['pending'])

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from trivia.services import battles as svc
from trivia.validation import parse_count, parse_difficulty


battles = Blueprint('battles', __name__)


@battles.route('/inbox', methods=['GET'])
@login_required
def inbox():
    return jsonify(svc.battle_inbox(current_user))


@battles.route('/create', methods=['POST'])
@login_required
def create_battle():
    data = request.get_json(silent=True) or {}
    cfg = current_app.config
    count = parse_count(data.get('count'), cfg.get('DEFAULT_QUESTION_COUNT', 10), cfg.get('MAX_QUESTION_COUNT', 50))
    difficulty = parse_difficulty(data.get('difficulty'))
    battle = svc.create_battle(
        current_user,
        (data.get('opponentUsername') or '').strip(),
        (data.get('category') or '').strip(),
        count,
        difficulty=difficulty,
    )
    return jsonify({
        'battle': {
            'id': battle.id,
            'opponentUsername': battle.player2.username,
            'status': battle.status,
            'questionCount': battle.question_count,
            'message': 'Challenge sent!',
        }
    }), 201


@battles.route('/<int:battle_id>', methods=['GET'])
@login_required
def view_battle(battle_id):
    return jsonify(svc.view_battle(battle_id, current_user))


@battles.route('/<int:battle_id>/accept', methods=['POST'])
@login_required
def accept_battle(battle_id):
    battle = svc.accept_battle(battle_id, current_user)
    return jsonify({'battle': {'id': battle.id, 'status': battle.status, 'message': 'Battle accepted! Good luck'}})


@battles.route('/<int:battle_id>/submit', methods=['POST'])
@login_required
def submit_answers(battle_id):
    data = request.get_json(silent=True) or {}
    return jsonify(svc.submit_battle(battle_id, current_user, data.get('answers')))


@battles.route('/<int:battle_id>/result', methods=['GET'])
@login_required
def battle_result(battle_id):
    return jsonify(svc.battle_result(battle_id, current_user))

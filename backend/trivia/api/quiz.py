from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from trivia.services.solo import start_quiz, submit_quiz
from trivia.validation import parse_count, parse_difficulty, require_text


quiz = Blueprint('quiz', __name__)


@quiz.route('/start', methods=['POST'])
@login_required
def start():
    data = request.get_json(silent=True) or {}
    cfg = current_app.config
    category = require_text(data, 'category')
    count = parse_count(data.get('count'), cfg.get('DEFAULT_QUESTION_COUNT', 10), cfg.get('MAX_QUESTION_COUNT', 50))
    use_adaptive = bool(data.get('useAdaptive'))
    difficulty = None if use_adaptive else parse_difficulty(data.get('difficulty'))
    return jsonify(start_quiz(current_user, category, count, difficulty=difficulty, use_adaptive=use_adaptive))


@quiz.route('/submit', methods=['POST'])
@login_required
def submit():
    data = request.get_json(silent=True) or {}
    return jsonify(submit_quiz(current_user, data.get('questionIds'), data.get('answers')))

from functools import wraps
from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from trivia import db
from trivia.errors import Forbidden, InvalidArgument, NotFound
from trivia.models import Question
from trivia.services.questions import list_categories
from trivia.validation import parse_difficulty, validate_question_payload


questions = Blueprint('questions', __name__)

BROWSE_LIMIT = 100


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not current_user.is_admin:
            raise Forbidden('Admin only')
        return view(*args, **kwargs)
    return login_required(wrapper)


def _get_question(question_id):
    question = db.session.get(Question, question_id)
    if not question:
        raise NotFound('Question not found')
    return question


@questions.route('', methods=['GET'])
def browse():
    query = Question.query
    category = request.args.get('category')
    if category:
        query = query.filter_by(category=category)
    difficulty = parse_difficulty(request.args.get('difficulty'))
    if difficulty is not None:
        query = query.filter_by(difficulty=difficulty)
    rows = query.order_by(Question.id).limit(BROWSE_LIMIT).all()
    return jsonify({'questions': [q.to_public_dict() for q in rows]})


@questions.route('/categories', methods=['GET'])
def categories():
    return jsonify({'categories': list_categories()})


@questions.route('', methods=['POST'])
@admin_required
def create_question():
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidArgument('JSON object body required')
    question = Question(**validate_question_payload(data))
    db.session.add(question)
    db.session.commit()
    current_app.logger.info(f"[question-create] question={question.id} by={current_user.id} category={question.category}")
    return jsonify({'question': question.to_dict()}), 201


@questions.route('/<int:question_id>', methods=['PUT'])
@admin_required
def update_question(question_id):
    question = _get_question(question_id)
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidArgument('JSON object body required')
    for field, value in validate_question_payload(data, partial=True).items():
        setattr(question, field, value)
    db.session.add(question)
    db.session.commit()
    return jsonify({'question': question.to_dict()})


@questions.route('/<int:question_id>', methods=['DELETE'])
@admin_required
def delete_question(question_id):
    question = _get_question(question_id)
    db.session.delete(question)
    db.session.commit()
    current_app.logger.info(f"[question-delete] question={question_id} by={current_user.id}")
    return jsonify({'ok': True})

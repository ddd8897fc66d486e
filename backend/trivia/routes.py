from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from trivia import db
from trivia.errors import Conflict, InvalidArgument
from trivia.models import User
from trivia.validation import require_text

main = Blueprint('main', __name__)


@main.route('/health')
def health():
    return jsonify({'ok': True})


@main.route('/auth/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    username = require_text(data, 'username')
    email = require_text(data, 'email').lower()
    password = data.get('password')
    if not isinstance(password, str) or not password:
        raise InvalidArgument('password is required')

    if User.query.filter(db.or_(User.username == username, User.email == email)).first():
        current_app.logger.warning(f"[register-conflict] username={username}")
        raise Conflict('Username or email already in use')

    user = User(username=username, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    login_user(user, remember=True)
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@main.route('/auth/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    identifier = (data.get('email') or data.get('username') or '').strip()
    user = User.query.filter(db.or_(User.email == identifier.lower(), User.username == identifier)).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify({'success': True, 'user': user.to_dict()})
    current_app.logger.warning(f"[login-failed] identifier={identifier}")
    return jsonify({'error': 'Invalid credentials', 'kind': 'unauthorized'}), 401


@main.route('/auth/check_login', methods=['GET'])
@login_required
def check_login():
    return jsonify({'success': True, 'user': current_user.to_dict()})


@main.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})

from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from trivia.services.adaptive import window_accuracy


users = Blueprint('users', __name__)


@users.route('/me', methods=['GET'])
@login_required
def me():
    payload = current_user.to_dict()
    payload.update({
        'stats': current_user.stats_dict(),
        'points': current_user.points or 0,
        'accuracy': current_user.accuracy,
        'preferredDifficulty': current_user.preferred_difficulty,
        'recentAccuracy': window_accuracy(current_user.recent_answers),
    })
    return jsonify(payload)

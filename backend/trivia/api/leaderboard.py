from flask import Blueprint, jsonify, request
from trivia.services.leaderboard import leaderboard as build_leaderboard


leaderboard = Blueprint('leaderboard', __name__)


@leaderboard.route('', methods=['GET'])
@leaderboard.route('/', methods=['GET'])
def standings():
    return jsonify(build_leaderboard(request.args.get('range')))

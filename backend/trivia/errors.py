"""Domain error taxonomy.

Services raise these; the handlers registered in ``create_app`` render them
as ``{"error": ..., "kind": ...}`` with the matching HTTP status.
"""

from flask import jsonify
from werkzeug.exceptions import HTTPException, BadRequest, Conflict as _Conflict
from werkzeug.exceptions import Forbidden as _Forbidden, NotFound as _NotFound


class TriviaError(HTTPException):
    kind = 'error'

    def __init__(self, message=None):
        super().__init__(description=message)


class InvalidArgument(TriviaError, BadRequest):
    kind = 'invalid_argument'


class NotFound(TriviaError, _NotFound):
    kind = 'not_found'


class Forbidden(TriviaError, _Forbidden):
    kind = 'forbidden'


class InvalidState(TriviaError, BadRequest):
    kind = 'invalid_state'


class Conflict(TriviaError, _Conflict):
    kind = 'conflict'


def register_error_handlers(flask_app, db):
    @flask_app.errorhandler(TriviaError)
    def handle_trivia_error(exc):
        return jsonify({'error': exc.description, 'kind': exc.kind}), exc.code

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description, 'kind': 'http_error'}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected(exc):
        db.session.rollback()
        flask_app.logger.exception(f"[server-error] {type(exc).__name__}: {exc}")
        return jsonify({'error': 'Internal server error', 'kind': 'server_error'}), 500

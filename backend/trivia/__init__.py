from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS', []))

    from trivia.errors import register_error_handlers
    register_error_handlers(flask_app, db)

    # Import and register blueprints here
    from trivia.routes import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from trivia.api.questions import questions
    flask_app.register_blueprint(questions, url_prefix='/api/questions')

    from trivia.api.quiz import quiz
    flask_app.register_blueprint(quiz, url_prefix='/api/quiz')

    from trivia.api.battles import battles
    flask_app.register_blueprint(battles, url_prefix='/api/battles')

    from trivia.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    from trivia.api.users import users
    flask_app.register_blueprint(users, url_prefix='/api/users')

    # Flask-Login user loader
    from trivia.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required', 'kind': 'unauthorized'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from trivia.seed import seed_questions, seed_users
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_users()
            added = seed_questions()
            print(f'Database has been reset and seeded with {added} questions!')

    @click.command('seed-questions')
    def seed_questions_command():
        """Adds the bundled question bank without dropping anything."""
        from trivia.seed import seed_questions
        with flask_app.app_context():
            added = seed_questions()
            print(f'Seeded {added} questions.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_questions_command)

    return flask_app

from datetime import datetime, timezone
from flask_login import UserMixin
from trivia import db, bcrypt


def utcnow():
    """Naive UTC timestamp, matching what SQLite and Postgres hand back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    # Leaderboard accumulator; only ever incremented
    points = db.Column(db.Integer, default=0, nullable=False)
    total_answered = db.Column(db.Integer, default=0, nullable=False)
    correct_answered = db.Column(db.Integer, default=0, nullable=False)
    wins = db.Column(db.Integer, default=0, nullable=False)
    losses = db.Column(db.Integer, default=0, nullable=False)
    recent_answers = db.Column(db.JSON, default=list, nullable=False)  # last N booleans, oldest first
    preferred_difficulty = db.Column(db.Integer, default=2, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def accuracy(self) -> float:
        if not self.total_answered:
            return 0
        return self.correct_answered / self.total_answered

    def stats_dict(self):
        return {
            'totalAnswered': self.total_answered or 0,
            'correctAnswered': self.correct_answered or 0,
            'wins': self.wins or 0,
            'losses': self.losses or 0,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'isAdmin': bool(self.is_admin),
        }


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    prompt = db.Column(db.Text, nullable=False)
    choices = db.Column(db.JSON, nullable=False)  # exactly four strings
    correct_index = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(64), nullable=False, index=True)
    difficulty = db.Column(db.Integer, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_public_dict(self):
        """Playable form: the correct index is withheld."""
        return {
            'id': self.id,
            'prompt': self.prompt,
            'choices': list(self.choices or []),
            'category': self.category,
            'difficulty': self.difficulty,
        }

    def to_dict(self):
        payload = self.to_public_dict()
        payload['correctIndex'] = self.correct_index
        return payload


class Battle(db.Model):
    __tablename__ = 'battle'
    id = db.Column(db.Integer, primary_key=True)
    player1_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)  # challenger
    player2_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)  # invited
    category = db.Column(db.String(64), nullable=False)
    difficulty = db.Column(db.Integer, nullable=True)  # NULL = mixed
    status = db.Column(db.String(16), default='pending', nullable=False, index=True)  # pending, active, completed
    question_ids = db.Column(db.JSON, nullable=False)
    # NULL until the player submits; the guarded update relies on SQL NULL
    p1_answers = db.Column(db.JSON(none_as_null=True), nullable=True)
    p2_answers = db.Column(db.JSON(none_as_null=True), nullable=True)
    p1_score = db.Column(db.Integer, default=0, nullable=False)
    p2_score = db.Column(db.Integer, default=0, nullable=False)
    winner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)

    player1 = db.relationship('User', foreign_keys=[player1_id])
    player2 = db.relationship('User', foreign_keys=[player2_id])
    winner = db.relationship('User', foreign_keys=[winner_id])

    def slot_for(self, user_id):
        """Return 'p1', 'p2' or None for a user id."""
        if user_id == self.player1_id:
            return 'p1'
        if user_id == self.player2_id:
            return 'p2'
        return None

    def answers_for(self, slot):
        return self.p1_answers if slot == 'p1' else self.p2_answers

    def score_for(self, slot):
        return self.p1_score if slot == 'p1' else self.p2_score

    def opponent_of(self, slot):
        return self.player2 if slot == 'p1' else self.player1

    @property
    def question_count(self) -> int:
        return len(self.question_ids or [])

    def summary_for(self, user_id):
        slot = self.slot_for(user_id)
        other = 'p2' if slot == 'p1' else 'p1'
        opponent = self.opponent_of(slot)
        return {
            'id': self.id,
            'opponentUsername': opponent.username if opponent else None,
            'category': self.category,
            'difficulty': self.difficulty,
            'mixedDifficulty': self.difficulty is None,
            'questionCount': self.question_count,
            'status': self.status,
            'youAre': 'player1' if slot == 'p1' else 'player2',
            'canAccept': self.status == 'pending' and slot == 'p2',
            'submitted': self.answers_for(slot) is not None,
            'yourScore': self.score_for(slot),
            'opponentScore': self.score_for(other),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


class QuizAttempt(db.Model):
    __tablename__ = 'quiz_attempt'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    mode = db.Column(db.String(16), default='solo', nullable=False)
    question_ids = db.Column(db.JSON, nullable=False)
    answers = db.Column(db.JSON, nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    accuracy = db.Column(db.Float, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'mode': self.mode,
            'questionIds': list(self.question_ids or []),
            'answers': list(self.answers or []),
            'score': self.score,
            'accuracy': self.accuracy,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

from cheetahtype import db
from flask_login import UserMixin
from datetime import datetime, timezone

TEST_MODES = ('time', 'words', 'quote', 'custom', 'punctuation', 'numbers', 'zen')


def utcnow():
    return datetime.now(timezone.utc)


def isoformat(value):
    if value is None:
        return None
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    # Opaque uid issued by the identity provider; the join key for every request
    firebase_uid = db.Column(db.String(128), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(128), nullable=True)
    photo_url = db.Column(db.String(512), nullable=True)
    email_verified = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    tests = db.relationship(
        'TypingTest', back_populates='user',
        cascade='all, delete-orphan',
    )
    practice_texts = db.relationship(
        'CustomPracticeText', back_populates='user',
        cascade='all, delete-orphan',
    )

    @property
    def public_name(self):
        """Display name, else the email local-part, else 'Anonymous'."""
        if self.display_name:
            return self.display_name
        if self.email and self.email.split('@')[0]:
            return self.email.split('@')[0]
        return 'Anonymous'

    def to_dict(self):
        return {
            'id': self.id,
            'firebase_uid': self.firebase_uid,
            'email': self.email,
            'display_name': self.display_name,
            'photo_url': self.photo_url,
            'email_verified': self.email_verified,
            'created_at': isoformat(self.created_at),
            'last_login_at': isoformat(self.last_login_at),
        }


class TypingTest(db.Model):
    """One completed typing test. Rows are append-only."""
    __tablename__ = 'typing_tests'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    test_mode = db.Column(db.String(16), nullable=False, default='time', index=True)
    time_limit = db.Column(db.Integer, nullable=True)
    word_limit = db.Column(db.Integer, nullable=True)
    language = db.Column(db.String(32), nullable=False, default='english')
    text_content = db.Column(db.Text, nullable=True)
    wpm = db.Column(db.Float, nullable=False)
    raw_wpm = db.Column(db.Float, nullable=True)
    accuracy = db.Column(db.Float, nullable=False, default=0.0)  # 0-100
    consistency = db.Column(db.Float, nullable=True)  # 0-100
    total_characters = db.Column(db.Integer, nullable=False, default=0)
    correct_characters = db.Column(db.Integer, nullable=False, default=0)
    incorrect_characters = db.Column(db.Integer, nullable=False, default=0)
    total_words = db.Column(db.Integer, nullable=False, default=0)
    correct_words = db.Column(db.Integer, nullable=False, default=0)
    incorrect_words = db.Column(db.Integer, nullable=False, default=0)
    actual_duration = db.Column(db.Integer, nullable=False)  # seconds
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    user = db.relationship('User', back_populates='tests')
    character_performance = db.relationship(
        'CharacterPerformance', back_populates='test',
        cascade='all, delete-orphan',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'wpm': self.wpm,
            'raw_wpm': self.raw_wpm,
            'accuracy': self.accuracy,
            'consistency': self.consistency,
            'test_mode': self.test_mode,
            'time_limit': self.time_limit,
            'word_limit': self.word_limit,
            'language': self.language,
            'total_characters': self.total_characters,
            'correct_characters': self.correct_characters,
            'incorrect_characters': self.incorrect_characters,
            'total_words': self.total_words,
            'correct_words': self.correct_words,
            'incorrect_words': self.incorrect_words,
            'actual_duration': self.actual_duration,
            'created_at': isoformat(self.created_at),
        }


class CharacterPerformance(db.Model):
    """Per-character counters captured during one test."""
    __tablename__ = 'character_performance'
    __table_args__ = (
        db.CheckConstraint(
            'total_typed = correct_typed + incorrect_typed',
            name='character_performance_totals_check',
        ),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    test_id = db.Column(db.Integer, db.ForeignKey('typing_tests.id', ondelete='CASCADE'), nullable=False, index=True)
    character = db.Column(db.String(8), nullable=False, index=True)
    total_typed = db.Column(db.Integer, nullable=False, default=0)
    correct_typed = db.Column(db.Integer, nullable=False, default=0)
    incorrect_typed = db.Column(db.Integer, nullable=False, default=0)
    average_speed = db.Column(db.Float, nullable=False, default=0.0)
    error_rate = db.Column(db.Float, nullable=False, default=0.0)
    difficulty_score = db.Column(db.Float, nullable=False, default=0.0)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    test = db.relationship('TypingTest', back_populates='character_performance')

    def to_dict(self):
        return {
            'id': self.id,
            'test_id': self.test_id,
            'character': self.character,
            'total_typed': self.total_typed,
            'correct_typed': self.correct_typed,
            'incorrect_typed': self.incorrect_typed,
            'average_speed': self.average_speed,
            'error_rate': self.error_rate,
            'difficulty_score': self.difficulty_score,
            'created_at': isoformat(self.created_at),
        }


class CustomPracticeText(db.Model):
    """Generated drill text aimed at one character."""
    __tablename__ = 'custom_practice_texts'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    target_character = db.Column(db.String(8), nullable=False)
    practice_text = db.Column(db.Text, nullable=False)
    difficulty_level = db.Column(db.Integer, nullable=False, default=1)
    word_count = db.Column(db.Integer, nullable=False, default=0)
    character_frequency = db.Column(db.Float, nullable=False, default=0.0)  # 0-1
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    user = db.relationship('User', back_populates='practice_texts')

    def to_dict(self):
        return {
            'id': self.id,
            'target_character': self.target_character,
            'practice_text': self.practice_text,
            'difficulty_level': self.difficulty_level,
            'word_count': self.word_count,
            # Stored as a fraction, reported as a percentage
            'character_frequency': round(self.character_frequency * 100, 2),
            'is_active': self.is_active,
            'created_at': isoformat(self.created_at),
        }

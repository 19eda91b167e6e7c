"""Append-only recording of completed typing tests."""
from typing import Optional

from flask import current_app

from cheetahtype import db
from cheetahtype.errors import ValidationError, storage_errors
from cheetahtype.models import TypingTest, TEST_MODES
from cheetahtype.schemas import parse_counters
from cheetahtype.services import metrics
from cheetahtype.services.analytics import build_performance_rows
from cheetahtype.services.users import ensure_user

NON_NEGATIVE_FIELDS = (
    'wpm', 'raw_wpm', 'actual_duration', 'time_limit', 'word_limit',
    'total_characters', 'correct_characters', 'incorrect_characters',
    'total_words', 'correct_words', 'incorrect_words',
)


def _or(value, fallback):
    return fallback if value is None else value


def derive_test_fields(payload) -> dict:
    """Fill counters the client left out and return the row's columns.

    Character totals fall back to what ``wpm`` over ``actual_duration``
    implies; word counts are characters / 5.
    """
    wpm = metrics.as_number(payload.wpm)
    duration = metrics.as_number(payload.actual_duration)

    total = _or(payload.total_characters, int(metrics.round_half_up(wpm * duration / 60 * 5)))

    accuracy = payload.accuracy
    if accuracy is None:
        if payload.correct_characters is None:
            raise ValidationError('accuracy or correct_characters is required', field='accuracy')
        accuracy = metrics.accuracy(payload.correct_characters, total)

    correct = _or(payload.correct_characters, int(metrics.round_half_up(total * accuracy / 100)))
    incorrect = _or(payload.incorrect_characters, total - correct)

    consistency = payload.consistency
    if consistency is None and payload.wpm_samples:
        consistency = metrics.consistency(payload.wpm_samples)

    raw = payload.raw_wpm
    if raw is None:
        raw = metrics.raw_wpm(total, duration)

    return {
        'test_mode': payload.test_mode,
        'time_limit': payload.time_limit,
        'word_limit': payload.word_limit,
        'language': payload.language or 'english',
        'text_content': payload.text_content,
        'wpm': metrics.round2(wpm),
        'raw_wpm': metrics.round2(raw),
        'accuracy': metrics.round2(accuracy),
        'consistency': metrics.round2(consistency) if consistency is not None else None,
        'total_characters': total,
        'correct_characters': correct,
        'incorrect_characters': incorrect,
        'total_words': _or(payload.total_words, int(metrics.round_half_up(total / 5))),
        'correct_words': _or(payload.correct_words, int(metrics.round_half_up(correct / 5))),
        'incorrect_words': _or(payload.incorrect_words, int(metrics.round_half_up(incorrect / 5))),
        'actual_duration': int(metrics.round_half_up(duration)),
    }


def validate_test_fields(fields: dict) -> None:
    """Reject negative counters and inconsistent totals."""
    for name in ('accuracy', 'consistency'):
        value = fields.get(name)
        if value is not None and not 0 <= value <= 100:
            raise ValidationError(f'{name} must be between 0 and 100', field=name)
    for name in NON_NEGATIVE_FIELDS:
        value = fields.get(name)
        if value is not None and value < 0:
            raise ValidationError(f'{name} must not be negative', field=name)
    if fields['total_characters'] != fields['correct_characters'] + fields['incorrect_characters']:
        raise ValidationError(
            'total_characters must equal correct_characters + incorrect_characters',
            field='total_characters',
        )
    if fields['test_mode'] not in TEST_MODES:
        raise ValidationError(f"Unknown test_mode {fields['test_mode']!r}", field='test_mode')


def record_test(payload) -> TypingTest:
    """Persist one test (and its character rows) and return it."""
    fields = derive_test_fields(payload)
    validate_test_fields(fields)
    user = ensure_user(payload.firebase_uid, payload.user_email)

    with storage_errors('save test result'):
        test = TypingTest(user_id=user.id, **fields)
        db.session.add(test)
        db.session.flush()
        if payload.character_performance:
            counters = parse_counters(payload.character_performance)
            db.session.add_all(build_performance_rows(user, test.id, counters))
        db.session.commit()

    current_app.logger.info(
        f"[test-recorded] user={user.id} test={test.id} mode={test.test_mode} "
        f"time_limit={test.time_limit} wpm={test.wpm} accuracy={test.accuracy}"
    )
    return test


def list_tests(user, limit: int = 25, offset: int = 0, max_limit: Optional[int] = None):
    """Most recent tests first."""
    limit = max(1, limit)
    if max_limit:
        limit = min(limit, max_limit)
    with storage_errors('fetch tests'):
        return (
            TypingTest.query.filter_by(user_id=user.id)
            .order_by(TypingTest.created_at.desc(), TypingTest.id.desc())
            .offset(max(0, offset))
            .limit(limit)
            .all()
        )

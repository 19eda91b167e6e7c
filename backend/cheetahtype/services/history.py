"""Paginated test history for one user.

Derived metrics (``raw_wpm``, ``error_rate``) are recomputed from the
stored character and duration totals on every read, so rows written by an
older formula still render with the current one.
"""
import math
from typing import Optional

from cheetahtype.errors import ValidationError, storage_errors
from cheetahtype.models import TypingTest, isoformat
from cheetahtype.services import metrics

ALL = 'all'


def _filter_value(value):
    """Treat None, '' and the 'all' sentinel as no filter."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in ('', ALL):
        return None
    return value


def as_time_limit(value):
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError('time_limit must be an integer', field='time_limit')


def pagination(total: int, page: int, limit: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        'currentPage': page,
        'totalPages': total_pages,
        'totalTests': total,
        'limit': limit,
        'hasNextPage': page < total_pages,
        'hasPreviousPage': page > 1,
    }


def format_history_test(test: TypingTest) -> dict:
    return {
        'id': test.id,
        'wpm': test.wpm,
        'accuracy': metrics.round2(test.accuracy),
        'consistency': metrics.round2(test.consistency) if test.consistency is not None else None,
        'test_mode': test.test_mode,
        'time_limit': test.time_limit,
        'word_limit': test.word_limit,
        'language': test.language,
        'actual_duration': test.actual_duration,
        'total_characters': test.total_characters,
        'correct_characters': test.correct_characters,
        'incorrect_characters': test.incorrect_characters,
        'total_words': test.total_words,
        'correct_words': test.correct_words,
        'incorrect_words': test.incorrect_words,
        'created_at': isoformat(test.created_at),
        'raw_wpm': metrics.round_half_up(metrics.raw_wpm(test.total_characters, test.actual_duration)),
        'error_rate': metrics.error_rate(test.incorrect_characters, test.total_characters),
    }


def get_history(user, page: int = 1, limit: int = 20, mode: Optional[str] = None,
                time_limit=None, count_applies_filters: bool = True,
                max_limit: Optional[int] = None) -> dict:
    """Return ``{tests, pagination, filters}`` for one page of history.

    ``page`` is 1-indexed and the page is ordered newest first. With
    ``count_applies_filters`` off, the total ignores mode/time_limit.
    """
    page = max(1, int(page or 1))
    limit = max(1, int(limit or 1))
    if max_limit:
        limit = min(limit, max_limit)
    mode = _filter_value(mode)
    time_limit = as_time_limit(_filter_value(time_limit))

    base = TypingTest.query.filter(TypingTest.user_id == user.id)
    filtered = base
    if mode is not None:
        filtered = filtered.filter(TypingTest.test_mode == mode)
    if time_limit is not None:
        filtered = filtered.filter(TypingTest.time_limit == time_limit)

    with storage_errors('count tests'):
        total = (filtered if count_applies_filters else base).order_by(None).count()

    with storage_errors('fetch test history'):
        tests = (
            filtered.order_by(TypingTest.created_at.desc(), TypingTest.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

    return {
        'tests': [format_history_test(t) for t in tests],
        'pagination': pagination(total, page, limit),
        'filters': {
            'mode': mode or ALL,
            'timeLimit': time_limit if time_limit is not None else ALL,
        },
    }

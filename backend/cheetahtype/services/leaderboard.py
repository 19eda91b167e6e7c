"""Leaderboard ranking over recorded tests."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from cheetahtype import db
from cheetahtype.errors import ValidationError, storage_errors
from cheetahtype.models import TypingTest, User, TEST_MODES, isoformat
from cheetahtype.services import metrics
from cheetahtype.services.history import as_time_limit

PERIODS = {
    '7d': timedelta(days=7),
    '30d': timedelta(days=30),
    'all': None,
}
DEFAULT_PERIOD = '30d'
DEFAULT_MODE = 'time'
DEFAULT_TIME_LIMIT = 30


def normalize_period(period: Optional[str], default: str = DEFAULT_PERIOD) -> str:
    if period in PERIODS:
        return period
    return default if default in PERIODS else DEFAULT_PERIOD


def board_time_limit(mode: str, time_limit=None) -> Optional[int]:
    """Time limit a board request refers to.

    Time boards default to 30 seconds and ``'all'`` spans every limit
    (None); other modes never split by limit.
    """
    if mode != 'time':
        return None
    if time_limit is None or time_limit == '':
        return DEFAULT_TIME_LIMIT
    if isinstance(time_limit, str) and time_limit.strip().lower() == 'all':
        return None
    return as_time_limit(time_limit)


def leaderboard_room(mode: str, time_limit=None) -> str:
    """Socket.IO room for one board; only time boards split by limit."""
    if mode == 'time' and time_limit is not None:
        return f"leaderboard:{mode}:{time_limit}"
    return f"leaderboard:{mode}"


def update_rooms(mode: str, time_limit=None) -> list:
    """Rooms that display a test with this mode and limit."""
    rooms = [leaderboard_room(mode, time_limit)]
    if mode == 'time' and time_limit is not None:
        rooms.append(leaderboard_room(mode))
    return rooms


def to_entry(test: TypingTest, user: User, rank: int) -> dict:
    return {
        'id': test.id,
        'rank': rank,
        'user_id': user.firebase_uid,
        'username': user.public_name,
        'display_name': user.display_name,
        'wpm': test.wpm,
        'raw_wpm': test.raw_wpm,
        'accuracy': test.accuracy,
        'consistency': test.consistency,
        'characters': test.total_characters,
        'errors': metrics.errors_from_accuracy(test.total_characters, test.accuracy),
        'test_mode': test.test_mode,
        'time_limit': test.time_limit,
        'word_limit': test.word_limit,
        'actual_duration': test.actual_duration,
        'created_at': isoformat(test.created_at),
    }


def get_leaderboard(mode: Optional[str] = DEFAULT_MODE, time_limit=None, period: Optional[str] = None,
                    limit: Optional[int] = 50, now: Optional[datetime] = None,
                    default_period: str = DEFAULT_PERIOD, max_limit: Optional[int] = None) -> dict:
    """Rank the best tests for one board.

    Sort is wpm desc, then accuracy desc, then earliest submission first.
    Ranks are 1-based positions inside the returned window only.
    """
    mode = mode or DEFAULT_MODE
    if mode not in TEST_MODES:
        raise ValidationError(f'Unknown mode {mode!r}', field='mode')
    period = normalize_period(period, default_period)
    limit = max(1, int(limit if limit is not None else 50))
    if max_limit:
        limit = min(limit, max_limit)

    time_limit = board_time_limit(mode, time_limit)

    query = (
        db.session.query(TypingTest, User)
        .join(User, TypingTest.user_id == User.id)
        .filter(TypingTest.test_mode == mode)
    )
    if time_limit is not None:
        query = query.filter(TypingTest.time_limit == time_limit)
    window = PERIODS[period]
    if window is not None:
        cutoff = (now or datetime.now(timezone.utc)) - window
        query = query.filter(TypingTest.created_at >= cutoff)

    with storage_errors('fetch leaderboard'):
        rows = (
            query.order_by(
                TypingTest.wpm.desc(),
                TypingTest.accuracy.desc(),
                TypingTest.created_at.asc(),
                TypingTest.id.asc(),
            )
            .limit(limit)
            .all()
        )

    entries = [to_entry(test, user, index + 1) for index, (test, user) in enumerate(rows)]
    return {
        'entries': entries,
        'count': len(entries),
        'filters': {
            'mode': mode,
            'time_limit': time_limit,
            'period': period,
            'limit': limit,
        },
    }

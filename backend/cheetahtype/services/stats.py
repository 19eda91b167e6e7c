"""Per-user summaries and site-wide aggregates."""
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func

from cheetahtype import db
from cheetahtype.errors import storage_errors
from cheetahtype.models import TypingTest, User, isoformat
from cheetahtype.services import metrics

RECENT_TESTS = 10
PROGRESS_WINDOW = 30


def _mean(values):
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def _group_summary(tests) -> dict:
    return {
        'count': len(tests),
        'averageWpm': metrics.round_half_up(_mean(t.wpm for t in tests)),
        'bestWpm': max(t.wpm for t in tests),
        'averageAccuracy': metrics.round2(_mean(t.accuracy for t in tests)),
        'bestAccuracy': max(t.accuracy for t in tests),
    }


def _grouped(tests, key) -> dict:
    groups = OrderedDict()
    for test in tests:
        groups.setdefault(key(test), []).append(test)
    return {str(k): _group_summary(v) for k, v in groups.items()}


def summarize_tests(tests) -> dict:
    """Summary over tests ordered newest first."""
    stats = {
        'totalTests': len(tests),
        'averageWpm': 0,
        'bestWpm': 0,
        'averageAccuracy': 0,
        'bestAccuracy': 0,
        'averageConsistency': 0,
        'bestConsistency': 0,
        'totalTimeSpent': 0,
        'totalCharactersTyped': 0,
        'recentTests': [],
        'wpmProgress': [],
        'accuracyProgress': [],
        'testsByMode': {},
        'testsByTimeLimit': {},
    }
    if not tests:
        return stats

    stats['averageWpm'] = metrics.round_half_up(_mean(t.wpm for t in tests))
    stats['bestWpm'] = max(t.wpm for t in tests)
    stats['averageAccuracy'] = metrics.round2(_mean(t.accuracy for t in tests))
    stats['bestAccuracy'] = max(t.accuracy for t in tests)

    consistency = [t.consistency for t in tests if t.consistency is not None]
    if consistency:
        stats['averageConsistency'] = metrics.round2(_mean(consistency))
        stats['bestConsistency'] = max(consistency)

    stats['totalTimeSpent'] = sum(t.actual_duration or 0 for t in tests)
    stats['totalCharactersTyped'] = sum(t.total_characters or 0 for t in tests)

    stats['recentTests'] = [
        {
            'id': t.id,
            'wpm': t.wpm,
            'accuracy': t.accuracy,
            'consistency': t.consistency,
            'test_mode': t.test_mode,
            'time_limit': t.time_limit,
            'word_limit': t.word_limit,
            'actual_duration': t.actual_duration,
            'created_at': isoformat(t.created_at),
        }
        for t in tests[:RECENT_TESTS]
    ]

    progress = list(reversed(tests[:PROGRESS_WINDOW]))
    stats['wpmProgress'] = [
        {'test': i + 1, 'wpm': t.wpm, 'date': isoformat(t.created_at)}
        for i, t in enumerate(progress)
    ]
    stats['accuracyProgress'] = [
        {'test': i + 1, 'accuracy': t.accuracy, 'date': isoformat(t.created_at)}
        for i, t in enumerate(progress)
    ]

    stats['testsByMode'] = _grouped(tests, lambda t: t.test_mode)
    timed = [t for t in tests if t.test_mode == 'time' and t.time_limit]
    stats['testsByTimeLimit'] = _grouped(timed, lambda t: t.time_limit)
    return stats


def get_user_stats(user: User) -> dict:
    with storage_errors('fetch user tests'):
        tests = (
            TypingTest.query.filter_by(user_id=user.id)
            .order_by(TypingTest.created_at.desc(), TypingTest.id.desc())
            .all()
        )
    return summarize_tests(tests)


def get_site_stats(now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    with storage_errors('fetch site stats'):
        total_tests = db.session.query(func.count(TypingTest.id)).scalar() or 0
        total_users = db.session.query(func.count(User.id)).scalar() or 0
        avg_wpm = db.session.query(func.avg(TypingTest.wpm)).scalar()
        top = (
            db.session.query(TypingTest, User)
            .join(User, TypingTest.user_id == User.id)
            .order_by(TypingTest.wpm.desc(), TypingTest.created_at.asc())
            .first()
        )
        recent = (
            db.session.query(func.count(TypingTest.id))
            .filter(TypingTest.created_at >= now - timedelta(hours=24))
            .scalar() or 0
        )
    return {
        'totalTests': total_tests,
        'totalUsers': total_users,
        'avgWpm': metrics.round_half_up(avg_wpm or 0),
        'highestWpm': {'wpm': top[0].wpm, 'username': top[1].public_name} if top else None,
        'recentTests': recent,
    }

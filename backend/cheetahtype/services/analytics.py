"""Per-character performance aggregation and weakness ranking."""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from cheetahtype.models import CharacterPerformance, User
from cheetahtype.services import metrics

# 1 is home-row comfortable, 5 is a stretch for most typists
CHARACTER_DIFFICULTY = {
    'e': 1, 't': 1, 'a': 1, 'o': 1, 'i': 1, 'n': 1, 's': 1, 'h': 1, 'r': 1,
    'd': 2, 'l': 2, 'c': 2, 'u': 2, 'm': 2, 'w': 2, 'f': 2, 'g': 2, 'y': 2, 'p': 2,
    'b': 3, 'v': 3, 'k': 3, 'j': 3, 'x': 3, 'q': 4, 'z': 4,
    '1': 2, '2': 2, '3': 2, '4': 3, '5': 3, '6': 3, '7': 3, '8': 3, '9': 3, '0': 3,
    ',': 2, '.': 2, '!': 3, '?': 3, ';': 4, ':': 4, "'": 3, '"': 4,
    '(': 4, ')': 4, '[': 5, ']': 5, '{': 5, '}': 5, '-': 3, '_': 4, '=': 4, '+': 4,
    '*': 4, '&': 5, '%': 5, '$': 4, '#': 4, '@': 4, '~': 5, '`': 5,
    '/': 4, '\\': 4, '|': 5, '<': 4, '>': 4,
}
DEFAULT_DIFFICULTY = 3


def character_difficulty(character: str) -> int:
    return CHARACTER_DIFFICULTY.get(character.lower(), DEFAULT_DIFFICULTY)


@dataclass
class CharacterStat:
    """Counters for one character within a single typing session."""
    character: str
    total_typed: int = 0
    correct_typed: int = 0
    incorrect_typed: int = 0
    speeds: List[float] = field(default_factory=list)
    difficulty_score: float = 0.0

    def record(self, correct: bool, speed: Optional[float] = None) -> None:
        self.total_typed += 1
        if correct:
            self.correct_typed += 1
        else:
            self.incorrect_typed += 1
        if speed is not None:
            self.speeds.append(float(speed))

    def to_dict(self) -> dict:
        return {
            'total_typed': self.total_typed,
            'correct_typed': self.correct_typed,
            'incorrect_typed': self.incorrect_typed,
            'speeds': list(self.speeds),
            'difficulty_score': self.difficulty_score,
        }


def _analytics_entry(character, total_typed, accuracy, avg_speed, error_rate, difficulty) -> dict:
    return {
        'character': character,
        'total_typed': int(metrics.as_number(total_typed)),
        'accuracy': metrics.round2(accuracy),
        'average_speed': metrics.round2(avg_speed),
        'error_rate': metrics.round2(error_rate),
        'difficulty_score': metrics.round2(difficulty),
        'weakness_score': metrics.weakness_score(accuracy, error_rate, avg_speed),
    }


def _rank(entries: List[dict]) -> List[dict]:
    # sorted() is stable, so equal scores keep the input order
    return sorted(entries, key=lambda e: e['weakness_score'], reverse=True)


def compute_analytics(character_data: Optional[Mapping[str, Mapping]]) -> List[dict]:
    """Turn ``{char: counters}`` into entries ranked by weakness score.

    Counters may omit any field (``total_typed``, ``correct_typed``,
    ``incorrect_typed``, ``speeds``, ``difficulty_score``); missing values
    count as zero. An empty mapping yields an empty list.
    """
    if not character_data:
        return []

    entries = []
    for character, data in character_data.items():
        if isinstance(data, CharacterStat):
            data = data.to_dict()
        data = data or {}
        total = metrics.as_number(data.get('total_typed'))
        entries.append(_analytics_entry(
            character,
            total,
            metrics.accuracy(data.get('correct_typed'), total),
            metrics.average_speed(data.get('speeds')),
            metrics.error_rate(data.get('incorrect_typed'), total),
            metrics.as_number(data.get('difficulty_score')),
        ))
    return _rank(entries)


def aggregate_rows(rows: Iterable) -> List[dict]:
    """Merge stored per-test rows by character, then rank them.

    Counters are summed across tests; speed, error rate and difficulty
    are averaged per stored row.
    """
    merged: Dict[str, dict] = {}
    for row in rows:
        stats = merged.setdefault(row.character, {
            'total_typed': 0,
            'correct_typed': 0,
            'incorrect_typed': 0,
            'speeds': [],
            'error_rates': [],
            'difficulties': [],
        })
        stats['total_typed'] += int(metrics.as_number(row.total_typed))
        stats['correct_typed'] += int(metrics.as_number(row.correct_typed))
        stats['incorrect_typed'] += int(metrics.as_number(row.incorrect_typed))
        stats['speeds'].append(metrics.as_number(row.average_speed))
        stats['error_rates'].append(metrics.as_number(row.error_rate))
        stats['difficulties'].append(metrics.as_number(row.difficulty_score))

    entries = []
    for character, stats in merged.items():
        entries.append(_analytics_entry(
            character,
            stats['total_typed'],
            metrics.accuracy(stats['correct_typed'], stats['total_typed']),
            metrics.average_speed(stats['speeds']),
            metrics.average_speed(stats['error_rates']),
            metrics.average_speed(stats['difficulties']),
        ))
    return _rank(entries)


def build_performance_rows(user: User, test_id: int, character_data: Mapping[str, Mapping]) -> List[CharacterPerformance]:
    """Snapshot a session's counters as rows tied to a recorded test."""
    rows = []
    for character, data in (character_data or {}).items():
        if isinstance(data, CharacterStat):
            data = data.to_dict()
        data = data or {}
        total = metrics.as_number(data.get('total_typed'))
        correct = metrics.as_number(data.get('correct_typed'))
        incorrect = metrics.as_number(data.get('incorrect_typed'))
        if data.get('speeds'):
            avg_speed = metrics.average_speed(data.get('speeds'))
        else:
            avg_speed = metrics.as_number(data.get('average_speed'))
        difficulty = data.get('difficulty_score')
        if difficulty is None:
            difficulty = character_difficulty(character)
        rows.append(CharacterPerformance(
            user_id=user.id,
            test_id=test_id,
            character=character,
            total_typed=int(total),
            correct_typed=int(correct),
            incorrect_typed=int(incorrect),
            average_speed=metrics.round2(avg_speed),
            error_rate=metrics.error_rate(incorrect, total),
            difficulty_score=metrics.round2(difficulty),
        ))
    return rows


def character_rows_for_user(user: User, character: Optional[str] = None, limit: int = 100) -> List[CharacterPerformance]:
    query = CharacterPerformance.query.filter_by(user_id=user.id)
    if character:
        query = query.filter_by(character=character)
    return (
        query.order_by(CharacterPerformance.created_at.desc(), CharacterPerformance.id.desc())
        .limit(limit)
        .all()
    )


def get_character_analytics(user: User, character: Optional[str] = None, limit: int = 100) -> List[dict]:
    """Ranked analytics over the user's most recent stored rows."""
    return aggregate_rows(character_rows_for_user(user, character=character, limit=limit))


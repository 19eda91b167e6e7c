from types import SimpleNamespace

from cheetahtype.services.analytics import CharacterStat, aggregate_rows, compute_analytics
from cheetahtype.services.sessions import SessionAnalyticsStore


def test_empty_input_yields_empty_list():
    assert compute_analytics({}) == []
    assert compute_analytics(None) == []


def test_untyped_character_entry():
    [entry] = compute_analytics({'q': {'total_typed': 0}})
    assert entry == {
        'character': 'q',
        'total_typed': 0,
        'accuracy': 0.0,
        'average_speed': 0.0,
        'error_rate': 0.0,
        'difficulty_score': 0.0,
        'weakness_score': 50.0,
    }


def test_sorted_by_weakness_and_one_entry_per_key():
    data = {
        'a': {'total_typed': 10, 'correct_typed': 10, 'incorrect_typed': 0, 'speeds': [90, 110]},
        'z': {'total_typed': 10, 'correct_typed': 5, 'incorrect_typed': 5, 'speeds': [20]},
        'e': {'total_typed': 10, 'correct_typed': 9, 'incorrect_typed': 1, 'speeds': [60]},
    }
    result = compute_analytics(data)
    assert len(result) == len(data)
    assert [e['character'] for e in result] == ['z', 'e', 'a']
    scores = [e['weakness_score'] for e in result]
    assert scores == sorted(scores, reverse=True)


def test_ties_keep_input_order_across_calls():
    same = {'total_typed': 4, 'correct_typed': 3, 'incorrect_typed': 1, 'speeds': [40]}
    data = {'m': dict(same), 'b': dict(same), 'x': dict(same)}
    first = compute_analytics(data)
    assert [e['character'] for e in first] == ['m', 'b', 'x']
    for _ in range(5):
        assert compute_analytics(data) == first


def test_missing_fields_count_as_zero():
    [entry] = compute_analytics({'k': {}})
    assert entry['total_typed'] == 0
    assert entry['weakness_score'] == 50.0


def test_values_rounded_to_two_places():
    [entry] = compute_analytics({
        'r': {'total_typed': 3, 'correct_typed': 2, 'incorrect_typed': 1,
              'speeds': [10, 20, 20.5], 'difficulty_score': 1.23456},
    })
    assert entry['accuracy'] == 66.67
    assert entry['error_rate'] == 33.33
    assert entry['average_speed'] == 16.83
    assert entry['difficulty_score'] == 1.23


def test_character_stat_records_keystrokes():
    stat = CharacterStat('t')
    stat.record(True, 55)
    stat.record(False, 45)
    stat.record(True)
    assert stat.total_typed == 3
    assert stat.total_typed == stat.correct_typed + stat.incorrect_typed
    assert stat.speeds == [55.0, 45.0]
    [entry] = compute_analytics({'t': stat})
    assert entry['average_speed'] == 50.0
    assert entry['accuracy'] == 66.67


def test_aggregate_rows_merges_per_character():
    rows = [
        SimpleNamespace(character='a', total_typed=10, correct_typed=9, incorrect_typed=1,
                        average_speed=40, error_rate=10, difficulty_score=1),
        SimpleNamespace(character='a', total_typed=10, correct_typed=10, incorrect_typed=0,
                        average_speed=60, error_rate=0, difficulty_score=3),
        SimpleNamespace(character='s', total_typed=5, correct_typed=5, incorrect_typed=0,
                        average_speed=70, error_rate=0, difficulty_score=0),
    ]
    result = aggregate_rows(rows)
    by_char = {e['character']: e for e in result}
    assert by_char['a']['total_typed'] == 20
    assert by_char['a']['accuracy'] == 95.0
    assert by_char['a']['average_speed'] == 50.0
    assert by_char['a']['error_rate'] == 5.0
    assert by_char['a']['difficulty_score'] == 2.0
    assert result[0]['character'] == 'a'


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_session_store_expires_entries():
    clock = FakeClock()
    store = SessionAnalyticsStore(ttl_seconds=10, clock=clock)
    sid = store.put({'a': {'total_typed': 1, 'correct_typed': 1}})
    assert store.get(sid) == {'a': {'total_typed': 1, 'correct_typed': 1}}
    clock.now += 11
    assert store.get(sid) is None
    assert len(store) == 0


def test_session_store_owner_and_eviction():
    store = SessionAnalyticsStore(ttl_seconds=10, clock=FakeClock())
    sid = store.put({'a': {}}, session_id='s1', owner='uid-1')
    assert sid == 's1'
    assert store.get('s1', owner='uid-2') is None
    assert store.evict('s1', owner='uid-2') is False
    assert store.get('s1', owner='uid-1') == {'a': {}}
    assert store.evict('s1', owner='uid-1') is True
    assert store.get('s1', owner='uid-1') is None


def test_session_store_put_keeps_existing_owner():
    store = SessionAnalyticsStore(ttl_seconds=10, clock=FakeClock())
    assert store.put({'a': {}}, session_id='s1', owner='uid-1') == 's1'
    assert store.put({'b': {}}, session_id='s1', owner='uid-2') is None
    assert store.get('s1', owner='uid-1') == {'a': {}}
    # The owner may refresh their own session
    assert store.put({'c': {}}, session_id='s1', owner='uid-1') == 's1'
    assert store.get('s1', owner='uid-1') == {'c': {}}


def test_session_store_expired_id_can_be_reused():
    clock = FakeClock()
    store = SessionAnalyticsStore(ttl_seconds=10, clock=clock)
    store.put({'a': {}}, session_id='s1', owner='uid-1')
    clock.now += 11
    assert store.put({'b': {}}, session_id='s1', owner='uid-2') == 's1'
    assert store.get('s1', owner='uid-2') == {'b': {}}

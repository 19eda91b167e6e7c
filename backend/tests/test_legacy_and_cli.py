import json
from datetime import datetime, timezone

from cheetahtype.models import TypingTest, User
from cheetahtype.services.legacy import LEGACY_MAP_VERSION, import_legacy_rows, map_legacy_record


LEGACY_ROW = {
    'user_id': 'uid-alice',
    'wpm': 70,
    'acc': 0.95,
    'characters': 350,
    'errors': 17,
    'time_seconds': 30,
    'mode': 'time',
    'created_at': '2023-01-01T00:00:00Z',
}


def test_map_prefers_first_candidate():
    mapped = map_legacy_record({'raw_cpm': 400, 'rawwpm': 80, 'characters_count': 12, 'chars': 10})
    assert mapped['raw_wpm'] == 80
    assert mapped['total_characters'] == 10


def test_map_ignores_null_candidates():
    mapped = map_legacy_record({'uid': None, 'user': 'u-7', 'consist': 88})
    assert mapped == {'firebase_uid': 'u-7', 'consistency': 88}


def test_import_rows(flask_app, make_user):
    make_user()
    rows = [
        LEGACY_ROW,
        dict(LEGACY_ROW, user_id='uid-ghost'),
        {k: v for k, v in LEGACY_ROW.items() if k != 'time_seconds'},
        dict(LEGACY_ROW, acc=140),
    ]
    summary = import_legacy_rows(rows)
    assert summary == {'imported': 1, 'skipped': 3, 'version': LEGACY_MAP_VERSION}

    test = TypingTest.query.one()
    assert test.accuracy == 95.0
    assert test.total_characters == 350
    assert test.incorrect_characters == 17
    assert test.correct_characters == 333
    assert test.time_limit == 30
    assert test.created_at.replace(tzinfo=timezone.utc) == datetime(2023, 1, 1, tzinfo=timezone.utc)


def test_import_drops_time_limit_outside_time_mode(flask_app, make_user):
    make_user()
    import_legacy_rows([dict(LEGACY_ROW, mode='words')])
    test = TypingTest.query.one()
    assert test.test_mode == 'words'
    assert test.time_limit is None


def test_db_reset_command_seeds_demo_data(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['db-reset'])
    assert result.exit_code == 0
    assert 'seeded with 15 tests' in result.output
    assert User.query.count() == 3
    assert TypingTest.query.count() == 15


def test_import_legacy_command(flask_app, make_user, tmp_path):
    make_user()
    path = tmp_path / 'results.json'
    path.write_text(json.dumps([LEGACY_ROW, dict(LEGACY_ROW, user_id='uid-ghost')]))
    result = flask_app.test_cli_runner().invoke(args=['import-legacy', str(path)])
    assert result.exit_code == 0
    assert 'Imported 1 rows, skipped 1.' in result.output
    assert TypingTest.query.count() == 1

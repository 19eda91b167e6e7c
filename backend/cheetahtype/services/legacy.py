"""Import of result rows from the legacy ``typing_results`` export.

Legacy rows used inconsistent column names. ``LEGACY_FIELD_MAP`` lists,
per target field, the candidate source names in priority order; the first
candidate holding a non-null value wins. Bump ``LEGACY_MAP_VERSION`` when
the table changes.
"""
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from flask import current_app

from cheetahtype import db
from cheetahtype.errors import ValidationError, storage_errors
from cheetahtype.models import TypingTest
from cheetahtype.schemas import RecordTestSchema, parse
from cheetahtype.services.recording import derive_test_fields, validate_test_fields
from cheetahtype.services.users import find_user

LEGACY_MAP_VERSION = 1

LEGACY_FIELD_MAP = (
    ('firebase_uid', ('user_id', 'uid', 'user', 'userId')),
    ('wpm', ('wpm',)),
    ('raw_wpm', ('raw_wpm', 'rawwpm', 'raw_cpm', 'rawcpm', 'cpm')),
    ('accuracy', ('accuracy', 'acc')),
    ('consistency', ('consistency', 'consist', 'stability')),
    ('total_characters', (
        'characters', 'character', 'chars', 'char_count', 'characters_count',
        'character_count', 'character_column', 'total_characters', 'total_chars',
    )),
    ('incorrect_characters', ('errors', 'error', 'mistakes', 'incorrect_chars', 'incorrect')),
    ('actual_duration', ('duration', 'time', 'seconds', 'time_seconds')),
    ('test_mode', ('test_mode', 'mode')),
    ('time_limit', ('time_seconds', 'seconds', 'duration')),
    ('text_content', ('text_content', 'text', 'content')),
    ('created_at', ('created_at',)),
)

BATCH_SIZE = 500


def map_legacy_record(row: Mapping) -> dict:
    """Resolve every target field through the mapping table."""
    mapped = {}
    for target, candidates in LEGACY_FIELD_MAP:
        for source in candidates:
            value = row.get(source)
            if value is not None:
                mapped[target] = value
                break
    return mapped


def _parse_created_at(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_payload(mapped: dict, email: str) -> dict:
    payload = {k: v for k, v in mapped.items() if k != 'created_at'}
    payload['user_email'] = email
    payload.setdefault('wpm', 0)
    accuracy = payload.get('accuracy')
    # Legacy accuracy was stored as a 0-1 fraction
    if isinstance(accuracy, (int, float)) and 0 <= accuracy <= 1:
        payload['accuracy'] = accuracy * 100
    total = payload.get('total_characters')
    errors = payload.get('incorrect_characters')
    if isinstance(total, int) and isinstance(errors, int):
        payload['correct_characters'] = max(0, total - errors)
    if payload.get('test_mode', 'time') != 'time':
        payload.pop('time_limit', None)
    return payload


def import_legacy_rows(rows: Iterable[Mapping]) -> dict:
    """Map and insert legacy rows; returns imported/skipped counts."""
    imported = 0
    skipped = 0
    batch = []

    def flush():
        with storage_errors('import legacy rows'):
            db.session.add_all(batch)
            db.session.commit()
        batch.clear()

    for row in rows:
        mapped = map_legacy_record(row)
        if mapped.get('firebase_uid') is not None:
            mapped['firebase_uid'] = str(mapped['firebase_uid'])
        user = find_user(mapped.get('firebase_uid'))
        if user is None or 'actual_duration' not in mapped:
            skipped += 1
            continue
        try:
            payload = parse(RecordTestSchema, _to_payload(mapped, user.email))
            fields = derive_test_fields(payload)
            validate_test_fields(fields)
        except ValidationError as exc:
            current_app.logger.warning(f"[legacy-skip] uid={user.firebase_uid} reason={exc.message}")
            skipped += 1
            continue
        test = TypingTest(user_id=user.id, **fields)
        created_at = _parse_created_at(mapped.get('created_at'))
        if created_at is not None:
            test.created_at = created_at
        batch.append(test)
        imported += 1
        if len(batch) >= BATCH_SIZE:
            flush()

    if batch:
        flush()
    current_app.logger.info(
        f"[legacy-import] version={LEGACY_MAP_VERSION} imported={imported} skipped={skipped}"
    )
    return {'imported': imported, 'skipped': skipped, 'version': LEGACY_MAP_VERSION}

from flask import Blueprint, jsonify, request, current_app

from cheetahtype import db
from cheetahtype.api.params import int_arg, json_body, request_uid
from cheetahtype.errors import ConflictError, NotFoundError, storage_errors
from cheetahtype.models import TypingTest
from cheetahtype.schemas import CharacterPerformanceSchema, SessionAnalyticsSchema, parse, parse_counters
from cheetahtype.services.analytics import (
    aggregate_rows,
    build_performance_rows,
    compute_analytics,
    character_rows_for_user,
    get_character_analytics,
)
from cheetahtype.services.users import resolve_user

character_performance = Blueprint('character_performance', __name__)


def _session_store():
    return current_app.extensions['session_analytics']


@character_performance.route('', methods=['POST'])
def save_performance():
    """Attach per-character counters to one of the user's recorded tests."""
    payload = parse(CharacterPerformanceSchema, json_body())
    user = resolve_user(payload.firebase_uid)
    with storage_errors('look up test'):
        test = TypingTest.query.filter_by(id=payload.test_id, user_id=user.id).first()
    if test is None:
        raise NotFoundError('Test not found')

    rows = build_performance_rows(user, test.id, parse_counters(payload.character_performance))
    with storage_errors('save character performance'):
        db.session.add_all(rows)
        db.session.commit()
    current_app.logger.info(f"[char-perf-saved] user={user.id} test={test.id} characters={len(rows)}")
    return jsonify({'success': True, 'data': [r.to_dict() for r in rows]}), 201


@character_performance.route('', methods=['GET'])
def get_performance():
    user = resolve_user(request_uid())
    limit = int_arg('limit', current_app.config.get('CHARACTER_ANALYTICS_DEFAULT_LIMIT', 100))
    with storage_errors('fetch character performance'):
        rows = character_rows_for_user(user, character=request.args.get('character'), limit=max(1, limit))
    return jsonify({
        'success': True,
        'data': [r.to_dict() for r in rows],
        'analytics': aggregate_rows(rows),
    })


@character_performance.route('/analytics', methods=['GET'])
def get_analytics():
    user = resolve_user(request_uid())
    limit = int_arg('limit', current_app.config.get('CHARACTER_ANALYTICS_DEFAULT_LIMIT', 100))
    with storage_errors('fetch character analytics'):
        analytics = get_character_analytics(user, limit=max(1, limit))
    return jsonify({'success': True, 'analytics': analytics})


@character_performance.route('/session', methods=['POST'])
def put_session():
    """Keep a session's counters for dashboard analytics without persisting them."""
    body = json_body()
    payload = parse(SessionAnalyticsSchema, body)
    owner = request_uid(body, required=False)
    store = _session_store()
    session_id = store.put(
        parse_counters(payload.character_performance),
        session_id=payload.session_id,
        owner=owner,
    )
    if session_id is None:
        raise ConflictError('Session id is already in use')
    return jsonify({
        'success': True,
        'session_id': session_id,
        'expires_in': store.ttl_seconds,
    }), 201


@character_performance.route('/session/<string:session_id>', methods=['GET'])
def get_session(session_id):
    store = _session_store()
    owner = request_uid(required=False)
    data = store.get(session_id, owner=owner)
    if data is None:
        raise NotFoundError('Session not found or expired')
    return jsonify({'success': True, 'data': data, 'analytics': compute_analytics(data)})


@character_performance.route('/session/<string:session_id>', methods=['DELETE'])
def evict_session(session_id):
    if not _session_store().evict(session_id, owner=request_uid(required=False)):
        raise NotFoundError('Session not found or expired')
    return jsonify({'success': True})

from flask import Blueprint, jsonify, request, current_app

from cheetahtype.api.params import int_arg, json_body, request_uid
from cheetahtype.schemas import IdentityProfileSchema, UserUpdateSchema, parse
from cheetahtype.services.history import get_history
from cheetahtype.services.stats import get_user_stats
from cheetahtype.services.users import delete_user, resolve_user, update_user, upsert_user

users = Blueprint('users', __name__)


@users.route('', methods=['POST'])
def upsert():
    """Create or update a user keyed on the provider uid."""
    profile = parse(IdentityProfileSchema, json_body())
    user = upsert_user(profile)
    return jsonify({'success': True, 'user': user.to_dict()})


@users.route('', methods=['GET'])
def get_user():
    user = resolve_user(request_uid())
    return jsonify({'success': True, 'user': user.to_dict()})


@users.route('', methods=['PUT'])
def update():
    changes = parse(UserUpdateSchema, json_body())
    user = update_user(changes)
    return jsonify({'success': True, 'user': user.to_dict()})


@users.route('', methods=['DELETE'])
def delete():
    delete_user(request_uid())
    return jsonify({'success': True, 'message': 'User and all associated data deleted'})


@users.route('/history', methods=['GET'])
def history():
    user = resolve_user(request_uid())
    cfg = current_app.config
    data = get_history(
        user,
        page=int_arg('page', 1),
        limit=int_arg('limit', cfg.get('HISTORY_DEFAULT_LIMIT', 20)),
        mode=request.args.get('mode'),
        time_limit=request.args.get('time_limit', request.args.get('timeLimit')),
        count_applies_filters=cfg.get('HISTORY_COUNT_APPLIES_FILTERS', True),
        max_limit=cfg.get('HISTORY_MAX_LIMIT'),
    )
    return jsonify({'success': True, 'data': data})


@users.route('/stats', methods=['GET'])
def stats():
    user = resolve_user(request_uid())
    return jsonify({'success': True, 'user': user.to_dict(), 'stats': get_user_stats(user)})

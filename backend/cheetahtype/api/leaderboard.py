from flask import Blueprint, jsonify, request, current_app

from cheetahtype.api.params import int_arg
from cheetahtype.services.leaderboard import get_leaderboard

leaderboard = Blueprint('leaderboard', __name__)


@leaderboard.route('', methods=['GET'])
def get_board():
    cfg = current_app.config
    board = get_leaderboard(
        mode=request.args.get('mode') or 'time',
        time_limit=request.args.get('time_limit'),
        period=request.args.get('period'),
        limit=int_arg('limit', cfg.get('LEADERBOARD_DEFAULT_LIMIT', 50)),
        default_period=cfg.get('LEADERBOARD_DEFAULT_PERIOD', '30d'),
        max_limit=cfg.get('LEADERBOARD_MAX_LIMIT'),
    )
    return jsonify({'success': True, **board})

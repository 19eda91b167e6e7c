from flask import Blueprint, jsonify

from cheetahtype.services.stats import get_site_stats

site_stats = Blueprint('site_stats', __name__)


@site_stats.route('/site', methods=['GET'])
def site():
    return jsonify({'success': True, 'data': get_site_stats()})

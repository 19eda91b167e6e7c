from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user

from cheetahtype.api.params import json_body
from cheetahtype.schemas import IdentityProfileSchema, parse
from cheetahtype.services.users import upsert_user

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the CheetahType API!'})

@main.route('/health')
def health():
    return jsonify({'status': 'ok'})

@main.route('/auth/session', methods=['POST'])
def create_session():
    """Sign in a user the identity provider has already authenticated."""
    profile = parse(IdentityProfileSchema, json_body())
    user = upsert_user(profile)
    login_user(user, remember=True)
    return jsonify({'success': True, 'user': user.to_dict()})

@main.route('/auth/me')
def me():
    if not current_user.is_authenticated:
        return jsonify({'success': False, 'error': 'Not signed in'}), 401
    return jsonify({'success': True, 'user': current_user.to_dict()})

@main.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})

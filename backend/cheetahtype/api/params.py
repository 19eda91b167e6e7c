from flask import request
from flask_login import current_user

from cheetahtype.errors import ValidationError


def request_uid(body=None, required=True):
    """Caller's provider uid: explicit parameter first, else the signed-in user."""
    uid = None
    if body:
        uid = body.get('firebase_uid')
    uid = uid or request.args.get('firebase_uid')
    if not uid and current_user.is_authenticated:
        uid = current_user.firebase_uid
    if not uid and required:
        raise ValidationError('Missing firebase_uid parameter', field='firebase_uid')
    return uid


def int_arg(name, default):
    """Integer query parameter, falling back to ``default`` when absent."""
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f'{name} must be an integer', field=name)


def json_body():
    return request.get_json(silent=True)

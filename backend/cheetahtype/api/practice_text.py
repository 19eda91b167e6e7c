from flask import Blueprint, jsonify, request

from cheetahtype.api.params import int_arg, json_body, request_uid
from cheetahtype.schemas import PracticeTextSchema, parse
from cheetahtype.services.practice import create_practice_text, list_practice_texts
from cheetahtype.services.users import resolve_user

practice_text = Blueprint('practice_text', __name__)


@practice_text.route('', methods=['POST'])
def create():
    """Generate a drill text for one character and keep it for later sessions."""
    body = json_body()
    if isinstance(body, dict) and not body.get('firebase_uid'):
        uid = request_uid(required=False)
        if uid:
            body = {**body, 'firebase_uid': uid}
    payload = parse(PracticeTextSchema, body)
    user = resolve_user(payload.firebase_uid)
    practice = create_practice_text(user, payload)
    return jsonify({'success': True, 'data': practice.to_dict()}), 201


@practice_text.route('', methods=['GET'])
def list_texts():
    user = resolve_user(request_uid())
    texts = list_practice_texts(
        user,
        character=request.args.get('target_character'),
        limit=int_arg('limit', 10),
    )
    return jsonify({'success': True, 'data': [t.to_dict() for t in texts]})

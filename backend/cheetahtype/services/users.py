"""User identity resolution and upsert keyed on the provider uid."""
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from cheetahtype import db
from cheetahtype.errors import NotFoundError, ValidationError, storage_errors
from cheetahtype.models import User, utcnow


def find_user(firebase_uid: Optional[str]) -> Optional[User]:
    if not firebase_uid:
        return None
    with storage_errors('look up user'):
        return User.query.filter_by(firebase_uid=firebase_uid).first()


def resolve_user(firebase_uid: Optional[str]) -> User:
    """Map an external uid to the internal user or raise NotFoundError."""
    if not firebase_uid:
        raise ValidationError('Missing firebase_uid parameter', field='firebase_uid')
    user = find_user(firebase_uid)
    if user is None:
        raise NotFoundError('User not found')
    return user


def _apply_profile(user: User, profile) -> None:
    user.email = profile.email
    # Fields the provider did not send keep their stored value
    if profile.display_name is not None:
        user.display_name = profile.display_name
    if profile.photo_url is not None:
        user.photo_url = profile.photo_url
    user.email_verified = bool(profile.email_verified)
    now = utcnow()
    user.updated_at = now
    user.last_login_at = now


def upsert_user(profile) -> User:
    """Insert or merge a user by ``firebase_uid``; last write wins."""
    with storage_errors('upsert user'):
        user = User.query.filter_by(firebase_uid=profile.firebase_uid).first()
        created = user is None
        if created:
            user = User(firebase_uid=profile.firebase_uid, email=profile.email)
            db.session.add(user)
        _apply_profile(user, profile)
        try:
            db.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same uid: merge into it
            db.session.rollback()
            user = User.query.filter_by(firebase_uid=profile.firebase_uid).one()
            _apply_profile(user, profile)
            db.session.commit()
            created = False
    current_app.logger.info(f"[user-upsert] uid={user.firebase_uid} id={user.id} created={created}")
    return user


def ensure_user(firebase_uid: str, email: str) -> User:
    """Fetch the user, creating a minimal record on first sight."""
    user = find_user(firebase_uid)
    if user is not None:
        return user
    with storage_errors('create user'):
        user = User(
            firebase_uid=firebase_uid,
            email=email,
            display_name=email.split('@')[0] or None,
        )
        db.session.add(user)
        db.session.commit()
    current_app.logger.info(f"[user-create] uid={firebase_uid} id={user.id}")
    return user


def update_user(changes) -> User:
    user = resolve_user(changes.firebase_uid)
    provided = changes.model_fields_set
    with storage_errors('update user'):
        for field in ('email', 'display_name', 'photo_url'):
            if field in provided and (field != 'email' or changes.email):
                setattr(user, field, getattr(changes, field))
        now = utcnow()
        user.updated_at = now
        user.last_login_at = now
        db.session.commit()
    return user


def delete_user(firebase_uid: str) -> None:
    """Delete the user; their tests and character rows go with them."""
    user = resolve_user(firebase_uid)
    with storage_errors('delete user'):
        db.session.delete(user)
        db.session.commit()
    current_app.logger.info(f"[user-delete] uid={firebase_uid}")

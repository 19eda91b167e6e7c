"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; the handler registered in ``create_app`` turns them
into ``{"success": false, "error": ...}`` JSON with the matching status.
Numeric degeneracies never land here, the metric helpers resolve them to 0.
"""
from contextlib import contextmanager
from typing import Optional

from flask import jsonify, current_app
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.message}


class ValidationError(ServiceError):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.field:
            payload['field'] = self.field
        return payload

    @classmethod
    def from_schema_error(cls, exc: SchemaValidationError) -> 'ValidationError':
        """Name the first offending field of a pydantic error."""
        errors = exc.errors()
        if not errors:
            return cls('Invalid request body')
        first = errors[0]
        field = '.'.join(str(part) for part in first.get('loc', ())) or None
        return cls(f"{field}: {first.get('msg')}" if field else first.get('msg'), field=field)


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class StorageError(ServiceError):
    status_code = 500


def register_error_handlers(app) -> None:
    @app.errorhandler(ServiceError)
    def handle_service_error(exc: ServiceError):
        return jsonify(exc.to_dict()), exc.status_code


@contextmanager
def storage_errors(action: str):
    """Roll back and surface any database failure as a StorageError."""
    from cheetahtype import db
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(f"[storage] failed to {action}")
        raise StorageError(f"Failed to {action}") from exc

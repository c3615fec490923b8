"""Error taxonomy and the app-level handlers that render it.

Every failure leaves the API as the standard envelope
``{"success": false, "error": {"message": ..., "details": ...}}`` with a
Hebrew, user-facing message. Unexpected exceptions are logged with their
stack trace and reported to the client only as a generic 500.
"""

import logging

from flask import request
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from couplegames.utils.responses import api_response

logger = logging.getLogger(__name__)

INVALID_DATA_MESSAGE = 'נתונים לא תקינים'
INTERNAL_ERROR_MESSAGE = 'שגיאת שרת. נסה שוב מאוחר יותר'


class ApiError(Exception):
    """Base class for errors that map to a known HTTP response."""

    status_code = 500
    message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message=None, status_code=None, details=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_error(self):
        error = {'message': self.message}
        if self.details is not None:
            error['details'] = self.details
        return error


class ValidationError(ApiError):
    status_code = 400
    message = INVALID_DATA_MESSAGE


class UnauthorizedError(ApiError):
    status_code = 401
    message = 'נדרשת התחברות'


class ForbiddenError(ApiError):
    status_code = 403
    message = 'אין הרשאה לפעולה זו'


class AuthError(ApiError):
    status_code = 401
    message = 'שגיאת הזדהות'


class InvalidCredentialsError(AuthError):
    status_code = 401
    message = 'כתובת מייל או סיסמה שגויים'


class PasswordNotSetError(InvalidCredentialsError):
    """Email login attempted on an account created through Google."""

    status_code = 400
    message = 'חשבון זה לא נוצר עם סיסמה. נסה להתחבר עם Google'


class AccountInactiveError(AuthError):
    status_code = 403
    message = 'חשבון המשתמש אינו פעיל'


class NotRegisteredError(AuthError):
    status_code = 404
    message = 'חשבון Google זה לא רשום במערכת'


class ConflictError(ApiError):
    status_code = 400
    message = 'הרשומה כבר קיימת במערכת'


class EmailTakenError(ConflictError):
    message = 'משתמש עם כתובת מייל זו כבר קיים במערכת'


class GoogleIdTakenError(ConflictError):
    message = 'חשבון Google זה כבר רשום במערכת'


class NotFoundError(ApiError):
    status_code = 404
    message = 'משתמש לא נמצא'


class InvalidTokenError(ApiError):
    status_code = 400
    message = 'טוקן לא תקין או פג תוקף'


class ExpiredTokenError(ApiError):
    status_code = 400
    message = 'טוקן פג תוקף'


def register_error_handlers(app):
    """Attach envelope-rendering handlers to the Flask app."""
    from couplegames import db

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, error.message)
        return api_response(False, error=error.to_error(), status=error.status_code)

    @app.errorhandler(PydanticValidationError)
    def handle_validation_error(error):
        details = error.errors(include_url=False, include_context=False, include_input=False)
        return api_response(False, error={'message': INVALID_DATA_MESSAGE, 'details': details}, status=400)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        messages = {
            400: INVALID_DATA_MESSAGE,
            404: 'הכתובת המבוקשת לא נמצאה',
            405: 'פעולה לא נתמכת',
            429: 'יותר מדי בקשות. נסה שוב בעוד מספר דקות',
        }
        message = messages.get(error.code, error.name)
        return api_response(False, error={'message': message}, status=error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return api_response(False, error={'message': INTERNAL_ERROR_MESSAGE}, status=500)

"""The single JSON envelope used by every route."""

from flask import jsonify


def api_response(success, data=None, error=None, status=200):
    """Build ``{success, data?, error?}`` with the given HTTP status.

    ``error`` is either a message string or a ``{message, details?}`` dict.
    """
    body = {'success': success}
    if data is not None:
        body['data'] = data
    if error is not None:
        if isinstance(error, str):
            error = {'message': error}
        body['error'] = error
    return jsonify(body), status

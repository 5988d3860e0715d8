from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify

from ..core.exceptions import ConflictError, PersistenceError, SequenceError, ValidationError

logger = logging.getLogger(__name__)


def error_response(message: str, status_code: int):
    return jsonify({"success": False, "error": message}), status_code


def api_errors(view):
    """Map domain errors raised by a JSON view to HTTP responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return error_response(str(e), 400)
        except (SequenceError, ConflictError) as e:
            return error_response(str(e), 409)
        except PersistenceError:
            logger.exception("storage failure in %s", view.__name__)
            return error_response("storage unavailable", 503)

    return wrapper


def json_body(request) -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data

import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class Conflict(exceptions.APIException):
    """A username, email or reference constraint would be violated."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource conflict."
    default_code = "conflict"


def _flatten(detail):
    if isinstance(detail, dict):
        return {key: _flatten(value) for key, value in detail.items()}
    if isinstance(detail, list):
        return [_flatten(item) for item in detail]
    return str(detail)


def _validation_body(detail):
    errors = _flatten(detail)
    if isinstance(errors, list):
        errors = {"non_field_errors": errors}
    non_field = errors.get("non_field_errors") or []
    if non_field and len(errors) == 1:
        message = non_field[0]
    else:
        message = "Validation error"
    return {"success": False, "message": message, "errors": errors}


def api_exception_handler(exc, context):
    """Render every API failure as ``{"success": false, "message": ...}``.

    Field-level validation problems are reported together under ``errors``.
    Anything DRF does not recognise is logged and reported as an opaque 500.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(str(exc) or None)
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied(str(exc) or None)

    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, exceptions.ValidationError):
            response.data = _validation_body(exc.detail)
        else:
            response.data = {"success": False, "message": _flatten(exc.detail)}
        return response

    view = context.get("view")
    logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "api")
    body = {"success": False, "message": "Something went wrong!"}
    if settings.DEBUG:
        body["error"] = str(exc)
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

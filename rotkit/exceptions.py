import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


def _first_message(detail):
    """Pull a human readable message out of a (possibly nested) DRF error detail."""
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return "Invalid request"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request"
    return str(detail)


def api_exception_handler(exc, context):
    """
    Translate every error that reaches a view boundary into
    {"error": "<message>"} with the status carried by the exception.
    Field validation errors also carry the full serializer errors in "details".
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        set_rollback()
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "request")
        return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        response.data = {"error": _first_message(response.data), "details": response.data}
    else:
        response.data = {"error": _first_message(response.data)}
    return response

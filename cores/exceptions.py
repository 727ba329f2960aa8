import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state of the resource."
    default_code = 'conflict'


def api_exception_handler(exc, context):
    """
    Renders every error as {"error": "<message>"}.
    Validation errors also carry the per-field messages under "fields".
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "unknown view")
        set_rollback()
        return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    if isinstance(data, dict) and set(data) == {'detail'}:
        response.data = {"error": str(data['detail'])}
    elif isinstance(data, list):
        response.data = {"error": " ".join(str(item) for item in data)}
    elif isinstance(data, dict):
        non_field = data.get('non_field_errors')
        message = str(non_field[0]) if non_field else "Validation failed"
        response.data = {"error": message, "fields": data}
    return response

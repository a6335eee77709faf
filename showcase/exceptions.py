import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class StorageUnavailable(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "File storage is unavailable. Please try again later."
    default_code = "storage_unavailable"


class ReorderFailed(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to save the new order. Reload the list and try again."
    default_code = "reorder_failed"


def _first_message(detail):
    if isinstance(detail, list):
        return _first_message(detail[0]) if detail else ""
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for key, value in detail.items():
            msg = _first_message(value)
            if msg:
                return msg if key == "non_field_errors" else f"{key}: {msg}"
        return ""
    return str(detail)


def api_exception_handler(exc, context):
    """DRF's handler plus a flat ``message`` the frontend can show as-is."""
    response = exception_handler(exc, context)
    if response is None:
        return None
    if response.status_code >= 500:
        view = context.get("view")
        logger.error("%s failed with %s: %s", type(view).__name__, response.status_code, exc)
    data = response.data
    if isinstance(data, dict):
        data.setdefault("message", _first_message(data))
    else:
        response.data = {"detail": data, "message": _first_message(data)}
    return response


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"

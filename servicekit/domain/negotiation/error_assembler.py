"""
Error response assembly.

Folds an ordered list of details into an ErrorResponse:
- ErrorCause / Message overwrite the message
- Documentation overwrites the documentation reference
- Detail appends to the details list

Raw exceptions and strings are accepted too. A string starting with
``#`` is a documentation reference, any other string is a message.
"""

from http import HTTPStatus
from typing import Union

from servicekit.domain.negotiation.entities import (
    Detail,
    Documentation,
    ErrorCause,
    ErrorDetail,
    ErrorResponse,
    Message,
)

DOCUMENTATION_MARKER = "#"
UNKNOWN_STATUS_TEXT = "Unknown Status"


def status_text(status_code: int) -> str:
    """Standard reason phrase for a status code."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return UNKNOWN_STATUS_TEXT


def coerce_detail(value: Union[ErrorDetail, BaseException, str]) -> ErrorDetail:
    """Turn a raw exception or string into its detail variant."""
    if isinstance(value, (ErrorCause, Message, Documentation, Detail)):
        return value
    if isinstance(value, BaseException):
        return ErrorCause(value)
    if isinstance(value, str):
        if value.startswith(DOCUMENTATION_MARKER):
            return Documentation(value[len(DOCUMENTATION_MARKER):])
        return Message(value)
    raise TypeError(f"Unsupported error detail: {type(value).__name__}")


def build_error_response(
    status_code: int, *details: Union[ErrorDetail, BaseException, str]
) -> ErrorResponse:
    """Build the error payload for a failed request.

    Args:
        status_code: HTTP status that will be sent.
        *details: Applied left to right; later messages win, details
            accumulate.

    Returns:
        The assembled ErrorResponse. The message falls back to the
        standard reason phrase and is never empty.
    """
    response = ErrorResponse(status_code=status_code, message=status_text(status_code))

    for value in details:
        detail = coerce_detail(value)
        if isinstance(detail, ErrorCause):
            text = str(detail.error)
            response.message = text or type(detail.error).__name__
        elif isinstance(detail, Message):
            if detail.text:
                response.message = detail.text
        elif isinstance(detail, Documentation):
            response.documentation = detail.ref
        else:
            response.details.append(detail.text)

    return response

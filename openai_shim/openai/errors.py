"""OpenAI-style error envelopes."""

from fastapi.responses import JSONResponse

from ..types.chat import ErrorResponse


def error_type_for_status(status_code: int) -> str:
    """Map an HTTP status code to the OpenAI error type tag."""
    if status_code == 400:
        return "invalid_request_error"
    if status_code == 404:
        return "not_found_error"
    return "api_error"


def new_error(status_code: int, message: str) -> ErrorResponse:
    """Build an OpenAI error envelope for the given status and message."""
    return {
        "error": {
            "message": message,
            "type": error_type_for_status(status_code),
            "param": None,
            "code": None,
        }
    }


def openai_error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(new_error(status_code, message), status_code=status_code)

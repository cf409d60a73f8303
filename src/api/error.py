from typing import Dict

from fastapi import status

from src.libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


STATUS_BY_CODE: Dict[str, int] = {
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "INVALID_API_KEY": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "USER_DISABLED": status.HTTP_403_FORBIDDEN,
    "VALIDATION_FAILED": status.HTTP_400_BAD_REQUEST,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "USERNAME_TAKEN": status.HTTP_409_CONFLICT,
    "EMAIL_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
}

# details that are part of the response contract, shown in every environment
PUBLIC_DETAIL_CODES = frozenset({"INVALID_TRANSITION", "RATE_LIMITED"})


def to_http_error(error: Error) -> Exception:
    """Map a use case error to the exception the registered handlers render"""
    if error.code.endswith("_NOT_FOUND"):
        return ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code in STATUS_BY_CODE:
        return ClientError(error, status_code=STATUS_BY_CODE[error.code])
    return ServerError(error)

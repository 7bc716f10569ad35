"""
fbmessenger/outbound/errors.py

Error model for the Graph API client.

There is exactly one exception type. What went wrong is carried by
`kind`, a closed set:
- CONFIGURATION: bad call arguments, detected before any network I/O
- TRANSPORT: the HTTP exchange failed or the body was not JSON
- REMOTE_API: the Graph API answered with a non-200 status or an error object
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    REMOTE_API = "remote_api"


class MessengerError(RuntimeError):
    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        response: Any = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        # Decoded response body, when the API returned one
        self.response = response
        self.status_code = status_code

    @classmethod
    def configuration(cls, message: str) -> "MessengerError":
        return cls(ErrorKind.CONFIGURATION, message)

    @classmethod
    def transport(cls, message: str, status_code: Optional[int] = None) -> "MessengerError":
        return cls(ErrorKind.TRANSPORT, message, status_code=status_code)

    @classmethod
    def remote(cls, response: Any, status_code: Optional[int] = None) -> "MessengerError":
        error = _error_object(response)
        if error is None:
            message = "Messenger Send API returned unknown error."
        else:
            message = (
                f"Messenger Send API error code {error.get('code')}; "
                f"{error.get('type')}; {error.get('message')}"
            )
        return cls(ErrorKind.REMOTE_API, message, response=response, status_code=status_code)

    @property
    def code(self) -> Optional[int]:
        error = _error_object(self.response)
        return error.get("code") if error else None

    @property
    def error_type(self) -> Optional[str]:
        error = _error_object(self.response)
        return error.get("type") if error else None

    @property
    def error_message(self) -> Optional[str]:
        error = _error_object(self.response)
        return error.get("message") if error else None

    def __repr__(self) -> str:
        return f"MessengerError(kind={self.kind.value!r}, message={self.message!r})"


def _error_object(response: Any) -> Optional[dict]:
    if isinstance(response, dict) and isinstance(response.get("error"), dict):
        return response["error"]
    return None

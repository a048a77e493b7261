#!/usr/bin/env python3

"""Exception view of failed ``ReturnResponse`` values.

The client never raises for remote outcomes. Callers that prefer exceptions
can pass a response through :func:`raise_for_response`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

from ..schemas.codes import RespCode
from ..schemas.response import ReturnResponse


class NetboxError(Exception):
    """Base error for netboxkit."""

    code: int = 1

    def __init__(self, message: str, *, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data


class TransportError(NetboxError):
    """The service could not be reached (network, DNS, TLS, timeout)."""

    code = RespCode.TRANSPORT_ERROR


class RemoteError(NetboxError):
    """The service answered with a non-2xx status."""

    code = RespCode.REMOTE_ERROR

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        body: str = "",
        data: Any = None,
    ) -> None:
        super().__init__(message, data=data)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (HTTP {self.status}): {self.body}"
        return self.message


class BadPayloadError(NetboxError):
    """A 2xx response did not have the expected shape."""

    code = RespCode.BAD_PAYLOAD


class PartialFailureError(NetboxError):
    """Some records of a multi-record operation failed."""

    code = RespCode.PARTIAL_FAILURE


class NotFoundError(NetboxError):
    """Zero results where exactly one was required."""

    code = RespCode.NOT_FOUND


class AmbiguousResultError(NetboxError):
    """More than one result where at most one was expected."""

    code = RespCode.AMBIGUOUS_RESULT


class ConfigurationError(NetboxError):
    """Unsupported model kind, invalid object type or missing base URL."""

    code = RespCode.CONFIGURATION_ERROR


class InvalidParamsError(NetboxError):
    """A constraint was violated before any request was sent."""

    code = RespCode.INVALID_PARAMS


class NotImplementedOperationError(NetboxError):
    """The operation is declared but not wired to an endpoint. Not transient."""

    code = RespCode.NOT_IMPLEMENTED


_ERRORS_BY_CODE: Dict[int, Type[NetboxError]] = {
    int(error_cls.code): error_cls
    for error_cls in (
        TransportError,
        RemoteError,
        BadPayloadError,
        PartialFailureError,
        NotFoundError,
        AmbiguousResultError,
        ConfigurationError,
        InvalidParamsError,
        NotImplementedOperationError,
    )
}


def error_for_response(response: ReturnResponse) -> Optional[NetboxError]:
    """Map a failed response onto a :class:`NetboxError`.

    Args:
        response: Client response.

    Returns:
        Optional[NetboxError]: Matching error, or ``None`` when the response
        is successful.
    """
    if response.code == int(RespCode.OK):
        return None

    error_cls = _ERRORS_BY_CODE.get(response.code, NetboxError)
    if error_cls is RemoteError:
        payload = response.data if isinstance(response.data, dict) else {}
        return RemoteError(
            response.msg,
            status=payload.get("http_status"),
            body=str(payload.get("err", "")),
            data=response.data,
        )
    return error_cls(response.msg, data=response.data)


def raise_for_response(response: ReturnResponse) -> ReturnResponse:
    """Raise the matching :class:`NetboxError` for a failed response.

    Args:
        response: Client response.

    Returns:
        ReturnResponse: The same response when it is successful.

    Raises:
        NetboxError: The response carries a failure code.
    """
    error = error_for_response(response)
    if error is not None:
        raise error
    return response

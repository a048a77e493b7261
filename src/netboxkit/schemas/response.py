#!/usr/bin/env python3

"""Unified return envelope shared by every client operation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from .codes import RespCode


class ReturnResponse(BaseModel):
    """Outcome of a client call.

    ``code`` is ``0`` on success and a :class:`RespCode` value otherwise.
    Callers must check ``code`` before using ``data``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    code: int = int(RespCode.OK)
    msg: str = ""
    data: Any = None

    @classmethod
    def ok(cls, msg: str = "success", data: Any = None) -> "ReturnResponse":
        """Build a success response.

        Args:
            msg: Message text.
            data: Optional payload.

        Returns:
            ReturnResponse: Success response.
        """
        return cls(code=int(RespCode.OK), msg=msg, data=data)

    @classmethod
    def fail(cls, code: int = 1, msg: str = "failed", data: Any = None) -> "ReturnResponse":
        """Build a failure response.

        Args:
            code: Error code, usually a :class:`RespCode`.
            msg: Error message text.
            data: Optional failure payload.

        Returns:
            ReturnResponse: Failure response.
        """
        return cls(code=int(code), msg=msg, data=data)

    @classmethod
    def no_data(cls, msg: str = "no data", data: Any = None) -> "ReturnResponse":
        """Build a not-found response."""
        return cls(code=int(RespCode.NOT_FOUND), msg=msg, data=data)

    @property
    def is_ok(self) -> bool:
        return self.code == int(RespCode.OK)

    @property
    def resp_code(self) -> RespCode | int:
        """Return ``code`` as a :class:`RespCode` when it is a known value."""
        try:
            return RespCode(self.code)
        except ValueError:
            return self.code

"""
NetBox client and its model kind table.
"""

from .client import NetboxClient
from .errors import (
    AmbiguousResultError,
    BadPayloadError,
    ConfigurationError,
    InvalidParamsError,
    NetboxError,
    NotFoundError,
    NotImplementedOperationError,
    PartialFailureError,
    RemoteError,
    TransportError,
    error_for_response,
    raise_for_response,
)
from .kinds import INVALID_OBJECT_TYPE, ModelKind, get_object_type, get_path_for_model, resolve_kind

__all__ = [
    "NetboxClient",
    "ModelKind",
    "INVALID_OBJECT_TYPE",
    "get_object_type",
    "get_path_for_model",
    "resolve_kind",
    "NetboxError",
    "TransportError",
    "RemoteError",
    "BadPayloadError",
    "PartialFailureError",
    "NotFoundError",
    "AmbiguousResultError",
    "ConfigurationError",
    "InvalidParamsError",
    "NotImplementedOperationError",
    "error_for_response",
    "raise_for_response",
]

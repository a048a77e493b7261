"""
netboxkit: typed client for the NetBox DCIM/IPAM REST API.
"""

from .netbox import ModelKind, NetboxClient, raise_for_response
from .schemas import RespCode, ReturnResponse
from .utils.load_config import NetboxConfig, load_config_by_file

__version__ = "0.1.0"

__all__ = [
    "NetboxClient",
    "ModelKind",
    "NetboxConfig",
    "RespCode",
    "ReturnResponse",
    "load_config_by_file",
    "raise_for_response",
]

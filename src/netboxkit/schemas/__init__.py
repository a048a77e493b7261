from .codes import RespCode
from .response import ReturnResponse

__all__ = ["RespCode", "ReturnResponse"]

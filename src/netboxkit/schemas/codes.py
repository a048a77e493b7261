from enum import IntEnum



class RespCode(IntEnum):
    """
    RespCode 类。

    ReturnResponse.code 的取值, 0 表示成功。
    """
    OK = 0

    # 1xxx: transport / remote
    TRANSPORT_ERROR = 1001
    REMOTE_ERROR = 1002
    BAD_PAYLOAD = 1003
    PARTIAL_FAILURE = 1004

    # 2xxx: lookup
    NOT_FOUND = 2001
    AMBIGUOUS_RESULT = 2002

    # 4xxx: client side, raised before any request
    CONFIGURATION_ERROR = 4001
    INVALID_PARAMS = 4002
    NOT_IMPLEMENTED = 4003

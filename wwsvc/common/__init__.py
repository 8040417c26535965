# Common utilities
from wwsvc.common.crypto import sign as sign
from wwsvc.common.logging_utils import setup_logger as setup_logger
from wwsvc.common.params import Parameters as Parameters

__all__ = ["Parameters", "setup_logger", "sign"]

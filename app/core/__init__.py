from .logging import log_error, log_info, log_warning, setup_logging
from .state import state

__all__ = ["log_error", "log_info", "log_warning", "setup_logging", "state"]

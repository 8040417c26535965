"""
Configuration settings for the WEBSERVICES client.
"""

from __future__ import annotations

import os

from wwsvc.common.logging_utils import resolve_log_level


class Config:
    """Central configuration class for protocol constants and defaults."""

    def __init__(self) -> None:
        # Protocol constants
        self.WWSVC_PATH: str = "/WWSVC/"
        self.EXECUTE_MODE: str = "SYNCHRON"
        self.RESULT_TYPE: str = "JSON"
        self.SUCCESS_STATUS: int = 200
        self.TICKET_EXPIRED_STATUSES: frozenset[int] = frozenset({401})
        self.CURSOR_CREATE: str = "CREATE"
        self.CURSOR_CLOSED: str = "CLOSED"

        # Request defaults
        self.DEFAULT_TIMEOUT: float = float(os.getenv("WWSVC_TIMEOUT", "60"))
        self.RESULT_MAX_LINES: int = 1000
        self.CURSOR_PAGE_SIZE: int = 500
        self.DEFAULT_METHOD: str = "PUT"

        # Environment variable names for connection settings
        self.ENV_URL: str = "WWSVC_URL"
        self.ENV_VENDOR_HASH: str = "WWSVC_VENDOR_HASH"
        self.ENV_APP_HASH: str = "WWSVC_APP_HASH"
        self.ENV_SECRET: str = "WWSVC_SECRET"
        self.ENV_REVISION: str = "WWSVC_REVISION"

        # Logging
        self.LOG_LEVEL: int = resolve_log_level(os.getenv("WWSVC_LOG_LEVEL", "INFO"))

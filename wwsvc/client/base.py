"""
State shared by the blocking and the async client facades.
"""

from __future__ import annotations

import logging

from wwsvc.client.domain.entities import Cursor, Session, SessionStatus
from wwsvc.common.config import Config
from wwsvc.common.logging_utils import setup_logger
from wwsvc.common.models import ClientConfig, Credentials
from wwsvc.common.params import Parameters, ParameterInput
from wwsvc.common.resources import WebwareResource

logger = logging.getLogger(__name__)


class BaseWebwareClient:
    """Holds the configuration, the session and the cursor controls.

    A client instance is one logical session and is not thread- or task-safe.
    """

    def __init__(self, config: ClientConfig) -> None:
        self.config = config
        self.settings = Config()
        self.session = Session(result_max_lines=config.result_max_lines)
        if config.log_level is not None:
            setup_logger("wwsvc", config.log_level)

    @property
    def status(self) -> SessionStatus:
        return self.session.status

    @property
    def is_registered(self) -> bool:
        return self.session.status is SessionStatus.REGISTERED

    @property
    def credentials(self) -> Credentials:
        """Service pass and app id of the current registration."""
        return self.session.snapshot().require_registered("read credentials")

    def _check_registered(self, operation: str) -> None:
        self.session.snapshot().require_registered(operation)

    def _adopt_credentials(self, credentials: Credentials) -> None:
        self.session.mark_registered(credentials)
        logger.info(
            "Registered as app %s with %s",
            credentials.app_id or "<unknown>",
            self.config.service_url,
        )

    def _finish_deregister(self) -> None:
        self.session.mark_deregistered()
        logger.info("Deregistered from %s", self.config.service_url)

    def _resource_request(
        self, resource: type[WebwareResource], parameters: ParameterInput
    ) -> Parameters:
        params = Parameters.coerce(parameters)
        params.setdefault("FELDER", resource.fields())
        return params

    # Cursor controls

    def create_cursor(self, max_lines: int | None = None) -> Cursor:
        """Open a pagination cursor used by the following requests."""
        self._check_registered("create a cursor")
        if max_lines is None:
            max_lines = self.settings.CURSOR_PAGE_SIZE
        cursor = Cursor(max_lines=max_lines)
        self.session.cursor = cursor
        return cursor

    def close_cursor(self) -> None:
        self.session.cursor = None

    def has_cursor(self) -> bool:
        return self.session.cursor is not None

    def cursor_closed(self) -> bool:
        """True when there is no cursor or the server reported it CLOSED."""
        return self.session.cursor is None or self.session.cursor.closed

    def suspend_cursor(self) -> None:
        self.session.cursor_suspended = True

    def resume_cursor(self) -> None:
        self.session.cursor_suspended = False

    def set_result_max_lines(self, max_lines: int) -> None:
        if max_lines <= 0:
            msg = f"max_lines must be positive, got {max_lines}"
            raise ValueError(msg)
        self.session.result_max_lines = max_lines

"""Application layer: the signed request pipeline.

Every call follows the same steps: check the session snapshot, sign a fresh
envelope, serialize parameters, send, record the cursor, decode COMRESULT.
Only the send step differs between the blocking and the async dispatcher;
everything else runs to completion without suspending.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from wwsvc.client.infrastructure.transport import RawResponse, RequestDescriptor
from wwsvc.common.config import Config
from wwsvc.common.crypto import SignedEnvelope
from wwsvc.common.exceptions import (
    ApiError,
    HttpStatusError,
    SerializationError,
    TicketExpiredError,
)
from wwsvc.common.models import (
    ComResult,
    Credentials,
    ExecJsonRequest,
    RegisterResponse,
    ServiceFunction,
    ServicePassInfo,
)
from wwsvc.common.params import Parameters

if TYPE_CHECKING:
    from wwsvc.client.domain.entities import Session, SessionSnapshot
    from wwsvc.client.infrastructure.transport import (
        AsyncHttpTransport,
        HttpTransport,
    )
    from wwsvc.common.models import ClientConfig
    from wwsvc.common.params import ParameterInput

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

HTTP_BAD_REQUEST = 400


def _segment(value: str) -> str:
    return quote(value, safe="")


def _check_headers(headers: dict[str, str] | None) -> None:
    for name, value in (headers or {}).items():
        try:
            name.encode("ascii")
            value.encode("latin-1")
        except (AttributeError, UnicodeEncodeError) as e:
            msg = f"Header {name!r} cannot be sent as HTTP header text"
            raise SerializationError(msg) from e


class DispatcherBase:
    """Non-suspending parts of the pipeline shared by both dispatchers."""

    def __init__(self, config: ClientConfig, session: Session) -> None:
        self.config = config
        self.session = session
        self.settings = Config()

    # Request construction

    def _envelope(self, snapshot: SessionSnapshot, revision: int) -> SignedEnvelope:
        ticket = snapshot.ticket
        request_id = self.session.issue_request_id() if ticket else 0
        envelope = SignedEnvelope.create(
            self.config.secret, ticket, revision, request_id
        )
        self.session.last_timestamp = envelope.timestamp
        return envelope

    def _default_headers(
        self,
        snapshot: SessionSnapshot,
        additional: dict[str, str] | None = None,
    ) -> dict[str, str]:
        headers = {
            "WWSVC-EXECUTE-MODE": self.settings.EXECUTE_MODE,
            "WWSVC-ACCEPT-RESULT-TYPE": self.settings.RESULT_TYPE,
            "WWSVC-ACCEPT-RESULT-MAX-LINES": str(snapshot.max_lines),
        }
        if snapshot.cursor_id is not None:
            headers["WWSVC-CURSOR"] = snapshot.cursor_id
        if additional:
            headers.update(additional)
        return headers

    def _redactions(self) -> tuple[str, ...]:
        return (self.config.secret, _segment(self.config.secret))

    def prepare_register(self) -> RequestDescriptor:
        self.session.require_unregistered("register")
        snapshot = self.session.snapshot()
        segments = (
            self.config.vendor_hash,
            self.config.app_hash,
            self.config.secret,
            str(self.config.revision),
        )
        url = (
            f"{self.config.service_url}WWSERVICE/REGISTER/"
            + "/".join(_segment(s) for s in segments)
            + "/"
        )
        return RequestDescriptor(
            method="GET",
            url=url,
            envelope=self._envelope(snapshot, self.config.revision),
            function="REGISTER",
            revision=self.config.revision,
            redact=self._redactions(),
        )

    def prepare_deregister(self) -> RequestDescriptor:
        snapshot = self.session.snapshot()
        credentials = snapshot.require_registered("deregister")
        url = (
            f"{self.config.service_url}WWSERVICE/DEREGISTER/"
            f"{_segment(credentials.service_pass)}/"
        )
        return RequestDescriptor(
            method="GET",
            url=url,
            headers=self._default_headers(snapshot),
            envelope=self._envelope(snapshot, self.config.revision),
            function="DEREGISTER",
            revision=self.config.revision,
            redact=self._redactions(),
        )

    def prepare(
        self,
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> RequestDescriptor:
        """Build a signed EXECJSON request for a remote function."""
        snapshot = self.session.snapshot()
        credentials = snapshot.require_registered(f"call {function}")
        params = Parameters.coerce(parameters)
        _check_headers(headers)
        envelope = self._envelope(snapshot, revision)

        body = ExecJsonRequest(
            function=ServiceFunction(
                function_name=function,
                parameters=params.to_service_function_parameters(),
                revision=revision,
            ),
            pass_info=ServicePassInfo(
                service_pass=credentials.service_pass,
                app_hash=envelope.signature,
                timestamp=envelope.timestamp,
                request_id=envelope.request_id,
                execute_mode=self.settings.EXECUTE_MODE,
            ),
        )
        request_headers = self._default_headers(snapshot, headers)
        request_headers["Content-Type"] = "application/json"
        return RequestDescriptor(
            method=method.upper(),
            url=f"{self.config.service_url}EXECJSON",
            headers=request_headers,
            body=body.model_dump_json(by_alias=True).encode("utf-8"),
            envelope=envelope,
            function=function,
            revision=revision,
            timeout=timeout,
            redact=self._redactions(),
        )

    # Response handling

    def complete(self, raw: RawResponse) -> None:
        """Apply response side effects once a call has fully returned."""
        self.session.update_cursor(raw.header("WWSVC-CURSOR"))

    def api_error(self, com_result: ComResult) -> ApiError:
        error_cls = ApiError
        if com_result.status in self.settings.TICKET_EXPIRED_STATUSES:
            error_cls = TicketExpiredError
        return error_cls(
            com_result.message,
            code=com_result.status,
            errno=com_result.errno,
            com_result=com_result,
        )

    def checked_payload(self, raw: RawResponse, function: str | None) -> dict[str, Any]:
        """Decode the body and raise unless COMRESULT reports success."""
        label = function or "request"
        try:
            payload = raw.json()
        except SerializationError as e:
            if raw.status_code >= HTTP_BAD_REQUEST:
                msg = f"{label} failed with HTTP {raw.status_code}"
                raise HttpStatusError(msg, raw.status_code) from e
            raise

        if not isinstance(payload, dict) or "COMRESULT" not in payload:
            if raw.status_code >= HTTP_BAD_REQUEST:
                msg = f"{label} failed with HTTP {raw.status_code}"
                raise HttpStatusError(msg, raw.status_code)
            msg = f"{label} response carries no COMRESULT"
            raise SerializationError(msg)

        try:
            com_result = ComResult.model_validate(payload["COMRESULT"])
        except ValidationError as e:
            msg = f"{label} response has a malformed COMRESULT"
            raise SerializationError(msg) from e

        if com_result.status != self.settings.SUCCESS_STATUS:
            raise self.api_error(com_result)
        return payload

    def decode(
        self,
        raw: RawResponse,
        function: str | None,
        response_model: type[ModelT] | None = None,
    ) -> ModelT | dict[str, Any]:
        payload = self.checked_payload(raw, function)
        if response_model is None:
            return payload
        try:
            return response_model.model_validate(payload)
        except ValidationError as e:
            msg = f"{function} response does not match {response_model.__name__}"
            raise SerializationError(msg) from e

    def decode_register(self, raw: RawResponse) -> Credentials:
        payload = self.checked_payload(raw, "REGISTER")
        try:
            response = RegisterResponse.model_validate(payload)
            return Credentials(
                service_pass=response.service_pass.pass_id,
                app_id=response.service_pass.app_id,
            )
        except ValidationError as e:
            msg = "REGISTER response carries no usable SERVICEPASS"
            raise SerializationError(msg) from e

    def decode_deregister(self, raw: RawResponse) -> None:
        if raw.content.strip():
            self.checked_payload(raw, "DEREGISTER")
        elif raw.status_code >= HTTP_BAD_REQUEST:
            msg = f"DEREGISTER failed with HTTP {raw.status_code}"
            raise HttpStatusError(msg, raw.status_code)


class RequestDispatcher(DispatcherBase):
    """Blocking dispatcher: one call at a time on the caller's thread."""

    def __init__(
        self, config: ClientConfig, session: Session, transport: HttpTransport
    ) -> None:
        super().__init__(config, session)
        self.transport = transport

    def execute(self, descriptor: RequestDescriptor) -> RawResponse:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("send request\n%s", descriptor.to_http_string())
        raw = self.transport.send(descriptor)
        self.complete(raw)
        return raw

    def request(
        self,
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        *,
        response_model: type[ModelT] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> ModelT | dict[str, Any]:
        descriptor = self.prepare(method, function, revision, parameters, headers, timeout)
        raw = self.execute(descriptor)
        return self.decode(raw, function, response_model)

    def register(self) -> Credentials:
        raw = self.execute(self.prepare_register())
        return self.decode_register(raw)

    def deregister(self, descriptor: RequestDescriptor) -> None:
        raw = self.execute(descriptor)
        self.decode_deregister(raw)


class AsyncRequestDispatcher(DispatcherBase):
    """Cooperative dispatcher. The transport await is the only suspension point."""

    def __init__(
        self, config: ClientConfig, session: Session, transport: AsyncHttpTransport
    ) -> None:
        super().__init__(config, session)
        self.transport = transport

    async def execute(self, descriptor: RequestDescriptor) -> RawResponse:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("send request\n%s", descriptor.to_http_string())
        raw = await self.transport.send(descriptor)
        self.complete(raw)
        return raw

    async def request(
        self,
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        *,
        response_model: type[ModelT] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> ModelT | dict[str, Any]:
        descriptor = self.prepare(method, function, revision, parameters, headers, timeout)
        raw = await self.execute(descriptor)
        return self.decode(raw, function, response_model)

    async def register(self) -> Credentials:
        raw = await self.execute(self.prepare_register())
        return self.decode_register(raw)

    async def deregister(self, descriptor: RequestDescriptor) -> None:
        raw = await self.execute(descriptor)
        self.decode_deregister(raw)

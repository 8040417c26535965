"""
Blocking client for SoftENGINE's WEBSERVICES.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from wwsvc.client.application.dispatcher import RequestDispatcher
from wwsvc.client.base import BaseWebwareClient
from wwsvc.client.cursor import CursoredResponse
from wwsvc.client.infrastructure.transport import HttpTransport
from wwsvc.common.exceptions import WebwareError
from wwsvc.common.params import Parameters

if TYPE_CHECKING:
    import requests
    from pydantic import BaseModel

    from wwsvc.client.infrastructure.transport import RawResponse, RequestDescriptor
    from wwsvc.common.models import ClientConfig
    from wwsvc.common.params import ParameterInput
    from wwsvc.common.resources import ListResponse, WebwareResource

    ModelT = TypeVar("ModelT", bound=BaseModel)
    ResourceT = TypeVar("ResourceT", bound=WebwareResource)

logger = logging.getLogger(__name__)


class WebwareClient(BaseWebwareClient):
    """Client for one WEBSERVICES session.

    Typical use::

        config = ClientConfig.build(
            base_url="https://webware.example",
            vendor_hash="V1",
            app_hash="A1",
            secret="s3cr3t",
            revision=1,
        )
        with WebwareClient(config).registered() as client:
            articles = client.request("PUT", "ARTIKEL.GET", 1, {"FELDER": "ART_1_25"})
    """

    def __init__(
        self,
        config: ClientConfig,
        session: requests.Session | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        super().__init__(config)
        self.transport = transport or HttpTransport(config, session=session)
        self.dispatcher = RequestDispatcher(config, self.session, self.transport)

    def register(self) -> WebwareClient:
        """Send REGISTER and store the issued service pass.

        Pre-issued credentials from the config are adopted without a call.
        """
        self.session.require_unregistered("register")
        if self.config.credentials is not None:
            self._adopt_credentials(self.config.credentials)
            return self
        credentials = self.dispatcher.register()
        self._adopt_credentials(credentials)
        return self

    def deregister(self) -> None:
        """Invalidate the service pass. Local state is torn down even if the
        remote call fails; that failure is raised afterwards.
        """
        descriptor = self.dispatcher.prepare_deregister()
        try:
            self.dispatcher.deregister(descriptor)
        except WebwareError as e:
            self._finish_deregister()
            logger.error("Remote deregistration failed: %s", e)
            raise
        self._finish_deregister()

    @contextmanager
    def registered(self) -> Iterator[WebwareClient]:
        """Register, yield the client and always deregister afterwards."""
        self.register()
        try:
            yield self
        finally:
            if self.is_registered:
                self.deregister()

    def prepare_request(
        self,
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> RequestDescriptor:
        """Build a signed request without sending it. Consumes a request id."""
        return self.dispatcher.prepare(method, function, revision, parameters, headers, timeout)

    def execute_request(self, descriptor: RequestDescriptor) -> RawResponse:
        """Send a prepared request and return the undecoded response."""
        self._check_registered(f"call {descriptor.function}")
        return self.dispatcher.execute(descriptor)

    def request(
        self,
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Call a remote function and return the decoded JSON object."""
        return self.dispatcher.request(
            method, function, revision, parameters, headers=headers, timeout=timeout
        )

    def request_generic(
        self,
        response_model: type[ModelT],
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> ModelT:
        """Call a remote function and validate the response into a model."""
        return self.dispatcher.request(
            method,
            function,
            revision,
            parameters,
            response_model=response_model,
            headers=headers,
            timeout=timeout,
        )

    def request_resource(
        self,
        resource: type[ResourceT],
        parameters: ParameterInput = None,
        timeout: float | None = None,
    ) -> list[ResourceT]:
        """Fetch the records of a typed resource."""
        response = self.request_generic(
            resource.response_model(),
            resource.METHOD,
            resource.function_name(),
            resource.VERSION,
            self._resource_request(resource, parameters),
            timeout=timeout,
        )
        return response.items()

    def cursored_request(
        self,
        response_model: type[ListResponse],
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        page_size: int | None = None,
    ) -> CursoredResponse:
        """Page through a list function with a server-side cursor."""
        self._check_registered(f"call {function}")
        return CursoredResponse(
            self,
            response_model,
            method,
            function,
            revision,
            Parameters.coerce(parameters),
            page_size or self.settings.CURSOR_PAGE_SIZE,
        )

    def cursored_resource(
        self,
        resource: type[ResourceT],
        parameters: ParameterInput = None,
        page_size: int | None = None,
    ) -> CursoredResponse[ResourceT]:
        return self.cursored_request(
            resource.response_model(),
            resource.METHOD,
            resource.function_name(),
            resource.VERSION,
            self._resource_request(resource, parameters),
            page_size,
        )

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> WebwareClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

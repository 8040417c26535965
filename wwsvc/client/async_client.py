"""
Async client for SoftENGINE's WEBSERVICES.

Signing, serialization and state checks run synchronously inside each call;
only the HTTP exchange is awaited. A call cancelled while awaiting leaves the
session exactly as it was before the call.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from wwsvc.client.application.dispatcher import AsyncRequestDispatcher
from wwsvc.client.base import BaseWebwareClient
from wwsvc.client.cursor import AsyncCursoredResponse
from wwsvc.client.infrastructure.transport import AsyncHttpTransport
from wwsvc.common.exceptions import WebwareError
from wwsvc.common.params import Parameters

if TYPE_CHECKING:
    import httpx
    from pydantic import BaseModel

    from wwsvc.client.infrastructure.transport import RawResponse, RequestDescriptor
    from wwsvc.common.models import ClientConfig
    from wwsvc.common.params import ParameterInput
    from wwsvc.common.resources import ListResponse, WebwareResource

    ModelT = TypeVar("ModelT", bound=BaseModel)
    ResourceT = TypeVar("ResourceT", bound=WebwareResource)

logger = logging.getLogger(__name__)


class AsyncWebwareClient(BaseWebwareClient):
    """Async counterpart of WebwareClient, backed by httpx."""

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.AsyncClient | None = None,
        transport: AsyncHttpTransport | None = None,
    ) -> None:
        super().__init__(config)
        self.transport = transport or AsyncHttpTransport(config, client=http_client)
        self.dispatcher = AsyncRequestDispatcher(config, self.session, self.transport)

    async def register(self) -> AsyncWebwareClient:
        self.session.require_unregistered("register")
        if self.config.credentials is not None:
            self._adopt_credentials(self.config.credentials)
            return self
        credentials = await self.dispatcher.register()
        self._adopt_credentials(credentials)
        return self

    async def deregister(self) -> None:
        descriptor = self.dispatcher.prepare_deregister()
        try:
            await self.dispatcher.deregister(descriptor)
        except WebwareError as e:
            self._finish_deregister()
            logger.error("Remote deregistration failed: %s", e)
            raise
        self._finish_deregister()

    @asynccontextmanager
    async def registered(self) -> AsyncIterator[AsyncWebwareClient]:
        await self.register()
        try:
            yield self
        finally:
            if self.is_registered:
                await self.deregister()

    def prepare_request(
        self,
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> RequestDescriptor:
        return self.dispatcher.prepare(method, function, revision, parameters, headers, timeout)

    async def execute_request(self, descriptor: RequestDescriptor) -> RawResponse:
        self._check_registered(f"call {descriptor.function}")
        return await self.dispatcher.execute(descriptor)

    async def request(
        self,
        method: str,
        function: str,
        revision: int,
        parameters: ParameterInput = None,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        return await self.dispatcher.request(
            method, function, revision, parameters, headers=headers, timeout=timeout
        )

    async def request_generic(
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
        return await self.dispatcher.request(
            method,
            function,
            revision,
            parameters,
            response_model=response_model,
            headers=headers,
            timeout=timeout,
        )

    async def request_resource(
        self,
        resource: type[ResourceT],
        parameters: ParameterInput = None,
        timeout: float | None = None,
    ) -> list[ResourceT]:
        response = await self.request_generic(
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
    ) -> AsyncCursoredResponse:
        self._check_registered(f"call {function}")
        return AsyncCursoredResponse(
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
    ) -> AsyncCursoredResponse[ResourceT]:
        return self.cursored_request(
            resource.response_model(),
            resource.METHOD,
            resource.function_name(),
            resource.VERSION,
            self._resource_request(resource, parameters),
            page_size,
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> AsyncWebwareClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

"""
Cursor-driven pagination over list functions.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from wwsvc.common.params import Parameters

if TYPE_CHECKING:
    from wwsvc.client.async_client import AsyncWebwareClient
    from wwsvc.client.client import WebwareClient
    from wwsvc.common.models import ComResult
    from wwsvc.common.resources import ListResponse

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")


@dataclass
class CursorPage(Generic[ItemT]):
    """One page of results with the COMRESULT it arrived with."""

    com_result: ComResult
    items: list[ItemT] = field(default_factory=list)


class _CursorBase(Generic[ItemT]):
    def __init__(
        self,
        response_model: type[ListResponse],
        method: str,
        function: str,
        revision: int,
        parameters: Parameters,
        page_size: int,
    ) -> None:
        self.response_model = response_model
        self.method = method
        self.function = function
        self.revision = revision
        self.parameters = parameters
        self.page_size = page_size
        self.finished = False

    def _page(
        self, client: WebwareClient | AsyncWebwareClient, response: Any
    ) -> CursorPage[ItemT]:
        com_result = response.com_result
        if client.cursor_closed():
            logger.debug("Cursor for %s closed by the server", self.function)
            self._finish(client)
        elif not client.session.cursor.acknowledged:
            logger.warning("No cursor returned for %s, closing cursor", self.function)
            self._finish(client)

        if not response.has_list():
            logger.warning("No list received for %s, closing cursor", self.function)
            self._finish(client)
            return CursorPage(com_result=com_result)
        items = response.items()
        if not items:
            logger.warning("Empty list received for %s, closing cursor", self.function)
            self._finish(client)
        return CursorPage(com_result=com_result, items=items)

    def _finish(self, client: WebwareClient | AsyncWebwareClient) -> None:
        self.finished = True
        client.close_cursor()

    def is_finished(self) -> bool:
        return self.finished


class CursoredResponse(_CursorBase[ItemT]):
    """Pages through a list function on a blocking client.

    Owns the client's cursor while iterating; other requests issued in the
    meantime would advance the same cursor.
    """

    def __init__(self, client: WebwareClient, *args: Any) -> None:
        super().__init__(*args)
        self.client = client

    def next_page(self) -> CursorPage[ItemT] | None:
        if self.finished:
            return None
        if not self.client.has_cursor():
            self.client.create_cursor(self.page_size)
        response = self.client.request_generic(
            self.response_model,
            self.method,
            self.function,
            self.revision,
            self.parameters,
        )
        return self._page(self.client, response)

    def __iter__(self) -> Iterator[list[ItemT]]:
        while (page := self.next_page()) is not None:
            if page.items:
                yield page.items

    def collect_all(self) -> list[ItemT]:
        items: list[ItemT] = []
        for batch in self:
            items.extend(batch)
        return items


class AsyncCursoredResponse(_CursorBase[ItemT]):
    """Pages through a list function on an async client."""

    def __init__(self, client: AsyncWebwareClient, *args: Any) -> None:
        super().__init__(*args)
        self.client = client

    async def next_page(self) -> CursorPage[ItemT] | None:
        if self.finished:
            return None
        if not self.client.has_cursor():
            self.client.create_cursor(self.page_size)
        response = await self.client.request_generic(
            self.response_model,
            self.method,
            self.function,
            self.revision,
            self.parameters,
        )
        return self._page(self.client, response)

    async def __aiter__(self) -> AsyncIterator[list[ItemT]]:
        while (page := await self.next_page()) is not None:
            if page.items:
                yield page.items

    async def collect_all(self) -> list[ItemT]:
        items: list[ItemT] = []
        async for batch in self:
            items.extend(batch)
        return items

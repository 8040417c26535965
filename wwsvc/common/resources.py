"""
Typed resources: binding a remote function to its parameter and list shapes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, create_model

from wwsvc.common.models import ComResult

if TYPE_CHECKING:
    from wwsvc.client.async_client import AsyncWebwareClient
    from wwsvc.client.client import WebwareClient
    from wwsvc.common.params import ParameterInput

ItemT = TypeVar("ItemT")
ResourceT = TypeVar("ResourceT", bound="WebwareResource")


class ListContainer(BaseModel, Generic[ItemT]):
    """Named container holding the returned list, e.g. ``ARTIKELLISTE``."""

    model_config = ConfigDict(populate_by_name=True)

    items: Optional[list[ItemT]] = None


class ListResponse(BaseModel, Generic[ItemT]):
    """Response envelope of a list function: COMRESULT plus an optional container."""

    model_config = ConfigDict(populate_by_name=True)

    com_result: ComResult = Field(alias="COMRESULT")
    container: Optional[ListContainer[ItemT]] = None

    def items(self) -> list[ItemT]:
        if self.container is None or self.container.items is None:
            return []
        return list(self.container.items)

    def has_list(self) -> bool:
        return self.container is not None and self.container.items is not None


def list_response_model(
    name: str,
    list_name: str,
    container_name: str,
    item_type: Any = dict,
) -> type[ListResponse]:
    """Create a response model whose container and list use the given keys.

    ``list_response_model("Articles", "ARTIKELLISTE", "ARTIKEL", Article)``
    validates ``{"COMRESULT": {...}, "ARTIKELLISTE": {"ARTIKEL": [...]}}``.
    """
    container = create_model(
        f"{name}Container",
        __base__=ListContainer[item_type],
        items=(Optional[list[item_type]], Field(default=None, alias=container_name)),
    )
    return create_model(
        f"{name}Response",
        __base__=ListResponse[item_type],
        container=(Optional[container], Field(default=None, alias=list_name)),
    )


_RESPONSE_MODELS: dict[type, type[ListResponse]] = {}


class WebwareResource(BaseModel):
    """Base class for records returned by a ``<FUNCTION>.GET`` list function.

    Subclasses set ``FUNCTION`` and alias every field to its WEBWARE column::

        class Article(WebwareResource):
            FUNCTION = "ARTIKEL"

            number: str = Field(alias="ART_1_25")
    """

    model_config = ConfigDict(populate_by_name=True)

    FUNCTION: ClassVar[str]
    VERSION: ClassVar[int] = 1
    METHOD: ClassVar[str] = "PUT"
    LIST_NAME: ClassVar[Optional[str]] = None
    CONTAINER_NAME: ClassVar[Optional[str]] = None

    @classmethod
    def function_name(cls) -> str:
        return f"{cls.FUNCTION}.GET"

    @classmethod
    def list_name(cls) -> str:
        return cls.LIST_NAME or f"{cls.FUNCTION}LISTE"

    @classmethod
    def container_name(cls) -> str:
        return cls.CONTAINER_NAME or cls.FUNCTION

    @classmethod
    def fields(cls) -> str:
        """Comma separated column names, sent as the FELDER parameter."""
        return ",".join(
            field.alias or name for name, field in cls.model_fields.items()
        )

    @classmethod
    def response_model(cls) -> type[ListResponse]:
        model = _RESPONSE_MODELS.get(cls)
        if model is None:
            model = list_response_model(
                cls.__name__, cls.list_name(), cls.container_name(), cls
            )
            _RESPONSE_MODELS[cls] = model
        return model

    @classmethod
    def get(
        cls: type[ResourceT],
        client: WebwareClient,
        parameters: ParameterInput = None,
        timeout: float | None = None,
    ) -> list[ResourceT]:
        """Fetch records of this resource through a registered client."""
        return client.request_resource(cls, parameters, timeout=timeout)

    @classmethod
    async def aget(
        cls: type[ResourceT],
        client: AsyncWebwareClient,
        parameters: ParameterInput = None,
        timeout: float | None = None,
    ) -> list[ResourceT]:
        """Fetch records of this resource through a registered async client."""
        return await client.request_resource(cls, parameters, timeout=timeout)

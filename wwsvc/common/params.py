"""
Function parameters and their PNAME/PCONTENT wire form.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Union

from pydantic import BaseModel

from wwsvc.common.exceptions import SerializationError
from wwsvc.common.models import ServiceFunctionParameter

_SCALARS = (str, int, float, bool)


def _content(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if value is None or not isinstance(value, _SCALARS):
        msg = f"Parameter {key!r} has unsupported value {value!r}"
        raise SerializationError(msg)
    return str(value)


class Parameters:
    """Ordered collection of string parameters for a remote function.

    Supports builder-style chaining::

        Parameters().param("FELDER", "ART_1_25").param("ARTNR", "4711")
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._inner: dict[str, str] = {}
        if values:
            self.extend(values.items())

    def param(self, key: str, value: Any) -> Parameters:
        if not isinstance(key, str) or not key:
            msg = f"Parameter names must be non-empty strings, got {key!r}"
            raise SerializationError(msg)
        self._inner[key] = _content(key, value)
        return self

    def extend(self, items: Iterable[tuple[str, Any]]) -> Parameters:
        for key, value in items:
            self.param(key, value)
        return self

    def setdefault(self, key: str, value: Any) -> Parameters:
        if key not in self._inner:
            self.param(key, value)
        return self

    def copy(self) -> Parameters:
        return Parameters(self._inner)

    def as_dict(self) -> dict[str, str]:
        return dict(self._inner)

    def to_service_function_parameters(self) -> list[ServiceFunctionParameter]:
        return [
            ServiceFunctionParameter(name=name, content=content)
            for name, content in self._inner.items()
        ]

    @classmethod
    def from_service_function_parameters(
        cls, parameters: Iterable[ServiceFunctionParameter]
    ) -> Parameters:
        return cls().extend((p.name, p.content) for p in parameters)

    @classmethod
    def coerce(cls, value: ParameterInput) -> Parameters:
        """Normalize any accepted parameter input into a fresh Parameters."""
        if value is None:
            return cls()
        if isinstance(value, Parameters):
            return value.copy()
        if isinstance(value, BaseModel):
            return cls(value.model_dump(by_alias=True, exclude_none=True))
        if isinstance(value, Mapping):
            return cls(value)
        msg = f"Cannot use {type(value).__name__} as function parameters"
        raise SerializationError(msg)

    def __contains__(self, key: object) -> bool:
        return key in self._inner

    def __getitem__(self, key: str) -> str:
        return self._inner[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._inner)

    def __len__(self) -> int:
        return len(self._inner)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Parameters):
            return self._inner == other._inner
        if isinstance(other, Mapping):
            return self._inner == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Parameters({self._inner!r})"


ParameterInput = Union[Parameters, Mapping[str, Any], BaseModel, None]

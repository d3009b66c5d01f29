"""Parameter binding with wire-type inference.

Every value sent to a statement gets a :class:`BindType` from its Python
type. Integer keys (positional parameters) are shifted by one so the first
positional parameter is bound at position 1.

Examples:
    >>> infer_bind_type(True)
    <BindType.BOOL: 'bool'>
    >>> ParamBinder().bind(["a", 2]).data
    {1: 'a', 2: 2}
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from quarry.core.errors import BindTypeError


class BindType(str, Enum):
    """Wire type a value is bound as."""

    BOOL = "bool"
    INT = "int"
    NULL = "null"
    STRING = "string"


def infer_bind_type(value: Any) -> BindType:
    """Infer the wire type of ``value``.

    ``bool`` is checked before ``int`` (``True`` is an ``int`` in Python);
    ``float`` and ``bytes`` travel as strings like ``str`` does.

    Raises:
        BindTypeError: For every other type.
    """
    if isinstance(value, bool):
        return BindType.BOOL
    if isinstance(value, int):
        return BindType.INT
    if value is None:
        return BindType.NULL
    if isinstance(value, (str, float, bytes)):
        return BindType.STRING
    raise BindTypeError(value)


@dataclass
class BoundParams:
    """Parameters exactly as sent to the driver, in binding order."""

    data: dict[str | int, Any] = field(default_factory=dict)
    types: dict[str | int, BindType] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[str | int]:
        return iter(self.data)

    @property
    def is_positional(self) -> bool:
        return bool(self.data) and all(isinstance(k, int) for k in self.data)

    def positional(self) -> list[Any]:
        """Values ordered by their 1-based position."""
        return [self.data[k] for k in sorted(self.data)]  # type: ignore[type-var]

    def named(self) -> dict[str, Any]:
        """Values keyed by placeholder name (a leading ``:`` is dropped)."""
        return {str(k).lstrip(":"): v for k, v in self.data.items()}


class ParamBinder:
    """Turns caller data into :class:`BoundParams`."""

    def bind(self, data: Mapping[Any, Any] | Sequence[Any] | None) -> BoundParams:
        """Bind every value of ``data``.

        Accepts a mapping (string or int keys) or a sequence (0-based
        positions). Binding stops at the first unbindable value.

        Raises:
            BindTypeError: If a value has no wire type.
        """
        bound = BoundParams()
        if not data:
            return bound

        items = data.items() if isinstance(data, Mapping) else enumerate(data)
        for key, value in items:
            if isinstance(key, int) and not isinstance(key, bool):
                key += 1
            try:
                bind_type = infer_bind_type(value)
            except BindTypeError as e:
                e.key = key
                raise
            bound.data[key] = value
            bound.types[key] = bind_type

        return bound


__all__ = ["BindType", "BoundParams", "ParamBinder", "infer_bind_type"]

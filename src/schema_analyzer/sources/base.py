"""
Data Source Interface
Read-only handles the analyzer walks; implementations wrap a live base or a snapshot
"""
from __future__ import annotations

from typing import Any, Awaitable, List, Optional, Protocol, Sequence, Union, runtime_checkable


@runtime_checkable
class RecordHandle(Protocol):
    """A record; only identity is read"""
    id: str
    name: Optional[str]


@runtime_checkable
class FieldHandle(Protocol):
    """A field definition. ``options`` shape depends on ``type``"""
    id: Optional[str]
    name: Optional[str]
    type: Optional[str]
    description: Optional[str]
    is_computed: Optional[bool]
    options: Any


@runtime_checkable
class ViewHandle(Protocol):
    id: Optional[str]
    name: Optional[str]
    type: Optional[str]


@runtime_checkable
class TableHandle(Protocol):
    """
    A table with ordered fields and views.

    ``select_records`` may be a coroutine function or a plain function; passing
    an empty ``fields`` list asks for identity only, without field values.
    """
    id: str
    name: str
    description: Optional[str]
    fields: Sequence[FieldHandle]
    views: Sequence[ViewHandle]

    def select_records(
        self, fields: Optional[List[str]] = None
    ) -> Union[Sequence[RecordHandle], Awaitable[Sequence[RecordHandle]]]:
        ...


@runtime_checkable
class BaseHandle(Protocol):
    """The top-level database being introspected"""
    id: str
    name: str
    tables: Sequence[TableHandle]

"""Persistence contract shared by the catalog and order repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, Mapping, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Storage for one aggregate type.

    Lookups return ``None`` rather than raising when a row is missing or the
    identifier is malformed; services decide which domain error that is.
    """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[T]: ...

    @abstractmethod
    def list(self, filters: Optional[Mapping[str, Any]] = None) -> Iterable[T]: ...

    @abstractmethod
    def save(self, entity: T) -> T: ...

    @abstractmethod
    def delete(self, id: Any) -> bool:
        """Return ``False`` when there was nothing to delete."""

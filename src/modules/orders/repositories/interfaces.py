"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the order workflow needs:
atomic creation with items, owner-scoped look-ups (optionally locked) and
the paginated per-user listing.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderItem children.  Mutations must
    be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` must include ``user_id`` and ``items`` (list of dicts with
        ``product_id``, ``quantity``, ``price`` and optional ``attributes``);
        ``shipping_address``, ``notes`` and ``payment_method`` are optional.
        ``total_amount`` is computed from the items.
        """

    @abstractmethod
    def get_for_user(self, id: Any, user_id: int) -> Optional[Order]:
        """Retrieve an order owned by ``user_id`` with items prefetched."""

    @abstractmethod
    def get_for_update_for_user(self, id: Any, user_id: int) -> Optional[Order]:
        """Same as ``get_for_user`` but holding a row lock on the order."""

    @abstractmethod
    def list_by_user(
        self,
        user_id: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Order], int]:
        """Return one page of the user's orders (newest first) and the total.

        Each order is annotated with ``item_count``.
        """

"""Order lifecycle events, published after the owning transaction commits.

Amounts travel as strings so handlers never see a ``Decimal`` bound to the
order's database precision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    user_id: Optional[int] = None
    order_number: str = ""
    total_amount: str = "0.00"


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    user_id: Optional[int] = None
    order_number: str = ""
    reason: str = ""

"""
Order repository interface - what the payment flows need from the order store.
"""
from abc import ABC, abstractmethod
from typing import Optional

from .entity import Order


class OrderRepository(ABC):
    """Order repository abstraction - defines what, not how"""

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """Fetch an order by id"""
        pass

    @abstractmethod
    async def save(self, order: Order) -> Order:
        """Persist status and metadata changes"""
        pass

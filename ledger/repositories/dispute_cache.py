"""Bounded LRU cache of recently disputed transactions."""

from collections import OrderedDict
from dataclasses import replace

from ledger.models.transaction import Transaction

DEFAULT_CAPACITY = 50_000


class DisputeCache:
    """
    Keeps the most recently disputed transactions in memory.

    A resolve or chargeback usually follows its dispute closely, so holding
    the disputed record here saves a round trip to the backing store. The
    cache is never authoritative: a miss simply means the caller has to ask
    the store.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize an empty cache.

        Args:
            capacity: Maximum number of entries before the least recently
                used one is evicted

        Raises:
            ValueError: If capacity is not positive
        """
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: OrderedDict[int, Transaction] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, txn_id: int) -> Transaction | None:
        """Return a copy of the cached transaction and mark it recently used."""
        txn = self._entries.get(txn_id)
        if txn is None:
            return None
        self._entries.move_to_end(txn_id)
        return replace(txn)

    def put(self, txn: Transaction) -> None:
        """Insert or refresh an entry, evicting the least recently used one when full."""
        self._entries[txn.transaction_id] = replace(txn)
        self._entries.move_to_end(txn.transaction_id)
        if len(self._entries) > self._capacity:
            self._entries.popitem(last=False)

    def remove(self, txn_id: int) -> None:
        self._entries.pop(txn_id, None)

    def __contains__(self, txn_id: int) -> bool:
        return txn_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

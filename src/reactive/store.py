"""
Shared observable key-value stores.

Each store serialises reads and writes behind its own lock. Updates run
against a working copy which is committed by swapping the data reference,
so a reader sees either the old or the new mapping, never a mix. Diffs are
delivered to subscribers after the lock is released, in commit order, by
whichever thread holds the delivery slot; an update made from inside a
subscriber is queued and delivered after the one in flight.
"""

import copy
import threading
import weakref
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterator, Mapping

from core.errors import StoreAccessError
from core.id import SubscriptionID, new_subscription_id
from core.logging_config import get_logger

from .binding import Binding
from .state import values_equal

if TYPE_CHECKING:
    from monitoring.metrics import MetricsCollector

logger = get_logger(__name__)

Unsubscribe = Callable[[], None]


# ============================================================================
# Diffs
# ============================================================================


@dataclass(frozen=True)
class StoreChange:
    """One key's transition inside an update."""

    key: str
    old: Any
    new: Any


@dataclass(frozen=True)
class StoreDiff:
    """Keys added, changed and removed by one committed update."""

    store_id: str
    version: int
    added: tuple[StoreChange, ...] = ()
    changed: tuple[StoreChange, ...] = ()
    removed: tuple[StoreChange, ...] = ()

    def changes(self) -> tuple[StoreChange, ...]:
        return self.added + self.changed + self.removed

    def keys(self) -> set[str]:
        return {change.key for change in self.changes()}

    def __bool__(self) -> bool:
        return bool(self.added or self.changed or self.removed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "store_id": self.store_id,
            "version": self.version,
            "added": {c.key: c.new for c in self.added},
            "changed": {c.key: {"old": c.old, "new": c.new} for c in self.changed},
            "removed": {c.key: c.old for c in self.removed},
        }


def compute_diff(store_id: str, version: int, before: Mapping[str, Any], after: Mapping[str, Any]) -> StoreDiff:
    """Compare two snapshots key by key."""
    added = tuple(StoreChange(key, None, after[key]) for key in after if key not in before)
    removed = tuple(StoreChange(key, before[key], None) for key in before if key not in after)
    changed = tuple(
        StoreChange(key, before[key], after[key])
        for key in after
        if key in before and not values_equal(before[key], after[key])
    )
    return StoreDiff(store_id, version, added, changed, removed)


# ============================================================================
# Transaction view
# ============================================================================


class StoreTransaction:
    """
    Mutable view handed to an ``update`` mutator.

    Valid only while the mutator runs; any use afterwards raises
    StoreAccessError.
    """

    def __init__(self, store_id: str, data: dict[str, Any]) -> None:
        self.store_id = store_id
        self._data = data
        self._open = True

    def _check(self) -> dict[str, Any]:
        if not self._open:
            raise StoreAccessError(f"Transaction on store '{self.store_id}' used after update() returned")
        return self._data

    def close(self) -> None:
        self._open = False

    def get(self, key: str, default: Any = None) -> Any:
        return self._check().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._check()[key] = value

    def delete(self, key: str) -> None:
        self._check().pop(key, None)

    def keys(self) -> list[str]:
        return list(self._check().keys())

    def items(self) -> list[tuple[str, Any]]:
        return list(self._check().items())

    def update(self, values: Mapping[str, Any]) -> None:
        self._check().update(values)

    def clear(self) -> None:
        self._check().clear()

    def __getitem__(self, key: str) -> Any:
        return self._check()[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        del self._check()[key]

    def __contains__(self, key: object) -> bool:
        return key in self._check()

    def __len__(self) -> int:
        return len(self._check())


# ============================================================================
# Store
# ============================================================================


@dataclass
class _Subscription:
    id: SubscriptionID
    callback: Callable[[StoreDiff], Any]
    observer: "weakref.ref[Any] | None" = field(default=None)

    @property
    def alive(self) -> bool:
        return self.observer is None or self.observer() is not None


class ObservableStore:
    """
    Process-wide shared state addressed by id.

    Examples:
        >>> store = ObservableStore("cart", {"items": []})
        >>> diff = store.update(lambda tx: tx.set("items", ["apple"]))
        >>> [c.key for c in diff.changed]
        ['items']
    """

    def __init__(
        self,
        store_id: str,
        initial: Mapping[str, Any] | None = None,
        metrics: "MetricsCollector | None" = None,
    ) -> None:
        self.id = store_id
        self._data: dict[str, Any] = copy.deepcopy(dict(initial or {}))
        self._version = 0
        self._lock = threading.RLock()
        self._mutating: int | None = None
        self._subscribers: dict[SubscriptionID, _Subscription] = {}
        self._pending: deque[StoreDiff] = deque()
        self._delivering = threading.Lock()
        self._metrics = metrics

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            data = self._data
        return copy.deepcopy(data.get(key, default))

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of the committed data."""
        with self._lock:
            data = self._data
        return copy.deepcopy(data)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data.keys())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update(self, mutator: Callable[[StoreTransaction], Any]) -> StoreDiff:
        """
        Apply ``mutator`` atomically and notify subscribers of the diff.

        The mutator receives a StoreTransaction over a working copy. If it
        raises, the committed data is left untouched and the error
        propagates. An update that changes nothing notifies nobody.

        Raises:
            StoreAccessError: If called from inside a mutator of this store
        """
        with self._lock:
            if self._mutating == threading.get_ident():
                raise StoreAccessError(
                    f"update() on store '{self.id}' called from inside its own mutator; use the transaction"
                )

            before = self._data
            working = copy.deepcopy(before)
            transaction = StoreTransaction(self.id, working)
            self._mutating = threading.get_ident()
            try:
                mutator(transaction)
            finally:
                self._mutating = None
                transaction.close()

            diff = compute_diff(self.id, self._version + 1, before, working)
            if not diff:
                logger.debug("store_update_noop", store=self.id)
                if self._metrics is not None:
                    self._metrics.record_store_update(changed=False)
                return StoreDiff(self.id, self._version)

            self._data = working
            self._version += 1
            self._pending.append(diff)

        logger.debug("store_updated", store=self.id, version=diff.version, keys=sorted(diff.keys()))
        if self._metrics is not None:
            self._metrics.record_store_update(changed=True)
        self._drain()
        return diff

    def set(self, key: str, value: Any) -> StoreDiff:
        return self.update(lambda tx: tx.set(key, value))

    def delete(self, key: str) -> StoreDiff:
        return self.update(lambda tx: tx.delete(key))

    def reset(self, data: Mapping[str, Any] | None = None) -> StoreDiff:
        """Replace all data with ``data`` (empty when None)."""

        def replace(tx: StoreTransaction) -> None:
            tx.clear()
            tx.update(copy.deepcopy(dict(data or {})))

        return self.update(replace)

    def binding(self, key: str) -> Binding:
        """Two-way binding onto one key."""
        return Binding(lambda: self.get(key), lambda value: self.set(key, value), name=f"{self.id}.{key}")

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[[StoreDiff], Any], observer: Any = None) -> Unsubscribe:
        """
        Register ``callback(diff)`` for committed changes.

        Args:
            callback: Receives each non-empty StoreDiff
            observer: Optional owner held weakly; the subscription lapses
                once it is garbage collected

        Returns:
            Idempotent unsubscribe function, safe to call during delivery
        """
        subscription = _Subscription(
            new_subscription_id(),
            callback,
            weakref.ref(observer) if observer is not None else None,
        )
        with self._lock:
            self._subscribers[subscription.id] = subscription
        logger.debug("store_subscribed", store=self.id, subscription=subscription.id)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(subscription.id, None)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return sum(1 for s in self._subscribers.values() if s.alive)

    def _drain(self) -> None:
        """Deliver queued diffs in order from a single thread at a time."""
        while True:
            if not self._delivering.acquire(blocking=False):
                return
            try:
                while True:
                    with self._lock:
                        if not self._pending:
                            break
                        diff = self._pending.popleft()
                        subscribers = list(self._subscribers.values())
                    self._deliver(diff, subscribers)
            finally:
                self._delivering.release()

            with self._lock:
                if not self._pending:
                    return

    def _deliver(self, diff: StoreDiff, subscribers: list[_Subscription]) -> None:
        delivered = 0
        for subscription in subscribers:
            if not subscription.alive:
                with self._lock:
                    self._subscribers.pop(subscription.id, None)
                continue
            with self._lock:
                if subscription.id not in self._subscribers:
                    continue
            try:
                subscription.callback(diff)
                delivered += 1
            except Exception:
                logger.error(
                    "store_subscriber_failed",
                    store=self.id,
                    subscription=subscription.id,
                    version=diff.version,
                    exc_info=True,
                )
                if self._metrics is not None:
                    self._metrics.record_subscriber_error()

        if self._metrics is not None and delivered:
            self._metrics.record_store_notifications(delivered)

    def __repr__(self) -> str:
        return f"<ObservableStore {self.id} v{self._version} keys={len(self._data)}>"


# ============================================================================
# Registry
# ============================================================================


class StoreRegistry:
    """
    Id-keyed registry of stores with atomic get-or-create.

    One registry is created per process by the container; tests build their
    own to stay isolated.
    """

    def __init__(self, metrics: "MetricsCollector | None" = None) -> None:
        self._stores: dict[str, ObservableStore] = {}
        self._lock = threading.Lock()
        self._metrics = metrics
        self.created_count = 0

    def find_or_create(self, store_id: str, initial: Mapping[str, Any] | None = None) -> ObservableStore:
        """
        Return the store for ``store_id``, creating it on first use.

        ``initial`` only seeds a store that does not exist yet.
        """
        with self._lock:
            store = self._stores.get(store_id)
            if store is None:
                store = ObservableStore(store_id, initial, metrics=self._metrics)
                self._stores[store_id] = store
                self.created_count += 1
                logger.info("store_created", store=store_id)
            return store

    def find(self, store_id: str) -> ObservableStore | None:
        with self._lock:
            return self._stores.get(store_id)

    def remove(self, store_id: str) -> bool:
        with self._lock:
            return self._stores.pop(store_id, None) is not None

    def clear(self) -> None:
        """Drop every store."""
        with self._lock:
            count = len(self._stores)
            self._stores.clear()
        logger.info("store_registry_cleared", count=count)

    def store_ids(self) -> list[str]:
        with self._lock:
            return list(self._stores)

    def __contains__(self, store_id: object) -> bool:
        with self._lock:
            return store_id in self._stores

    def __len__(self) -> int:
        with self._lock:
            return len(self._stores)

    def __iter__(self) -> Iterator[ObservableStore]:
        with self._lock:
            return iter(list(self._stores.values()))

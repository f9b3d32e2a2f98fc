"""
Ledger service.

Owns every mutating operation on items. Each mutation runs read, validate,
write under the item's lock, with the write guarded by an expected-version
compare-and-set, and publishes a change event once the write is accepted.
Persistence routing between the durable store and the fallback mirror is
delegated to the store selector.
"""

import time
import uuid
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .config.defaults import LedgerConfig, NotificationParams, get_default_config
from .config.loader import ConfigLoader
from .errors import ItemNotFoundError
from .logging.config import configure_logging, get_ledger_logger, log_listing_transition
from .notify.base import BaseEventSink
from .notify.emitter import NotificationEmitter
from .notify.events import build_event
from .notify.file_sink import FileEventSink
from .notify.journal_sink import JournalEventSink
from .notify.stdout_sink import StdoutEventSink
from .persistence.base import ItemStore
from .persistence.mirror import FallbackMirror
from .persistence.reconciler import Reconciler, ReconciliationReport
from .persistence.selector import StoreSelector
from .persistence.sqlite_store import SqliteItemStore
from .persistence.transaction_store import StoredTransaction, TransactionStore
from .state import transitions
from .state.locks import KeyedLocks
from .state.models import Item, LedgerAction
from .utils.retry import run_with_retry
from .utils.time import Duration, is_auction_expired, utc_now

ledger_logger = get_ledger_logger(__name__)


def build_emitter(
    params: NotificationParams,
    journal: Optional[TransactionStore] = None,
) -> NotificationEmitter:
    """Create the emitter and sinks described by the notification settings."""
    sinks: list[BaseEventSink] = []

    if params.stdout:
        sinks.append(StdoutEventSink())
    if params.file_path:
        sinks.append(FileEventSink(params.file_path))
    if journal is not None:
        sinks.append(JournalEventSink(journal))

    return NotificationEmitter(
        sinks=sinks,
        max_workers=params.max_workers,
        enabled=params.enabled,
    )


class LedgerService:
    """
    Authoritative ownership and listing ledger.

    Manages the item lifecycle:
    mint → list / auction → bid → settle / buy / transfer
    """

    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        durable: Optional[ItemStore] = None,
        emitter: Optional[NotificationEmitter] = None,
        journal: Optional[TransactionStore] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Optional[Callable[[], str]] = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the ledger and its persistence components."""
        self.config = config or get_default_config()
        self.logger = ledger_logger
        self._clock = clock
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

        store_cfg = self.config.store
        self.durable = durable or SqliteItemStore(
            db_path=store_cfg.db_path,
            timeout_seconds=store_cfg.timeout_seconds,
        )
        self.mirror = FallbackMirror()
        self.locks = KeyedLocks()
        self.reconciler = Reconciler(self.durable, self.mirror, self.locks)
        self.selector = StoreSelector(
            durable=self.durable,
            mirror=self.mirror,
            reconciler=self.reconciler,
            cooldown_seconds=store_cfg.cooldown_seconds,
            monotonic=monotonic,
        )

        notify_cfg = self.config.notifications
        if journal is None and notify_cfg.journal_path:
            journal = TransactionStore(notify_cfg.journal_path)
        self.journal = journal
        self.emitter = emitter or build_emitter(notify_cfg, journal)

        self.logger.info(
            "Ledger service initialized",
            durable_store=type(self.durable).__name__,
            sinks=[sink.name for sink in self.emitter.sinks],
        )

    @classmethod
    def from_config(
        cls,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
        **kwargs: Any,
    ) -> "LedgerService":
        """Load configuration, configure logging and build the service."""
        config = ConfigLoader.create(config_dir).load(overrides)
        configure_logging(level=config.logging.level, format_json=config.logging.format_json)
        return cls(config=config, **kwargs)

    def __enter__(self) -> "LedgerService":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_item(self, item_id: str) -> Item:
        """
        Current record for ``item_id``.

        An auction found past its end time is settled first when
        ``auction.auto_settle_on_read`` is enabled.

        Raises:
            ItemNotFoundError: Unknown id
            StoreUnavailableError: Neither store can serve the record
        """
        item = self._require(item_id)
        if self._needs_settlement(item):
            return self.settle_auction(item_id)
        return item

    def items_by_owner(self, owner: str) -> list[Item]:
        """All items currently held by ``owner``."""
        items = [self._settle_if_due(item) for item in self.selector.scan_by_owner(owner)]
        return [item for item in items if item.owner == owner]

    def items_by_creator(self, creator: str) -> list[Item]:
        """All items minted by ``creator``."""
        return [self._settle_if_due(item) for item in self.selector.scan_by_creator(creator)]

    def transaction_history(self, item_id: str) -> list[StoredTransaction]:
        """Ownership journal for an item, oldest first. Empty without a journal."""
        if self.journal is None:
            return []
        self.emitter.flush()
        return self.journal.history(item_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_item(
        self,
        creator: str,
        initial_owner: Optional[str] = None,
        metadata_ref: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> Item:
        """
        Mint a new unlisted item at version 0.

        Raises:
            DuplicateIdError: The allocated id already exists
        """
        now = self._now()
        item = Item(
            id=self._id_factory(),
            owner=initial_owner or creator,
            creator=creator,
            metadata_ref=metadata_ref,
            currency=currency or self.config.default_currency,
            created_at=now,
            updated_at=now,
        )

        with self.locks.hold(item.id):
            stored = self.selector.put(item, expected_version=None)
            self._publish(LedgerAction.CREATE, None, stored, now)

        self.logger.info(
            "Item created",
            item_id=stored.id,
            creator=creator,
            owner=stored.owner,
            dirty=stored.dirty,
        )
        return stored

    def list_fixed_price(self, item_id: str, price: float, requester: str) -> Item:
        """List (or re-price) an item for a fixed price."""
        return self._mutate(
            item_id,
            LedgerAction.LIST_FIXED_PRICE,
            lambda item, now: transitions.list_fixed_price(item, price, requester, now),
        )

    def delist(self, item_id: str, requester: str) -> Item:
        """Withdraw a fixed-price listing."""
        return self._mutate(
            item_id,
            LedgerAction.DELIST,
            lambda item, now: transitions.delist(item, requester, now),
        )

    def start_auction(
        self,
        item_id: str,
        starting_price: float,
        duration: Duration,
        requester: str,
    ) -> Item:
        """Put an unlisted item under auction for ``duration`` (seconds or timedelta)."""
        max_duration = self.config.auction.max_duration_seconds
        return self._mutate(
            item_id,
            LedgerAction.START_AUCTION,
            lambda item, now: transitions.start_auction(
                item, starting_price, duration, requester, now,
                max_duration_seconds=max_duration,
            ),
        )

    def place_bid(self, item_id: str, bidder: str, amount: float) -> Item:
        """Record a bid; it must strictly exceed the current minimum."""
        return self._mutate(
            item_id,
            LedgerAction.PLACE_BID,
            lambda item, now: transitions.place_bid(item, bidder, amount, now),
        )

    def settle_auction(self, item_id: str) -> Item:
        """Close an expired auction. Idempotent once the item is unlisted."""
        return self._mutate(
            item_id,
            LedgerAction.SETTLE_AUCTION,
            transitions.settle_auction,
        )

    def buy_fixed_price(
        self,
        item_id: str,
        buyer: str,
        settlement_ref: Optional[str] = None,
    ) -> Item:
        """
        Record a completed fixed-price purchase.

        Payment must already be settled; ``settlement_ref`` is kept in the
        transaction journal only.
        """
        return self._mutate(
            item_id,
            LedgerAction.BUY_FIXED_PRICE,
            lambda item, now: transitions.buy_fixed_price(item, buyer, now),
            settlement_ref=settlement_ref,
        )

    def transfer_ownership(
        self,
        item_id: str,
        from_owner: str,
        to_owner: str,
        settlement_ref: Optional[str] = None,
    ) -> Item:
        """Directly reassign ownership outside a sale."""
        return self._mutate(
            item_id,
            LedgerAction.TRANSFER_OWNERSHIP,
            lambda item, now: transitions.transfer_ownership(item, from_owner, to_owner, now),
            settlement_ref=settlement_ref,
        )

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def reconcile(self) -> ReconciliationReport:
        """
        Idle reconciliation pass over every dirty mirror record.

        Raises:
            StoreUnavailableError: Durable store still unreachable
        """
        return self.selector.reconcile()

    def health(self) -> dict[str, Any]:
        """
        Snapshot of store routing and notification state.

        Returns:
            Dictionary with durable reachability, pending reconciliation,
            mirror and dirty record counts, and emitter statistics
        """
        return {
            "durable_reachable": self.selector.reachable,
            "reconcile_pending": self.selector.reconcile_pending,
            "mirror_records": len(self.mirror),
            "dirty_records": len(self.mirror.dirty_ids()),
            "notifications": self.emitter.get_stats(),
        }

    def close(self) -> None:
        """Deliver queued notifications and stop the emitter."""
        self.emitter.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return self._clock()

    def _require(self, item_id: str) -> Item:
        item = self.selector.get(item_id)
        if item is None:
            raise ItemNotFoundError(f"Item {item_id} not found", item_id=item_id)
        return item

    def _needs_settlement(self, item: Item) -> bool:
        auction = item.auction
        return (
            self.config.auction.auto_settle_on_read
            and auction is not None
            and is_auction_expired(auction.ends_at, self._now())
        )

    def _settle_if_due(self, item: Item) -> Item:
        if self._needs_settlement(item):
            return self.settle_auction(item.id)
        return item

    def _mutate(
        self,
        item_id: str,
        action: LedgerAction,
        apply: Callable[[Item, datetime], Item],
        settlement_ref: Optional[str] = None,
    ) -> Item:
        def attempt() -> Item:
            with self.locks.hold(item_id):
                current = self._require(item_id)
                now = self._now()
                updated = apply(current, now)
                if updated is current:
                    return current

                stored = self.selector.put(updated, expected_version=current.version)
                self._publish(action, current, stored, now, settlement_ref)
                return stored

        concurrency = self.config.concurrency
        return run_with_retry(
            attempt,
            attempts=concurrency.max_retries,
            backoff_base=concurrency.backoff_base_seconds,
        )

    def _publish(
        self,
        action: LedgerAction,
        previous: Optional[Item],
        current: Item,
        now: datetime,
        settlement_ref: Optional[str] = None,
    ) -> None:
        log_listing_transition(
            self.logger,
            item_id=current.id,
            action=action.value,
            from_listing=previous.listing_kind.value if previous else "none",
            to_listing=current.listing_kind.value,
            version=current.version,
            context={"owner": current.owner, "dirty": current.dirty},
        )
        self.emitter.emit(build_event(action, previous, current, now, settlement_ref))

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from types import TracebackType

from structlog import get_logger

from quickshop.aggregate import (
  TrolleySummary,
  all_quick_shop_committed,
  quick_shop_cta,
  selection_progress,
  summarize_trolley,
)
from quickshop.catalog import (
  Product,
  apply_default_selection,
  ensure_selected,
  find_product,
  set_quantity,
)
from quickshop.categorize import Bucket, Buckets, ViewFilters, partition
from quickshop.checkout import (
  INITIAL_STATE,
  CheckoutEvent,
  CheckoutState,
  Effect,
  Page,
  TransitionContext,
  transition,
)
from quickshop.config import ShopSettings
from quickshop.timers import LoopScheduler, Scheduler, TimerSlot
from quickshop.trolley import TrolleyLedger

logger = get_logger(__name__)


class CtaState(StrEnum):
  IDLE = "idle"
  SUCCESS = "success"


@dataclass(slots=True, frozen=True)
class SessionSnapshot:
  """Everything the presentation layer renders, computed from current state."""

  state: CheckoutState
  cta_state: CtaState
  filters: ViewFilters
  products: list[Product]
  buckets: Buckets
  trolley: dict[str, int]
  trolley_items: list[Product]
  trolley_count: int
  trolley_summary: TrolleySummary
  quick_shop_summary: TrolleySummary
  quick_shop_cta: str
  all_quick_shop_committed: bool
  selection_progress: float
  can_checkout: bool
  auto_advance_pending: bool


class ShopSession:
  """Owns catalog, trolley, view filters and checkout state for one shopper.

  Every mutation is a synchronous method; derived views are recomputed on each
  ``snapshot()``. Timers re-render through ``on_change``. Without an explicit
  ``scheduler`` the session must be created inside a running event loop.
  """

  def __init__(
    self,
    products: Sequence[Product],
    *,
    settings: ShopSettings | None = None,
    ledger: TrolleyLedger | None = None,
    scheduler: Scheduler | None = None,
    on_change: Callable[[], None] | None = None,
  ) -> None:
    self._settings = settings or ShopSettings()
    self._products = list(products)
    self._ledger = ledger if ledger is not None else TrolleyLedger()
    self._filters = ViewFilters()
    self._state = INITIAL_STATE
    self._cta_state = CtaState.IDLE
    self._on_change = on_change
    scheduler = scheduler or LoopScheduler()
    self._success_timer = TimerSlot("success_revert", scheduler)
    self._advance_timer = TimerSlot("auto_advance", scheduler)

  # --- Queries ---

  @property
  def settings(self) -> ShopSettings:
    return self._settings

  @property
  def products(self) -> list[Product]:
    return list(self._products)

  @property
  def ledger(self) -> TrolleyLedger:
    return self._ledger

  @property
  def state(self) -> CheckoutState:
    return self._state

  @property
  def cta_state(self) -> CtaState:
    return self._cta_state

  @property
  def filters(self) -> ViewFilters:
    return self._filters

  def buckets(self) -> Buckets:
    return partition(
      self._products,
      self._ledger,
      threshold=self._settings.score_threshold,
      household_categories=self._settings.household_categories,
      filters=self._filters,
    )

  def trolley_items(self) -> list[Product]:
    return self._ledger.materialize(self._products)

  def trolley_summary(self) -> TrolleySummary:
    return self._summarize(self.trolley_items())

  def snapshot(self) -> SessionSnapshot:
    buckets = self.buckets()
    trolley_items = self.trolley_items()
    trolley_summary = self._summarize(trolley_items)
    committed = all_quick_shop_committed(buckets.quick_shop, self._ledger)
    return SessionSnapshot(
      state=self._state,
      cta_state=self._cta_state,
      filters=self._filters,
      products=list(self._products),
      buckets=buckets,
      trolley=self._ledger.snapshot(),
      trolley_items=trolley_items,
      trolley_count=self._ledger.count(),
      trolley_summary=trolley_summary,
      quick_shop_summary=self._summarize(buckets.visible_quick_shop),
      quick_shop_cta=quick_shop_cta(
        buckets.visible_quick_shop,
        all_committed=committed,
        success_pending=self._cta_state is CtaState.SUCCESS,
      ),
      all_quick_shop_committed=committed,
      selection_progress=selection_progress(buckets.quick_shop),
      can_checkout=bool(trolley_items)
      and (not trolley_summary.below_minimum or self._settings.allow_collection_below_minimum),
      auto_advance_pending=self._advance_timer.pending,
    )

  # --- Catalog selection ---

  def set_selected_quantity(self, product_id: object, quantity: int) -> None:
    self._products = set_quantity(self._products, product_id, quantity)

  def tap_item(self, product_id: object) -> None:
    """Grid tap: toggle the staged quantity between 0 and 1."""
    product = find_product(self._products, product_id)
    if product is None:
      return
    self.set_selected_quantity(product_id, 1 if product.selected_quantity == 0 else 0)

  def set_item_quantity(self, product_id: object, quantity: int) -> None:
    """Stepper on the food & drink / household pages: selection and trolley move together."""
    qty = max(0, quantity)
    self._products = set_quantity(self._products, product_id, qty)
    self._ledger.set_quantity(product_id, qty)

  # --- Trolley ---

  def commit_many(self) -> int:
    """Commit the visible quick-shop selection and raise the transient success signal."""
    items = [p for p in self.buckets().visible_quick_shop if p.selected_quantity > 0]
    if not items:
      return 0
    committed = self._ledger.commit_many(items)
    self._cta_state = CtaState.SUCCESS
    self._success_timer.arm(self._settings.success_revert, self._revert_success)
    logger.info("Committed quick shop selection", items=committed, trolley=self._ledger.count())
    return committed

  def commit_single(self, product_id: object) -> None:
    if find_product(self._products, product_id) is None:
      logger.warning("Ignoring add for unknown product", product_id=str(product_id))
      return
    self._products = ensure_selected(self._products, product_id)
    self._ledger.commit_single(product_id)

  def set_trolley_quantity(self, product_id: object, quantity: int) -> None:
    self._ledger.set_quantity(product_id, quantity)

  def remove_from_trolley(self, product_id: object) -> None:
    self._ledger.remove(product_id)

  def clear_trolley(self) -> None:
    self._ledger.clear()

  # --- Views ---

  def toggle_offers_only(self, bucket: Bucket) -> ViewFilters:
    self._filters = self._filters.toggle(bucket)
    return self._filters

  # --- Navigation ---

  def advance(self, event: CheckoutEvent) -> CheckoutState:
    result = transition(self._state, event, self._context())
    for effect in result.effects:
      self._apply(effect)
    previous, self._state = self._state, result.state
    if self._state != previous:
      # Any navigation supersedes a pending quick-shop auto-advance.
      self._advance_timer.cancel()
      logger.debug(
        "Checkout transition",
        checkout_event=event.value,
        source=previous.label,
        target=self._state.label,
      )
    return self._state

  def close(self) -> None:
    self._success_timer.cancel()
    self._advance_timer.cancel()

  def __enter__(self) -> ShopSession:
    return self

  def __exit__(
    self,
    exc_type: type[BaseException] | None,
    exc: BaseException | None,
    tb: TracebackType | None,
  ) -> None:
    self.close()

  # --- Internal helpers ---

  def _summarize(self, items: Sequence[Product]) -> TrolleySummary:
    return summarize_trolley(
      items,
      min_spend=self._settings.min_spend,
      delivery_fee=self._settings.delivery_fee,
    )

  def _context(self) -> TransitionContext:
    regulars = self.buckets().quick_shop
    summary = self.trolley_summary()
    return TransitionContext(
      all_quick_shop_committed=all_quick_shop_committed(regulars, self._ledger),
      success_pending=self._cta_state is CtaState.SUCCESS,
      trolley_empty=summary.item_count == 0,
      below_minimum_spend=summary.below_minimum,
      allow_collection_below_minimum=self._settings.allow_collection_below_minimum,
    )

  def _apply(self, effect: Effect) -> None:
    match effect:
      case Effect.COMMIT_VISIBLE:
        self.commit_many()
      case Effect.SCHEDULE_ADVANCE:
        self._advance_timer.arm(self._settings.auto_advance, self._auto_advance)
      case Effect.RESET_SESSION:
        self._success_timer.cancel()
        self._cta_state = CtaState.IDLE
        self._ledger.clear()
        self._products = apply_default_selection(self._products, self._settings.score_threshold)
        logger.info("Order confirmed; session reset")

  def _revert_success(self) -> None:
    self._cta_state = CtaState.IDLE
    self._notify()

  def _auto_advance(self) -> None:
    if self._state.page is not Page.QUICK_SHOP:
      return
    self._state = transition(self._state, CheckoutEvent.AUTO_ADVANCE).state
    self._notify()

  def _notify(self) -> None:
    if self._on_change is not None:
      self._on_change()


__all__ = ["CtaState", "SessionSnapshot", "ShopSession"]

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from quickshop.catalog import Product
from quickshop.config import DELIVERY_FEE, MIN_SPEND
from quickshop.trolley import TrolleyLedger
from quickshop.utils.currency import format_price
from quickshop.utils.strings import pluralize

_ZERO = Decimal("0")

ADDED_LABEL = "Added to trolley"
NEXT_STEP_LABEL = "Next step"


def subtotal(items: Sequence[Product]) -> Decimal:
  return sum((p.price * p.selected_quantity for p in items), _ZERO)


def item_count(items: Sequence[Product]) -> int:
  return sum(p.selected_quantity for p in items)


def trolley_count(ledger: TrolleyLedger) -> int:
  return ledger.count()


def minimum_spend_shortfall(amount: Decimal, threshold: Decimal = MIN_SPEND) -> Decimal:
  return max(_ZERO, threshold - amount)


def below_minimum_spend(amount: Decimal, threshold: Decimal = MIN_SPEND) -> bool:
  return amount < threshold


def all_quick_shop_committed(items: Sequence[Product], ledger: TrolleyLedger) -> bool:
  if not items:
    return False
  return all(ledger.is_in_trolley(p) for p in items if p.selected_quantity > 0)


def selection_progress(items: Sequence[Product]) -> float:
  """Share of items with a positive staged quantity, for the favourites progress bar."""
  if not items:
    return 0.0
  selected = sum(1 for p in items if p.selected_quantity > 0)
  return min(1.0, selected / len(items))


@dataclass(slots=True, frozen=True)
class TrolleySummary:
  subtotal: Decimal
  item_count: int
  delivery_fee: Decimal
  min_spend: Decimal

  @property
  def estimated_total(self) -> Decimal:
    return self.subtotal + self.delivery_fee

  @property
  def shortfall(self) -> Decimal:
    return minimum_spend_shortfall(self.subtotal, self.min_spend)

  @property
  def below_minimum(self) -> bool:
    return below_minimum_spend(self.subtotal, self.min_spend)

  @property
  def delivery_text(self) -> str:
    return "Free" if self.delivery_fee == 0 else format_price(self.delivery_fee)

  @property
  def count_text(self) -> str:
    return f"{self.item_count} {pluralize(self.item_count, 'item')}"

  def minimum_spend_warning(self) -> str | None:
    if not self.below_minimum:
      return None
    return (
      f"Spend {format_price(self.shortfall)} more to reach the "
      f"£{self.min_spend:.0f} minimum for delivery."
    )


def summarize_trolley(
  items: Sequence[Product],
  *,
  min_spend: Decimal = MIN_SPEND,
  delivery_fee: Decimal = DELIVERY_FEE,
) -> TrolleySummary:
  return TrolleySummary(
    subtotal=subtotal(items),
    item_count=item_count(items),
    delivery_fee=delivery_fee,
    min_spend=min_spend,
  )


def quick_shop_cta(visible: Sequence[Product], *, all_committed: bool, success_pending: bool) -> str:
  if success_pending:
    return ADDED_LABEL
  if all_committed:
    return NEXT_STEP_LABEL
  return f"Add {item_count(visible)} items to trolley and continue"


__all__ = [
  "ADDED_LABEL",
  "NEXT_STEP_LABEL",
  "TrolleySummary",
  "all_quick_shop_committed",
  "below_minimum_spend",
  "item_count",
  "minimum_spend_shortfall",
  "quick_shop_cta",
  "selection_progress",
  "subtotal",
  "summarize_trolley",
  "trolley_count",
]

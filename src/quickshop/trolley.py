from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from structlog import get_logger

from quickshop.catalog import Product

logger = get_logger(__name__)


class TrolleyLedger:
  """Committed trolley quantities keyed by product id.

  Entries are always positive; setting a quantity to zero deletes the entry.
  """

  def __init__(self, entries: Mapping[str, int] | None = None) -> None:
    self._entries: dict[str, int] = {}
    for product_id, quantity in (entries or {}).items():
      self.set_quantity(product_id, quantity)

  def commit_many(self, items: Iterable[Product]) -> int:
    committed = 0
    for item in items:
      if item.selected_quantity > 0:
        self._entries[item.id] = item.selected_quantity
        committed += 1
    return committed

  def commit_single(self, product_id: object) -> int:
    key = str(product_id)
    quantity = max(self._entries.get(key, 0), 1)
    self._entries[key] = quantity
    return quantity

  def set_quantity(self, product_id: object, quantity: int) -> None:
    key = str(product_id)
    qty = max(0, quantity)
    if qty == 0:
      self._entries.pop(key, None)
    else:
      self._entries[key] = qty

  def remove(self, product_id: object) -> None:
    self._entries.pop(str(product_id), None)

  def clear(self) -> None:
    self._entries.clear()

  def committed(self, product_id: object) -> int:
    return self._entries.get(str(product_id), 0)

  def is_in_trolley(self, product: Product) -> bool:
    # A later raise of the staged quantity above the committed amount counts as "not in trolley".
    committed = self._entries.get(product.id)
    if committed is None or product.selected_quantity <= 0:
      return False
    return committed >= product.selected_quantity

  def materialize(self, products: Sequence[Product]) -> list[Product]:
    by_id = {p.id: p for p in products}
    items: list[Product] = []
    for product_id, quantity in self._entries.items():
      product = by_id.get(product_id)
      if product is None:
        logger.debug("Dropping trolley entry missing from catalog", product_id=product_id)
        continue
      items.append(product.with_quantity(quantity))
    return items

  def count(self) -> int:
    return sum(self._entries.values())

  def snapshot(self) -> dict[str, int]:
    return dict(self._entries)

  def __contains__(self, product_id: object) -> bool:
    return str(product_id) in self._entries

  def __len__(self) -> int:
    return len(self._entries)

  def __bool__(self) -> bool:
    return bool(self._entries)


__all__ = ["TrolleyLedger"]

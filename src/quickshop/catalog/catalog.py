from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from pydantic import ValidationError
from structlog import get_logger

from .source import ProductSource, RawRow
from .types import Product, ProductRowModel

logger = get_logger(__name__)


class CatalogOrigin(StrEnum):
  LIVE = "live"
  FALLBACK = "fallback"


@dataclass(slots=True, frozen=True)
class CatalogLoad:
  products: list[Product]
  origin: CatalogOrigin
  source_label: str


def load_products(rows: Iterable[RawRow]) -> list[Product]:
  """Normalize raw source rows into products; rows without any identifier are skipped."""
  products: list[Product] = []
  for index, row in enumerate(rows):
    try:
      model = ProductRowModel.model_validate(dict(row))
    except ValidationError as exc:
      logger.warning("Skipping unreadable product row", row_index=index, error=str(exc))
      continue
    product = model.to_product()
    if product is None:
      logger.warning("Skipping product row without an identifier", row_index=index)
      continue
    products.append(product)
  return products


def apply_default_selection(products: Sequence[Product], threshold: float) -> list[Product]:
  return [
    p.with_quantity(p.recommended_quantity if p.relevance_score >= threshold else 0)
    for p in products
  ]


def set_quantity(products: Sequence[Product], product_id: object, next_quantity: int) -> list[Product]:
  key = str(product_id)
  return [p.with_quantity(next_quantity) if p.id == key else p for p in products]


def ensure_selected(products: Sequence[Product], product_id: object) -> list[Product]:
  key = str(product_id)
  return [p.with_quantity(max(p.selected_quantity, 1)) if p.id == key else p for p in products]


def find_product(products: Sequence[Product], product_id: object) -> Product | None:
  key = str(product_id)
  for p in products:
    if p.id == key:
      return p
  return None


async def load_catalog(
  source: ProductSource | None,
  fallback: ProductSource,
  *,
  threshold: float,
) -> CatalogLoad:
  """Load the catalog once, falling back to the static rows on failure or an empty result.

  There is no retry: a single failed or empty fetch switches to the fallback.
  """
  if source is not None:
    try:
      rows = await source.fetch_rows()
    except Exception as exc:  # noqa: BLE001
      logger.warning("Product source failed; using fallback", source=source.label, error=str(exc))
    else:
      products = load_products(rows)
      if products:
        logger.info("Loaded catalog", source=source.label, count=len(products))
        return CatalogLoad(
          products=apply_default_selection(products, threshold),
          origin=CatalogOrigin.LIVE,
          source_label=source.label,
        )
      logger.warning("Product source returned no rows; using fallback", source=source.label)

  rows = await fallback.fetch_rows()
  products = load_products(rows)
  logger.info("Loaded fallback catalog", source=fallback.label, count=len(products))
  return CatalogLoad(
    products=apply_default_selection(products, threshold),
    origin=CatalogOrigin.FALLBACK,
    source_label=fallback.label,
  )

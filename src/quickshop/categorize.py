from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, replace
from enum import StrEnum

from quickshop.catalog import Product
from quickshop.config import HOUSEHOLD_CATEGORIES, SCORE_THRESHOLD
from quickshop.trolley import TrolleyLedger


class Bucket(StrEnum):
  FOOD_DRINK = "fooddrink"
  HOUSEHOLD = "household"


@dataclass(slots=True, frozen=True)
class ViewFilters:
  """Per-bucket "offers only" toggles; they only change what is presented."""

  offers_only_food: bool = False
  offers_only_household: bool = False

  def toggle(self, bucket: Bucket) -> ViewFilters:
    if bucket is Bucket.FOOD_DRINK:
      return replace(self, offers_only_food=not self.offers_only_food)
    return replace(self, offers_only_household=not self.offers_only_household)

  def offers_only(self, bucket: Bucket) -> bool:
    if bucket is Bucket.FOOD_DRINK:
      return self.offers_only_food
    return self.offers_only_household


@dataclass(slots=True, frozen=True)
class Buckets:
  quick_shop: list[Product]
  visible_quick_shop: list[Product]
  food_and_drink: list[Product]
  household: list[Product]


def is_household(product: Product, household_categories: Collection[str]) -> bool:
  category = product.category.strip().lower()
  return any(category == label.strip().lower() for label in household_categories)


def quick_shop(products: Sequence[Product], threshold: float = SCORE_THRESHOLD) -> list[Product]:
  return [p for p in products if p.relevance_score >= threshold]


def below_threshold(products: Sequence[Product], threshold: float = SCORE_THRESHOLD) -> list[Product]:
  return [p for p in products if p.relevance_score < threshold]


def food_and_drink(
  products: Sequence[Product],
  threshold: float = SCORE_THRESHOLD,
  household_categories: Collection[str] = HOUSEHOLD_CATEGORIES,
) -> list[Product]:
  return [
    p for p in below_threshold(products, threshold) if not is_household(p, household_categories)
  ]


def household(
  products: Sequence[Product],
  threshold: float = SCORE_THRESHOLD,
  household_categories: Collection[str] = HOUSEHOLD_CATEGORIES,
) -> list[Product]:
  return [p for p in below_threshold(products, threshold) if is_household(p, household_categories)]


def offers_only(products: Sequence[Product]) -> list[Product]:
  return [p for p in products if p.has_offer]


def visible_quick_shop(items: Sequence[Product], ledger: TrolleyLedger) -> list[Product]:
  return [p for p in items if not ledger.is_in_trolley(p)]


def partition(
  products: Sequence[Product],
  ledger: TrolleyLedger,
  *,
  threshold: float = SCORE_THRESHOLD,
  household_categories: Collection[str] = HOUSEHOLD_CATEGORIES,
  filters: ViewFilters | None = None,
) -> Buckets:
  filters = filters or ViewFilters()
  regulars = quick_shop(products, threshold)
  food = food_and_drink(products, threshold, household_categories)
  home = household(products, threshold, household_categories)
  return Buckets(
    quick_shop=regulars,
    visible_quick_shop=visible_quick_shop(regulars, ledger),
    food_and_drink=offers_only(food) if filters.offers_only_food else food,
    household=offers_only(home) if filters.offers_only_household else home,
  )


__all__ = [
  "Bucket",
  "Buckets",
  "ViewFilters",
  "below_threshold",
  "food_and_drink",
  "household",
  "is_household",
  "offers_only",
  "partition",
  "quick_shop",
  "visible_quick_shop",
]

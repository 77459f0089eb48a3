from __future__ import annotations

from quickshop.catalog import Product
from quickshop.categorize import (
  Bucket,
  ViewFilters,
  food_and_drink,
  household,
  partition,
  quick_shop,
  visible_quick_shop,
)
from quickshop.trolley import TrolleyLedger


def _ids(products: list[Product]) -> list[str]:
  return [p.id for p in products]


def test_buckets_are_disjoint_and_cover_catalog(products: list[Product]) -> None:
  regulars = quick_shop(products)
  food = food_and_drink(products)
  home = household(products)
  assert _ids(regulars) == ["A"]
  assert _ids(food) == ["B", "3"]
  assert _ids(home) == ["H1", "H2"]
  assert sorted(_ids(regulars) + _ids(food) + _ids(home)) == sorted(_ids(products))


def test_household_match_is_case_insensitive(products: list[Product]) -> None:
  # "HEALTH & BEAUTY" still lands in household.
  assert "H2" in _ids(household(products))


def test_high_scoring_household_item_stays_in_quick_shop() -> None:
  product = Product(id="bleach", category="Non Food", relevance_score=0.9)
  assert _ids(quick_shop([product])) == ["bleach"]
  assert household([product]) == []


def test_visible_quick_shop_hides_committed_items(products: list[Product]) -> None:
  ledger = TrolleyLedger({"A": 3})
  assert visible_quick_shop(quick_shop(products), ledger) == []


def test_partition_applies_offer_filters(products: list[Product]) -> None:
  ledger = TrolleyLedger()
  filters = ViewFilters().toggle(Bucket.FOOD_DRINK)
  buckets = partition(products, ledger, filters=filters)
  assert _ids(buckets.food_and_drink) == ["3"]
  assert _ids(buckets.household) == ["H1", "H2"]

  filters = filters.toggle(Bucket.HOUSEHOLD)
  buckets = partition(products, ledger, filters=filters)
  assert _ids(buckets.household) == ["H1"]


def test_partition_respects_custom_settings(products: list[Product]) -> None:
  buckets = partition(
    products,
    TrolleyLedger(),
    threshold=0.45,
    household_categories=("Food Cupboard",),
  )
  assert _ids(buckets.quick_shop) == ["A", "H1"]
  assert _ids(buckets.household) == ["B"]
  assert _ids(buckets.food_and_drink) == ["3", "H2"]


def test_view_filter_toggle_round_trips() -> None:
  filters = ViewFilters().toggle(Bucket.HOUSEHOLD)
  assert filters.offers_only(Bucket.HOUSEHOLD)
  assert not filters.offers_only(Bucket.FOOD_DRINK)
  assert filters.toggle(Bucket.HOUSEHOLD) == ViewFilters()


def test_household_labels_match_in_any_case() -> None:
  items = [
    Product(id="H", category="Non Food"),
    Product(id="P", category=" pet care "),
    Product(id="F", category="Bakery"),
  ]
  labels = ("Non Food", "PET CARE")
  assert _ids(household(items, household_categories=labels)) == ["H", "P"]
  assert _ids(food_and_drink(items, household_categories=labels)) == ["F"]

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import httpx
import pytest

from quickshop.catalog import (
  CatalogOrigin,
  PostgrestProductSource,
  Product,
  ProductSourceError,
  YAMLProductSource,
  apply_default_selection,
  bundled_source,
  ensure_selected,
  find_product,
  load_catalog,
  load_products,
  set_quantity,
)
from quickshop.catalog.source import RawRow
from quickshop.config import PostgrestSourceConfig


class _StaticSource:
  def __init__(self, rows: list[RawRow], label: str = "static") -> None:
    self._rows = rows
    self._label = label
    self.calls = 0

  @property
  def label(self) -> str:
    return self._label

  async def fetch_rows(self) -> list[RawRow]:
    self.calls += 1
    return list(self._rows)


class _FailingSource:
  def __init__(self) -> None:
    self.calls = 0

  @property
  def label(self) -> str:
    return "failing"

  async def fetch_rows(self) -> list[RawRow]:
    self.calls += 1
    raise httpx.ConnectError("connection refused")


class TestLoadProducts:
  """Row normalization from the product table shape."""

  def test_maps_sheet_columns(self, sample_rows: list[dict[str, Any]]) -> None:
    products = load_products(sample_rows)
    milk = products[0]
    assert milk.id == "A"
    assert milk.name == "Semi-Skimmed Milk"
    assert milk.price == Decimal("2.00")
    assert milk.recommended_quantity == 3
    assert milk.relevance_score == pytest.approx(0.8)
    assert milk.selected_quantity == 0

  def test_numeric_ids_become_strings(self, sample_rows: list[dict[str, Any]]) -> None:
    products = load_products(sample_rows)
    assert products[2].id == "3"
    assert products[2].price == Decimal("0.85")
    assert products[2].offer_label == "2 for £1.50"

  def test_missing_score_defaults_to_zero(self, sample_rows: list[dict[str, Any]]) -> None:
    products = load_products(sample_rows)
    assert products[4].relevance_score == 0.0

  def test_order_is_used_when_item_id_is_missing(self) -> None:
    products = load_products([{"Order": 12, "Name": "Bananas", "Price": "£1.10"}])
    assert [p.id for p in products] == ["12"]

  def test_rows_without_any_identifier_are_skipped(self) -> None:
    products = load_products([{"Name": "Mystery"}, {"item_id": "", "Order": None}, {"id": "X"}])
    assert [p.id for p in products] == ["X"]

  @pytest.mark.parametrize("raw", [None, 0, -2, "lots", True])
  def test_bad_recommended_quantity_defaults_to_one(self, raw: object) -> None:
    products = load_products([{"item_id": "A", "Recommended Quantity": raw}])
    assert products[0].recommended_quantity == 1

  def test_malformed_cells_do_not_drop_the_row(self) -> None:
    products = load_products([{"item_id": "A", "Price": "call for price", "score": "n/a"}])
    assert products[0].price == 0
    assert products[0].relevance_score == 0.0


def test_default_selection_uses_threshold(sample_rows: list[dict[str, Any]]) -> None:
  products = apply_default_selection(load_products(sample_rows), 0.6)
  quantities = {p.id: p.selected_quantity for p in products}
  assert quantities == {"A": 3, "B": 0, "3": 0, "H1": 0, "H2": 0}


def test_default_selection_threshold_is_inclusive() -> None:
  products = apply_default_selection([Product(id="edge", relevance_score=0.6)], 0.6)
  assert products[0].selected_quantity == 1


def test_set_quantity_matches_numeric_and_string_ids(products: list[Product]) -> None:
  updated = set_quantity(products, 3, 2)
  assert find_product(updated, "3") is not None
  assert find_product(updated, "3").selected_quantity == 2  # type: ignore[union-attr]
  assert set_quantity(updated, "3", -5)[2].selected_quantity == 0


def test_set_quantity_leaves_input_untouched(products: list[Product]) -> None:
  updated = set_quantity(products, "B", 4)
  assert products[1].selected_quantity == 0
  assert updated[1].selected_quantity == 4
  assert updated[0] is products[0]


def test_set_quantity_unknown_id_is_noop(products: list[Product]) -> None:
  assert set_quantity(products, "nope", 4) == products


def test_ensure_selected_keeps_existing_quantity(products: list[Product]) -> None:
  updated = ensure_selected(products, "A")
  assert find_product(updated, "A").selected_quantity == 3  # type: ignore[union-attr]
  updated = ensure_selected(updated, "B")
  assert find_product(updated, "B").selected_quantity == 1  # type: ignore[union-attr]


class TestLoadCatalog:
  """Live fetch with a single fallback on failure or an empty result."""

  @pytest.mark.asyncio
  async def test_live_rows_win(self, sample_rows: list[dict[str, Any]]) -> None:
    fallback = _StaticSource([{"item_id": "F"}], label="fallback")
    load = await load_catalog(_StaticSource(sample_rows, label="live"), fallback, threshold=0.6)
    assert load.origin is CatalogOrigin.LIVE
    assert load.source_label == "live"
    assert [p.id for p in load.products][:2] == ["A", "B"]
    assert load.products[0].selected_quantity == 3
    assert fallback.calls == 0

  @pytest.mark.asyncio
  async def test_failure_switches_to_fallback_without_retry(self) -> None:
    live = _FailingSource()
    fallback = _StaticSource([{"item_id": "F", "score": 0.9, "Recommended Quantity": 2}])
    load = await load_catalog(live, fallback, threshold=0.6)
    assert live.calls == 1
    assert load.origin is CatalogOrigin.FALLBACK
    assert [(p.id, p.selected_quantity) for p in load.products] == [("F", 2)]

  @pytest.mark.asyncio
  async def test_empty_result_switches_to_fallback(self) -> None:
    load = await load_catalog(_StaticSource([]), _StaticSource([{"item_id": "F"}]), threshold=0.6)
    assert load.origin is CatalogOrigin.FALLBACK
    assert [p.id for p in load.products] == ["F"]

  @pytest.mark.asyncio
  async def test_rows_without_ids_count_as_empty(self) -> None:
    live = _StaticSource([{"Name": "no id"}])
    load = await load_catalog(live, _StaticSource([{"item_id": "F"}]), threshold=0.6)
    assert load.origin is CatalogOrigin.FALLBACK

  @pytest.mark.asyncio
  async def test_no_source_uses_fallback(self) -> None:
    load = await load_catalog(None, _StaticSource([{"item_id": "F"}]), threshold=0.6)
    assert load.origin is CatalogOrigin.FALLBACK


@pytest.mark.asyncio
async def test_bundled_fallback_is_usable() -> None:
  rows = await bundled_source().fetch_rows()
  products = apply_default_selection(load_products(rows), 0.6)
  assert len(products) == len(rows)
  assert any(p.selected_quantity > 0 for p in products)
  assert any(p.category.lower() == "non food" for p in products)


@pytest.mark.asyncio
async def test_yaml_source_reads_products(tmp_path: Path) -> None:
  path = tmp_path / "products.yaml"
  path.write_text("products:\n  - item_id: 7\n    Name: Eggs\n    Price: '£2.10'\n", encoding="utf-8")
  rows = await YAMLProductSource(path=path).fetch_rows()
  assert [p.id for p in load_products(rows)] == ["7"]


@pytest.mark.asyncio
async def test_yaml_source_rejects_non_mapping(tmp_path: Path) -> None:
  path = tmp_path / "products.yaml"
  path.write_text("- item_id: 7\n")
  with pytest.raises(ProductSourceError):
    await YAMLProductSource(path=path).fetch_rows()


class TestPostgrestProductSource:
  """HTTP shape of the product table query."""

  @pytest.fixture
  def config(self) -> PostgrestSourceConfig:
    return PostgrestSourceConfig(url="https://db.example.test/", api_key="anon-key")

  @pytest.mark.asyncio
  async def test_queries_table_for_model(self, config: PostgrestSourceConfig) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
      seen.append(request)
      return httpx.Response(200, json=[{"item_id": "A", "Order": 1}, "junk"])

    source = PostgrestProductSource(config, transport=httpx.MockTransport(handler))
    rows = await source.fetch_rows()

    assert rows == [{"item_id": "A", "Order": 1}]
    request = seen[0]
    assert request.url.path == "/rest/v1/POP529"
    assert request.url.params["Model"] == "eq.BBM"
    assert request.url.params["order"] == "Order.asc"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["Authorization"] == "Bearer anon-key"

  @pytest.mark.asyncio
  async def test_http_error_raises(self, config: PostgrestSourceConfig) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    with pytest.raises(httpx.HTTPStatusError):
      await PostgrestProductSource(config, transport=transport).fetch_rows()

  @pytest.mark.asyncio
  async def test_non_list_payload_raises(self, config: PostgrestSourceConfig) -> None:
    transport = httpx.MockTransport(
      lambda request: httpx.Response(200, content=json.dumps({"message": "nope"}).encode())
    )
    with pytest.raises(ProductSourceError):
      await PostgrestProductSource(config, transport=transport).fetch_rows()

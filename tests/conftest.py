"""Shared pytest fixtures and configuration for all tests."""

from __future__ import annotations

from typing import Any

import pytest
from rich.console import Console

from quickshop.catalog import Product, apply_default_selection, load_products
from quickshop.term import ActivityLog, set_activity_log


@pytest.fixture(autouse=True)
def setup_activity_log() -> None:
  """Set up a quiet activity log context for all tests."""
  set_activity_log(ActivityLog(Console(quiet=True)))


@pytest.fixture
def sample_rows() -> list[dict[str, Any]]:
  return [
    {
      "item_id": "A",
      "Order": 1,
      "Name": "Semi-Skimmed Milk",
      "Price": "£2.00",
      "Recommended Quantity": 3,
      "Category": "Dairy, Eggs & Chilled",
      "score": 0.8,
    },
    {
      "item_id": "B",
      "Order": 2,
      "Name": "Risotto Rice",
      "Price": 5.00,
      "Category": "Food Cupboard",
      "score": 0.2,
    },
    {
      "item_id": 3,
      "Order": 3,
      "Name": "Sparkling Water",
      "Price": "85p",
      "Category": "Tea, Coffee & Soft Drinks",
      "Offers": "2 for £1.50",
      "score": "0.4",
    },
    {
      "item_id": "H1",
      "Order": 4,
      "Name": "Laundry Liquid",
      "Price": "£5.50",
      "Category": "Non Food",
      "Offers": "Half price",
      "score": 0.5,
    },
    {
      "item_id": "H2",
      "Order": 5,
      "Name": "Toothpaste",
      "Price": "£3.00",
      "Category": "HEALTH & BEAUTY",
      "score": None,
    },
  ]


@pytest.fixture
def products(sample_rows: list[dict[str, Any]]) -> list[Product]:
  return apply_default_selection(load_products(sample_rows), 0.6)

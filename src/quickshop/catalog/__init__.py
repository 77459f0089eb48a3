from __future__ import annotations

from .catalog import (
  CatalogLoad,
  CatalogOrigin,
  apply_default_selection,
  ensure_selected,
  find_product,
  load_catalog,
  load_products,
  set_quantity,
)
from .source import (
  PostgrestProductSource,
  ProductSource,
  ProductSourceError,
  RawRow,
  YAMLProductSource,
  bundled_products_path,
  bundled_source,
)
from .types import Product, ProductRowModel

__all__ = [
  # catalog
  "CatalogLoad",
  "CatalogOrigin",
  "apply_default_selection",
  "ensure_selected",
  "find_product",
  "load_catalog",
  "load_products",
  "set_quantity",
  # source
  "PostgrestProductSource",
  "ProductSource",
  "ProductSourceError",
  "RawRow",
  "YAMLProductSource",
  "bundled_products_path",
  "bundled_source",
  # types
  "Product",
  "ProductRowModel",
]

from __future__ import annotations

# aggregate.py exports
from quickshop.aggregate import (
  TrolleySummary,
  all_quick_shop_committed,
  below_minimum_spend,
  item_count,
  minimum_spend_shortfall,
  subtotal,
  summarize_trolley,
  trolley_count,
)

# catalog exports
from quickshop.catalog import (
  CatalogLoad,
  CatalogOrigin,
  PostgrestProductSource,
  Product,
  ProductSource,
  YAMLProductSource,
  apply_default_selection,
  load_catalog,
  load_products,
  set_quantity,
)

# categorize.py exports
from quickshop.categorize import Bucket, Buckets, ViewFilters, partition

# checkout.py exports
from quickshop.checkout import (
  CheckoutEvent,
  CheckoutState,
  CheckoutStep,
  InvalidTransitionError,
  Page,
  transition,
)

# config.py exports
from quickshop.config import (
  DEFAULT_CONFIG_PATH,
  AppConfig,
  PostgrestSourceConfig,
  ShopSettings,
  load_config,
)

# session.py exports
from quickshop.session import CtaState, SessionSnapshot, ShopSession

# trolley.py exports
from quickshop.trolley import TrolleyLedger

# utils exports
from quickshop.utils.currency import format_price, parse_price

__all__ = [
  # aggregate.py
  "TrolleySummary",
  "all_quick_shop_committed",
  "below_minimum_spend",
  "item_count",
  "minimum_spend_shortfall",
  "subtotal",
  "summarize_trolley",
  "trolley_count",
  # catalog
  "CatalogLoad",
  "CatalogOrigin",
  "PostgrestProductSource",
  "Product",
  "ProductSource",
  "YAMLProductSource",
  "apply_default_selection",
  "load_catalog",
  "load_products",
  "set_quantity",
  # categorize.py
  "Bucket",
  "Buckets",
  "ViewFilters",
  "partition",
  # checkout.py
  "CheckoutEvent",
  "CheckoutState",
  "CheckoutStep",
  "InvalidTransitionError",
  "Page",
  "transition",
  # config.py
  "DEFAULT_CONFIG_PATH",
  "AppConfig",
  "PostgrestSourceConfig",
  "ShopSettings",
  "load_config",
  # session.py
  "CtaState",
  "SessionSnapshot",
  "ShopSession",
  # trolley.py
  "TrolleyLedger",
  # utils
  "format_price",
  "parse_price",
]

import asyncio
from pathlib import Path

import clypi.parsers as cp
from clypi import Command, arg
from typing_extensions import override

from quickshop.catalog import (
  CatalogOrigin,
  PostgrestProductSource,
  YAMLProductSource,
  bundled_source,
  load_catalog,
)
from quickshop.categorize import Bucket
from quickshop.checkout import CheckoutEvent, Page
from quickshop.config import load_config
from quickshop.session import ShopSession
from quickshop.term import ActivityLog, activity_log, set_activity_log
from quickshop.utils.currency import format_price


async def open_session(config_path: Path | None) -> ShopSession:
  """Load config and catalog, then build a session for the loaded products."""
  log = activity_log()
  config = load_config(config_path)
  source = PostgrestProductSource(config=config.source) if config.source else None
  fallback = YAMLProductSource(path=config.fallback_path) if config.fallback_path else bundled_source()

  log.catalog.operation("Loading products...")
  load = await load_catalog(source, fallback, threshold=config.shop.score_threshold)
  if load.origin is CatalogOrigin.FALLBACK and source is not None:
    log.catalog.warning(f"Live products unavailable; using {load.source_label}")
  log.catalog.success(f"Loaded {len(load.products)} products from {load.source_label}")
  return ShopSession(load.products, settings=config.shop)


class Catalog(Command):
  """Show the quick shop, food & drink and household buckets"""

  config: Path | None = arg(
    None,
    help="Path to config.yaml (defaults to ~/.config/quickshop/config.yaml)",
    parser=cp.Path(exists=True),
  )
  offers_only: bool = arg(False, help="Only show food & drink and household items on offer")

  @override
  async def run(self) -> None:
    log = activity_log()
    session = await open_session(self.config)
    with session:
      if self.offers_only:
        session.toggle_offers_only(Bucket.FOOD_DRINK)
        session.toggle_offers_only(Bucket.HOUSEHOLD)
      snap = session.snapshot()
      log.print_products("Quick Shop", snap.buckets.quick_shop)
      log.print_summary("Quick Shop estimate", snap.quick_shop_summary)
      log.print_products("Food & Drink", snap.buckets.food_and_drink)
      log.print_products("Household", snap.buckets.household)


async def walk_through(session: ShopSession, *, add_extras: bool = True) -> None:
  """Drive ``session`` from favourites through confirmation and back, logging each page."""
  log = activity_log()
  collection_allowed = session.settings.allow_collection_below_minimum

  session.advance(CheckoutEvent.VIEW_MORE)
  snap = session.snapshot()
  log.checkout.important(f"Page: {snap.state.label}")
  log.print_products("Quick Shop", snap.buckets.visible_quick_shop)
  log.checkout.operation(snap.quick_shop_cta)

  session.advance(CheckoutEvent.NEXT_STEP)
  log.trolley.success(f"Added to trolley ({session.ledger.count()} items)")
  while session.state.page is Page.QUICK_SHOP and session.snapshot().auto_advance_pending:
    await asyncio.sleep(0.05)
  if session.state.page is Page.QUICK_SHOP:
    session.advance(CheckoutEvent.NEXT_STEP)

  for bucket, event in (
    (Bucket.FOOD_DRINK, CheckoutEvent.NEXT_STEP),
    (Bucket.HOUSEHOLD, CheckoutEvent.REVIEW_TROLLEY),
  ):
    log.checkout.important(f"Page: {session.state.label}")
    buckets = session.buckets()
    items = buckets.food_and_drink if bucket is Bucket.FOOD_DRINK else buckets.household
    if items and add_extras:
      session.commit_single(items[0].id)
      log.trolley.success(f"Added {items[0].name}")
    session.advance(event)

  snap = session.snapshot()
  log.checkout.important(f"Page: {snap.state.label}")
  log.print_products("Your trolley", snap.trolley_items)
  log.print_summary("Order summary", snap.trolley_summary, collection_allowed=collection_allowed)
  if not snap.can_checkout:
    log.checkout.warning("Checkout unavailable for this trolley.")
    return

  session.advance(CheckoutEvent.CHECKOUT)
  log.checkout.important(f"Page: {session.state.label}")
  total = format_price(session.trolley_summary().estimated_total)
  session.advance(CheckoutEvent.PLACE_ORDER)
  log.checkout.success(f"Order placed: {total} ({session.state.label})")

  session.advance(CheckoutEvent.BACK_TO_FAVOURITES)
  snap = session.snapshot()
  log.checkout.important(
    f"Back to {snap.state.label}; trolley has {snap.trolley_count} items, "
    f"{len(snap.buckets.visible_quick_shop)} regulars ready"
  )


class Walkthrough(Command):
  """Run one session from favourites through order confirmation"""

  config: Path | None = arg(
    None,
    help="Path to config.yaml (defaults to ~/.config/quickshop/config.yaml)",
    parser=cp.Path(exists=True),
  )
  skip_extras: bool = arg(False, help="Do not add a food & drink and a household item")

  @override
  async def run(self) -> None:
    with await open_session(self.config) as session:
      await walk_through(session, add_extras=not self.skip_extras)


class Cli(Command):
  """Quick shop trolley CLI"""

  subcommand: Catalog | Walkthrough


def run() -> int:
  set_activity_log(ActivityLog())
  try:
    cmd = Cli.parse()
    cmd.start()
    return 0
  except KeyboardInterrupt:
    # Graceful exit on Ctrl+C without stack trace
    print("\nInterrupted by user (Ctrl+C). Exiting cleanly.")
    return 130

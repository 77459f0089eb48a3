from __future__ import annotations

from collections.abc import Sequence
from contextvars import ContextVar

from rich import box
from rich.console import Console
from rich.table import Table

from quickshop.aggregate import TrolleySummary
from quickshop.catalog import Product
from quickshop.utils.currency import format_price

# Context variable for activity log
_activity_log: ContextVar[ActivityLog | None] = ContextVar("activity_log", default=None)


def activity_log() -> ActivityLog:
  """Get the current ActivityLog instance from context."""
  log = _activity_log.get()
  if log is None:
    raise RuntimeError("ActivityLog not initialized. Call set_activity_log() first.")
  return log


def set_activity_log(log: ActivityLog) -> None:
  """Set the ActivityLog instance for the current context."""
  _activity_log.set(log)


class CategoryLogger:
  """Prefixed logger delegate for a specific category."""

  def __init__(self, console: Console, prefix: str | None) -> None:
    self._console = console
    self._prefix = prefix

  def _print(self, style: str, message: str) -> None:
    if self._prefix:
      self._console.print(f"[{style}]\\[{self._prefix}] {message}[/{style}]")
    else:
      self._console.print(f"[{style}]{message}[/{style}]")

  def operation(self, message: str) -> None:
    """Log an operation in progress (cyan)."""
    self._print("cyan", message)

  def success(self, message: str) -> None:
    """Log a successful completion (green)."""
    self._print("green", message)

  def warning(self, message: str) -> None:
    """Log a warning or unusual state (yellow)."""
    self._print("yellow", message)

  def important(self, message: str) -> None:
    """Log important data or information (magenta)."""
    self._print("magenta", message)


class ActivityLog:
  """Terminal output for the CLI: category loggers plus product and trolley tables."""

  def __init__(self, console: Console | None = None) -> None:
    self._console = console or Console()

    self.catalog = CategoryLogger(self._console, "catalog")
    self.trolley = CategoryLogger(self._console, "trolley")
    self.checkout = CategoryLogger(self._console, "checkout")

  @property
  def console(self) -> Console:
    return self._console

  def print_products(self, title: str, products: Sequence[Product]) -> None:
    table = Table(title=title, box=box.SIMPLE, expand=True)
    table.add_column("Id", style="grey70", no_wrap=True)
    table.add_column("Product", style="white")
    table.add_column("Size", style="white")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right", style="cyan")
    table.add_column("Offer", style="red")
    for p in products:
      table.add_row(
        p.id,
        p.name,
        p.weight,
        format_price(p.price),
        str(p.selected_quantity),
        p.offer_label,
      )
    if not products:
      table.add_row("", "[dim]nothing to show[/dim]", "", "", "", "")
    self._console.print(table)

  def print_summary(
    self, title: str, summary: TrolleySummary, *, collection_allowed: bool = True
  ) -> None:
    table = Table(title=title, show_header=False, box=box.SIMPLE)
    table.add_column("Label", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    table.add_row(f"Subtotal ({summary.count_text})", format_price(summary.subtotal))
    table.add_row("Delivery", summary.delivery_text)
    table.add_row("Estimated total", f"[bold]{format_price(summary.estimated_total)}[/bold]")
    self._console.print(table)
    warning = summary.minimum_spend_warning()
    if warning:
      if collection_allowed:
        warning = f"{warning} You can still checkout for collection."
      self.trolley.warning(warning)
    elif summary.item_count:
      self.trolley.success(f"You've met the £{summary.min_spend:.0f} minimum spend for delivery")

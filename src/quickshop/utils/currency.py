"""Utilities for parsing and formatting price values."""

import re
from decimal import Decimal, InvalidOperation

_ZERO = Decimal("0")
_PENCE_MARKERS = ("p", "P")
# Includes the mis-encoded pound sign ("¬£") found in exported sheets.
_CURRENCY_PREFIXES = ("¬£", "£", "$", "€", "GBP")
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def _leading_decimal(text: str) -> Decimal:
  """Parse the numeric prefix of ``text`` the way a lenient float parser would."""

  match = _LEADING_NUMBER.match(text.strip().replace(",", ""))
  if match is None:
    return _ZERO
  try:
    value = Decimal(match.group(0))
  except InvalidOperation:
    return _ZERO
  return value


def _non_negative(value: Decimal) -> Decimal:
  if not value.is_finite() or value < 0:
    return _ZERO
  return value


def parse_price(raw: object) -> Decimal:
  """Normalize a raw price ("£1.50", "99p", 2.5, None) into a non-negative Decimal.

  Malformed input degrades to zero; this never raises.
  """

  if isinstance(raw, bool):
    return _ZERO
  if isinstance(raw, Decimal):
    return _non_negative(raw)
  if isinstance(raw, (int, float)):
    try:
      return _non_negative(Decimal(str(raw)))
    except InvalidOperation:
      return _ZERO
  if raw is None:
    return _ZERO

  text = str(raw).strip()
  if not text:
    return _ZERO
  if text.endswith(_PENCE_MARKERS):
    return _non_negative(_leading_decimal(text[:-1]) / 100)
  for prefix in _CURRENCY_PREFIXES:
    if text.startswith(prefix):
      text = text[len(prefix) :]
      break
  return _non_negative(_leading_decimal(text))


def format_price(amount: Decimal) -> str:
  return f"£{amount.quantize(Decimal('0.01')):.2f}"

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from quickshop.utils.strings import trim

DEFAULT_CONFIG_PATH = Path("~/.config/quickshop/config.yaml").expanduser()
SCORE_THRESHOLD = 0.6
HOUSEHOLD_CATEGORIES = ("non food", "health & beauty")
MIN_SPEND = Decimal("40")
DELIVERY_FEE = Decimal("0")
SUCCESS_REVERT = timedelta(seconds=2.5)
AUTO_ADVANCE = timedelta(seconds=1.2)


class PostgrestSourceConfig(BaseModel):
  model_config = ConfigDict(extra="forbid", frozen=True)

  url: str
  api_key: str
  table: str = "POP529"
  model: str = "BBM"

  @field_validator("url", mode="after")
  @classmethod
  def _normalize_url(cls, value: str) -> str:
    trimmed = trim(value)
    if trimmed is None:
      raise ValueError("url must be a non-empty string")
    return trimmed.rstrip("/")

  @field_validator("api_key", "table", "model", mode="after")
  @classmethod
  def _normalize(cls, value: str) -> str:
    trimmed = trim(value)
    if trimmed is None:
      raise ValueError("value must be a non-empty string")
    return trimmed


class ShopSettings(BaseModel):
  model_config = ConfigDict(extra="forbid", frozen=True)

  score_threshold: float = SCORE_THRESHOLD
  household_categories: tuple[str, ...] = HOUSEHOLD_CATEGORIES
  min_spend: Decimal = MIN_SPEND
  delivery_fee: Decimal = DELIVERY_FEE
  # Below the delivery minimum the order can still be placed for collection.
  allow_collection_below_minimum: bool = True
  success_revert: timedelta = SUCCESS_REVERT
  auto_advance: timedelta = AUTO_ADVANCE

  @field_validator("household_categories", mode="after")
  @classmethod
  def _lower_categories(cls, value: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(label.strip().lower() for label in value if label.strip())

  @field_validator("min_spend", "delivery_fee", mode="after")
  @classmethod
  def _validate_amount(cls, value: Decimal) -> Decimal:
    if value < 0:
      raise ValueError("amounts must not be negative")
    return value

  @field_validator("success_revert", "auto_advance", mode="after")
  @classmethod
  def _validate_delay(cls, value: timedelta) -> timedelta:
    if value < timedelta(0):
      raise ValueError("delays must not be negative")
    return value


class AppConfig(BaseModel):
  model_config = ConfigDict(extra="forbid")

  source: PostgrestSourceConfig | None = None
  fallback_path: Path | None = None
  shop: ShopSettings = Field(default_factory=ShopSettings)

  @field_validator("fallback_path", mode="after")
  @classmethod
  def _expand_path(cls, value: Path | None) -> Path | None:
    if value is None:
      return None
    return value.expanduser()


def _read_document(p: Path) -> dict[str, Any]:
  try:
    parsed: object = yaml.safe_load(p.read_text(encoding="utf-8"))
  except OSError as exc:
    raise ValueError(f"Failed to read configuration from {p}") from exc
  except yaml.YAMLError as exc:
    raise ValueError(f"Failed to parse YAML from {p}") from exc

  match parsed:
    case None:
      raise ValueError(f"Configuration file {p} is empty")
    case dict():
      return cast(dict[str, Any], parsed)
    case _:
      raise ValueError(f"Configuration file {p} must contain a mapping at the top level")


def load_config(path: Path | None) -> AppConfig:
  """Load the YAML config into an ``AppConfig``.

  Without an explicit path a missing default file means built-in defaults; an explicit
  path must exist. Every other problem surfaces as ``ValueError`` naming the file.
  """
  if path is None:
    if not DEFAULT_CONFIG_PATH.exists():
      return AppConfig()
    path = DEFAULT_CONFIG_PATH
  resolved = path.expanduser()
  if not resolved.exists():
    raise FileNotFoundError(f"Config file not found: {resolved}")

  document = _read_document(resolved)
  try:
    return AppConfig.model_validate(document)
  except ValidationError as exc:
    raise ValueError(f"Invalid configuration in {resolved}: {exc}") from exc

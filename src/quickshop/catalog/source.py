from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Protocol, cast

import aiofiles
import httpx
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from quickshop.config import PostgrestSourceConfig

RawRow = Mapping[str, Any]

BUNDLED_PRODUCTS = "products.yaml"


class ProductSource(Protocol):
  @property
  def label(self) -> str: ...

  async def fetch_rows(self) -> list[RawRow]: ...


class ProductSourceError(RuntimeError):
  """Raised when a product source cannot produce rows."""


class _ProductDocumentModel(BaseModel):
  model_config = ConfigDict(extra="allow")

  products: list[dict[str, Any]] = Field(default_factory=list)

  @field_validator("products", mode="before")
  @classmethod
  def _coerce_products(cls, value: object) -> list[dict[str, Any]]:
    if value is None:
      return []
    if isinstance(value, list):
      return [
        cast(dict[str, Any], item) for item in cast(list[object], value) if isinstance(item, dict)
      ]
    return []


@dataclass(slots=True)
class PostgrestProductSource:
  """Reads the product table through a PostgREST endpoint (e.g. Supabase)."""

  config: PostgrestSourceConfig
  transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

  @property
  def label(self) -> str:
    return f"{self.config.table}@{self.config.url}"

  def _headers(self) -> dict[str, str]:
    return {
      "apikey": self.config.api_key,
      "Authorization": f"Bearer {self.config.api_key}",
      "Accept": "application/json",
    }

  def _params(self) -> dict[str, str]:
    return {
      "select": "*",
      "Model": f"eq.{self.config.model}",
      "order": "Order.asc",
    }

  async def fetch_rows(self) -> list[RawRow]:
    url = f"{self.config.url}/rest/v1/{self.config.table}"
    async with httpx.AsyncClient(transport=self.transport) as client:
      resp = await client.get(url, params=self._params(), headers=self._headers())
      resp.raise_for_status()
      payload: object = resp.json()
    if not isinstance(payload, list):
      raise ProductSourceError(f"Expected a list of rows from {self.label}")
    return [cast(RawRow, row) for row in cast(list[object], payload) if isinstance(row, Mapping)]


@dataclass(slots=True)
class YAMLProductSource:
  """Static product rows from a YAML document with a top-level ``products`` list."""

  path: Path

  @property
  def label(self) -> str:
    return str(self.path)

  async def fetch_rows(self) -> list[RawRow]:
    async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
      raw_text = await f.read()
    try:
      parsed: object = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
      raise ProductSourceError(f"Failed to parse YAML from {self.path}") from exc
    if parsed is None:
      return []
    if not isinstance(parsed, dict):
      raise ProductSourceError(f"{self.path} must contain a mapping at the top level")
    document = _ProductDocumentModel.model_validate(parsed)
    return list(document.products)


def bundled_products_path() -> Path:
  return Path(str(resources.files("quickshop.data").joinpath(BUNDLED_PRODUCTS)))


def bundled_source() -> YAMLProductSource:
  return YAMLProductSource(path=bundled_products_path())

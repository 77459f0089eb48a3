from __future__ import annotations

import math
from dataclasses import dataclass, replace
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from quickshop.utils.currency import parse_price


@dataclass(slots=True, frozen=True)
class Product:
  id: str
  name: str = ""
  price: Decimal = Decimal("0")
  weight: str = ""
  price_per_unit_label: str = ""
  image: str = ""
  category: str = ""
  offer_label: str = ""
  order: int | str | None = None
  relevance_score: float = 0.0
  recommended_quantity: int = 1
  selected_quantity: int = 0

  @property
  def has_offer(self) -> bool:
    return bool(self.offer_label)

  def with_quantity(self, quantity: int) -> Product:
    return replace(self, selected_quantity=max(0, quantity))


def _text(value: object) -> str:
  if value is None:
    return ""
  return str(value)


class ProductRowModel(BaseModel):
  """A raw product row as returned by the product table or the fallback file.

  Field names follow the upstream sheet ("Formatted PPU", "Recommended Quantity").
  Every field is coerced rather than rejected so one bad cell never drops a row.
  """

  model_config = ConfigDict(extra="ignore", populate_by_name=True)

  item_id: str | None = Field(default=None, validation_alias=AliasChoices("item_id", "id"))
  order: int | str | None = Field(default=None, validation_alias=AliasChoices("Order", "order"))
  name: str = Field(default="", validation_alias=AliasChoices("Name", "name"))
  price: Decimal = Field(default=Decimal("0"), validation_alias=AliasChoices("Price", "price"))
  size: str = Field(default="", validation_alias=AliasChoices("Size", "weight"))
  formatted_ppu: str = Field(default="", validation_alias=AliasChoices("Formatted PPU", "ppu"))
  recommended_quantity: int = Field(
    default=1, validation_alias=AliasChoices("Recommended Quantity", "quantity")
  )
  image_url: str = Field(default="", validation_alias=AliasChoices("imageUrl", "image"))
  category: str = Field(default="", validation_alias=AliasChoices("Category", "category"))
  offers: str = Field(default="", validation_alias=AliasChoices("Offers", "offers"))
  score: float = Field(default=0.0, validation_alias=AliasChoices("score", "Score"))

  @field_validator("item_id", mode="before")
  @classmethod
  def _coerce_id(cls, value: object) -> str | None:
    if value is None or isinstance(value, bool):
      return None
    text = str(value).strip()
    return text or None

  @field_validator("order", mode="before")
  @classmethod
  def _coerce_order(cls, value: object) -> int | str | None:
    if value is None or isinstance(value, bool):
      return None
    if isinstance(value, int):
      return value
    if isinstance(value, float) and value.is_integer():
      return int(value)
    text = str(value).strip()
    return text or None

  @field_validator("name", "size", "formatted_ppu", "image_url", "category", "offers", mode="before")
  @classmethod
  def _coerce_text(cls, value: object) -> str:
    return _text(value)

  @field_validator("price", mode="before")
  @classmethod
  def _coerce_price(cls, value: object) -> Decimal:
    return parse_price(value)

  @field_validator("recommended_quantity", mode="before")
  @classmethod
  def _coerce_quantity(cls, value: object) -> int:
    if isinstance(value, bool):
      return 1
    try:
      parsed = float(str(value).strip()) if value is not None else 0.0
    except ValueError:
      return 1
    if not math.isfinite(parsed) or parsed < 1:
      return 1
    return int(parsed)

  @field_validator("score", mode="before")
  @classmethod
  def _coerce_score(cls, value: object) -> float:
    if value is None or isinstance(value, bool):
      return 0.0
    try:
      parsed = float(str(value).strip())
    except ValueError:
      return 0.0
    if not math.isfinite(parsed):
      return 0.0
    return parsed

  @property
  def resolved_id(self) -> str | None:
    if self.item_id:
      return self.item_id
    if self.order is None:
      return None
    return str(self.order)

  def to_product(self) -> Product | None:
    product_id = self.resolved_id
    if product_id is None:
      return None
    return Product(
      id=product_id,
      name=self.name,
      price=self.price,
      weight=self.size,
      price_per_unit_label=self.formatted_ppu,
      image=self.image_url,
      category=self.category,
      offer_label=self.offers,
      order=self.order,
      relevance_score=self.score,
      recommended_quantity=self.recommended_quantity,
    )

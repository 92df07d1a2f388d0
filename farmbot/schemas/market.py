"""Pydantic schemas for silo holdings, crop prices and sales."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from farmbot.schemas.tabs import _object


class SiloProduct(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: int
	name: str = ""
	amount: float = 0
	pct_full: float = Field(default=0.0, alias="pctFull")


class SiloCapacity(BaseModel):
	capacity: float
	total_holding: float
	pct_full: float


class CropValue(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: int | None = None
	name: str = ""
	crop_value_per_1k: float = Field(default=0.0, alias="cropValuePer1k")
	price_increase: int = Field(default=0, alias="priceIncrease")


class SellResult(BaseModel):
	success: bool
	product_id: int
	product_name: str
	amount_sold: float = 0
	income: float = 0
	remaining: float = 0


class SalesSummary(BaseModel):
	total_sold: float = 0
	total_income: float = 0
	success_count: int = 0
	failed_count: int = 0


class SaleCropData(BaseModel):
	model_config = ConfigDict(extra="ignore")

	name: str | None = None


class SaleReceipt(BaseModel):
	"""Body of a sell-product response."""

	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	success: int = 0
	amount: float = 0
	income: float = 0
	remaining: float = 0
	crop_data: Annotated[SaleCropData, BeforeValidator(_object)] = Field(
		default_factory=SaleCropData,
		alias="cropData",
	)

	@field_validator("amount", "income", "remaining", mode="before")
	@classmethod
	def _null_as_zero(cls, value: Any) -> Any:
		return 0 if value is None else value

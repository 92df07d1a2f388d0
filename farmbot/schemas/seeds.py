"""Pydantic schemas for crop scoring and the seed market."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CropScore(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: int
	name: str = ""
	score: float = 0.0


class MarketSeed(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: int
	name: str = ""
	unlocked: int = 0
	can_afford: int = Field(default=0, alias="canAfford")
	kg_per_ha: float = Field(default=0.0, alias="kgPerHa")
	seed_cost: float = Field(default=0.0, alias="seedCost")

	@property
	def purchasable(self) -> bool:
		return self.unlocked == 1 and self.can_afford == 1


class BestSeedResult(BaseModel):
	crop_id: int
	crop_name: str
	score: float
	kg_per_ha: float
	seed_cost: float
	required_amount: int = Field(ge=0)
	current_stock: float = 0
	need_to_buy: int = Field(ge=0)


class SeedPurchase(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	success: int = 0
	amount: float = 0
	cost: float = 0

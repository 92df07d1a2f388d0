"""Seed choice for plowed plots and the purchases needed to plant them."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from farmbot.schemas.seeds import BestSeedResult, CropScore, MarketSeed, SeedPurchase
from farmbot.schemas.tabs import SeedingTab
from farmbot.services.api_client import FarmApiClient, FarmApiError

_logger = structlog.get_logger("farmbot.seeds")


def parse_crop_scores(raw: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> list[CropScore]:
	"""Crop scores in source order; keyed payloads use the key as the default name."""
	if isinstance(raw, Mapping):
		return [
			CropScore.model_validate({"name": str(name), **dict(data)})
			for name, data in raw.items()
		]
	return [CropScore.model_validate(item) for item in raw]


def parse_market_seeds(raw: Iterable[Mapping[str, Any]]) -> list[MarketSeed]:
	return [MarketSeed.model_validate(item) for item in raw]


def required_seed_amount(area: float, kg_per_ha: float) -> int:
	return math.ceil(area * kg_per_ha)


def select_best_seed(
	crop_scores: Iterable[CropScore],
	market_seeds: Iterable[MarketSeed],
	area: float,
	seed_stock: Mapping[int, float] | None = None,
) -> BestSeedResult | None:
	"""Pick the highest-scoring crop that is unlocked and affordable right now.

	Scores are ranked with a stable descending sort, so equal scores keep
	their source order. Returns ``None`` when no scored crop is purchasable.
	"""
	purchasable = {seed.id: seed for seed in market_seeds if seed.purchasable}
	ranked = sorted(crop_scores, key=lambda crop: crop.score, reverse=True)
	stock = seed_stock or {}

	for crop in ranked:
		seed = purchasable.get(crop.id)
		if seed is None:
			continue
		required = required_seed_amount(area, seed.kg_per_ha)
		current = stock.get(crop.id, 0)
		return BestSeedResult(
			crop_id=crop.id,
			crop_name=crop.name,
			score=crop.score,
			kg_per_ha=seed.kg_per_ha,
			seed_cost=seed.seed_cost,
			required_amount=required,
			current_stock=current,
			need_to_buy=max(0, math.ceil(required - current)),
		)
	return None


class SeedService:
	def __init__(self, api: FarmApiClient):
		self.api = api

	async def get_seed_stock(self, crop_id: int) -> float:
		stock = await self._stock_by_crop()
		return stock.get(crop_id, 0)

	async def get_best_seed_for_farmland(self, farmland_id: int, area: float) -> BestSeedResult | None:
		details = await self.api.get_farmland_details(farmland_id)
		raw_scores = details.get("cropScores")
		if not raw_scores:
			_logger.warning("crop_scores_missing", farmland_id=farmland_id)
			return None

		market = await self.api.get_market_seeds()
		raw_seeds = market.get("seed")
		if not isinstance(raw_seeds, list):
			_logger.warning("market_seeds_missing")
			return None

		crop_scores = parse_crop_scores(raw_scores)
		market_seeds = parse_market_seeds(raw_seeds)
		best = select_best_seed(crop_scores, market_seeds, area, await self._stock_by_crop())
		if best is None:
			_logger.warning("no_suitable_seed", farmland_id=farmland_id, scored=len(crop_scores))
			return None

		_logger.info(
			"best_seed_selected",
			crop=best.crop_name,
			score=best.score,
			required_kg=best.required_amount,
			stock_kg=best.current_stock,
			buy_kg=best.need_to_buy,
		)
		return best

	async def ensure_stock(self, crop_id: int, required_amount: int) -> bool:
		"""Top up the seed stock to ``required_amount``, buying only the shortfall."""
		current_stock = await self.get_seed_stock(crop_id)
		need_to_buy = max(0, math.ceil(required_amount - current_stock))
		if need_to_buy == 0:
			_logger.debug("seed_stock_sufficient", crop_id=crop_id, stock_kg=current_stock)
			return True

		_logger.info("seed_purchase", crop_id=crop_id, amount_kg=need_to_buy)
		try:
			purchase = SeedPurchase.model_validate(await self.api.buy_seeds(crop_id, need_to_buy))
		except FarmApiError as exc:
			_logger.error("seed_purchase_error", crop_id=crop_id, error=str(exc))
			return False
		except ValidationError as exc:
			_logger.error("seed_purchase_response_invalid", crop_id=crop_id, error=str(exc))
			return False

		if purchase.success != 1:
			_logger.warning("seed_purchase_rejected", crop_id=crop_id, amount_kg=need_to_buy)
			return False
		_logger.info("seed_purchase_done", crop_id=crop_id, amount_kg=purchase.amount, cost=purchase.cost)
		return True

	async def prepare_for_seeding(self, farmland_id: int, area: float) -> BestSeedResult | None:
		best = await self.get_best_seed_for_farmland(farmland_id, area)
		if best is None:
			return None

		if best.need_to_buy > 0 and not await self.ensure_stock(best.crop_id, best.required_amount):
			_logger.warning("seeding_not_ready", farmland_id=farmland_id, crop_id=best.crop_id)
			return None
		return best

	async def _stock_by_crop(self) -> dict[int, float]:
		tab = SeedingTab.model_validate(await self.api.get_seeding_tab())
		return {int(crop_id): entry.amount for crop_id, entry in tab.seed.items()}

"""Silo holdings and the fill-threshold sell trigger."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from farmbot.schemas.market import SiloCapacity, SiloProduct
from farmbot.services.api_client import FarmApiClient

_logger = structlog.get_logger("farmbot.silo")


def stored_products(silo_tab: Mapping[str, Any]) -> list[SiloProduct]:
	crop_silo = silo_tab.get("cropSilo") or {}
	holding = crop_silo.get("holding") or {}
	items = holding.values() if isinstance(holding, Mapping) else holding
	return [SiloProduct.model_validate(item) for item in items]


def products_above_threshold(products: Iterable[SiloProduct], threshold: float) -> list[SiloProduct]:
	"""Products at or above ``threshold`` percent of their capacity."""
	return [product for product in products if product.pct_full >= threshold]


class SiloService:
	def __init__(self, api: FarmApiClient):
		self.api = api

	async def get_silo_status(self) -> dict[str, Any]:
		return await self.api.get_silo_tab()

	async def get_silo_capacity(self) -> SiloCapacity:
		crop_silo = (await self.get_silo_status()).get("cropSilo") or {}
		return SiloCapacity(
			capacity=float(crop_silo.get("siloCapacity") or 0),
			total_holding=float(crop_silo.get("totalHolding") or 0),
			pct_full=float(crop_silo.get("pctFull") or 0),
		)

	async def get_stored_products(self) -> list[SiloProduct]:
		return stored_products(await self.get_silo_status())

	async def get_products_above_threshold(self, threshold: float) -> list[SiloProduct]:
		return products_above_threshold(await self.get_stored_products(), threshold)

	async def has_products_over_threshold(self, threshold: float) -> bool:
		return bool(await self.get_products_above_threshold(threshold))

	async def get_product_by_id(self, product_id: int) -> SiloProduct | None:
		return next((p for p in await self.get_stored_products() if p.id == product_id), None)

	async def log_silo_status(self) -> None:
		silo_tab = await self.get_silo_status()
		crop_silo = silo_tab.get("cropSilo") or {}
		_logger.info(
			"silo_status",
			total_holding_kg=crop_silo.get("totalHolding", 0),
			capacity_kg=crop_silo.get("siloCapacity", 0),
			pct_full=round(float(crop_silo.get("pctFull") or 0), 2),
		)
		for product in stored_products(silo_tab):
			_logger.info(
				"silo_product",
				product=product.name,
				amount_kg=product.amount,
				pct_full=round(product.pct_full, 2),
			)

"""Crop prices and sequential product sales."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence

import structlog
from pydantic import ValidationError

from farmbot.schemas.market import CropValue, SaleReceipt, SalesSummary, SellResult, SiloProduct
from farmbot.services.api_client import FarmApiClient, FarmApiError
from farmbot.services.context import BotSession

_logger = structlog.get_logger("farmbot.market")


def summarize_sales(results: Iterable[SellResult]) -> SalesSummary:
	summary = SalesSummary()
	for result in results:
		if result.success:
			summary.total_sold += result.amount_sold
			summary.total_income += result.income
			summary.success_count += 1
		else:
			summary.failed_count += 1
	return summary


class MarketService:
	def __init__(self, api: FarmApiClient, session: BotSession):
		self.api = api
		self.session = session

	async def get_crop_values(self) -> dict[str, CropValue]:
		response = await self.api.get_crop_values()
		values = response.get("cropValues") or {}
		return {str(key): CropValue.model_validate(value) for key, value in values.items()}

	async def get_crop_value(self, crop_id: int) -> CropValue | None:
		return (await self.get_crop_values()).get(str(crop_id))

	async def estimate_sale_value(self, crop_id: int, amount: float) -> float:
		value = await self.get_crop_value(crop_id)
		if value is None:
			return 0.0
		return (amount / 1000) * value.crop_value_per_1k

	async def is_price_increasing(self, crop_id: int) -> bool:
		value = await self.get_crop_value(crop_id)
		return value is not None and value.price_increase == 1

	async def get_price_history(self, crop_id: int) -> list[float]:
		response = await self.api.get_crop_values()
		history = response.get("history") or {}
		return [float(point) for point in history.get(str(crop_id), [])]

	async def sell_product(self, crop_id: int, product_name: str | None = None) -> SellResult:
		"""Sell the full stock of one product; failures come back as ``success=False``."""
		fallback_name = product_name or f"Crop {crop_id}"
		try:
			response = await self.api.sell_product(crop_id, "all")
		except FarmApiError as exc:
			_logger.error("sell_error", crop_id=crop_id, error=str(exc))
			return SellResult(success=False, product_id=crop_id, product_name=fallback_name)

		try:
			receipt = SaleReceipt.model_validate(response)
		except ValidationError as exc:
			_logger.error("sell_response_invalid", crop_id=crop_id, error=str(exc))
			return SellResult(success=False, product_id=crop_id, product_name=fallback_name)

		product_name = receipt.crop_data.name or fallback_name
		if receipt.success != 1:
			_logger.warning("sell_rejected", product=product_name)
			return SellResult(
				success=False,
				product_id=crop_id,
				product_name=product_name,
				remaining=receipt.remaining,
			)

		result = SellResult(
			success=True,
			product_id=crop_id,
			product_name=product_name,
			amount_sold=receipt.amount,
			income=receipt.income,
			remaining=receipt.remaining,
		)
		_logger.info(
			"product_sold",
			product=result.product_name,
			amount_kg=result.amount_sold,
			income=result.income,
		)
		return result

	async def sell_all(self, products: Sequence[SiloProduct]) -> list[SellResult]:
		"""Sell each product in turn, pausing between calls for the server's rate limit."""
		results: list[SellResult] = []
		for index, product in enumerate(products):
			if index:
				await asyncio.sleep(self.session.sell_delay_seconds)
			results.append(await self.sell_product(product.id, product.name))
		return results

	def summarize_sales(self, results: Iterable[SellResult]) -> SalesSummary:
		return summarize_sales(results)

"""Pydantic schemas for cycle reports and the status endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from farmbot.schemas.market import SalesSummary, SiloProduct
from farmbot.schemas.tasks import OperationType, Task


class SkippedTask(BaseModel):
	task: Task
	reason: str


class DispatchedAction(BaseModel):
	task: Task
	op_type: OperationType
	tractor_id: int
	implement_id: int | None = None
	crop_id: int | None = None
	success: bool


class CycleReport(BaseModel):
	cycle: int
	started_at: datetime
	completed_at: datetime | None = None
	tasks_found: dict[str, int] = Field(default_factory=dict)
	dispatched: list[DispatchedAction] = Field(default_factory=list)
	skipped: list[SkippedTask] = Field(default_factory=list)
	products_over_threshold: list[SiloProduct] = Field(default_factory=list)
	sales: SalesSummary | None = None


class BotStatusResponse(BaseModel):
	running: bool
	cycles_completed: int
	check_interval_ms: int
	last_error: str | None = None
	last_report: CycleReport | None = None


class CooldownItem(BaseModel):
	user_farmland_id: int
	minutes_remaining: int
	eligible: bool


class CooldownResponse(BaseModel):
	interval_hours: float
	items: list[CooldownItem] = Field(default_factory=list)

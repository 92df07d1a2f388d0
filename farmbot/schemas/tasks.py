"""Pydantic schemas for normalized work items."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class OperationType(StrEnum):
	clearing = "clearing"
	plowing = "plowing"
	seeding = "seeding"
	harvesting = "harvesting"


# Fallback order used when the requested operation has no usable equipment.
OPERATION_PRIORITY: tuple[OperationType, ...] = (
	OperationType.harvesting,
	OperationType.clearing,
	OperationType.plowing,
	OperationType.seeding,
)


class Task(BaseModel):
	model_config = ConfigDict(frozen=True)

	type: OperationType
	farm_id: int
	farmland_id: int
	user_farmland_id: int
	area: float
	complexity_index: float = 1.0
	farmland_name: str = ""


class TaskCounts(BaseModel):
	pending: int = 0
	cultivate: int = 0
	harvesting: int = 0
	seed: int = 0
	silo: int = 0

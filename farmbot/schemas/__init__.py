"""Schema registry: payload shapes, domain values and API responses.

Application code can do::

    from farmbot.schemas import Task, OperationType, BestSeedResult, ...
"""

# ── Cycle reports & status ──────────────────────────────────────────────────
from farmbot.schemas.bot import (
    BotStatusResponse,
    CooldownItem,
    CooldownResponse,
    CycleReport,
    DispatchedAction,
    SkippedTask,
)

# ── Equipment ───────────────────────────────────────────────────────────────
from farmbot.schemas.equipment import (
    AvailableTractor,
    BatchActionUnit,
    EquipmentOption,
    EquipmentSelection,
    EquipmentUnit,
)

# ── Market & silo ───────────────────────────────────────────────────────────
from farmbot.schemas.market import (
    CropValue,
    SaleReceipt,
    SalesSummary,
    SellResult,
    SiloCapacity,
    SiloProduct,
)

# ── Seeds ───────────────────────────────────────────────────────────────────
from farmbot.schemas.seeds import BestSeedResult, CropScore, MarketSeed, SeedPurchase

# ── Raw tab payloads ────────────────────────────────────────────────────────
from farmbot.schemas.tabs import (
    CultivatingTab,
    FarmlandEntry,
    HarvestTab,
    SeedingTab,
    StateTab,
)

# ── Tasks ───────────────────────────────────────────────────────────────────
from farmbot.schemas.tasks import OPERATION_PRIORITY, OperationType, Task, TaskCounts

__all__ = [
    "OPERATION_PRIORITY",
    "AvailableTractor",
    "BatchActionUnit",
    "BestSeedResult",
    "BotStatusResponse",
    "CooldownItem",
    "CooldownResponse",
    "CropScore",
    "CropValue",
    "CultivatingTab",
    "CycleReport",
    "DispatchedAction",
    "EquipmentOption",
    "EquipmentSelection",
    "EquipmentUnit",
    "FarmlandEntry",
    "HarvestTab",
    "MarketSeed",
    "OperationType",
    "SaleReceipt",
    "SalesSummary",
    "SeedPurchase",
    "SeedingTab",
    "SellResult",
    "SiloCapacity",
    "SiloProduct",
    "SkippedTask",
    "StateTab",
    "Task",
    "TaskCounts",
]

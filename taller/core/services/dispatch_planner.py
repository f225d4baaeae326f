"""
Validation phase of a parts dispatch.

``plan_dispatch`` decides, from entities loaded inside the dispatch
transaction, whether a request can be committed in full. It performs no I/O.
The coordinator only enters the commit phase when the plan has no errors.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from taller.core.entities.inventory import InventoryItem, WarehouseLocation


@dataclass(frozen=True)
class DispatchLine:
    """One requested line: take ``quantity`` of an item from a location."""

    inventory_item_id: int
    quantity: float
    warehouse_location_id: int


@dataclass
class StockShortfall:
    inventory_item_id: int
    name: str
    available: float
    requested: float

    @property
    def missing(self) -> float:
        return self.requested - self.available

    def to_dict(self) -> dict:
        return {
            "inventory_item_id": self.inventory_item_id,
            "name": self.name,
            "available": self.available,
            "requested": self.requested,
            "missing": self.missing,
        }


@dataclass
class PlannedLine:
    line: DispatchLine
    item: InventoryItem
    location: WarehouseLocation


@dataclass
class DispatchPlan:
    """Outcome of the validation phase."""

    lines: list[PlannedLine] = field(default_factory=list)
    line_errors: list[str] = field(default_factory=list)
    shortfalls: list[StockShortfall] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        return self.line_errors + [
            f"inventory_item {s.inventory_item_id}: insufficient stock for "
            f"'{s.name}' (available {s.available:g}, requested {s.requested:g})"
            for s in self.shortfalls
        ]

    @property
    def ok(self) -> bool:
        return not self.line_errors and not self.shortfalls

    @property
    def only_stock_shortfalls(self) -> bool:
        return not self.line_errors and bool(self.shortfalls)


def aggregate_quantities(lines: list[DispatchLine]) -> dict[int, float]:
    """Total requested quantity per inventory item, in first-seen order."""
    totals: dict[int, float] = defaultdict(float)
    for line in lines:
        totals[line.inventory_item_id] += line.quantity
    return dict(totals)


def plan_dispatch(
    lines: list[DispatchLine],
    items: dict[int, InventoryItem],
    locations: dict[int, WarehouseLocation],
) -> DispatchPlan:
    """
    Validate every requested line and the aggregated stock per item.

    All problems are reported, not just the first. Stock is compared against
    the sum requested for an item across all lines, so splitting a request
    over two locations cannot overdraw it.
    """
    plan = DispatchPlan()

    if not lines:
        plan.line_errors.append("lines: at least one line is required")
        return plan

    for i, line in enumerate(lines):
        if line.quantity <= 0:
            plan.line_errors.append(f"lines[{i}].quantity: must be greater than 0")
            continue

        item = items.get(line.inventory_item_id)
        if item is None:
            plan.line_errors.append(
                f"lines[{i}].inventory_item_id: item {line.inventory_item_id} not found"
            )
            continue
        if not item.is_active:
            plan.line_errors.append(
                f"lines[{i}].inventory_item_id: item '{item.name}' ({item.id}) is inactive"
            )
            continue

        location = locations.get(line.warehouse_location_id)
        if location is None:
            plan.line_errors.append(
                f"lines[{i}].warehouse_location_id: location "
                f"{line.warehouse_location_id} not found"
            )
            continue
        if not location.is_active:
            plan.line_errors.append(
                f"lines[{i}].warehouse_location_id: location '{location.code}' is inactive"
            )
            continue

        plan.lines.append(PlannedLine(line=line, item=item, location=location))

    for item_id, requested in aggregate_quantities(lines).items():
        item = items.get(item_id)
        if item is None or not item.is_active:
            continue
        if item.stock_quantity < requested:
            plan.shortfalls.append(
                StockShortfall(
                    inventory_item_id=item_id,
                    name=item.name,
                    available=item.stock_quantity,
                    requested=requested,
                )
            )

    return plan

"""Data models for stations, bays, audits and change-log entries."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from inventory.errors import ConflictError

DEVICE_TYPES = ("mouse", "keyboard", "headset")

SITES = ("Calamba", "Bay", "Los Baños", "La Espacio")

# Items counted per department on every audit.
MAIN_ITEMS = ("CPU", "Monitor", "Keyboard", "Mouse", "Headset")
OTHER_ITEMS = ("Laptop", "Webcam", "RAM", "SSD")

LOG_ACTIONS = ("create", "update", "delete")

DEFAULT_BAY_WIDTH = 55
DEFAULT_BAY_HEIGHT = 50
DEFAULT_BAY_COLOR = "#6c757d"


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Position:
    """A point on the floor map, in canvas pixels."""

    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class Size:
    width: float = DEFAULT_BAY_WIDTH
    height: float = DEFAULT_BAY_HEIGHT


@dataclass
class Device:
    """A peripheral registered to a station.

    Serial numbers are deliberately not unique: several physical tags can
    share one logged serial.
    """

    serial_number: str
    brand: str = ""
    model: str = ""
    notes: str = ""
    registered_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class Station:
    """One addressable slot on the floor map.

    Attributes:
        device_type: Partition key ("mouse", "keyboard" or "headset"); fixed
            at creation and scopes station-number uniqueness.
        position: Location on the canvas.
        station_number: Optional positive integer, unique among active
            stations of the same device type.
        bay: Name of the bay the station belongs to. A soft reference only.
        device: The registered peripheral, if any.
        is_active: False once soft-deleted.
    """

    device_type: str
    position: Position = field(default_factory=Position)
    station_number: int | None = None
    bay: str | None = None
    device: Device | None = None
    is_active: bool = True
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def has_device(self) -> bool:
        return bool(self.device and self.device.serial_number)

    @property
    def status(self) -> str:
        if not self.is_active:
            return "inactive"
        if self.has_device:
            return "occupied"
        return "empty"

    @property
    def display_number(self) -> int | str:
        return self.station_number or "Unnumbered"


class BayLifecycle(str, Enum):
    """Lifecycle of a bay record.

    ``create -> ACTIVE``, ``ACTIVE -> SOFT_DELETED`` on delete and
    ``SOFT_DELETED -> ACTIVE`` when a bay with the same name is recreated.
    """

    ACTIVE = "active"
    SOFT_DELETED = "soft_deleted"


@dataclass
class Bay:
    """A named region grouping stations of one device type."""

    name: str
    device_type: str
    position: Position = field(default_factory=Position)
    size: Size = field(default_factory=Size)
    color: str = DEFAULT_BAY_COLOR
    metadata: dict = field(default_factory=dict)
    lifecycle: BayLifecycle = BayLifecycle.ACTIVE
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    # Filled in by the repository on listing queries.
    stations_count: int = 0

    def __post_init__(self) -> None:
        self.name = self.name.strip().upper()

    @property
    def is_active(self) -> bool:
        return self.lifecycle is BayLifecycle.ACTIVE

    def soft_delete(self) -> None:
        if self.lifecycle is not BayLifecycle.ACTIVE:
            raise ConflictError(f"Bay {self.name} is already deleted")
        self.lifecycle = BayLifecycle.SOFT_DELETED
        self.updated_at = datetime.now()

    def reactivate(self) -> None:
        if self.lifecycle is not BayLifecycle.SOFT_DELETED:
            raise ConflictError(f"Bay {self.name} already exists for {self.device_type}")
        self.lifecycle = BayLifecycle.ACTIVE
        self.updated_at = datetime.now()


@dataclass
class ItemCounts:
    """Counts for one audited item.

    ``departments`` maps a department name to its count; the set of
    departments is managed elsewhere and changes over time.
    """

    departments: dict[str, int] = field(default_factory=dict)
    stock: int = 0
    defectives: int = 0

    @property
    def total(self) -> int:
        return sum(self.departments.values())

    @property
    def overall_total(self) -> int:
        return self.total + self.stock + self.defectives

    def to_dict(self) -> dict:
        return {
            "departments": dict(self.departments),
            "stock": self.stock,
            "defectives": self.defectives,
            "total": self.total,
            "overall_total": self.overall_total,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ItemCounts":
        return cls(
            departments={k: int(v) for k, v in (data.get("departments") or {}).items()},
            stock=int(data.get("stock") or 0),
            defectives=int(data.get("defectives") or 0),
        )


@dataclass
class Audit:
    """A dated snapshot of equipment counts for one site."""

    date: date
    site: str
    items: dict[str, ItemCounts] = field(default_factory=dict)
    other_items: dict[str, int] = field(default_factory=dict)
    missing_items: dict[str, int] = field(default_factory=dict)
    created_by: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class LogEntry:
    """A single field-level change. Never modified once written.

    Attributes:
        action: One of "create", "update" or "delete".
        audit_date: The audit the change belongs to.
        description: Human-readable summary of the change.
        item: Audited item name (e.g. "Mouse").
        field_name: Changed field (a department name, "stock", ...).
        old_value: Value before the change.
        new_value: Value after the change.
        user_id: Caller that made the change.
        timestamp: When the change was recorded.
    """

    action: str
    audit_date: date
    description: str
    item: str | None = None
    field_name: str | None = None
    old_value: object = None
    new_value: object = None
    user_id: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    id: int | None = None

    @property
    def change_magnitude(self) -> float | None:
        """Numeric difference between new and old value, when both are numbers."""
        try:
            return float(self.new_value) - float(self.old_value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None

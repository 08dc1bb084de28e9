"""
Session snapshot data model.

A Snapshot is the immutable, serializable capture of a running game:
cash, reputation, the day/hour counters, the placed machines and the
alert count shown on the dashboard.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from ..core.exceptions import SnapshotError


SNAPSHOT_FORMAT_VERSION = 1
CENTS = Decimal("0.01")
HOURS_PER_DAY = 24


def to_money(value: Any) -> Decimal:
    """Convert a number or numeric string to a cent-quantized Decimal."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if amount.is_finite():
            return amount.quantize(CENTS)
    except (InvalidOperation, ValueError) as e:
        raise SnapshotError(f"Invalid cash amount: {value!r}", cause=e)
    raise SnapshotError(f"Invalid cash amount: {value!r}")


class MachineStatus(Enum):
    """Operational status of a placed machine."""
    OK = "ok"
    LOW_STOCK = "low_stock"
    EMPTY = "empty"
    BROKEN = "broken"


@dataclass(frozen=True)
class MachineRef:
    """Identity, position and status of a placed machine."""
    machine_id: str
    name: str
    x: float = 0.0
    y: float = 0.0
    status: MachineStatus = MachineStatus.OK

    @property
    def needs_attention(self) -> bool:
        return self.status in (MachineStatus.EMPTY, MachineStatus.BROKEN)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.machine_id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MachineRef':
        try:
            return cls(
                machine_id=str(data["id"]),
                name=str(data["name"]),
                x=float(data.get("x", 0.0)),
                y=float(data.get("y", 0.0)),
                status=MachineStatus(data.get("status", MachineStatus.OK.value)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Invalid machine entry: {data!r}", cause=e)


@dataclass(frozen=True)
class Snapshot:
    """
    Serializable capture of session state.

    ``alert_count`` is optional: when it is None the alert count is derived
    from the number of empty machines.
    """
    cash: Decimal
    reputation: int = 0
    day_count: int = 1
    hour_of_day: int = 0
    machines: Tuple[MachineRef, ...] = field(default_factory=tuple)
    alert_count: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "cash", to_money(self.cash))
        object.__setattr__(self, "machines", tuple(self.machines))

        if not 0 <= self.hour_of_day < HOURS_PER_DAY:
            raise SnapshotError(f"hour_of_day must be 0-23, got {self.hour_of_day}")
        if self.day_count < 1:
            raise SnapshotError(f"day_count must be at least 1, got {self.day_count}")
        if self.alert_count is not None and self.alert_count < 0:
            raise SnapshotError(f"alert_count cannot be negative, got {self.alert_count}")

    @classmethod
    def initial(cls, starting_cash: Any) -> 'Snapshot':
        """Baseline state of a new game."""
        return cls(cash=starting_cash, reputation=0, day_count=1, hour_of_day=0)

    @property
    def alerts(self) -> int:
        """Number of alerts the dashboard should show."""
        if self.alert_count is not None:
            return self.alert_count
        return sum(1 for machine in self.machines if machine.status == MachineStatus.EMPTY)

    @property
    def time_key(self) -> Tuple[int, int]:
        """(day, hour) pair ordering snapshots in game time."""
        return (self.day_count, self.hour_of_day)

    def with_time(self, day_count: int, hour_of_day: int) -> 'Snapshot':
        return replace(self, day_count=day_count, hour_of_day=hour_of_day)

    def with_machines(self, machines: Iterable[MachineRef]) -> 'Snapshot':
        return replace(self, machines=tuple(machines))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "format_version": SNAPSHOT_FORMAT_VERSION,
            "cash": str(self.cash),
            "reputation": self.reputation,
            "day_count": self.day_count,
            "hour_of_day": self.hour_of_day,
            "machines": [machine.to_dict() for machine in self.machines],
            "alert_count": self.alert_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snapshot':
        """
        Rebuild a snapshot from ``to_dict`` output.

        Raises:
            SnapshotError: If the data is malformed or from a newer format
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot data must be an object, got {type(data).__name__}")

        version = data.get("format_version", SNAPSHOT_FORMAT_VERSION)
        if not isinstance(version, int) or version > SNAPSHOT_FORMAT_VERSION:
            raise SnapshotError(f"Unsupported snapshot format version: {version!r}",
                                context={"format_version": version})

        try:
            machines = data.get("machines") or []
            alert_count = data.get("alert_count")
            return cls(
                cash=data["cash"],
                reputation=int(data.get("reputation", 0)),
                day_count=int(data.get("day_count", 1)),
                hour_of_day=int(data.get("hour_of_day", 0)),
                machines=tuple(MachineRef.from_dict(m) for m in machines),
                alert_count=None if alert_count is None else int(alert_count),
            )
        except KeyError as e:
            raise SnapshotError(f"Snapshot is missing field {e}", cause=e)
        except (TypeError, ValueError) as e:
            raise SnapshotError(f"Snapshot has an invalid field: {e}", cause=e)

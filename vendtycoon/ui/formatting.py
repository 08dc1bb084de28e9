"""
Text shown on the status cards, banners and machine rows.
"""

from decimal import Decimal
from typing import Optional

from ..session import GameTime, MachineRef, MachineStatus


STATUS_LABELS = {
    MachineStatus.OK: "OK",
    MachineStatus.LOW_STOCK: "Low stock",
    MachineStatus.EMPTY: "Empty",
    MachineStatus.BROKEN: "Broken",
}


def format_cash(amount: Decimal) -> str:
    """Format as "$1234.50", with any minus sign before the dollar symbol."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):.2f}"


def format_day(day_count: int, hour_of_day: Optional[int] = None) -> str:
    if hour_of_day is None:
        return f"Day {day_count}"
    time = GameTime(day_count, hour_of_day)
    return f"{time.label}, {time.clock_label}"


def alert_message(alert_count: int) -> str:
    plural = "s" if alert_count > 1 else ""
    return f"Warning: {alert_count} Machine{plural} Empty!"


def machine_summary(machine: MachineRef) -> str:
    return f"{STATUS_LABELS[machine.status]} at ({machine.x:.0f}, {machine.y:.0f})"

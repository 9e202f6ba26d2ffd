"""Selectors for the inventory kernel (read side)."""

from inventory_kernel.selectors.report_selector import (
    BusiestWarehouse,
    CapacityReportRow,
    PeakProductRow,
    ReportSelector,
)

__all__ = [
    "BusiestWarehouse",
    "CapacityReportRow",
    "PeakProductRow",
    "ReportSelector",
]

"""
Inventory Kernel

A constraint-enforcing inventory core with:
- Per-warehouse capacity and allowed-category validation
- Atomic import/export operations
- Append-only transaction log
- Read-only capacity and activity reporting
"""

__version__ = "0.1.0"

"""Application layer for batesmerge.

This layer orchestrates domain logic without direct PDF or filesystem I/O.
All side effects are delegated to adapters via port interfaces.
"""

__all__ = [
    "RegenerationTarget",
    "UniteResult",
    "UniteService",
]

from batesmerge.app.unite_service import RegenerationTarget, UniteResult, UniteService

"""Port interfaces for the batesmerge application layer.

These protocol interfaces define contracts for adapters.
Domain logic depends on these ports, never on concrete implementations.
"""

__all__ = [
    "LedgerPort",
    "PDFPort",
    "StoragePort",
    "UniteRecord",
]

from batesmerge.app.ports.ledger import LedgerPort, UniteRecord
from batesmerge.app.ports.pdf import PDFPort
from batesmerge.app.ports.storage import StoragePort

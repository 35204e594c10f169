"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

from dataclasses import dataclass

from batesmerge.app import UniteService
from batesmerge.app.adapters import FileSystemStorageAdapter, PyMuPDFAdapter
from batesmerge.app.ports import LedgerPort, PDFPort, StoragePort
from batesmerge.audit.ledger import AuditLedger
from batesmerge.config import Settings, get_settings


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer.

    ``ledger_port`` is ``None`` when auditing is disabled.
    """

    settings: Settings
    unite_service: UniteService
    ledger_port: LedgerPort | None
    storage_port: StoragePort
    pdf_port: PDFPort


def _create_ledger(settings: Settings) -> LedgerPort | None:
    if not settings.audit_enabled:
        return None
    return AuditLedger(settings.get_audit_path())


def bootstrap_application(settings: Settings | None = None) -> ApplicationContainer:
    """Instantiate adapters and services for CLI consumption."""

    active_settings = settings or get_settings()

    storage = FileSystemStorageAdapter()
    pdf = PyMuPDFAdapter()
    ledger = _create_ledger(active_settings)

    return ApplicationContainer(
        settings=active_settings,
        unite_service=UniteService(pdf, storage, ledger, active_settings),
        ledger_port=ledger,
        storage_port=storage,
        pdf_port=pdf,
    )

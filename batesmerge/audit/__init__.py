"""Append-only audit trail for united file generation."""

from batesmerge.audit.ledger import GENESIS_HASH, AuditLedger, LedgerEntry

__all__ = ["GENESIS_HASH", "AuditLedger", "LedgerEntry"]

"""Domain layer for envelopesync.

Services are loaded lazily: the source adapters import the domain entities,
and the import service imports the adapters.
"""

_EXPORTS = {
    "ImportService": "envelopesync.domain.import_service",
    "ImportLedger": "envelopesync.domain.import_ledger",
    "ReconciliationEngine": "envelopesync.domain.reconciliation",
    "TransactionService": "envelopesync.domain.transaction",
    "CredentialVault": "envelopesync.domain.vault",
}

__all__ = list(_EXPORTS)


def __getattr__(name):
    if name in _EXPORTS:
        from importlib import import_module

        return getattr(import_module(_EXPORTS[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

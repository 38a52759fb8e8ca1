"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist for the owner."""


class OwnershipError(DomainError):
    """Referenced entity belongs to a different owner."""


class ConfigurationError(DomainError):
    """Required configuration is missing or unusable."""


class ImportSourceError(DomainError):
    """Failure raised by a source adapter; terminal for the import run."""


class UntrustedSetupTokenError(ImportSourceError):
    """Setup token decodes to a claim URL failing scheme, host or path checks."""


class MalformedAccessUrlError(ImportSourceError):
    """Decrypted access URL does not carry embedded Basic-auth credentials."""


class UpstreamError(ImportSourceError):
    """Aggregator returned a non-2xx response or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(ImportSourceError):
    """Import payload (JSON or CSV) could not be parsed."""


class VaultError(DomainError):
    """Base class for credential vault failures."""


class InvalidCiphertextFormatError(VaultError):
    """Ciphertext is not in the nonce:tag:payload form."""


class AuthenticationFailedError(VaultError):
    """Authentication tag did not verify (tampered data or wrong key)."""


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category."""
    return f"Category {category_id} not found"


def connection_not_found(connection_id: str) -> str:
    """Return message for missing SimpleFIN connection."""
    return f"SimpleFIN connection {connection_id} not found"


def owner_mismatch(kind: str, entity_id: str) -> str:
    """Return message when an entity is referenced across owners."""
    return f"{kind.capitalize()} {entity_id} does not belong to this owner"


def invalid_choice(field: str, value: str, allowed: tuple[str, ...]) -> str:
    """Return message for a value outside an enumerated set."""
    return f"Invalid {field} '{value}'. Must be one of: {', '.join(allowed)}"

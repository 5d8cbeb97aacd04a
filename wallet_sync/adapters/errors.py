"""Project-native typed exceptions for Edenred and Wallet adapter failures.

Every network step of a sync run maps its failure to one of these types with
a step-specific reason, so steps that hit the same endpoint shape stay
distinguishable. None of them are retried.
"""

from __future__ import annotations


class SyncAdapterError(Exception):
    """Base exception for adapter-level sync failures.

    Attributes:
        reason: Human-readable reason naming the failed step.
        stage: Pipeline stage that failed.
        stage_timeline: Stage events recorded up to the failure.
    """

    def __init__(
        self,
        reason: str,
        stage: str | None = None,
        stage_timeline: list[dict[str, object]] | None = None,
    ):
        super().__init__(reason)
        self.reason = reason
        self.stage = stage
        self.stage_timeline = list(stage_timeline or [])


class AuthenticationError(SyncAdapterError, PermissionError):
    """Login rejected or the response lacked the expected session artifacts."""


class IdentityLookupError(SyncAdapterError, LookupError):
    """Account or card identifier could not be resolved after login."""


class BatchListError(SyncAdapterError, LookupError):
    """Wallet import batch list could not be retrieved or decoded."""


class MovementFetchError(SyncAdapterError, ConnectionError):
    """Edenred account movement list could not be retrieved."""


class UploadError(SyncAdapterError, ConnectionError):
    """Batch file upload to Wallet failed."""


class ImportConfigurationError(SyncAdapterError, RuntimeError):
    """Format configuration message for an uploaded batch was rejected."""


class BatchFileValidationError(SyncAdapterError, ValueError):
    """Local inputs are invalid; raised before any network call is made."""


class CredentialsValidationError(BatchFileValidationError):
    """Host or credentials are missing."""

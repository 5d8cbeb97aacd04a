"""Adapter layer package for Edenred and Wallet integration boundaries."""

from wallet_sync.domain import TrimParseWarning

from .budgetbakers_sink import (
	DEFAULT_BUDGETBAKERS_API_BASE_URL,
	DEFAULT_BUDGETBAKERS_UPLOAD_URL,
	BudgetBakersSinkAdapter,
	SinkAdapterLogger,
)
from .edenred_source import EdenredSourceAdapter, SourceAdapterLogger
from .errors import (
	AuthenticationError,
	BatchFileValidationError,
	BatchListError,
	CredentialsValidationError,
	IdentityLookupError,
	ImportConfigurationError,
	MovementFetchError,
	SyncAdapterError,
	UploadError,
)
from .interfaces import (
	SINK_STATUS_IMPORTED,
	SINK_STATUS_UP_TO_DATE,
	ImportBatch,
	SinkAdapterPort,
	SinkUploadResult,
	SourceAdapterPort,
)
from .session import AuthenticatedSession, session_extract_cookie, session_send_request

__all__ = [
	"DEFAULT_BUDGETBAKERS_API_BASE_URL",
	"DEFAULT_BUDGETBAKERS_UPLOAD_URL",
	"SINK_STATUS_IMPORTED",
	"SINK_STATUS_UP_TO_DATE",
	"AuthenticatedSession",
	"AuthenticationError",
	"BatchFileValidationError",
	"BatchListError",
	"BudgetBakersSinkAdapter",
	"CredentialsValidationError",
	"EdenredSourceAdapter",
	"IdentityLookupError",
	"ImportBatch",
	"ImportConfigurationError",
	"MovementFetchError",
	"SinkAdapterLogger",
	"SinkAdapterPort",
	"SinkUploadResult",
	"SourceAdapterLogger",
	"SourceAdapterPort",
	"SyncAdapterError",
	"TrimParseWarning",
	"UploadError",
	"session_extract_cookie",
	"session_send_request",
]

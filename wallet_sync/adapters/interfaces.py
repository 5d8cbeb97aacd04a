"""Typed interfaces for adapter-layer responsibilities."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from typing import Protocol


SINK_STATUS_IMPORTED = "imported"
SINK_STATUS_UP_TO_DATE = "up_to_date"


@dataclass(frozen=True)
class ImportBatch:
    """One batch Wallet already tracks.

    Attributes:
        batch_id: Server-assigned opaque batch identifier.
        file_name: Original filename of the uploaded CSV.
    """

    batch_id: str
    file_name: str | None


@dataclass(frozen=True)
class SinkUploadResult:
    """Result contract for Wallet upload operations.

    Attributes:
        status: `imported` or `up_to_date`.
        message: Human-readable outcome.
        batch_id: Identifier of the configured batch when a file was imported.
        stage_timeline: Structured stage timeline entries captured by adapter.
    """

    status: str
    message: str
    batch_id: str | None = None
    stage_timeline: list[dict[str, Any]] = field(default_factory=list)


class SourceAdapterPort(Protocol):
    """Port definition for fetching raw account movements from Edenred."""

    def adapter_source_name(self) -> str:
        """Return adapter source identifier for diagnostics.

        Returns:
            str: Human-readable upstream source identifier.

        Raises:
            RuntimeError: Raised when source metadata is unavailable.
        """

    def source_fetch_movements(self, host: str, user_id: str, password: str) -> list[dict[str, Any]]:
        """Fetch the raw movement list of the first card on the account.

        Args:
            host: Edenred API base URL.
            user_id: Edenred login identifier.
            password: Edenred password.

        Returns:
            list[dict[str, Any]]: Raw movement records.

        Raises:
            SyncAdapterError: Raised with a step-specific reason when any step fails.
        """


class SinkAdapterPort(Protocol):
    """Port definition for importing batch files into Wallet."""

    def adapter_sink_name(self) -> str:
        """Return adapter sink identifier for diagnostics.

        Returns:
            str: Human-readable downstream sink identifier.

        Raises:
            RuntimeError: Raised when sink metadata is unavailable.
        """

    def sink_upload_batch_file(
        self,
        file_path: Path,
        email: str,
        password: str,
        only_new_rows: bool = False,
    ) -> SinkUploadResult:
        """Upload one batch file and configure its import.

        Args:
            file_path: Local batch file path.
            email: Wallet login email.
            password: Wallet password.
            only_new_rows: Trim rows already covered by the last imported batch.

        Returns:
            SinkUploadResult: Import outcome.

        Raises:
            SyncAdapterError: Raised with a step-specific reason when any step fails.
        """

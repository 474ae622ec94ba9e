"""History recorder contract and backend selection."""

import logging
from typing import List, Optional

from core.utils import DetectionResult, HistoryRecord, IdentityProvider, OperationResult

logger = logging.getLogger(__name__)


class HistoryRecorder:
    """Persists detection results per user.

    save() creates a new record on every call. list() returns a snapshot,
    newest first, and raises BackendError when the store cannot be read.
    delete() fails (success=False) for a missing or not-owned record.
    """

    def save(self, user_id: str, result: DetectionResult) -> OperationResult:
        raise NotImplementedError

    def list(self, user_id: str) -> List[HistoryRecord]:
        raise NotImplementedError

    def delete(self, record_id: str) -> OperationResult:
        raise NotImplementedError


def create_history_recorder(config, client=None, identity: Optional[IdentityProvider] = None) -> Optional[HistoryRecorder]:
    """Build the recorder selected by config.

    Returns None when history is unavailable (Supabase selected but not
    configured).
    """
    if config.history_backend == "local":
        from core.history_db import LocalHistoryRecorder
        return LocalHistoryRecorder(identity=identity)

    if client is None:
        logger.warning("Supabase is not configured; history is disabled")
        return None

    from core.cloud_history import SupabaseHistoryRecorder
    from core.storage_service import LeafImageStorage
    return SupabaseHistoryRecorder(
        client, storage=LeafImageStorage(client, bucket=config.storage_bucket)
    )

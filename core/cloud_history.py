"""Detection history stored in the Supabase ``detections`` table."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.errors import BackendError
from core.history_recorder import HistoryRecorder
from core.storage_service import LeafImageStorage
from core.utils import (
    DetectionResult,
    HistoryRecord,
    OperationResult,
    is_remote_url,
    stored_severity,
)

logger = logging.getLogger(__name__)


class SupabaseHistoryRecorder(HistoryRecorder):
    """History recorder backed by Supabase.

    Ownership is enforced by row-level security on the table: a delete of
    someone else's record affects zero rows, which is reported as an error.
    """

    def __init__(self, client, storage: Optional[LeafImageStorage] = None, table: str = "detections"):
        self._client = client
        self._storage = storage
        self._table = table

    def save(self, user_id: str, result: DetectionResult) -> OperationResult:
        if not user_id:
            return OperationResult.failed("A signed-in user is required to save history")

        image_url = result.source_image_reference
        uploaded = False
        if self._storage and image_url and not is_remote_url(image_url) and Path(image_url).is_file():
            try:
                image_url = self._storage.upload(image_url, user_id)
            except BackendError as exc:
                return OperationResult.failed(str(exc))
            uploaded = True

        row = {
            "user_id": user_id,
            "disease_name": result.disease_name,
            "confidence_level": result.confidence_level,
            "severity": result.severity.value,
            "image_url": image_url,
            "recommendations": result.recommendations_text(),
        }
        try:
            response = self._client.table(self._table).insert(row).execute()
        except Exception as exc:
            logger.error("Insert into %s failed: %s", self._table, exc)
            if uploaded:
                self._remove_orphan(image_url)
            return OperationResult.failed(str(exc))

        if not response.data:
            if uploaded:
                self._remove_orphan(image_url)
            return OperationResult.failed("The backend did not return the saved record")
        record = self._row_to_record(response.data[0])
        logger.info("Saved detection %s for %s", record.id, user_id)
        return OperationResult.ok(record)

    def list(self, user_id: str) -> List[HistoryRecord]:
        try:
            response = (
                self._client.table(self._table)
                .select("*")
                .eq("user_id", user_id)
                .order("detected_at", desc=True)
                .execute()
            )
        except Exception as exc:
            logger.error("Loading history failed: %s", exc)
            raise BackendError(f"Could not load history: {exc}") from exc
        return [self._row_to_record(row) for row in response.data or []]

    def delete(self, record_id: str) -> OperationResult:
        try:
            response = self._client.table(self._table).delete().eq("id", record_id).execute()
        except Exception as exc:
            logger.error("Deleting record %s failed: %s", record_id, exc)
            return OperationResult.failed(str(exc))

        if not response.data:
            return OperationResult.failed("Record not found or not owned by the current user")

        image_url = response.data[0].get("image_url") or ""
        if self._storage and image_url and not self._storage.delete(image_url):
            logger.warning("Stored image for record %s was not removed", record_id)
        return OperationResult.ok()

    def _remove_orphan(self, image_url: str):
        if not self._storage.delete(image_url):
            logger.warning("Uploaded image %s was left in storage after a failed save", image_url)

    @staticmethod
    def _row_to_record(row: Dict[str, Any]) -> HistoryRecord:
        return HistoryRecord(
            id=str(row["id"]),
            user_id=str(row.get("user_id") or ""),
            disease_name=row.get("disease_name") or "",
            confidence_level=int(round(float(row.get("confidence_level") or 0))),
            severity=stored_severity(row.get("severity")),
            image_url=row.get("image_url") or "",
            detected_at=row.get("detected_at") or "",
            recommendations=row.get("recommendations") or "",
        )

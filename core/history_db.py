"""SQLite history store for on-device detection records."""

import logging
import shutil
import sqlite3
import uuid
from pathlib import Path
from typing import List, Optional

from core.errors import BackendError
from core.history_recorder import HistoryRecorder
from core.image_preprocessor import ImagePreprocessor
from core.utils import (
    DetectionResult,
    HistoryRecord,
    IdentityProvider,
    OperationResult,
    get_history_db_path,
    get_history_image_dir,
    is_remote_url,
    stored_severity,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


class LocalHistoryRecorder(HistoryRecorder):
    """Stores detection records in a local SQLite file.

    Deletes only touch rows owned by the user returned by `identity`, so a
    missing identity or someone else's record fails the same way a missing
    record does.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        identity: Optional[IdentityProvider] = None,
        image_dir: Optional[str] = None,
    ):
        self._db_path = db_path or str(get_history_db_path())
        self._identity = identity or (lambda: None)
        self._image_dir = Path(image_dir) if image_dir else get_history_image_dir()
        self._init_db()

    def _init_db(self):
        """Create the detections table if it doesn't exist."""
        with sqlite3.connect(self._db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS detections (
                    id TEXT PRIMARY KEY,
                    seq INTEGER NOT NULL,
                    user_id TEXT NOT NULL,
                    disease_name TEXT NOT NULL,
                    confidence_level INTEGER NOT NULL,
                    severity TEXT NOT NULL,
                    image_url TEXT NOT NULL DEFAULT '',
                    recommendations TEXT NOT NULL DEFAULT '',
                    detected_at TEXT NOT NULL,
                    thumbnail BLOB
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_detections_user ON detections (user_id, seq)"
            )

    def save(self, user_id: str, result: DetectionResult) -> OperationResult:
        """Insert a new record for user_id. Every call creates a new row.

        A local source image is copied next to the database, since camera
        captures are removed once the workflow releases them.
        """
        if not user_id:
            return OperationResult.failed("A signed-in user is required to save history")

        record_id = uuid.uuid4().hex
        reference = result.source_image_reference
        record = HistoryRecord(
            id=record_id,
            user_id=user_id,
            disease_name=result.disease_name,
            confidence_level=result.confidence_level,
            severity=result.severity,
            image_url=self._keep_image(record_id, reference),
            detected_at=utc_now_iso(),
            recommendations=result.recommendations_text(),
            thumbnail=self._thumbnail_for(reference),
        )

        try:
            with sqlite3.connect(self._db_path) as conn:
                conn.execute(
                    """INSERT INTO detections
                       (id, seq, user_id, disease_name, confidence_level, severity,
                        image_url, recommendations, detected_at, thumbnail)
                       VALUES (?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM detections),
                               ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        record.id,
                        record.user_id,
                        record.disease_name,
                        record.confidence_level,
                        record.severity.value,
                        record.image_url,
                        record.recommendations,
                        record.detected_at,
                        record.thumbnail,
                    ),
                )
        except sqlite3.Error as exc:
            logger.error("Could not save detection locally: %s", exc)
            self._discard_image(record.image_url)
            return OperationResult.failed(str(exc))

        logger.info("Saved detection %s for %s", record.id, user_id)
        return OperationResult.ok(record)

    def list(self, user_id: str) -> List[HistoryRecord]:
        """All records for user_id, newest first."""
        try:
            with sqlite3.connect(self._db_path) as conn:
                rows = conn.execute(
                    """SELECT id, user_id, disease_name, confidence_level, severity,
                              image_url, detected_at, recommendations, thumbnail
                       FROM detections WHERE user_id = ? ORDER BY seq DESC""",
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise BackendError(f"Could not read local history: {exc}") from exc
        return [self._row_to_record(row) for row in rows]

    def delete(self, record_id: str) -> OperationResult:
        """Delete one of the current user's records."""
        owner = self._identity()
        if not owner:
            return OperationResult.failed("A signed-in user is required to delete history")

        try:
            with sqlite3.connect(self._db_path) as conn:
                row = conn.execute(
                    "SELECT image_url FROM detections WHERE id = ? AND user_id = ?",
                    (record_id, owner),
                ).fetchone()
                if row is None:
                    return OperationResult.failed("Record not found or not owned by the current user")
                conn.execute(
                    "DELETE FROM detections WHERE id = ? AND user_id = ?",
                    (record_id, owner),
                )
        except sqlite3.Error as exc:
            logger.error("Could not delete local record %s: %s", record_id, exc)
            return OperationResult.failed(str(exc))

        self._discard_image(row[0])
        return OperationResult.ok()

    def _keep_image(self, record_id: str, reference: str) -> str:
        """Copy a local image into the history image dir; remote URLs pass through."""
        if not reference or is_remote_url(reference):
            return reference or ""
        source = Path(reference)
        if not source.is_file():
            return ""
        target = self._image_dir / f"{record_id}{source.suffix.lower()}"
        try:
            shutil.copyfile(source, target)
        except OSError as exc:
            logger.warning("Could not keep a copy of %s: %s", reference, exc)
            return ""
        return str(target)

    def _discard_image(self, image_url: str):
        if not image_url or is_remote_url(image_url):
            return
        path = Path(image_url)
        if path.parent != self._image_dir:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove %s: %s", path, exc)

    @staticmethod
    def _thumbnail_for(reference: str) -> bytes:
        if not reference or is_remote_url(reference) or not Path(reference).is_file():
            return b""
        try:
            return ImagePreprocessor.create_thumbnail(reference)
        except OSError as exc:
            logger.warning("Could not create history thumbnail: %s", exc)
            return b""

    @staticmethod
    def _row_to_record(row) -> HistoryRecord:
        """Convert a database row to a HistoryRecord."""
        return HistoryRecord(
            id=row[0],
            user_id=row[1],
            disease_name=row[2],
            confidence_level=row[3],
            severity=stored_severity(row[4]),
            image_url=row[5],
            detected_at=row[6],
            recommendations=row[7],
            thumbnail=row[8] or b"",
        )

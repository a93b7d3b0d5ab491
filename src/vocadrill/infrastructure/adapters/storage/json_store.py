"""
JSON file repository: infrastructure adapter for local storage.

Implements ReviewRepository with two JSON documents in a data directory:
review_items.json (the current item snapshot) and study_history.json
(the append-only session log).
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from vocadrill.domain.constants import (
    REVIEW_ITEMS_FILE,
    STORAGE_FORMAT_VERSION,
    STUDY_HISTORY_FILE,
)
from vocadrill.domain.errors import StorageError
from vocadrill.domain.review.models import ReviewItem, StudySession
from vocadrill.domain.review.ports import ReviewRepository

from .records import (
    ReviewItemRecord,
    StudySessionRecord,
    parse_review_items,
    parse_study_sessions,
)

logger = logging.getLogger(__name__)


class JsonFileReviewRepository(ReviewRepository):
    """
    Stores review items and study history as JSON files.

    Writes go to a temp file that replaces the target atomically, so readers
    never see a half-written document. Writers inside one process are
    serialized; across processes the last writer wins.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.items_path = self.data_dir / REVIEW_ITEMS_FILE
        self.history_path = self.data_dir / STUDY_HISTORY_FILE
        self._lock = asyncio.Lock()

    async def load_review_items(self) -> list[ReviewItem]:
        raw = await asyncio.to_thread(self._read_records, self.items_path, "items")
        items = parse_review_items(raw)
        if len(items) != len(raw):
            logger.warning(
                f"Loaded {len(items)}/{len(raw)} review records from {self.items_path}"
            )
        return items

    async def save_review_items(self, items: list[ReviewItem]) -> None:
        payload = {
            "version": STORAGE_FORMAT_VERSION,
            "items": [ReviewItemRecord.from_domain(item).to_json() for item in items],
        }
        async with self._lock:
            await asyncio.to_thread(self._write_document, self.items_path, payload)
        logger.debug(f"Saved {len(items)} review items to {self.items_path}")

    async def get_study_history(self) -> list[StudySession]:
        raw = await asyncio.to_thread(self._read_records, self.history_path, "sessions")
        return parse_study_sessions(raw)

    async def add_study_session(self, session: StudySession) -> None:
        async with self._lock:
            raw = await asyncio.to_thread(self._read_records, self.history_path, "sessions")
            raw.append(StudySessionRecord.from_domain(session).model_dump(mode="json"))
            await asyncio.to_thread(
                self._write_document,
                self.history_path,
                {"version": STORAGE_FORMAT_VERSION, "sessions": raw},
            )

    def _read_records(self, path: Path, key: str) -> list[Any]:
        """
        Read the record list stored under `key`.

        A missing file is an empty set. A bare JSON list is accepted too.

        Raises:
            StorageError: If the file exists but cannot be read or parsed.
        """
        if not path.exists():
            return []

        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt JSON in {path}: {e}") from e

        if isinstance(document, list):
            return document
        if isinstance(document, dict) and isinstance(document.get(key), list):
            return document[key]

        raise StorageError(f"Unexpected document layout in {path}: missing '{key}' list")

    def _write_document(self, path: Path, payload: dict[str, Any]) -> None:
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(payload, tmp, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Could not write {path}: {e}") from e

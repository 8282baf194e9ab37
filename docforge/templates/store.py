"""Storage and retrieval of user-defined custom patterns."""

import json
import logging
import re
import threading
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from docforge.templates.schema import CustomPattern, new_id

logger = logging.getLogger(__name__)

# Ids double as file names; anything else never touches the disk
SAFE_ID_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]*")


class CustomPatternStore:
    """Custom patterns kept in memory over an optional on-disk store.

    The in-memory map is a cache: a miss falls back to the JSON file for
    that id, so patterns written by another process are still found.
    """

    def __init__(self, storage_path: Path | str | None = None) -> None:
        """Initialize the store.

        Args:
            storage_path: Optional directory for file-based persistence.
        """
        self._patterns: dict[str, CustomPattern] = {}
        self._storage_path = Path(storage_path) if storage_path else None
        self._lock = threading.Lock()

        if self._storage_path:
            self._storage_path.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def save(self, pattern: CustomPattern) -> str:
        """Save a custom pattern.

        Args:
            pattern: Pattern to save.

        Returns:
            Pattern ID.
        """
        if not pattern.id:
            pattern = pattern.model_copy(update={"id": new_id("custom")})
        if self._storage_path and self._file_for(pattern.id) is None:
            raise ValueError(f"Invalid custom pattern id: {pattern.id!r}")

        with self._lock:
            self._patterns[pattern.id] = pattern
            if self._storage_path:
                self._save_to_disk(pattern)

        return pattern.id

    def get(self, pattern_id: str) -> CustomPattern | None:
        """Get a custom pattern by ID, falling back to disk on a cache miss."""
        with self._lock:
            pattern = self._patterns.get(pattern_id)
            file_path = self._file_for(pattern_id)
            if pattern is None and file_path is not None:
                pattern = self._read_file(file_path)
                if pattern is not None:
                    self._patterns[pattern.id] = pattern
            return pattern

    def delete(self, pattern_id: str) -> bool:
        """Delete a custom pattern.

        Returns:
            True if deleted, False if not found.
        """
        with self._lock:
            found = self._patterns.pop(pattern_id, None) is not None
            file_path = self._file_for(pattern_id)
            if file_path is not None:
                if file_path.exists():
                    file_path.unlink()
                    found = True
            return found

    def list_all(self) -> list[CustomPattern]:
        with self._lock:
            return list(self._patterns.values())

    def list_for_user(self, user_id: str | None = None, include_public: bool = True) -> list[CustomPattern]:
        """Patterns created by ``user_id`` plus, optionally, every public one.

        With no user, only public patterns are returned.
        """
        return [
            p for p in self.list_all()
            if (user_id is not None and p.created_by == user_id) or (include_public and p.is_public)
        ]

    def count(self) -> int:
        return len(self._patterns)

    def clear(self) -> None:
        """Clear all patterns. Use for testing."""
        with self._lock:
            self._patterns.clear()
            if self._storage_path:
                for file in self._storage_path.glob("*.json"):
                    file.unlink()

    def _file_for(self, pattern_id: str) -> Path | None:
        """JSON file for ``pattern_id``; None without storage or for unsafe ids."""
        if not self._storage_path or not SAFE_ID_RE.fullmatch(pattern_id):
            return None
        return self._storage_path / f"{pattern_id}.json"

    def _save_to_disk(self, pattern: CustomPattern) -> None:
        file_path = self._file_for(pattern.id)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(pattern.model_dump(mode="json"), f, indent=2)

    def _read_file(self, file_path: Path) -> CustomPattern | None:
        if not file_path.exists():
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return CustomPattern(**json.load(f))
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            logger.error("Error loading custom pattern %s: %s", file_path, e)
            return None

    def _load_from_disk(self) -> None:
        for file_path in self._storage_path.glob("*.json"):
            pattern = self._read_file(file_path)
            if pattern is not None:
                self._patterns[pattern.id] = pattern


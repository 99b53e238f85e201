"""
Local key-value persistence and the style profile store.

LocalKeyValueStore keeps one JSON object on disk (one key per record) and
replaces the file atomically on every write. StyleProfileStore reads and
writes the StyleProfile under a fixed key. A missing or unreadable record
always loads as the empty profile.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
from pydantic import ValidationError

from .models import StyleProfile

logger = structlog.get_logger()

STYLE_PROFILE_KEY = "brandProfile"
STORE_FILENAME = "local_storage.json"
DEFAULT_DATA_DIR = Path.home() / ".legal_content_studio"


def default_store_path() -> Path:
    """Store file location: $STUDIO_DATA_DIR/local_storage.json or the home default."""
    data_dir = os.environ.get("STUDIO_DATA_DIR")
    base = Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR
    return base / STORE_FILENAME


class LocalKeyValueStore:
    """
    Small persistent key-value store backed by a single JSON file.

    Values are raw strings, the same contract as browser localStorage.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else default_store_path()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("kv_store_read_error", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("kv_store_not_an_object", path=str(self.path))
            return {}
        return data

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".kv-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class StyleProfileStore:
    """Loads and saves the single StyleProfile record."""

    def __init__(self, kv_store: Optional[LocalKeyValueStore] = None, key: str = STYLE_PROFILE_KEY):
        self.kv_store = kv_store or LocalKeyValueStore()
        self.key = key

    def load(self) -> StyleProfile:
        """Return the saved profile, or the empty profile if none/corrupt."""
        raw = self.kv_store.get_item(self.key)
        if raw is None:
            return StyleProfile()
        try:
            return StyleProfile.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("style_profile_corrupt", key=self.key, error=str(e)[:200])
            return StyleProfile()

    def save(self, profile: StyleProfile) -> None:
        self.kv_store.set_item(self.key, profile.model_dump_json(by_alias=True))
        logger.info(
            "style_profile_saved",
            has_voice=bool(profile.voice_description),
            has_audience=bool(profile.target_audience),
            has_instructions=bool(profile.custom_instructions),
        )

    def clear(self) -> None:
        self.kv_store.remove_item(self.key)
        logger.info("style_profile_cleared", key=self.key)

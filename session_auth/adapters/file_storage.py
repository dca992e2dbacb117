"""
File Storage Adapter - JSON file on local disk.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union
from session_auth.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)


class FileStorageAdapter(StoragePort):
    """
    File-backed storage.

    All keys live in one JSON object. Every write rewrites the file through
    a temporary file and os.replace, so readers see either the old or the
    new content. The file is created with 0600 permissions.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file storage adapter.

        Args:
            path: Location of the JSON file (~ is expanded)
        """
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        """Read the whole file. Missing or unreadable files count as empty."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning(f"Could not read storage file {self._path}: {e}")
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Storage file {self._path} is not valid JSON, ignoring it: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Storage file {self._path} does not hold an object, ignoring it")
            return {}

        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._path.parent),
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def keys(self) -> List[str]:
        return list(self._load())

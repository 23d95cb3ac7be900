import json
import os
import tempfile
import threading
from typing import Any, Dict, List, Optional

from loguru import logger

try:  # pragma: no cover
    from .config import get_data_file
    from .errors import PersistenceError
except Exception:  # pragma: no cover
    from config import get_data_file
    from errors import PersistenceError


class SyncStore:
    """
    Sync records kept in a single JSON array file plus an in-process list.

    The file is the source of truth. The in-process list holds every record
    added since this process started, so the admin view still shows them when
    a file write failed. It is dropped on restart.

    The load-append-save cycle is serialised inside one process only; several
    processes writing the same file can still lose records.
    """

    def __init__(self, data_file: str):
        self.data_file = data_file
        self._session: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def load(self) -> List[Dict[str, Any]]:
        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable data file {self.data_file}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Ignoring data file {self.data_file}: expected a JSON array")
            return []
        return data

    def _file_mode(self) -> int:
        try:
            return os.stat(self.data_file).st_mode & 0o777
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def _save(self, records: List[Dict[str, Any]]) -> None:
        directory = os.path.dirname(self.data_file) or "."
        tmp_path: Optional[str] = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".data-", suffix=".json", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.chmod(tmp_path, self._file_mode())
            os.replace(tmp_path, self.data_file)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"Failed to write {self.data_file}: {e}") from e

    def append(self, record: Dict[str, Any]) -> None:
        with self._lock:
            records = self.load()
            records.append(record)
            self._save(records)

    def add(self, record: Dict[str, Any]) -> None:
        """Remember `record` for this process, then append it to the file."""
        self._session.append(record)
        self.append(record)

    @property
    def session_records(self) -> List[Dict[str, Any]]:
        return list(self._session)

    def all_records(self) -> List[Dict[str, Any]]:
        persisted = self.load()
        pending = [r for r in self._session if r not in persisted]
        return persisted + pending


_store: Optional[SyncStore] = None


def get_store() -> SyncStore:
    global _store
    if _store is None:
        _store = SyncStore(get_data_file())
    return _store

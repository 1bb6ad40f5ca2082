import posixpath
from typing import Dict, List, Optional

from file_stores.base import FileHandle, FileLookup


class InMemoryFileStore:
    """
    Dict-backed store for tests and the stub self-test.

    `lookups` records every requested id and is never trimmed; call `clear_lookups()`
    between runs in long-lived processes.
    """

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, bytes] = dict(files or {})
        self.lookups: List[str] = []

    def clear_lookups(self) -> None:
        self.lookups.clear()

    def put(self, file_id: str, content: bytes) -> None:
        self.files[file_id] = content

    def get_file(self, file_id: str) -> FileLookup:
        self.lookups.append(file_id)
        content = self.files.get(file_id)
        if content is None:
            return FileLookup(file_id=file_id, error=f"File not found: {file_id}")
        return FileLookup(file_id=file_id, handle=FileHandle(file_id=file_id, name=posixpath.basename(file_id), content=content))

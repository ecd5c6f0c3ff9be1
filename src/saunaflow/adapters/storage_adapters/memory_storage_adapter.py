from typing import Optional

from saunaflow.core.ports.storage_port import StoragePort


class InMemoryStorageAdapter(StoragePort):
    """Dictionary-backed storage for tests and throwaway runs."""

    def __init__(self, initial: Optional[dict] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

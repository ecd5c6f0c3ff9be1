from abc import ABC, abstractmethod
from typing import Optional


class StoragePort(ABC):
    """Flat string key/value store used for the profile and the session history."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string or None when the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget every key."""
        pass

"""Counter store interface.

The check engine talks to storage only through this abstraction. A backend
must provide an atomic "get or seed with expiration" and an atomic increment;
any consistency beyond that is up to the backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Union

Seed = Union[int, Callable[[], int]]


def resolve_seed(seed: Seed) -> int:
    """Return the initial counter value for a seed constant or factory."""
    return int(seed() if callable(seed) else seed)


class AbstractCounterStore(ABC):
    """Interface for hit counter backends."""

    @abstractmethod
    def fetch(self, key: str, *, expires_in: int, seed: Seed = 0) -> int:
        """Return the hit count stored under ``key``.

        When the key is absent it is created with the seed value and set to
        expire after ``expires_in`` seconds, and the seed is returned. The
        value returned counts hits made before this call only.

        Args:
            key: Window-aligned storage key.
            expires_in: Seconds until the current window ends.
            seed: Initial count, or a nullary callable producing it.

        Returns:
            Current hit count.

        Raises:
            StorageError: If the backend cannot be reached.
        """
        raise NotImplementedError

    @abstractmethod
    def increment(self, key: str) -> None:
        """Atomically add one hit to ``key``.

        An absent key (expired since the matching fetch) is not an error.

        Raises:
            StorageError: If the backend cannot be reached.
        """
        raise NotImplementedError

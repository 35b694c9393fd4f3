"""Rate Limit Store Port Interface."""

from abc import ABC, abstractmethod


class RateLimitStorePort(ABC):
    """Abstract interface for per-key sliding-window request counters.

    Swapping the in-memory store for a distributed one does not change the
    guardrails contract.
    """

    @abstractmethod
    def hit(self, key: str, limit: int, window_ms: float) -> bool:
        """Record a request for ``key`` if allowed.

        Timestamps at least ``window_ms`` milliseconds old are discarded
        first. Returns False (and records nothing) when ``limit`` requests
        remain in the window, True otherwise.
        """
        ...

    @abstractmethod
    def reset(self, key: str) -> None:
        """Forget all requests for ``key``."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Forget all requests for every key."""
        ...

    @abstractmethod
    def active_keys(self) -> int:
        """Number of keys currently tracked."""
        ...

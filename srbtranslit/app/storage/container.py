"""
Store container for dependency injection.

Provides a single point of access to the persisted stores, enabling:
- Lazy initialization of the configured backend
- Easy substitution of an in-memory backend for tests
- One shared backend for the rule and throttle stores
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from ..utils.config import get_config

if TYPE_CHECKING:
    from .backends import KeyValueStore
    from .rules import RuleStore
    from .throttle import ThrottleStore


@dataclass
class StoreContainer:
    """
    Dependency injection container for stores.

    Stores are lazily initialized on first access.
    """

    backend: Optional["KeyValueStore"] = None
    _rule_store: Optional["RuleStore"] = field(default=None, init=False)
    _throttle_store: Optional["ThrottleStore"] = field(default=None, init=False)

    def __post_init__(self):
        if self.backend is None:
            from .backends import DatabaseStore, MemoryStore

            config = get_config().storage
            if config.backend == "memory":
                self.backend = MemoryStore()
            else:
                self.backend = DatabaseStore(config.dsn)

    @property
    def rules(self) -> "RuleStore":
        """Get rule store (lazy initialized)."""
        if self._rule_store is None:
            from .rules import RuleStore
            self._rule_store = RuleStore(
                self.backend,
                known_second_level=get_config().domains.known_second_level,
            )
        return self._rule_store

    @property
    def throttle(self) -> "ThrottleStore":
        """Get throttle store (lazy initialized)."""
        if self._throttle_store is None:
            from .throttle import ThrottleStore
            self._throttle_store = ThrottleStore(self.backend)
        return self._throttle_store


# Global singleton instance
_container: Optional[StoreContainer] = None


def get_stores() -> StoreContainer:
    """
    Get the global store container singleton.

    Returns:
        The shared StoreContainer instance.
    """
    global _container
    if _container is None:
        _container = StoreContainer()
    return _container


def reset_stores() -> None:
    """
    Reset the global store container (for testing).
    """
    global _container
    _container = None

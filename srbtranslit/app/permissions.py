"""
Host permission checks and requests.

The platform owns the grant set; this module only reads it and asks the
user for more. Requests must come straight from a user action (a click or
a menu selection). Navigation handlers only ever check.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, Set

from .domains import origin_patterns
from .exceptions import StorageError
from .storage.throttle import ThrottleStore
from .utils.config import get_config
from .utils.logger import get_logger

logger = get_logger("permissions")


class PermissionHost(ABC):
    """The platform's record of granted origin patterns."""

    @abstractmethod
    async def contains(self, origins: List[str]) -> bool:
        """True when every listed origin pattern is granted."""

    @abstractmethod
    async def request(self, origins: List[str]) -> bool:
        """Prompt the user for the origins; True when granted."""


class GrantSet(PermissionHost):
    """In-process grant set. ``prompt`` stands in for the user answering a request."""

    def __init__(
        self,
        granted: Optional[Iterable[str]] = None,
        prompt: Optional[Callable[[List[str]], bool]] = None,
    ):
        self.granted: Set[str] = set(granted or ())
        self.prompt = prompt
        self.requests: List[List[str]] = []

    async def contains(self, origins: List[str]) -> bool:
        return all(origin in self.granted for origin in origins)

    async def request(self, origins: List[str]) -> bool:
        self.requests.append(list(origins))
        answer = bool(self.prompt(list(origins))) if self.prompt else False
        if answer:
            self.granted.update(origins)
        return answer

    def grant(self, *origins: str) -> None:
        self.granted.update(origins)

    def revoke(self, *origins: str) -> None:
        self.granted.difference_update(origins)


class PermissionGatekeeper:
    def __init__(
        self,
        host: PermissionHost,
        throttle: Optional[ThrottleStore] = None,
        fallback_requests: Optional[bool] = None,
    ):
        self.host = host
        self.throttle = throttle
        if fallback_requests is None:
            fallback_requests = get_config().permissions.fallback_requests
        self.fallback_requests = fallback_requests

    async def has_access(self, domain: Optional[str]) -> bool:
        """True if either the exact or the wildcard-subdomain pattern is granted."""
        for origin in origin_patterns(domain):
            try:
                if await self.host.contains([origin]):
                    return True
            except Exception as e:
                logger.debug(f"Permission check for {origin} failed: {e}")
        return False

    async def ensure_access(self, domain: Optional[str], allow_prompt: bool) -> bool:
        if not domain:
            return False
        if await self.has_access(domain):
            return True
        if not allow_prompt:
            return False

        granted = await self.request_access(domain)
        logger.debug(f"permissions.request {domain} => {granted}")
        if granted and self.throttle is not None:
            # A fresh grant makes any pending missing-permission notice stale
            try:
                await self.throttle.clear(domain)
            except StorageError as e:
                logger.warning(f"Could not clear notification throttle for {domain}: {e}")
        return granted

    async def request_access(self, domain: str) -> bool:
        """Ask for both patterns, then wildcard only, then exact only."""
        exact, wildcard = origin_patterns(domain)
        attempts = [[exact, wildcard]]
        if self.fallback_requests:
            attempts += [[wildcard], [exact]]

        for origins in attempts:
            try:
                if await self.host.request(origins):
                    return True
            except Exception as e:
                logger.warning(f"Permission request for {origins} failed: {e}")
                return False
        return False

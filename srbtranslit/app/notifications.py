"""
Missing-permission notices, throttled per domain.

At most one notice per domain is shown in any throttle window, however
many navigation events report the same missing grant.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .exceptions import StorageError
from .permissions import PermissionGatekeeper
from .storage.throttle import ThrottleStore
from .utils.config import NotificationsConfig, get_config
from .utils.logger import get_logger

logger = get_logger("notifications")

Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time() * 1000)


def notice_id(domain: str) -> str:
    return f"srbtranslit-missing-{domain}"


@dataclass(frozen=True)
class Notice:
    id: str
    title: str
    message: str
    icon: str


class Notifier(ABC):
    @abstractmethod
    async def show(self, notice: Notice) -> None:
        """Show a notice, replacing any active notice with the same id."""


class LoggingNotifier(Notifier):
    """Keeps active notices by id and reports them through the log."""

    def __init__(self):
        self.active: Dict[str, Notice] = {}
        self.shown = 0

    async def show(self, notice: Notice) -> None:
        self.active[notice.id] = notice
        self.shown += 1
        logger.warning(f"{notice.title}: {notice.message}")


class NotificationThrottle:
    def __init__(
        self,
        gatekeeper: PermissionGatekeeper,
        store: ThrottleStore,
        notifier: Notifier,
        clock: Optional[Clock] = None,
        window_ms: Optional[int] = None,
        messages: Optional[NotificationsConfig] = None,
    ):
        config = get_config()
        self.gatekeeper = gatekeeper
        self.store = store
        self.notifier = notifier
        self.clock = clock or system_clock
        self.window_ms = window_ms if window_ms is not None else config.throttle.window_ms
        self.messages = messages or config.notifications

    async def clear(self, domain: str) -> bool:
        """Forget the last notice for a domain once its grant is present."""
        try:
            return await self.store.clear(domain)
        except StorageError as e:
            logger.debug(f"Could not clear throttle for {domain}: {e}")
            return False

    async def should_notify(self, domain: str) -> bool:
        if await self.gatekeeper.has_access(domain):
            await self.clear(domain)
            return False

        try:
            last = await self.store.last_notified(domain)
            now = self.clock()
            if last is None or now - last > self.window_ms:
                await self.store.record(domain, now)
                return True
            return False
        except StorageError as e:
            # Better a repeated notice than a silent failure
            logger.warning(f"Throttle state unavailable for {domain}, notifying anyway: {e}")
            return True

    async def notify_missing(self, domain: str) -> bool:
        """Show the missing-permission notice for a domain unless throttled."""
        if not await self.should_notify(domain):
            return False

        logger.warning(f"Missing host permission for {domain}, notifying user")
        notice = Notice(
            id=notice_id(domain),
            title=self.messages.title,
            message=self.messages.message.format(domain=domain),
            icon=self.messages.icon,
        )
        try:
            await self.notifier.show(notice)
        except Exception as e:
            logger.error(f"Failed to show notice for {domain}: {e}")
            return False
        return True

    async def cleanup_granted(self) -> int:
        """Drop throttle entries for domains that have been granted since."""
        try:
            entries = await self.store.load()
            granted = [domain for domain in entries if await self.gatekeeper.has_access(domain)]
            return await self.store.clear_many(granted)
        except StorageError as e:
            logger.debug(f"Throttle cleanup skipped: {e}")
            return 0

"""
Auto-apply on navigation.

Each qualifying browser event runs the same short state machine:

    NO_RULE                      (no stored rule covers the host)
    RULE_FOUND -> PERMISSION_OK      -> INJECT
               -> PERMISSION_MISSING -> NOTIFY

Tab activation and a tab that starts loading or changes URL run a refresh
instead: the same resolve and permission check, ending in READY (grant
present, throttle entry dropped) or NOTIFY, and never injecting.

The controller keeps no memory between events beyond the rule and
throttle stores, so several callbacks reporting one page load (committed,
completed, tab update) can all run it safely.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .domains import hostname, registrable_domain
from .exceptions import StorageError
from .injection import Injector
from .notifications import NotificationThrottle
from .permissions import PermissionGatekeeper
from .storage.rules import RuleStore
from .tabs import NavigationEvent, NavigationSource, Tab, TabChange, TabRegistry, TabStatus, TOP_FRAME
from .translit import Direction
from .utils.logger import get_logger

logger = get_logger("controller")


class ApplyState(Enum):
    """Where a single event ended up."""

    IGNORED = "ignored"
    NO_RULE = "no_rule"
    INJECT = "inject"
    NOTIFY = "notify"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ApplyOutcome:
    state: ApplyState
    domain: Optional[str] = None
    direction: Optional[Direction] = None
    notified: bool = False
    injected: bool = False


class AutoApplyController:
    def __init__(
        self,
        rules: RuleStore,
        gatekeeper: PermissionGatekeeper,
        throttle: NotificationThrottle,
        injector: Injector,
        tabs: Optional[TabRegistry] = None,
    ):
        self.rules = rules
        self.gatekeeper = gatekeeper
        self.throttle = throttle
        self.injector = injector
        self.tabs = tabs

    async def on_navigation(self, event: NavigationEvent) -> ApplyOutcome:
        if not event.is_top_frame or not event.url:
            return ApplyOutcome(ApplyState.IGNORED)

        logger.debug(f"Nav event {event.source.value} url: {event.url}")

        try:
            match = await self.rules.resolve_for_url(event.url)
        except StorageError as e:
            logger.error(f"Auto transliteration failed, rules unavailable: {e}")
            return ApplyOutcome(ApplyState.FAILED)

        if match is None:
            return ApplyOutcome(ApplyState.NO_RULE)

        domain = registrable_domain(hostname(event.url), self.rules.known_second_level)
        direction = match.rule.direction
        has_access = await self.gatekeeper.has_access(domain)
        logger.debug(f"Auto-check domain={domain} match_key={match.key} has_access={has_access}")

        if not has_access:
            logger.warning(f"Skipping auto-run ({event.source.value}): missing permission for {domain}")
            notified = await self.throttle.notify_missing(domain)
            return ApplyOutcome(ApplyState.NOTIFY, domain, direction, notified=notified)

        tab = self._tab_for(event)
        try:
            injected = await self.injector.inject(tab, direction)
        except Exception as e:
            logger.error(f"Auto transliteration ({event.source.value}) failed: {e}")
            injected = False

        if injected:
            logger.info(f"Auto-applied ({event.source.value}) on {event.url} direction: {direction.value}")
        return ApplyOutcome(ApplyState.INJECT, domain, direction, injected=injected)

    async def on_tab_refreshed(self, tab: Tab) -> ApplyOutcome:
        """Re-check a tab's rule and grant without touching the page.

        Repairs a stale rule key, reports a missing grant, and drops the
        notice throttle entry once the grant is present.
        """
        if not tab.url:
            return ApplyOutcome(ApplyState.IGNORED)

        try:
            match = await self.rules.resolve_for_url(tab.url)
        except StorageError as e:
            logger.error(f"Tab refresh failed, rules unavailable: {e}")
            return ApplyOutcome(ApplyState.FAILED)

        if match is None:
            return ApplyOutcome(ApplyState.NO_RULE)

        domain = registrable_domain(hostname(tab.url), self.rules.known_second_level)
        direction = match.rule.direction
        if not await self.gatekeeper.has_access(domain):
            logger.warning(f"Tab {tab.id} needs permission for {domain}")
            notified = await self.throttle.notify_missing(domain)
            return ApplyOutcome(ApplyState.NOTIFY, domain, direction, notified=notified)

        await self.throttle.clear(domain)
        return ApplyOutcome(ApplyState.READY, domain, direction)

    async def on_tab_updated(self, tab_id: int, change: TabChange, tab: Tab) -> ApplyOutcome:
        """Refresh on loading or URL change; auto-apply once loading completes."""
        url = change.url or tab.url or ""
        outcome = ApplyOutcome(ApplyState.IGNORED)

        if change.status is TabStatus.LOADING or change.url:
            outcome = await self.on_tab_refreshed(Tab(id=tab_id, url=url, active=tab.active))
        if change.status is TabStatus.COMPLETE and url:
            outcome = await self.on_navigation(
                NavigationEvent(tab_id, url, TOP_FRAME, NavigationSource.TAB_UPDATED)
            )
        return outcome

    def _tab_for(self, event: NavigationEvent) -> Tab:
        tab = self.tabs.get(event.tab_id) if self.tabs is not None else None
        return tab or Tab(id=event.tab_id, url=event.url)

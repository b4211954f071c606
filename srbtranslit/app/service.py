from typing import Optional

from .commands import CommandDispatcher, MenuAction
from .controller import ApplyOutcome, ApplyState, AutoApplyController
from .injection import DocumentInjector, Injector
from .notifications import Clock, LoggingNotifier, NotificationThrottle, Notifier
from .permissions import PermissionGatekeeper, PermissionHost
from .storage.container import StoreContainer, get_stores
from .tabs import NavigationEvent, NavigationSource, Tab, TabChange, TabRegistry
from .utils.logger import get_logger

logger = get_logger("service")


class TranslitService:
    """Wires the stores, gatekeeper, throttle and injector behind the browser event handlers."""

    def __init__(
        self,
        permission_host: PermissionHost,
        stores: Optional[StoreContainer] = None,
        tabs: Optional[TabRegistry] = None,
        notifier: Optional[Notifier] = None,
        injector: Optional[Injector] = None,
        clock: Optional[Clock] = None,
    ):
        self.stores = stores or get_stores()
        self.tabs = tabs or TabRegistry()
        self.notifier = notifier or LoggingNotifier()
        self.gatekeeper = PermissionGatekeeper(permission_host, self.stores.throttle)
        self.throttle = NotificationThrottle(
            self.gatekeeper, self.stores.throttle, self.notifier, clock=clock
        )
        self.injector = injector or DocumentInjector(self.tabs)
        self.controller = AutoApplyController(
            self.stores.rules, self.gatekeeper, self.throttle, self.injector, self.tabs
        )
        self.dispatcher = CommandDispatcher(
            self.stores.rules, self.gatekeeper, self.throttle, self.injector, self.tabs
        )

    async def start(self) -> None:
        cleared = await self.throttle.cleanup_granted()
        if cleared:
            logger.info(f"Cleared {cleared} stale notification throttle entries")

    async def on_committed(self, tab_id: int, url: str, frame_id: int = 0) -> ApplyOutcome:
        return await self.controller.on_navigation(
            NavigationEvent(tab_id, url, frame_id, NavigationSource.COMMITTED)
        )

    async def on_history_state_updated(self, tab_id: int, url: str, frame_id: int = 0) -> ApplyOutcome:
        return await self.controller.on_navigation(
            NavigationEvent(tab_id, url, frame_id, NavigationSource.HISTORY_STATE_UPDATED)
        )

    async def on_completed(self, tab_id: int, url: str, frame_id: int = 0) -> ApplyOutcome:
        return await self.controller.on_navigation(
            NavigationEvent(tab_id, url, frame_id, NavigationSource.COMPLETED)
        )

    async def on_tab_updated(self, tab_id: int, change: TabChange, tab: Tab) -> ApplyOutcome:
        return await self.controller.on_tab_updated(tab_id, change, tab)

    async def on_tab_activated(self, tab_id: int) -> ApplyOutcome:
        tab = self.tabs.get(tab_id)
        if tab is None:
            logger.debug(f"Activated tab {tab_id} is not tracked")
            return ApplyOutcome(ApplyState.IGNORED)
        self.tabs.activate(tab_id)
        return await self.controller.on_tab_refreshed(tab)

    async def on_message(self, message: dict) -> dict:
        return await self.dispatcher.handle_message(message)

    async def on_menu_clicked(self, menu_item_id: str, tab: Tab) -> bool:
        try:
            action = MenuAction(menu_item_id)
        except ValueError:
            logger.debug(f"Ignoring unknown menu item {menu_item_id}")
            return False
        return await self.dispatcher.handle_menu(action, tab)

    async def on_action_clicked(self, tab: Tab) -> bool:
        return await self.dispatcher.toggle(tab)

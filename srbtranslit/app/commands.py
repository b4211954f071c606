"""
Inbound user commands: popup messages, context-menu items and the toolbar toggle.

Popup messages are validated into one model per command and answered with
one response model per command. Anything that does not parse is answered
with ``{"ok": false, "error": "unknown_message"}``.

Unlike navigation handling, these paths run as the direct continuation of a
user gesture and may therefore prompt for host permissions.
"""

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Protocol, Union, assert_never

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .domains import hostname, registrable_domain
from .exceptions import StorageError, UnknownCommandError
from .injection import Injector
from .notifications import NotificationThrottle
from .permissions import PermissionGatekeeper
from .storage.rules import RuleStore
from .tabs import Tab
from .translit import Direction
from .utils.logger import get_logger

logger = get_logger("commands")

MESSAGE_PREFIX = "srb:"


class _DirectedCommand(BaseModel):
    direction: Direction = Direction.LATIN_TO_CYRILLIC

    @field_validator('direction', mode='before')
    @classmethod
    def normalize_direction(cls, v: Any) -> Direction:
        return Direction.normalize(v)


class GetState(BaseModel):
    type: Literal["getState"]


class GrantPermission(BaseModel):
    type: Literal["grantPermission"]


class SetRule(_DirectedCommand):
    type: Literal["setRule"]
    run: bool = False

    @field_validator('run', mode='before')
    @classmethod
    def coerce_run(cls, v: Any) -> bool:
        return bool(v)


class RemoveRule(BaseModel):
    type: Literal["removeRule"]


class RunOnce(_DirectedCommand):
    type: Literal["runOnce"]


Command = Annotated[
    Union[GetState, GrantPermission, SetRule, RemoveRule, RunOnce],
    Field(discriminator="type"),
]

_command_adapter = TypeAdapter(Command)


def parse_command(message: Any) -> Command:
    if not isinstance(message, dict) or not isinstance(message.get("type"), str):
        raise UnknownCommandError()

    data = dict(message)
    data["type"] = data["type"].removeprefix(MESSAGE_PREFIX)
    try:
        return _command_adapter.validate_python(data)
    except PydanticValidationError as e:
        logger.debug(f"Rejected message {message!r}: {e.error_count()} error(s)")
        raise UnknownCommandError() from e


class StateResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    domain: str
    host: str
    has_permission: bool
    rule_direction: Optional[Direction] = None
    has_rule: bool
    can_auto: bool

    def to_message(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class OkResponse(BaseModel):
    ok: bool
    error: Optional[str] = None

    def to_message(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


Response = Union[StateResponse, OkResponse]


class MenuAction(Enum):
    TRANSLITERATE_TO_LATIN = "transliterate-to-lat"
    TRANSLITERATE_TO_CYRILLIC = "transliterate-to-cyr"
    ALWAYS_LATIN = "always-enable-domain-lat"
    ALWAYS_CYRILLIC = "always-enable-domain-cyr"
    STOP_AUTO = "stop-auto-domain"


class TabProvider(Protocol):
    async def active_tab(self) -> Optional[Tab]:
        ...


class CommandDispatcher:
    def __init__(
        self,
        rules: RuleStore,
        gatekeeper: PermissionGatekeeper,
        throttle: NotificationThrottle,
        injector: Injector,
        tabs: TabProvider,
    ):
        self.rules = rules
        self.gatekeeper = gatekeeper
        self.throttle = throttle
        self.injector = injector
        self.tabs = tabs

    def _domain(self, tab: Optional[Tab]) -> Optional[str]:
        host = hostname(tab.url) if tab else None
        return registrable_domain(host, self.rules.known_second_level)

    async def handle_message(self, message: Any) -> Dict[str, Any]:
        """Answer one popup message with a plain dict."""
        try:
            command = parse_command(message)
        except UnknownCommandError as e:
            return OkResponse(ok=False, error=e.code).to_message()

        try:
            response = await self.dispatch(command)
        except StorageError as e:
            logger.error(f"Command {command.type} failed: {e}")
            response = OkResponse(ok=False, error="storage_unavailable")
        return response.to_message()

    async def dispatch(self, command: Command) -> Response:
        tab = await self.tabs.active_tab()

        match command:
            case GetState():
                return await self.get_state(tab)
            case GrantPermission():
                return await self.grant_permission(tab)
            case SetRule(direction=direction, run=run):
                return await self.set_rule(tab, direction, run)
            case RemoveRule():
                return await self.remove_rule(tab)
            case RunOnce(direction=direction):
                return await self.run_once(tab, direction)
            case _:
                assert_never(command)

    async def get_state(self, tab: Optional[Tab]) -> StateResponse:
        url = tab.url if tab else ""
        host = hostname(url)
        domain = self._domain(tab)

        match = await self.rules.find_for_url(url) if url else None
        has_permission = await self.gatekeeper.has_access(domain) if domain else False
        return StateResponse(
            url=url,
            domain=domain or host or "",
            host=host or "",
            has_permission=has_permission,
            rule_direction=match.rule.direction if match else None,
            has_rule=match is not None,
            can_auto=match is not None and has_permission,
        )

    async def grant_permission(self, tab: Optional[Tab]) -> OkResponse:
        domain = self._domain(tab)
        if not domain:
            return OkResponse(ok=False)
        return OkResponse(ok=await self.gatekeeper.ensure_access(domain, allow_prompt=True))

    async def set_rule(self, tab: Optional[Tab], direction: Direction, run: bool) -> OkResponse:
        domain = self._domain(tab)
        if tab is None or not domain:
            return OkResponse(ok=False)

        # Saved regardless of permission; auto-apply reports the missing grant later
        await self.rules.upsert(domain, direction)
        if run and await self.gatekeeper.has_access(domain):
            await self.injector.inject(tab, direction)
        return OkResponse(ok=True)

    async def remove_rule(self, tab: Optional[Tab]) -> OkResponse:
        if tab is None:
            return OkResponse(ok=False)
        # The covering rule may still sit under a stale key
        match = await self.rules.find_for_url(tab.url)
        if match is not None:
            await self.rules.remove(match.key)
        return OkResponse(ok=True)

    async def run_once(self, tab: Optional[Tab], direction: Direction) -> OkResponse:
        if tab is None:
            return OkResponse(ok=False)
        await self.injector.inject(tab, direction)
        return OkResponse(ok=True)

    async def handle_menu(self, action: MenuAction, tab: Tab) -> bool:
        """Run a context-menu item for the tab it was opened on."""
        match action:
            case MenuAction.TRANSLITERATE_TO_LATIN:
                return await self.injector.inject(tab, Direction.CYRILLIC_TO_LATIN)
            case MenuAction.TRANSLITERATE_TO_CYRILLIC:
                return await self.injector.inject(tab, Direction.LATIN_TO_CYRILLIC)
            case MenuAction.ALWAYS_LATIN:
                return await self.always_enable(tab, Direction.CYRILLIC_TO_LATIN)
            case MenuAction.ALWAYS_CYRILLIC:
                return await self.always_enable(tab, Direction.LATIN_TO_CYRILLIC)
            case MenuAction.STOP_AUTO:
                return (await self.remove_rule(tab)).ok
            case _:
                assert_never(action)

    async def always_enable(self, tab: Tab, direction: Direction) -> bool:
        domain = self._domain(tab)
        if not domain:
            return False
        if not await self.gatekeeper.ensure_access(domain, allow_prompt=True):
            await self.throttle.notify_missing(domain)
            return False
        await self.rules.upsert(domain, direction)
        return await self.injector.inject(tab, direction)

    async def toggle(self, tab: Tab) -> bool:
        """Toolbar button: remember or forget the tab's domain.

        Returns whether a rule covers the domain afterwards.
        """
        domain = self._domain(tab)
        if not domain:
            return False

        match = await self.rules.find_for_url(tab.url)
        if match is not None:
            if await self.gatekeeper.has_access(domain):
                await self.rules.remove(match.key)
                return False
            # Rule without grant: use the click to ask for it
            if await self.gatekeeper.ensure_access(domain, allow_prompt=True):
                await self.injector.inject(tab, match.rule.direction)
            else:
                await self.throttle.notify_missing(domain)
            return True

        if not await self.gatekeeper.ensure_access(domain, allow_prompt=True):
            await self.throttle.notify_missing(domain)
            return False
        await self.rules.upsert(domain, Direction.LATIN_TO_CYRILLIC)
        await self.injector.inject(tab, Direction.LATIN_TO_CYRILLIC)
        return True

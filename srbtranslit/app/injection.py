"""
Running the transliteration engine against a tab.

Injection is fire-and-forget: failures are logged here and never reach
the caller, and they never touch stored rules.
"""

from abc import ABC, abstractmethod

from .exceptions import InjectionError
from .tabs import Tab, TabRegistry
from .translit import Direction, transliterate_document
from .utils.logger import get_logger

logger = get_logger("injection")


class Injector(ABC):
    async def inject(self, tab: Tab, direction: Direction) -> bool:
        """Run the engine over the tab's top document and all frames.

        Returns whether the run happened; errors are logged, not raised.
        """
        try:
            await self.run(tab, direction)
        except Exception as e:
            logger.error(f"failed to execute script: {e}")
            return False
        return True

    @abstractmethod
    async def run(self, tab: Tab, direction: Direction) -> None:
        ...


class DocumentInjector(Injector):
    """Transliterates the parsed frame documents held by a TabRegistry."""

    def __init__(self, registry: TabRegistry):
        self.registry = registry

    async def run(self, tab: Tab, direction: Direction) -> None:
        documents = self.registry.documents.get(tab.id)
        if documents is None:
            raise InjectionError(f"No tab with id {tab.id}", code="no_tab")
        if not documents.scriptable:
            raise InjectionError(f"Cannot access contents of {tab.url or tab.id}", code="forbidden")

        for frame in documents.frames:
            transliterate_document(frame, direction)
        logger.debug(f"Ran {direction.value} over {len(documents.frames)} frame(s) of tab {tab.id}")

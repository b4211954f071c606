from typing import Any, Dict, Iterable, Optional

from .backends import KeyValueStore
from ..utils.logger import get_logger

logger = get_logger("storage.throttle")

NOTIFIED_KEY = "notifiedMissingPermission"


def parse_throttle_map(raw: Any) -> Dict[str, int]:
    if not isinstance(raw, dict):
        return {}
    return {
        domain: int(timestamp) for domain, timestamp in raw.items()
        if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool)
    }


class ThrottleStore:
    """Last missing-permission notice per domain, in ms since the epoch."""

    def __init__(self, backend: KeyValueStore):
        self.backend = backend

    async def load(self) -> Dict[str, int]:
        return parse_throttle_map(await self.backend.get(NOTIFIED_KEY))

    async def save(self, entries: Dict[str, int]) -> None:
        await self.backend.set(NOTIFIED_KEY, entries)

    async def last_notified(self, domain: str) -> Optional[int]:
        return (await self.load()).get(domain)

    async def record(self, domain: str, timestamp_ms: int) -> None:
        entries = await self.load()
        entries[domain] = timestamp_ms
        await self.save(entries)

    async def clear(self, domain: str) -> bool:
        return await self.clear_many([domain]) > 0

    async def clear_many(self, domains: Iterable[str]) -> int:
        entries = await self.load()
        stale = [domain for domain in domains if domain in entries]
        if not stale:
            return 0
        for domain in stale:
            del entries[domain]
        await self.save(entries)
        logger.debug(f"Cleared notification throttle for {stale}")
        return len(stale)

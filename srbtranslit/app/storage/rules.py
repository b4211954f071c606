"""
Per-domain transliteration rules.

The module-level functions are pure: they take a rule set and return a new
one. RuleStore wraps them with a read-modify-write cycle over a key-value
backend. Concurrent writers are not serialised; the last write wins.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from .backends import KeyValueStore
from ..domains import host_matches, hostname, registrable_domain
from ..translit.direction import Direction
from ..utils.logger import get_logger

logger = get_logger("storage.rules")

ENABLED_DOMAINS_KEY = "enabledDomains"


@dataclass(frozen=True)
class Rule:
    direction: Direction = Direction.LATIN_TO_CYRILLIC

    def to_dict(self) -> Dict[str, str]:
        return {"direction": self.direction.value}

    @classmethod
    def from_dict(cls, data: Any) -> "Rule":
        direction = data.get("direction") if isinstance(data, dict) else None
        return cls(Direction.normalize(direction))


@dataclass(frozen=True)
class RuleMatch:
    key: str
    rule: Rule


RuleSet = Dict[str, Rule]


def parse_rule_set(raw: Any) -> Tuple[RuleSet, bool]:
    """Decode a stored rule set.

    Returns the rules and whether the stored value was the legacy list of
    domains, which implies Latin to Cyrillic for every entry.
    """
    if isinstance(raw, list):
        return {domain: Rule() for domain in raw if isinstance(domain, str) and domain}, True
    if isinstance(raw, dict):
        return {key: Rule.from_dict(value) for key, value in raw.items()}, False
    return {}, False


def dump_rule_set(rule_set: RuleSet) -> Dict[str, Dict[str, str]]:
    return {key: rule.to_dict() for key, rule in rule_set.items()}


def find_rule(rule_set: RuleSet, host: Optional[str]) -> Optional[RuleMatch]:
    """Find the rule covering a host.

    A key matches the host itself and any subdomain of it. If several keys
    match, the first in the set's order wins.
    """
    if not host:
        return None
    for key, rule in rule_set.items():
        if host_matches(host, key):
            return RuleMatch(key, rule)
    return None


def migrate_key_if_stale(
    rule_set: RuleSet,
    host: Optional[str],
    known_second_level: Optional[Iterable[str]] = None,
) -> Tuple[RuleSet, Optional[RuleMatch]]:
    """Re-key a matching rule under the host's registrable domain.

    Returns the (possibly new) rule set and the match under its corrected
    key. The input set is returned unchanged when nothing matches or the
    key is already aligned.
    """
    desired = registrable_domain(host, known_second_level)
    if not host or not desired:
        return rule_set, None

    match = find_rule(rule_set, host)
    if match is None or match.key == desired:
        return rule_set, match

    migrated = dict(rule_set)
    migrated[desired] = match.rule
    del migrated[match.key]
    return migrated, RuleMatch(desired, match.rule)


def _overlaps(a: str, b: str) -> bool:
    return host_matches(a, b) or host_matches(b, a)


def upsert(rule_set: RuleSet, domain: str, direction: Any) -> RuleSet:
    """Set the direction for a domain.

    Keys that are a parent or a subdomain of the new key are dropped so no
    host can be matched by two rules.
    """
    updated = {
        key: rule for key, rule in rule_set.items()
        if key == domain or not _overlaps(key, domain)
    }
    updated[domain] = Rule(Direction.normalize(direction))
    return updated


def remove(rule_set: RuleSet, domain: str) -> RuleSet:
    return {key: rule for key, rule in rule_set.items() if key != domain}


class RuleStore:
    """Persisted rule set under the enabledDomains key."""

    def __init__(
        self,
        backend: KeyValueStore,
        known_second_level: Optional[Iterable[str]] = None,
    ):
        self.backend = backend
        self.known_second_level = known_second_level

    async def load(self) -> RuleSet:
        raw = await self.backend.get(ENABLED_DOMAINS_KEY)
        rule_set, legacy = parse_rule_set(raw)
        if legacy:
            await self.save(rule_set)
            logger.info(f"Migrated {len(rule_set)} legacy domain entries to rule map")
        return rule_set

    async def save(self, rule_set: RuleSet) -> None:
        await self.backend.set(ENABLED_DOMAINS_KEY, dump_rule_set(rule_set))

    async def find_for_url(self, url: Optional[str]) -> Optional[RuleMatch]:
        host = hostname(url)
        if not host:
            return None
        return find_rule(await self.load(), host)

    async def migrate_for_url(self, url: Optional[str]) -> Optional[RuleMatch]:
        host = hostname(url)
        if not host:
            return None

        rule_set = await self.load()
        migrated, match = migrate_key_if_stale(rule_set, host, self.known_second_level)
        if migrated is not rule_set:
            await self.save(migrated)
            old = find_rule(rule_set, host)
            logger.info(f"Migrated rule key {old.key} -> {match.key}")
        return match

    async def resolve_for_url(self, url: Optional[str]) -> Optional[RuleMatch]:
        """Migrate a stale key if needed, falling back to a plain lookup."""
        return await self.migrate_for_url(url) or await self.find_for_url(url)

    async def upsert(self, domain: str, direction: Any) -> Rule:
        rule_set = await self.load()
        updated = upsert(rule_set, domain, direction)
        dropped = [key for key in rule_set if key not in updated]
        if dropped:
            logger.warning(f"Dropped overlapping rule keys {dropped} in favour of {domain}")
        await self.save(updated)
        rule = updated[domain]
        logger.info(f"Enabled {domain} direction: {rule.direction.value}")
        return rule

    async def remove(self, domain: str) -> bool:
        rule_set = await self.load()
        if domain not in rule_set:
            return False
        await self.save(remove(rule_set, domain))
        logger.info(f"Disabled {domain}")
        return True

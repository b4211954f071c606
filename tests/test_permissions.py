import asyncio

import pytest

from srbtranslit.app.permissions import PermissionGatekeeper, PermissionHost
from srbtranslit.app.storage.throttle import NOTIFIED_KEY, ThrottleStore

EXACT = "*://primer.rs/*"
WILDCARD = "*://*.primer.rs/*"


class BrokenHost(PermissionHost):
    async def contains(self, origins):
        raise RuntimeError("permissions API unavailable")

    async def request(self, origins):
        raise RuntimeError("permissions API unavailable")


@pytest.fixture
def gatekeeper(grants, memory_store):
    return PermissionGatekeeper(grants, ThrottleStore(memory_store))


class TestHasAccess:
    @pytest.mark.parametrize("granted", [[EXACT], [WILDCARD], [EXACT, WILDCARD]])
    def test_either_pattern_suffices(self, grants, gatekeeper, granted):
        grants.grant(*granted)
        assert asyncio.run(gatekeeper.has_access("primer.rs")) is True

    def test_nothing_granted(self, gatekeeper):
        assert asyncio.run(gatekeeper.has_access("primer.rs")) is False

    def test_other_domain_grant_does_not_count(self, grants, gatekeeper):
        grants.grant("*://*.example.com/*")
        assert asyncio.run(gatekeeper.has_access("primer.rs")) is False

    @pytest.mark.parametrize("domain", [None, ""])
    def test_no_domain(self, gatekeeper, domain):
        assert asyncio.run(gatekeeper.has_access(domain)) is False

    def test_host_errors_read_as_denied(self):
        gatekeeper = PermissionGatekeeper(BrokenHost(), fallback_requests=True)
        assert asyncio.run(gatekeeper.has_access("primer.rs")) is False


class TestEnsureAccess:
    def test_without_prompt_never_requests(self, grants, gatekeeper):
        assert asyncio.run(gatekeeper.ensure_access("primer.rs", allow_prompt=False)) is False
        assert grants.requests == []

    def test_existing_grant_skips_request(self, grants, gatekeeper):
        grants.grant(EXACT)
        assert asyncio.run(gatekeeper.ensure_access("primer.rs", allow_prompt=True)) is True
        assert grants.requests == []

    def test_grant_clears_throttle_entry(self, grants, gatekeeper, memory_store):
        asyncio.run(gatekeeper.throttle.save({"primer.rs": 1, "other.rs": 2}))
        grants.prompt = lambda origins: True

        assert asyncio.run(gatekeeper.ensure_access("primer.rs", allow_prompt=True)) is True
        assert grants.requests == [[EXACT, WILDCARD]]
        assert memory_store.snapshot()[NOTIFIED_KEY] == {"other.rs": 2}
        assert asyncio.run(gatekeeper.has_access("primer.rs")) is True

    def test_refusal_walks_the_fallback_ladder(self, grants, gatekeeper):
        assert asyncio.run(gatekeeper.ensure_access("primer.rs", allow_prompt=True)) is False
        assert grants.requests == [[EXACT, WILDCARD], [WILDCARD], [EXACT]]

    def test_wildcard_only_grant_is_accepted(self, grants, gatekeeper):
        grants.prompt = lambda origins: origins == [WILDCARD]

        assert asyncio.run(gatekeeper.ensure_access("primer.rs", allow_prompt=True)) is True
        assert grants.requests == [[EXACT, WILDCARD], [WILDCARD]]
        assert grants.granted == {WILDCARD}

    def test_without_fallback_one_request(self, grants, memory_store):
        gatekeeper = PermissionGatekeeper(grants, ThrottleStore(memory_store), fallback_requests=False)

        assert asyncio.run(gatekeeper.ensure_access("primer.rs", allow_prompt=True)) is False
        assert grants.requests == [[EXACT, WILDCARD]]

    def test_throttle_failure_does_not_lose_grant(self, grants, gatekeeper, memory_store):
        grants.prompt = lambda origins: True
        memory_store.fail_reads = True

        assert asyncio.run(gatekeeper.ensure_access("primer.rs", allow_prompt=True)) is True

    def test_raising_host_is_a_refusal(self):
        gatekeeper = PermissionGatekeeper(BrokenHost(), fallback_requests=True)
        assert asyncio.run(gatekeeper.ensure_access("primer.rs", allow_prompt=True)) is False

    def test_no_domain(self, grants, gatekeeper):
        assert asyncio.run(gatekeeper.ensure_access(None, allow_prompt=True)) is False
        assert grants.requests == []


def test_fallback_default_comes_from_config(grants):
    assert PermissionGatekeeper(grants).fallback_requests is True

"""Tests for contentsync.lint.graph -- recursive reference validation."""

from __future__ import annotations

import asyncio
from collections import Counter

import httpx

from contentsync.client import RestClient
from contentsync.lint.graph import NO_URL_MESSAGE, ReferenceGraphValidator
from contentsync.lint.ratelimit import FixedWindowThrottle
from contentsync.models import PublicUrlTarget, ResultEvent, ResultType

P = "http://domain.com"


def _lint(client, url, **kwargs) -> list[ResultEvent]:
    validator = ReferenceGraphValidator(client, window=0.001, **kwargs)

    async def collect():
        return [event async for event in validator.lint_url(url)]

    return asyncio.run(collect())


def _summary(events: list[ResultEvent]) -> list[tuple[str, str]]:
    return sorted((event.type.value, event.message) for event in events)


class TestComponents:
    def test_quick_check_covers_whole_subtree(self, store) -> None:
        store.data[f"{P}/_components/a.json"] = {"title": "composed"}
        events = _lint(store, f"{P}/_components/a")
        assert events == [ResultEvent.success(f"{P}/_components/a")]
        assert store.reads == [f"{P}/_components/a.json"]

    def test_deep_check_walks_children(self, store) -> None:
        store.data[f"{P}/_components/a"] = {
            "content": [
                {"_ref": "/_components/b"},
                {"_ref": "domain.com/_components/c"},
            ]
        }
        store.data[f"{P}/_components/b.json"] = {}
        events = _lint(store, f"{P}/_components/a")
        assert _summary(events) == [
            ("error", f"{P}/_components/c"),
            ("success", f"{P}/_components/a"),
            ("success", f"{P}/_components/b"),
        ]

    def test_error_carries_the_read_failure(self, store) -> None:
        events = _lint(store, f"{P}/_components/missing")
        assert events == [ResultEvent.error(f"{P}/_components/missing", "HTTP 404: Not Found")]

    def test_failed_child_does_not_stop_siblings(self, store) -> None:
        store.data[f"{P}/_components/a"] = {
            "content": [{"_ref": f"/_components/c{i}"} for i in range(5)]
        }
        for i in (0, 1, 3, 4):
            store.data[f"{P}/_components/c{i}.json"] = {}
        events = _lint(store, f"{P}/_components/a")
        errors = [event.message for event in events if event.is_error]
        assert errors == [f"{P}/_components/c2"]
        assert len(events) == 6

    def test_cyclic_references_terminate(self, store) -> None:
        store.data[f"{P}/_components/a"] = {"child": {"_ref": "/_components/b"}}
        store.data[f"{P}/_components/b"] = {"child": {"_ref": "/_components/a"}}
        events = _lint(store, f"{P}/_components/a")
        assert _summary(events) == [
            ("success", f"{P}/_components/a"),
            ("success", f"{P}/_components/b"),
        ]
        assert sorted(store.reads) == sorted([
            f"{P}/_components/a.json",
            f"{P}/_components/a",
            f"{P}/_components/b.json",
            f"{P}/_components/b",
        ])

    def test_shared_child_is_checked_once(self, store) -> None:
        store.data[f"{P}/_components/a"] = {
            "left": {"_ref": "/_components/shared"},
            "right": [{"_ref": "/_components/b"}],
        }
        store.data[f"{P}/_components/b"] = {"child": {"_ref": "/_components/shared"}}
        store.data[f"{P}/_components/shared.json"] = {}
        events = _lint(store, f"{P}/_components/a")
        assert [e.message for e in events].count(f"{P}/_components/shared") == 1

    def test_site_prefix_with_path(self, store) -> None:
        prefix = "https://domain.com/blog"
        store.data[f"{prefix}/_components/a"] = {"child": {"_ref": "/_components/b"}}
        store.data[f"{prefix}/_components/b.json"] = {}
        events = _lint(store, f"{prefix}/_components/a")
        assert _summary(events) == [
            ("success", f"{prefix}/_components/a"),
            ("success", f"{prefix}/_components/b"),
        ]

    def test_in_flight_checks_are_bounded(self, slow_store) -> None:
        slow_store.data[f"{P}/_components/a"] = {
            "content": [{"_ref": f"/_components/c{i}"} for i in range(12)]
        }
        for i in range(12):
            slow_store.data[f"{P}/_components/c{i}.json"] = {}
        events = _lint(slow_store, f"{P}/_components/a", concurrency=3)
        assert len(events) == 13
        assert slow_store.max_in_flight <= 3


    def test_reference_with_invalid_port(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/_components/a":
                return httpx.Response(200, json={"child": {"_ref": "domain.com:xx/_components/b"}})
            return httpx.Response(404)

        async def collect():
            async with RestClient(transport=httpx.MockTransport(handler)) as client:
                validator = ReferenceGraphValidator(client, concurrency=1, window=0.001)
                return [e async for e in validator.lint_url(f"{P}/_components/a")]

        events = asyncio.run(asyncio.wait_for(collect(), timeout=5))
        assert _summary(events) == [
            ("error", "http://domain.com:xx/_components/b"),
            ("success", f"{P}/_components/a"),
        ]
        assert events[-1].details.startswith("Invalid request: ")

    def test_read_that_raises_is_reported(self, store) -> None:
        store.data[f"{P}/_components/a"] = {
            "left": {"_ref": "/_components/b"},
            "right": {"_ref": "/_components/c"},
        }
        store.data[f"{P}/_components/c.json"] = {}
        get = store.get

        async def flaky_get(url: str):
            if url.startswith(f"{P}/_components/b"):
                raise RuntimeError("stream reset")
            return await get(url)

        store.get = flaky_get
        validator = ReferenceGraphValidator(store, concurrency=1, window=0.001)

        async def collect():
            return [e async for e in validator.lint_url(f"{P}/_components/a")]

        events = asyncio.run(asyncio.wait_for(collect(), timeout=5))
        assert _summary(events) == [
            ("error", f"{P}/_components/b"),
            ("success", f"{P}/_components/a"),
            ("success", f"{P}/_components/c"),
        ]
        assert [e.details for e in events if e.is_error] == ["stream reset"]


class TestPages:
    def test_page_walks_layout_and_areas(self, store) -> None:
        store.data[f"{P}/_pages/index"] = {
            "layout": "/_components/layout/instances/main",
            "main": ["/_components/article/instances/a", {"_ref": "/_components/ad"}],
        }
        store.data[f"{P}/_components/layout/instances/main.json"] = {}
        store.data[f"{P}/_components/article/instances/a.json"] = {}
        events = _lint(store, f"{P}/_pages/index")
        assert _summary(events) == [
            ("error", f"{P}/_components/ad"),
            ("success", f"{P}/_components/article/instances/a"),
            ("success", f"{P}/_components/layout/instances/main"),
            ("success", f"{P}/_pages/index"),
        ]

    def test_composed_page(self, store) -> None:
        store.data[f"{P}/_pages/index.json"] = {}
        assert _lint(store, f"{P}/_pages/index") == [ResultEvent.success(f"{P}/_pages/index")]


class TestPublicUrls:
    def test_public_url_resolves_to_page(self, store) -> None:
        store.uris[f"{P}/foo"] = PublicUrlTarget(uri="domain.com/_pages/index", prefix=P)
        store.data[f"{P}/_pages/index.json"] = {}
        events = _lint(store, f"{P}/foo")
        assert events == [
            ResultEvent.success(f"{P}/foo"),
            ResultEvent.success(f"{P}/_pages/index"),
        ]

    def test_unresolved_public_url(self, store) -> None:
        events = _lint(store, f"{P}/nope")
        assert len(events) == 1
        assert events[0].type == ResultType.ERROR
        assert events[0].message == f"{P}/nope"
        assert events[0].details.startswith("Cannot resolve public URL")


class TestEntryPoints:
    def test_no_url(self, store) -> None:
        assert _lint(store, None) == [ResultEvent.error(NO_URL_MESSAGE)]
        assert _lint(store, "") == [ResultEvent.error(NO_URL_MESSAGE)]

    def test_check_component_with_explicit_prefix(self, store) -> None:
        store.data[f"{P}/_components/a.json"] = {}
        validator = ReferenceGraphValidator(store)

        async def collect():
            return [e async for e in validator.check_component(f"{P}/_components/a", P)]

        assert asyncio.run(collect()) == [ResultEvent.success(f"{P}/_components/a")]

    def test_check_page_with_explicit_prefix(self, store) -> None:
        store.data[f"{P}/_pages/a"] = {"main": ["/_components/x"]}
        store.data[f"{P}/_components/x.json"] = {}
        validator = ReferenceGraphValidator(store)

        async def collect():
            return [e async for e in validator.check_page(f"{P}/_pages/a", P)]

        assert _summary(asyncio.run(collect())) == [
            ("success", f"{P}/_components/x"),
            ("success", f"{P}/_pages/a"),
        ]


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.now += seconds


class TestRateLimit:
    def test_check_starts_are_throttled_across_depth(self, store) -> None:
        # a -> b0..b3 -> g{i}{j}; only the leaves compose
        children = [f"/_components/b{i}" for i in range(4)]
        store.data[f"{P}/_components/a"] = {"content": [{"_ref": ref} for ref in children]}
        for i in range(4):
            leaves = [f"/_components/g{i}{j}" for j in range(3)]
            store.data[f"{P}/_components/b{i}"] = {"content": [{"_ref": ref} for ref in leaves]}
            for ref in leaves:
                store.data[f"{P}{ref}.json"] = {}

        clock = FakeClock()
        starts: list[float] = []
        get = store.get

        async def timed_get(url: str):
            if url.endswith(".json"):
                starts.append(clock.now)
            return await get(url)

        store.get = timed_get
        throttle = FixedWindowThrottle(2, 1.0, clock=clock.time, sleep=clock.sleep)
        validator = ReferenceGraphValidator(store, concurrency=5, throttle=throttle)

        async def collect():
            return [e async for e in validator.lint_url(f"{P}/_components/a")]

        events = asyncio.run(asyncio.wait_for(collect(), timeout=5))
        assert len(events) == 17
        assert not any(e.is_error for e in events)

        assert len(starts) == 17
        per_window = Counter(starts)
        assert max(per_window.values()) <= 2
        windows = sorted(per_window)
        assert len(windows) >= 9
        assert all(b - a >= 1.0 for a, b in zip(windows, windows[1:]))

"""End-to-end tests for contentsync.importer.runner.import_content."""

from __future__ import annotations

import asyncio
import json

import httpx
import yaml

from contentsync.client import RestClient
from contentsync.importer import import_content

URL = "domain.com"
KEY = "abc"
CONCURRENCY = 1000


def _run(source, url, client, **kwargs) -> list[dict]:
    async def collect():
        return [event.to_dict() async for event in import_content(source, url, client, **kwargs)]

    return asyncio.run(collect())


class TestImportErrors:
    def test_no_url(self, store) -> None:
        assert _run("abc", None, store) == [
            {"type": "error", "message": "URL is not defined! Please specify a site prefix to import to"}
        ]

    def test_not_json(self, store) -> None:
        assert _run("abc", URL, store) == [
            {
                "type": "error",
                "message": "Cannot import dispatch from yaml",
                "details": "Please use the --yaml argument to import from bootstraps",
            }
        ]

    def test_bad_json(self, store) -> None:
        assert _run(']{"a":}', URL, store) == [
            {
                "type": "error",
                "message": "JSON syntax error: Unexpected token ] in JSON at position 0",
                "details": ']{"a":}',
            }
        ]

    def test_bad_yaml(self, store) -> None:
        events = _run(yaml.safe_dump({"a": "hi"}) + "a", URL, store, bootstrap=True)
        assert len(events) == 1
        assert events[0]["type"] == "error"
        assert events[0]["message"].startswith("YAML syntax error: ")

    def test_parse_errors_write_nothing(self, store) -> None:
        _run(']{"a":}', URL, store)
        assert store.writes == []


class TestImportBootstrap:
    def test_imports_component_defaults(self, store) -> None:
        text = yaml.safe_dump({"_components": {"a": {"b": "c"}}})
        events = _run(text, URL, store, bootstrap=True, key=KEY, concurrency=CONCURRENCY)
        assert events == [{"type": "success", "message": "http://domain.com/_components/a"}]
        assert store.writes == [("http://domain.com/_components/a", {"b": "c"}, KEY)]

    def test_imports_instances(self, store) -> None:
        text = yaml.safe_dump({
            "_components": {
                "article": {
                    "instances": {
                        "foo": {
                            "title": "My Article",
                            "content": [{"_ref": "/_components/paragraph/instances/bar"}],
                        }
                    }
                },
                "paragraph": {"instances": {"bar": {"text": "hello world"}}},
            }
        })
        events = _run(text, URL, store, bootstrap=True, key=KEY, concurrency=CONCURRENCY)
        assert sorted(e["message"] for e in events) == [
            "http://domain.com/_components/article/instances/foo",
            "http://domain.com/_components/paragraph/instances/bar",
        ]

    def test_published_item_warns_about_generated_latest(self, store) -> None:
        text = yaml.safe_dump({"_components": {"a": {"instances": {"b@published": {"c": "d"}}}}})
        events = _run(text, URL, store, bootstrap=True, publish=True, key=KEY, concurrency=CONCURRENCY)
        assert events == [
            {"type": "success", "message": "http://domain.com/_components/a/instances/b"},
            {"type": "success", "message": "http://domain.com/_components/a/instances/b@published"},
            {
                "type": "warning",
                "message": "Generated latest data for @published item",
                "details": "http://domain.com/_components/a/instances/b@published",
            },
        ]

    def test_multiple_files_with_tail_markers(self, store) -> None:
        text = (
            "\n==> ../path/to/doc2.yml <==\n"
            + yaml.safe_dump({"_components": {"a": {"b": "c"}}})
            + "\n==> ../path/to/doc2.yml <==\n"
            + yaml.safe_dump({"_components": {"b": {"c": "d"}}})
        )
        events = _run(text, URL, store, bootstrap=True, key=KEY, concurrency=CONCURRENCY)
        assert sorted(e["message"] for e in events) == [
            "http://domain.com/_components/a",
            "http://domain.com/_components/b",
        ]

    def test_multiple_files_with_duplicate_keys(self, store) -> None:
        text = (
            yaml.safe_dump({"_components": {"a": {"b": "c"}}})
            + yaml.safe_dump({"_components": {"b": {"c": "d"}}})
        )
        events = _run(text, URL, store, bootstrap=True, key=KEY, concurrency=CONCURRENCY)
        assert sorted(e["message"] for e in events) == [
            "http://domain.com/_components/a",
            "http://domain.com/_components/b",
        ]

    def test_uri_aliases(self, store) -> None:
        text = yaml.safe_dump({"_uris": {"/foo": "/_pages/foo"}})
        events = _run(text, URL, store, bootstrap=True, key=KEY)
        assert events == [{"type": "success", "message": "http://domain.com/_uris/ZG9tYWluLmNvbS9mb28="}]
        assert store.writes[0][1] == "domain.com/_pages/foo"

    def test_site_prefix_with_path(self, store) -> None:
        text = yaml.safe_dump({"_pages": {"index": {"main": []}}})
        events = _run(text, "https://domain.com/blog/", store, bootstrap=True)
        assert events == [{"type": "success", "message": "https://domain.com/blog/_pages/index"}]


class TestImportDispatch:
    def test_imports_dispatch(self, store) -> None:
        text = json.dumps({
            "/_components/article/instances/foo": {
                "title": "My Article",
                "content": [{"_ref": "/_components/paragraphs/instances/bar", "text": "hello world"}],
            }
        })
        events = _run(text, URL, store, key=KEY, concurrency=CONCURRENCY)
        assert events == [
            {"type": "success", "message": "http://domain.com/_components/article/instances/foo"}
        ]

    def test_publishes_items(self, store) -> None:
        text = json.dumps({"/_components/article/instances/foo": {"title": "My Article"}})
        events = _run(text, URL, store, key=KEY, concurrency=CONCURRENCY, publish=True)
        assert events == [
            {"type": "success", "message": "http://domain.com/_components/article/instances/foo"},
            {"type": "success", "message": "http://domain.com/_components/article/instances/foo@published"},
        ]

    def test_imports_uris(self, store) -> None:
        text = json.dumps({"/_uris/foo": "/_pages/foo"})
        events = _run(text, URL, store, key=KEY)
        assert events == [{"type": "success", "message": "http://domain.com/_uris/ZG9tYWluLmNvbS9mb28="}]
        assert store.writes == [
            ("http://domain.com/_uris/ZG9tYWluLmNvbS9mb28=", "domain.com/_pages/foo", KEY)
        ]

    def test_failed_write_is_reported_and_others_continue(self, store) -> None:
        store.fail_writes.add("http://domain.com/_components/b")
        text = json.dumps({"/_components/a": {}, "/_components/b": {}, "/_components/c": {}})
        events = _run(text, URL, store, key=KEY)
        assert sorted((e["type"], e["message"]) for e in events) == [
            ("error", "http://domain.com/_components/b"),
            ("success", "http://domain.com/_components/a"),
            ("success", "http://domain.com/_components/c"),
        ]


class TestImportOverHttp:
    def test_dated_bootstrap_writes_every_component(self) -> None:
        bodies: dict[str, object] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            bodies[str(request.url)] = json.loads(request.content)
            return httpx.Response(200, json={})

        async def collect():
            async with RestClient(transport=httpx.MockTransport(handler)) as client:
                events = import_content(
                    "_components:\n  a:\n    date: 2020-01-01\n  b:\n    c: d\n",
                    URL,
                    client,
                    bootstrap=True,
                    concurrency=1,
                )
                return [event.to_dict() async for event in events]

        events = asyncio.run(asyncio.wait_for(collect(), timeout=5))
        assert sorted(e["message"] for e in events if e["type"] == "success") == [
            "http://domain.com/_components/a",
            "http://domain.com/_components/b",
        ]
        assert bodies["http://domain.com/_components/a"] == {"date": "2020-01-01"}

    def test_write_that_raises_is_reported(self, store, monkeypatch) -> None:
        async def put(url, payload, key=None):
            raise RuntimeError("socket closed")

        monkeypatch.setattr(store, "put", put)
        text = json.dumps({"/_components/a": {}, "/_components/b": {}})
        events = asyncio.run(asyncio.wait_for(_collect_events(text, store), timeout=5))
        assert sorted(events) == [
            ("error", "http://domain.com/_components/a", "socket closed"),
            ("error", "http://domain.com/_components/b", "socket closed"),
        ]


async def _collect_events(source, client) -> list[tuple]:
    return [
        (event.type.value, event.message, event.details)
        async for event in import_content(source, URL, client, concurrency=1)
    ]

"""Tests for perch.dispatch — matching, binding, invocation, match policy."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from perch.config import MatchPolicy
from perch.dispatch import Dispatcher
from perch.errors import ConfigurationError
from perch.http.request import RequestDescriptor
from perch.routing.registry import RouteRegistry
from perch.server.negotiation import ResponseSink
from perch.testing import ResultRecorder


def _dispatcher(
    *routes: tuple[str, str, object],
    policy: MatchPolicy = MatchPolicy.ALL,
) -> tuple[Dispatcher, ResultRecorder]:
    registry = RouteRegistry()
    for verb, template, handler in routes:
        registry.register(verb, template, None, handler)
    registry.finalize()
    recorder = ResultRecorder()
    return Dispatcher(registry, recorder, policy=policy), recorder


class TestConstruction:
    def test_requires_finalized_registry(self) -> None:
        registry = RouteRegistry()
        with pytest.raises(ConfigurationError, match="finalize"):
            Dispatcher(registry)

    def test_default_policy_is_all(self) -> None:
        registry = RouteRegistry()
        registry.finalize()
        assert Dispatcher(registry).policy is MatchPolicy.ALL

    def test_policy_from_string(self) -> None:
        registry = RouteRegistry()
        registry.finalize()
        assert Dispatcher(registry, policy="first").policy is MatchPolicy.FIRST  # type: ignore[arg-type]


class TestMatching:
    def test_path_variable_bound(self) -> None:
        dispatcher, recorder = _dispatcher(("GET", "/books/:id", lambda id: f"book {id}"))

        assert dispatcher.handle("GET", "/books/42") is True
        assert recorder.results == ["book 42"]

    def test_prefix_is_not_a_match(self) -> None:
        dispatcher, recorder = _dispatcher(("GET", "/books/:id", lambda id: id))

        assert dispatcher.handle("GET", "/books/42/chapters") is False
        assert recorder.results == []

    def test_two_variables(self) -> None:
        dispatcher, recorder = _dispatcher(("GET", "/a/:x/b/:y", lambda x, y: (x, y)))

        dispatcher.handle("GET", "/a/1/b/2")
        assert recorder.results == [("1", "2")]

    def test_method_case_insensitive(self) -> None:
        dispatcher, recorder = _dispatcher(("DELETE", "/books/:id", lambda id: id))

        assert dispatcher.handle("delete", "/books/9") is True
        assert recorder.results == ["9"]

    def test_unmatched_method_not_handled(self) -> None:
        calls: list[str] = []
        dispatcher, recorder = _dispatcher(
            ("GET", "/books", lambda: calls.append("get")),
            ("DELETE", "/books", lambda: calls.append("delete")),
        )

        assert dispatcher.handle("PUT", "/books") is False
        assert calls == []
        assert recorder.results == []

    def test_unmatched_path_logs_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        dispatcher, _ = _dispatcher(("GET", "/books", lambda: "x"))

        with caplog.at_level(logging.DEBUG, logger="perch.dispatch"):
            dispatcher.handle("GET", "/nope")
        assert "No route matched GET /nope" in caplog.text

    def test_empty_registry(self) -> None:
        dispatcher, recorder = _dispatcher()
        assert dispatcher.handle("GET", "/") is False
        assert recorder.calls == []


class TestParameters:
    def test_query_parameter_bound(self) -> None:
        dispatcher, recorder = _dispatcher(
            ("GET", "/books/:id", lambda id, fmt: {"id": id, "fmt": fmt}),
        )

        dispatcher.handle("GET", "/books/1", {"fmt": "json"})
        assert recorder.results == [{"id": "1", "fmt": "json"}]

    def test_missing_query_parameter_is_none(self) -> None:
        dispatcher, recorder = _dispatcher(
            ("GET", "/books/:id", lambda id, fmt: {"id": id, "fmt": fmt}),
        )

        assert dispatcher.handle("GET", "/books/1") is True
        assert recorder.results == [{"id": "1", "fmt": None}]

    def test_path_beats_query(self) -> None:
        dispatcher, recorder = _dispatcher(("GET", "/books/:id", lambda id: id))

        dispatcher.handle("GET", "/books/path", {"id": "query"})
        assert recorder.results == ["path"]

    def test_context_defaults_to_request(self) -> None:
        dispatcher, recorder = _dispatcher(("GET", "/x", lambda request: request))

        request = RequestDescriptor.build("GET", "/x")
        dispatcher.dispatch(request)
        assert recorder.results == [request]

    def test_explicit_context(self) -> None:
        dispatcher, recorder = _dispatcher(("GET", "/x", lambda context: context))

        dispatcher.handle("GET", "/x", context={"user": "ada"})
        assert recorder.results == [{"user": "ada"}]

    def test_explicit_none_context(self) -> None:
        dispatcher, recorder = _dispatcher(("GET", "/x", lambda request: request))

        dispatcher.handle("GET", "/x", context=None)
        dispatcher.dispatch(RequestDescriptor.build("GET", "/x"), context=None)
        assert recorder.results == [None, None]

    def test_sink_passed_to_processor(self) -> None:
        dispatcher, recorder = _dispatcher(("GET", "/x", lambda: "x"))
        sink = object()

        dispatcher.handle("GET", "/x", sink=sink)
        assert recorder.calls[0].sink is sink


class TestMultiMatch:
    def test_all_policy_fires_every_match_in_order(self) -> None:
        order: list[str] = []

        def h1():
            order.append("H1")
            return "H1"

        def h2():
            order.append("H2")
            return "H2"

        dispatcher, recorder = _dispatcher(("GET", "/x", h1), ("GET", "/x", h2))

        assert dispatcher.handle("GET", "/x") is True
        assert order == ["H1", "H2"]
        assert recorder.results == ["H1", "H2"]

    def test_overlapping_patterns_all_fire(self) -> None:
        dispatcher, recorder = _dispatcher(
            ("GET", "/books/:id", lambda id: f"var {id}"),
            ("GET", "/books/latest", lambda: "literal"),
            ("GET", "/authors/:id", lambda id: "unrelated"),
        )

        dispatcher.handle("GET", "/books/latest")
        assert recorder.results == ["var latest", "literal"]

    def test_first_policy_stops_after_first_match(self) -> None:
        dispatcher, recorder = _dispatcher(
            ("GET", "/x", lambda: "H1"),
            ("GET", "/x", lambda: "H2"),
            policy=MatchPolicy.FIRST,
        )

        assert dispatcher.handle("GET", "/x") is True
        assert recorder.results == ["H1"]

    def test_last_result_wins_in_sink(self) -> None:
        registry = RouteRegistry()
        registry.register("GET", "/x", [], lambda: "first")
        registry.register("GET", "/x", [], lambda: "second")
        registry.finalize()
        dispatcher = Dispatcher(registry)
        sink = ResponseSink()

        dispatcher.handle("GET", "/x", sink=sink)
        assert sink.results == ["first", "second"]
        assert sink.response is not None
        assert sink.response.text == "second"

    def test_match_all_does_not_invoke(self) -> None:
        calls: list[str] = []
        dispatcher, _ = _dispatcher(
            ("GET", "/books/:id", lambda id: calls.append(id)),
            ("GET", "/books/:slug", lambda slug: calls.append(slug)),
        )

        matches = dispatcher.match_all("GET", "/books/7")
        assert [m.path_params for m in matches] == [{"id": "7"}, {"slug": "7"}]
        assert calls == []

    def test_match_all_honours_first_policy(self) -> None:
        dispatcher, _ = _dispatcher(
            ("GET", "/x", lambda: 1),
            ("GET", "/x", lambda: 2),
            policy=MatchPolicy.FIRST,
        )
        assert len(dispatcher.match_all("GET", "/x")) == 1


class TestErrors:
    def test_handler_exception_propagates(self) -> None:
        def boom():
            raise ValueError("boom")

        dispatcher, recorder = _dispatcher(("GET", "/x", boom), ("GET", "/x", lambda: "after"))

        with pytest.raises(ValueError, match="boom"):
            dispatcher.handle("GET", "/x")
        assert recorder.results == []

    def test_processor_exception_propagates(self) -> None:
        registry = RouteRegistry()
        registry.register("GET", "/x", [], lambda: object())
        registry.finalize()
        dispatcher = Dispatcher(registry)

        with pytest.raises(ConfigurationError, match="Cannot convert"):
            dispatcher.handle("GET", "/x", sink=ResponseSink())


class TestConcurrency:
    def test_concurrent_dispatch_is_consistent(self) -> None:
        registry = RouteRegistry()
        registry.register("GET", "/items/:id", None, lambda id, page: {"id": id, "page": page})
        registry.register("DELETE", "/items/:id", None, lambda id: {"deleted": id})
        registry.register("GET", "/items/:id", None, lambda id: {"again": id})
        registry.finalize()
        dispatcher = Dispatcher(registry)
        barrier = threading.Barrier(8)

        def work(n: int) -> list[object]:
            barrier.wait()
            outcomes: list[object] = []
            for i in range(200):
                sink = ResponseSink()
                key = f"{n}_{i}"
                handled = dispatcher.handle("GET", f"/items/{key}", {"page": str(i)}, sink=sink)
                expected = [{"id": key, "page": str(i)}, {"again": key}]
                outcomes.append((handled, sink.results == expected))
            return outcomes

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = [r for batch in pool.map(work, range(8)) for r in batch]

        assert len(results) == 1600
        assert all(handled and consistent for handled, consistent in results)

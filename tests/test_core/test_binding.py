"""Tests for signpost.binding: parameter introspection and name binding."""

import logging

from signpost.binding import (
    Parameter,
    bind_arguments,
    call_bound,
    callable_name,
    parameters_of,
)


def show(id, name="guest"):
    return (id, name)


class TestParametersOf:
    def test_function(self) -> None:
        assert parameters_of(show) == (
            Parameter("id", required=True),
            Parameter("name", required=False, default="guest"),
        )

    def test_bound_method_excludes_self(self) -> None:
        class Controller:
            def action(self, slug, *, page=1):
                return slug, page

        params = parameters_of(Controller().action)
        assert [p.name for p in params] == ["slug", "page"]
        assert params[1].keyword_only

    def test_variadic_skipped(self) -> None:
        def fn(a, *args, **kwargs):
            return a

        assert [p.name for p in parameters_of(fn)] == ["a"]


class TestBindArguments:
    def test_uses_context_and_defaults(self) -> None:
        values = bind_arguments(parameters_of(show), {"id": "7"}, "show")
        assert values == ["7", "guest"]

    def test_context_overrides_default(self) -> None:
        values = bind_arguments(parameters_of(show), {"id": "7", "name": "ann"})
        assert values == ["7", "ann"]

    def test_missing_required_warns_and_uses_none(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="signpost.routing"):
            values = bind_arguments(parameters_of(show), {}, "show")

        assert values == [None, "guest"]
        assert "Missing argument 'id' for show()" in caplog.text

    def test_missing_optional_is_silent(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="signpost.routing"):
            bind_arguments([Parameter("page", required=False, default=1)], {})
        assert caplog.records == []

    def test_unknown_context_ignored(self) -> None:
        assert bind_arguments(parameters_of(show), {"id": 1, "other": 2}) == [1, "guest"]


class TestCallBound:
    def test_keyword_only(self) -> None:
        def fn(a, *, b):
            return a, b

        params = parameters_of(fn)
        assert call_bound(fn, params, bind_arguments(params, {"a": 1, "b": 2})) == (1, 2)

    def test_end_to_end(self) -> None:
        params = parameters_of(show)
        assert call_bound(show, params, bind_arguments(params, {"id": "7"})) == ("7", "guest")


class TestCallableName:
    def test_function(self) -> None:
        assert callable_name(show) == "show"

    def test_callable_instance(self) -> None:
        class Page:
            def __call__(self):
                return "page"

        assert callable_name(Page()).endswith("Page")

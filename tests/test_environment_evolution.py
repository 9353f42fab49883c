"""
Growing the environment over time.

The functions below start out needing only a translation table. A lower bound
is then added to the environment; the old functions are left untouched and
keep working against the wider environment, while a new function reads the
new field through ``ask`` and chains into the old ones.
"""

from typing import TypedDict

import pytest

from doreader import (
    MissingDependencyError,
    Reader,
    ask,
    do,
    override,
    reader,
    run,
    widen,
)

I18n = TypedDict("I18n", {"true": str, "false": str})


class Deps(TypedDict):
    i18n: I18n


class Deps2(Deps):
    lower_bound: int


def f(b: bool) -> Reader[Deps, str]:
    return reader(lambda deps: deps["i18n"]["true"] if b else deps["i18n"]["false"], Deps)


def g(n: int) -> Reader[Deps, str]:
    return f(n > 2)


def h(s: str) -> Reader[Deps, str]:
    return g(len(s) + 1)


def g2(n: int) -> Reader[Deps2, str]:
    return ask(Deps2).flat_map(lambda deps: f(n > deps["lower_bound"]))


def g2_raw(n: int) -> Reader[Deps2, str]:
    """The same as g2, destructuring the environment by hand."""

    return reader(lambda deps: f(n > deps["lower_bound"]).run(deps), Deps2)


@do
def g2_do(n: int):
    deps = yield ask(Deps2)
    return (yield f(n > deps["lower_bound"]))


def h2(s: str) -> Reader[Deps2, str]:
    return g2(len(s) + 1)


class TestWorkedExample:
    def test_override_lower_bound_gives_falso(self, deps) -> None:
        assert run(h2("foo"), {**deps, "lower_bound": 4}) == "falso"
        assert run(h2("foo"), deps, lower_bound=4) == "falso"

    def test_default_lower_bound_gives_vero(self, deps, env_factory) -> None:
        assert run(h2("foo"), env_factory(deps)) == "vero"

    @pytest.mark.parametrize("variant", [g2, g2_raw, g2_do], ids=["chain", "raw", "do"])
    def test_variants_agree(self, deps, variant) -> None:
        for bound in range(0, 7):
            env = override(deps, lower_bound=bound)
            assert run(variant(4), env) == run(g2(4), env)

    def test_override_leaves_environment_untouched(self, deps) -> None:
        run(h2("foo"), deps, lower_bound=4)

        assert deps["lower_bound"] == 2

    def test_same_composition_different_call_sites(self, deps) -> None:
        composed = h2("foo")

        results = [run(composed, deps, lower_bound=bound) for bound in (2, 3, 4, 5)]

        assert results == ["vero", "vero", "falso", "falso"]


class TestWidening:
    def test_narrow_readers_run_against_wide_environment(self, narrow_deps) -> None:
        wide = widen(narrow_deps, lower_bound=10)

        assert run(h("foo"), narrow_deps) == run(h("foo"), wide) == "vero"

    def test_widening_transparency(self, narrow_deps) -> None:
        """Environments agreeing on the narrow fields give identical results."""

        e2a = widen(narrow_deps, lower_bound=0)
        e2b = widen(narrow_deps, lower_bound=99)

        for word in ("", "a", "foo", "longer"):
            assert run(h(word), e2a) == run(h(word), e2b)

    def test_unrelated_extra_fields_are_ignored(self, deps) -> None:
        assert run(h("foo"), {**deps, "locale": "it", "debug": True}) == "vero"

    def test_wide_reader_rejects_narrow_environment(self, narrow_deps) -> None:
        with pytest.raises(MissingDependencyError) as exc_info:
            run(h2("foo"), narrow_deps)

        assert exc_info.value.key == "lower_bound"
        assert exc_info.value.schema_name == "Deps2"

    def test_composition_declares_wider_shape(self) -> None:
        assert g2(3).requires.widens(Deps)
        assert g2(3).requires.widens(Deps2)
        assert not h(3 * "x").requires.widens(Deps2)


class TestOverrideIsolation:
    @pytest.mark.parametrize("word", ["", "ab", "foo", "abcdef"])
    def test_override_of_unread_field(self, deps, word) -> None:
        """Changing a field the reader never reads cannot change its result."""

        changed = override(deps, lower_bound=deps["lower_bound"] + 100)

        assert run(h(word), deps) == run(h(word), changed)

    def test_override_of_read_field_can_change_result(self, deps) -> None:
        flipped = override(deps, i18n={"true": "yes", "false": "no"})

        assert run(h("foo"), flipped) == "yes"


def test_run_with_explicit_shape(deps) -> None:
    assert run(h("foo"), deps, shape=Deps2) == "vero"
    with pytest.raises(MissingDependencyError):
        run(h("foo"), {"i18n": deps["i18n"]}, shape=Deps2)


def test_run_rejects_non_reader() -> None:
    with pytest.raises(TypeError, match="expects a Reader"):
        run(lambda env: 1, {})

"""
Threading a translation table and a threshold through three small functions.

``h`` measures a string, ``g`` compares against a lower bound, ``f`` renders
the boolean. Only ``f`` reads the translation table and only ``g`` reads the
lower bound, yet neither dependency appears in any signature.
"""

from typing import TypedDict

from doreader import Reader, ask, do, reader, run

I18n = TypedDict("I18n", {"true": str, "false": str})


class Deps(TypedDict):
    i18n: I18n


# Widening: everything written against Deps keeps working against Deps2.
class Deps2(Deps):
    lower_bound: int


def f(b: bool) -> Reader[Deps, str]:
    return reader(lambda deps: deps["i18n"]["true"] if b else deps["i18n"]["false"], Deps)


def g(n: int) -> Reader[Deps2, str]:
    return ask(Deps2).flat_map(lambda deps: f(n > deps["lower_bound"]))


@do
def g_do(n: int):
    deps = yield ask(Deps2)
    return (yield f(n > deps["lower_bound"]))


def h(s: str) -> Reader[Deps2, str]:
    return g(len(s) + 1)


deps: Deps2 = {
    "i18n": {"true": "vero", "false": "falso"},
    "lower_bound": 2,
}


if __name__ == "__main__":
    print(run(h("foo"), deps))  # vero
    print(run(h("foo"), deps, lower_bound=4))  # falso
    print(run(g_do(4), deps, lower_bound=4))  # falso

"""
Pytest configuration for doreader tests.

Provides the environments shared across the test modules.
"""

from typing import Any

import pytest

from doreader import FrozenDict, utils


@pytest.fixture
def deps() -> dict[str, Any]:
    """Translation table plus lower bound, as used by the worked example."""

    return {
        "i18n": {"true": "vero", "false": "falso"},
        "lower_bound": 2,
    }


@pytest.fixture
def narrow_deps() -> dict[str, Any]:
    """The same environment before the lower bound was added."""

    return {"i18n": {"true": "vero", "false": "falso"}}


@pytest.fixture(params=[dict, FrozenDict], ids=["dict", "frozendict"])
def env_factory(request):
    """Build environments both as plain dicts and as frozen mappings."""

    return request.param


@pytest.fixture
def no_type_checks(monkeypatch):
    monkeypatch.setattr(utils, "CHECK_FIELD_TYPES", False)

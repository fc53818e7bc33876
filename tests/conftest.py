from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's ``LODMAPPER_*`` settings out of the tests."""

    for name in list(os.environ):
        if name.startswith("LODMAPPER_"):
            monkeypatch.delenv(name)

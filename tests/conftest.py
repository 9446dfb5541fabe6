from __future__ import annotations

import logging
from typing import Generator

import pytest

from envkeeper.models import Package
from envkeeper.core import DependencyRegistry
from envkeeper.utils.console import reconfigure_console


@pytest.fixture
def flask_registry() -> DependencyRegistry:
    """Registry with the flask → werkzeug/jinja2 → markupsafe graph."""
    return DependencyRegistry.from_packages(
        [
            Package("flask", "3.0.0", ["werkzeug", "jinja2"]),
            Package("werkzeug", "3.0.1", []),
            Package("jinja2", "3.1.2", ["markupsafe"]),
            Package("markupsafe", "2.1.3", []),
        ]
    )


@pytest.fixture(autouse=True)
def fresh_console(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Give every test a plain, uncolored console bound to the current stdout."""
    monkeypatch.setenv("NO_COLOR", "1")
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.fixture(autouse=True)
def reset_envkeeper_logger() -> Generator[None, None, None]:
    """Undo handlers installed by CLI invocations."""
    yield
    root = logging.getLogger("envkeeper")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True

    import envkeeper.utils.logger as logger_module

    logger_module._logging_configured = False

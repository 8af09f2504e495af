import logging
import os
import pathlib
import sys

import pytest


# Ensure repo root is on PYTHONPATH for direct package imports (e.g. `import orden`).
_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from orden.config import ConfigManager  # noqa: E402
from orden.observability import ROOT_LOGGER_NAME  # noqa: E402
from orden.identity import generate_address  # noqa: E402
from orden.token import OrdenToken  # noqa: E402

INITIAL_SUPPLY = 1_000_000


def _env_flag(name: str) -> bool:
    v = (os.environ.get(name) or '').strip().lower()
    return v in {'1', 'true', 'yes', 'y', 'on'}


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "slow: long randomized runs (skipped unless ORDEN_RUN_SLOW=1)",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    run_slow = _env_flag('ORDEN_RUN_SLOW')

    for item in items:
        if 'slow' in item.keywords and not run_slow:
            item.add_marker(pytest.mark.skip(reason='slow tests skipped; set ORDEN_RUN_SLOW=1 to enable'))


@pytest.fixture
def owner() -> str:
    return generate_address()


@pytest.fixture
def ledger_address() -> str:
    return generate_address()


@pytest.fixture
def alice() -> str:
    return generate_address()


@pytest.fixture
def bob() -> str:
    return generate_address()


@pytest.fixture
def carol() -> str:
    return generate_address()


@pytest.fixture
def token(owner, ledger_address) -> OrdenToken:
    return OrdenToken(owner=owner, address=ledger_address, initial_supply=INITIAL_SUPPLY)


@pytest.fixture
def funded(token, owner, alice) -> OrdenToken:
    """Ledger where alice holds 10,000 and fees are zero."""
    token.transfer(owner, alice, 10_000)
    return token


@pytest.fixture
def config_manager():
    manager = ConfigManager()
    manager.reset()
    yield manager
    manager.reset()


@pytest.fixture(autouse=True)
def restore_package_logging():
    """Undo handlers and level changes made to the package root logger."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)

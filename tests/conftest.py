import pytest

from stockledger.logging_config import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    """Undo any configure_logging() a CLI test performed."""
    reset_logging()
    yield
    reset_logging()

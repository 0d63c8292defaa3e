import pytest

from fakes import FakeElement
from region_driver.utils.logger import reset_logging


@pytest.fixture
def make_element():
    return FakeElement


@pytest.fixture(autouse=True)
def _restore_logging():
    # CLI runs install handlers on the package logger
    yield
    reset_logging()

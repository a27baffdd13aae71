import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from soulshepherd.config import load_boss_catalog, load_formulas  # noqa: E402
from soulshepherd.core import ManualClock  # noqa: E402
from soulshepherd.progression import ProgressionEngine  # noqa: E402
from soulshepherd.state import StateSchema  # noqa: E402


class FixedRoll:
    """Random source that always returns the same draw."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture()
def catalog():
    return load_boss_catalog()


@pytest.fixture()
def formulas():
    return load_formulas()


@pytest.fixture()
def engine(catalog, formulas):
    return ProgressionEngine(catalog, formulas)


@pytest.fixture()
def clock():
    return ManualClock(now_ms=1_700_000_000_000)


@pytest.fixture()
def schema(catalog, clock):
    return StateSchema(catalog, clock)


@pytest.fixture()
def fixed_roll():
    return FixedRoll

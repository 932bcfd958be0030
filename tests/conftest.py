import pytest

from buildcalc.calc_calculator import Calculator
from buildcalc.calc_manager import CalculatorsManager


@pytest.fixture  # type: ignore[misc]
def calculator() -> Calculator:
    return Calculator()


@pytest.fixture  # type: ignore[misc]
def small_calculator() -> Calculator:
    return Calculator(max_definitions=3, max_call_depth=10)


@pytest.fixture  # type: ignore[misc]
def manager() -> CalculatorsManager:
    return CalculatorsManager()

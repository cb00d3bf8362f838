import pytest

from rpn import CalculationContext


@pytest.fixture
def context():
    return CalculationContext.new_instance()


@pytest.fixture
def radius_context():
    return CalculationContext.new_instance().set_variable("r", 12)

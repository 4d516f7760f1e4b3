import numpy as np
import pytest

from finplan_core.domain.errors import ValidationError
from finplan_core.domain.models import GrowthConfig
from finplan_core.services.annuity import future_value, monthly_rate
from finplan_core.services.growth import simulate_growth


def test_one_year_simulation():
    result = simulate_growth(GrowthConfig(initial=1000, monthly_contribution=100, annual_rate=12, years=1))
    assert len(result.samples) == 1
    sample = result.samples[0]
    assert sample.year == 1
    assert sample.total_contributed == pytest.approx(2200)
    assert result.final_amount > result.total_contributed
    assert result.final_amount == pytest.approx(sample.balance)


def test_matches_closed_form():
    config = GrowthConfig(initial=5000, monthly_contribution=250, annual_rate=9, years=10)
    result = simulate_growth(config)
    expected = future_value(5000, 250, monthly_rate(9), 120)
    assert result.final_amount == pytest.approx(expected)
    assert [s.year for s in result.samples] == list(range(1, 11))
    assert result.monthly_balances.shape == (120,)
    assert np.all(np.diff(result.monthly_balances) > 0)


def test_zero_rate_has_no_interest():
    result = simulate_growth(GrowthConfig(initial=100, monthly_contribution=10, annual_rate=0, years=2))
    assert result.final_amount == pytest.approx(340)
    assert result.total_interest == pytest.approx(0)


def test_zero_years_returns_initial():
    result = simulate_growth(GrowthConfig(initial=750, monthly_contribution=50, annual_rate=10, years=0))
    assert result.samples == []
    assert result.final_amount == 750
    assert result.total_contributed == 750


@pytest.mark.parametrize(
    "config",
    [
        GrowthConfig(initial=-1),
        GrowthConfig(monthly_contribution=-5),
        GrowthConfig(years=-1),
        GrowthConfig(annual_rate=-1200),
    ],
)
def test_rejects_invalid_config(config):
    with pytest.raises(ValidationError):
        simulate_growth(config)

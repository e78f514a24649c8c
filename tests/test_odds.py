import pytest

from services.odds import round_money, calculate_potential_return, calculate_profit


def test_round_money():
    assert round_money(1.005 * 1000) == 1005.0
    assert round_money('2.345') == pytest.approx(2.35, abs=0.01)
    assert round_money(-0.004) == 0.0


def test_calculate_potential_return():
    assert calculate_potential_return(50, 2.0) == 100.0
    assert calculate_potential_return(33.33, 1.87) == 62.33
    assert calculate_potential_return(10, 1.333) == 13.33


def test_calculate_profit():
    assert calculate_profit(50, 2.0, won=True) == 50.0
    assert calculate_profit(50, 2.0, won=False) == -50.0
    assert calculate_profit(10, 1.333, won=True) == 3.33

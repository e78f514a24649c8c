import pytest

from errors import ValidationError
from services import build_services


def test_monthly_goal_defaults_to_1000(services):
    assert services.settings.get_monthly_goal() == 1000.0


def test_monthly_goal_default_is_configurable(store):
    services = build_services(store, monthly_goal_default=250)

    assert services.settings.get_monthly_goal() == 250.0


def test_set_monthly_goal(services):
    services.settings.set_monthly_goal(2500)
    services.settings.set_monthly_goal('3000')

    assert services.settings.get_monthly_goal() == 3000.0


@pytest.mark.parametrize('value', [0, -100, 'lots', None, 'inf', float('nan')])
def test_set_monthly_goal_rejects_invalid_values(services, value):
    with pytest.raises(ValidationError):
        services.settings.set_monthly_goal(value)
    assert services.settings.get_monthly_goal() == 1000.0


def test_monthly_progress_follows_total_profit(services):
    account = services.accounts.create('A', 1000)
    win = services.bets.create(account.id, '2026-10-01', 'Game', 'Home', 100, 3.0)
    loss = services.bets.create(account.id, '2026-10-02', 'Game', 'Away', 50, 2.0)

    assert services.settings.monthly_progress() == 0.0

    services.bets.update_status(win.id, 'won')
    services.bets.update_status(loss.id, 'lost')
    services.settings.set_monthly_goal(600)

    # profit 200 - 50
    assert services.settings.monthly_progress() == 25.0


def test_monthly_progress_can_be_negative(services):
    account = services.accounts.create('A', 1000)
    loss = services.bets.create(account.id, '2026-10-02', 'Game', 'Away', 100, 2.0)
    services.bets.update_status(loss.id, 'lost')

    assert services.settings.monthly_progress() == -10.0


def test_generic_settings(services):
    assert services.settings.get('theme') is None
    assert services.settings.get('theme', 'light') == 'light'

    services.settings.set('theme', 'dark')
    services.settings.set('theme', 'solarized')

    assert services.settings.get('theme') == 'solarized'

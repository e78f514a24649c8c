"""Key-value settings and the monthly profit goal."""
import math

from errors import ValidationError
from models import Setting
from services.odds import round_money

MONTHLY_GOAL_KEY = 'monthly_goal'
DEFAULT_MONTHLY_GOAL = 1000.0


class SettingsStore:

    def __init__(self, store, bets, default_goal=DEFAULT_MONTHLY_GOAL):
        self.store = store
        self.bets = bets
        self.default_goal = default_goal

    def get(self, key, default=None):
        setting = self.store.get_by_id('settings', key)
        return setting.value if setting is not None else default

    def set(self, key, value):
        setting = self.store.get_by_id('settings', key)
        if setting is None:
            self.store.create('settings', Setting(key=key, value=value))
        else:
            setting.value = value
            self.store.update('settings', setting)

    def get_monthly_goal(self):
        return float(self.get(MONTHLY_GOAL_KEY, self.default_goal))

    def set_monthly_goal(self, value):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ValidationError('Monthly goal must be a number') from None
        if not math.isfinite(value):
            raise ValidationError('Monthly goal must be a finite number')
        if value <= 0:
            raise ValidationError('Monthly goal must be greater than zero')
        self.set(MONTHLY_GOAL_KEY, value)
        return value

    def monthly_progress(self):
        """Total profit as a percentage of the monthly goal."""
        return round_money(self.bets.total_profit() / self.get_monthly_goal() * 100)

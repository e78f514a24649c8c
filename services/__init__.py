"""Ledger services wired around one record store."""
from collections import namedtuple

from services.accounts import AccountLedger
from services.bets import BetEngine
from services.settings import SettingsStore, DEFAULT_MONTHLY_GOAL
from services.transactions import TransactionLog

Services = namedtuple('Services', ['store', 'accounts', 'bets', 'transactions', 'settings'])


def build_services(store, monthly_goal_default=DEFAULT_MONTHLY_GOAL):
    accounts = AccountLedger(store)
    bets = BetEngine(store, accounts)
    return Services(
        store=store,
        accounts=accounts,
        bets=bets,
        transactions=TransactionLog(store),
        settings=SettingsStore(store, bets, default_goal=monthly_goal_default),
    )

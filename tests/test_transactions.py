from datetime import date, datetime, timedelta

import pytest

from errors import ValidationError
from models import TransactionType


@pytest.fixture
def populated(services):
    a = services.accounts.create('A', 100)
    b = services.accounts.create('B', 0)
    services.accounts.transfer(a.id, b.id, 40, 'move')
    bet = services.bets.create(b.id, '2026-10-01', 'Game', 'Home', 10, 2.5)
    services.bets.update_status(bet.id, 'won')
    return a, b


def test_history_for_account_newest_first(services, populated):
    a, b = populated

    history = services.transactions.history_for_account(b.id)

    assert [t.type for t in history] == [
        TransactionType.BET_RETURN, TransactionType.BET_RESERVED, TransactionType.TRANSFER_IN,
    ]


def test_full_history_labels_accounts_and_counterparties(services, populated):
    a, b = populated

    rows = services.transactions.full_history()

    assert len(rows) == 5
    ids = [row['id'] for row in rows]
    assert ids == sorted(ids, reverse=True)
    transfer_out = next(row for row in rows if row['type'] == 'transfer_out')
    assert transfer_out['account_name'] == 'A'
    assert transfer_out['counterparty_name'] == 'B'
    transfer_in = next(row for row in rows if row['type'] == 'transfer_in')
    assert transfer_in['counterparty_name'] == 'A'
    assert 'counterparty_name' not in rows[0]


def test_full_history_marks_removed_accounts_unknown(services):
    gone = services.accounts.create('Gone', 20)
    services.accounts.remove(gone.id)

    rows = services.transactions.full_history()

    assert rows[0]['account_name'] == 'Unknown'


def test_full_history_filters(services, populated):
    a, b = populated

    assert {row['account_id'] for row in services.transactions.full_history(account_id=a.id)} == {a.id}
    deposits = services.transactions.full_history(type='deposit')
    assert [row['amount'] for row in deposits] == [100.0]

    today = date.today()
    assert len(services.transactions.full_history(start=today, end=today)) == 5
    assert len(services.transactions.full_history(start=today.isoformat(), end=today.isoformat())) == 5
    assert services.transactions.full_history(end=today - timedelta(days=1)) == []
    assert services.transactions.full_history(start=today + timedelta(days=1)) == []

    with pytest.raises(ValidationError):
        services.transactions.full_history(type='refund')
    with pytest.raises(ValidationError):
        services.transactions.full_history(start='yesterday')


def test_bankroll_statement_running_balance(services, populated):
    rows = services.transactions.bankroll_statement()

    # newest first, so the first row carries the current bankroll
    assert rows[0]['balance_after'] == services.transactions.total_balance()
    assert rows[-1]['balance_after'] == rows[-1]['amount'] == 100.0


def test_bankroll_statement_keeps_running_balance_when_filtered(services, populated):
    a, b = populated

    rows = services.transactions.bankroll_statement(account_id=b.id)

    assert [row['type'] for row in rows] == ['bet_return', 'bet_reserved', 'transfer_in']
    assert rows[0]['balance_after'] == 115.0


def test_total_balance(services, populated):
    # A: 60, B: 40 - 10 + 25
    assert services.transactions.total_balance() == 115.0


def test_total_balance_empty(services):
    assert services.transactions.total_balance() == 0.0


def test_lookups(services, populated):
    a, b = populated

    assert len(services.transactions.by_account(a.id)) == 2
    assert len(services.transactions.by_type(TransactionType.TRANSFER_OUT)) == 1
    first = services.transactions.list_all()[0]
    assert services.transactions.get(first.id).type == TransactionType.DEPOSIT
    assert services.transactions.get(999) is None


def test_filter_by_period(services, populated):
    now = datetime.now()

    assert len(services.transactions.filter_by_period(now - timedelta(hours=1), now + timedelta(hours=1))) == 5
    assert services.transactions.filter_by_period(now + timedelta(hours=1), None) == []

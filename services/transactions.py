"""Read-side views over the append-only transaction log."""
from datetime import date, datetime, time, timedelta

from errors import ValidationError
from models import TransactionType
from services.odds import round_money

UNKNOWN_ACCOUNT = 'Unknown'


def parse_type(tx_type):
    if isinstance(tx_type, TransactionType):
        return tx_type
    try:
        return TransactionType(tx_type)
    except ValueError:
        raise ValidationError(f'Invalid transaction type: {tx_type}') from None


def _as_start(value):
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return datetime.fromisoformat(str(value))


def _as_end(value):
    """Inclusive upper bound; a bare date covers the whole day."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value + timedelta(days=1), time.min)
    text = str(value)
    if len(text) == 10:
        return datetime.fromisoformat(text) + timedelta(days=1)
    return datetime.fromisoformat(text)


def _newest_first(entries):
    return sorted(entries, key=lambda t: (t.timestamp, t.id), reverse=True)


class TransactionLog:

    def __init__(self, store):
        self.store = store

    def get(self, transaction_id):
        return self.store.get_by_id('transactions', transaction_id)

    def list_all(self):
        return self.store.get_all('transactions')

    def by_account(self, account_id):
        return self.store.get_by_index('transactions', 'account_id', account_id)

    def by_type(self, tx_type):
        return self.store.get_by_index('transactions', 'type', parse_type(tx_type))

    def filter_by_period(self, start, end):
        try:
            start, end = _as_start(start), _as_end(end)
        except ValueError as e:
            raise ValidationError(f'Invalid period: {e}') from None
        return [
            t for t in self.list_all()
            if (start is None or t.timestamp >= start) and (end is None or t.timestamp <= end)
        ]

    def history_for_account(self, account_id):
        return _newest_first(self.by_account(account_id))

    def full_history(self, account_id=None, type=None, start=None, end=None):
        """
        Every entry newest first, labelled with its account name and, for
        transfers, the counterparty name. Optional filters narrow the
        result by account, entry type and an inclusive date range.
        """
        return [row for row in self._labelled_rows() if self._matches(row, account_id, type, start, end)]

    def bankroll_statement(self, account_id=None, type=None, start=None, end=None):
        """Like ``full_history`` plus the bankroll total after each entry."""
        rows = self._labelled_rows()
        running = 0.0
        for row in reversed(rows):
            running = round_money(running + row['amount'])
            row['balance_after'] = running
        return [row for row in rows if self._matches(row, account_id, type, start, end)]

    def total_balance(self):
        return round_money(sum(account.balance for account in self.store.get_all('accounts')))

    def _labelled_rows(self):
        names = {account.id: account.name for account in self.store.get_all('accounts')}
        rows = []
        for entry in _newest_first(self.list_all()):
            row = entry.to_dict()
            row['account_name'] = names.get(entry.account_id, UNKNOWN_ACCOUNT)
            if entry.counterparty_account_id is not None:
                row['counterparty_name'] = names.get(entry.counterparty_account_id, UNKNOWN_ACCOUNT)
            rows.append(row)
        return rows

    def _matches(self, row, account_id, tx_type, start, end):
        if account_id is not None and row['account_id'] != account_id:
            return False
        if tx_type is not None and row['type'] != parse_type(tx_type).value:
            return False
        if start is None and end is None:
            return True
        try:
            lower, upper = _as_start(start), _as_end(end)
        except ValueError as e:
            raise ValidationError(f'Invalid period: {e}') from None
        timestamp = datetime.fromisoformat(row['timestamp'])
        if lower is not None and timestamp < lower:
            return False
        if upper is not None and timestamp > upper:
            return False
        return True

"""Betting-house accounts: balances, money movements and statistics."""
import logging
import math
from datetime import datetime

from errors import ValidationError, NotFoundError, InsufficientFundsError, ConflictError
from models import Account, Transaction, TransactionType
from services.metrics import calculate_roi, calculate_hit_rate
from services.odds import round_money

logger = logging.getLogger(__name__)


def _require_positive(amount, what):
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise ValidationError(f'{what} must be a number') from None
    if not math.isfinite(amount):
        raise ValidationError(f'{what} must be a finite number')
    if amount <= 0:
        raise ValidationError(f'{what} must be greater than zero')
    return round_money(amount)


def _clean_name(name):
    name = (name or '').strip()
    if not name:
        raise ValidationError('Betting house name is required')
    return name


class AccountLedger:
    """
    Owns betting-house accounts.

    Every balance change goes through ``apply_change`` so that the account row
    and its ledger entry are always written together.
    """

    def __init__(self, store):
        self.store = store

    def get(self, account_id):
        return self.store.get_by_id('accounts', account_id)

    def get_or_raise(self, account_id, label='Betting house'):
        account = self.get(account_id)
        if account is None:
            raise NotFoundError(f'{label} {account_id} not found')
        return account

    def list_all(self):
        return self.store.get_all('accounts')

    def create(self, name, initial_balance=0):
        """Open an account; a positive initial balance is logged as a deposit."""
        name = _clean_name(name)
        try:
            initial_balance = round_money(initial_balance or 0)
        except (TypeError, ValueError):
            raise ValidationError('Initial balance must be a number') from None
        if not math.isfinite(initial_balance):
            raise ValidationError('Initial balance must be a finite number')
        if initial_balance < 0:
            raise ValidationError('Initial balance cannot be negative')

        with self.store.atomic():
            account = Account(name=name, balance=0.0, roi=0.0, bet_count=0, hit_rate=0.0)
            account_id = self.store.create('accounts', account)
            if initial_balance > 0:
                self.apply_change(account, initial_balance, TransactionType.DEPOSIT, 'Initial balance')
        logger.info('Created betting house %s (%s) with balance %.2f', account_id, name, initial_balance)
        return account

    def rename(self, account_id, name):
        name = _clean_name(name)
        account = self.get_or_raise(account_id)
        account.name = name
        self.store.update('accounts', account)
        return account

    def deposit(self, account_id, amount, description=''):
        amount = _require_positive(amount, 'Deposit amount')
        account = self.get_or_raise(account_id)
        with self.store.atomic():
            entry = self.apply_change(account, amount, TransactionType.DEPOSIT, description)
        return entry

    def withdraw(self, account_id, amount, description=''):
        amount = _require_positive(amount, 'Withdrawal amount')
        account = self.get_or_raise(account_id)
        if account.balance < amount:
            raise InsufficientFundsError(
                f'Insufficient balance in {account.name}: {account.balance:.2f} < {amount:.2f}'
            )
        with self.store.atomic():
            entry = self.apply_change(account, -amount, TransactionType.WITHDRAW, description)
        return entry

    def transfer(self, from_id, to_id, amount, description=''):
        """Move money between two accounts, logging one entry per side."""
        amount = _require_positive(amount, 'Transfer amount')
        if from_id is None or to_id is None:
            raise ValidationError('Source and destination are required')
        source = self.get_or_raise(from_id, 'Source betting house')
        destination = self.get_or_raise(to_id, 'Destination betting house')
        if source.id == destination.id:
            raise ValidationError('Source and destination must be different')
        if source.balance < amount:
            raise InsufficientFundsError(
                f'Insufficient balance in {source.name}: {source.balance:.2f} < {amount:.2f}'
            )

        received = f'Transfer received from {source.name}'
        if description:
            received = f'{received}: {description}'

        with self.store.atomic():
            outgoing = self.apply_change(source, -amount, TransactionType.TRANSFER_OUT, description,
                                         counterparty_account_id=destination.id)
            incoming = self.apply_change(destination, amount, TransactionType.TRANSFER_IN, received,
                                         counterparty_account_id=source.id)
        return outgoing, incoming

    def remove(self, account_id):
        account = self.get_or_raise(account_id)
        if self.store.get_by_index('bets', 'account_id', account.id):
            raise ConflictError('Cannot remove a betting house that still has bets')
        self.store.delete('accounts', account.id)
        logger.info('Removed betting house %s (%s)', account.id, account.name)

    def statement(self, account_id):
        """The account's ledger entries, newest first."""
        self.get_or_raise(account_id)
        entries = self.store.get_by_index('transactions', 'account_id', account_id)
        return sorted(entries, key=lambda t: (t.timestamp, t.id), reverse=True)

    def recompute_statistics(self, account_id):
        """Rebuild bet count, ROI and hit rate from every bet on the account."""
        account = self.get_or_raise(account_id)
        bets = self.store.get_by_index('bets', 'account_id', account.id)
        account.bet_count = len(bets)
        account.roi = calculate_roi(bets)
        account.hit_rate = calculate_hit_rate(bets)
        self.store.update('accounts', account)
        return account

    def apply_change(self, account, delta, tx_type, description='', counterparty_account_id=None):
        """Change the balance by ``delta`` and append the matching entry.

        Callers run this inside ``store.atomic()``.
        """
        delta = round_money(delta)
        account.balance = round_money(account.balance + delta)
        self.store.update('accounts', account)
        entry = Transaction(
            account_id=account.id,
            type=tx_type,
            amount=delta,
            timestamp=datetime.now(),
            description=description or '',
            counterparty_account_id=counterparty_account_id,
        )
        self.store.create('transactions', entry)
        logger.info('%s %+.2f on %s -> balance %.2f', tx_type.value, delta, account.name, account.balance)
        return entry

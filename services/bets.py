"""Bet lifecycle and the ledger effect of each status transition."""
import logging
import math
from datetime import date, datetime

from errors import ValidationError, NotFoundError, ConflictError
from models import Bet, BetStatus, TransactionType
from services.metrics import calculate_roi, calculate_total_profit
from services.odds import calculate_potential_return, calculate_profit, round_money

logger = logging.getLogger(__name__)

# (old status, new status) -> (sign applied to the potential return, entry type).
# The stake is reserved once at creation, so only the return moves afterwards.
TRANSITIONS = {
    (BetStatus.PENDING, BetStatus.WON): (1, TransactionType.BET_RETURN),
    (BetStatus.PENDING, BetStatus.LOST): (0, TransactionType.BET_LOST),
    (BetStatus.WON, BetStatus.PENDING): (-1, TransactionType.RETURN_REVERSAL),
    (BetStatus.LOST, BetStatus.PENDING): (0, TransactionType.BET_PENDING),
    (BetStatus.WON, BetStatus.LOST): (-1, TransactionType.RETURN_REVERSAL),
    (BetStatus.LOST, BetStatus.WON): (1, TransactionType.BET_RETURN),
}

DESCRIPTIONS = {
    TransactionType.BET_RESERVED: 'Bet placed',
    TransactionType.BET_RETURN: 'Return of winning bet',
    TransactionType.BET_LOST: 'Bet lost',
    TransactionType.BET_PENDING: 'Bet back to pending',
    TransactionType.RETURN_REVERSAL: 'Reversal of bet return',
    TransactionType.BET_UNDO: 'Bet undone',
}

EDITABLE_FIELDS = ('account_id', 'event_date', 'event_name', 'market', 'stake', 'odds')


def parse_status(status):
    if isinstance(status, BetStatus):
        return status
    try:
        return BetStatus(status)
    except ValueError:
        raise ValidationError('Invalid status. Use pending, won or lost') from None


def parse_event_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError('Bet date is required')
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f'Invalid bet date: {value}') from None


def _required_text(value, what):
    value = (value or '').strip()
    if not value:
        raise ValidationError(f'{what} is required')
    return value


def _stake(value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValidationError('Stake must be a number') from None
    if not math.isfinite(value):
        raise ValidationError('Stake must be a finite number')
    if value <= 0:
        raise ValidationError('Stake must be greater than zero')
    return round_money(value)


def _odds(value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValidationError('Odds must be a number') from None
    if not math.isfinite(value):
        raise ValidationError('Odds must be a finite number')
    if value <= 1:
        raise ValidationError('Odds must be greater than 1')
    return value


def _entry_description(tx_type, bet):
    return f'{DESCRIPTIONS[tx_type]}: {bet.event_name} - {bet.market}'


class BetEngine:
    """
    Owns bets and keeps account balances in step with their status.

    Args:
        store: RecordStore shared with the account ledger
        accounts: AccountLedger used for balance changes and statistics
    """

    def __init__(self, store, accounts):
        self.store = store
        self.accounts = accounts

    def get(self, bet_id):
        return self.store.get_by_id('bets', bet_id)

    def get_or_raise(self, bet_id):
        bet = self.get(bet_id)
        if bet is None:
            raise NotFoundError(f'Bet {bet_id} not found')
        return bet

    def list_all(self):
        return self.store.get_all('bets')

    def by_account(self, account_id):
        return self.store.get_by_index('bets', 'account_id', account_id)

    def by_status(self, status):
        return self.store.get_by_index('bets', 'status', parse_status(status))

    def filter_by_period(self, start, end):
        start, end = parse_event_date(start), parse_event_date(end)
        return [bet for bet in self.list_all() if start <= bet.event_date <= end]

    def create(self, account_id, event_date, event_name, market, stake, odds):
        """Place a pending bet, reserving its stake from the account."""
        if not account_id:
            raise ValidationError('Betting house is required')
        event_date = parse_event_date(event_date)
        event_name = _required_text(event_name, 'Event')
        market = _required_text(market, 'Market')
        stake = _stake(stake)
        odds = _odds(odds)
        account = self.accounts.get_or_raise(account_id)

        with self.store.atomic():
            bet = Bet(
                account_id=account.id,
                event_date=event_date,
                event_name=event_name,
                market=market,
                stake=stake,
                odds=odds,
                potential_return=calculate_potential_return(stake, odds),
                status=BetStatus.PENDING,
            )
            self.store.create('bets', bet)
            self.accounts.apply_change(account, -stake, TransactionType.BET_RESERVED,
                                       _entry_description(TransactionType.BET_RESERVED, bet))
            self.accounts.recompute_statistics(account.id)
        return bet

    def update_status(self, bet_id, new_status):
        new_status = parse_status(new_status)
        bet = self.get_or_raise(bet_id)
        if bet.status == new_status:
            return bet
        account = self.accounts.get_or_raise(bet.account_id)
        sign, tx_type = TRANSITIONS[(bet.status, new_status)]
        delta = sign * calculate_potential_return(bet.stake, bet.odds)

        with self.store.atomic():
            old_status = bet.status
            bet.status = new_status
            self.store.update('bets', bet)
            self.accounts.apply_change(account, delta, tx_type, _entry_description(tx_type, bet))
            self.accounts.recompute_statistics(account.id)
        logger.info('Bet %s moved %s -> %s', bet.id, old_status.value, new_status.value)
        return bet

    def edit(self, bet_id, **changes):
        """
        Change bet details without touching any balance.

        A field passed as ``None`` counts as not supplied and keeps its
        current value. The potential return is recomputed from the
        resulting stake and odds.
        """
        bet = self.get_or_raise(bet_id)
        if 'status' in changes:
            raise ValidationError('Use the status update to change a bet status')
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f'Unknown bet fields: {", ".join(sorted(unknown))}')
        changes = {field: value for field, value in changes.items() if value is not None}

        old_account_id = bet.account_id
        new_account_id = old_account_id
        if 'account_id' in changes:
            new_account_id = self.accounts.get_or_raise(changes['account_id']).id

        values = {}
        if 'event_date' in changes:
            values['event_date'] = parse_event_date(changes['event_date'])
        if 'event_name' in changes:
            values['event_name'] = _required_text(changes['event_name'], 'Event')
        if 'market' in changes:
            values['market'] = _required_text(changes['market'], 'Market')
        if 'stake' in changes:
            values['stake'] = _stake(changes['stake'])
        if 'odds' in changes:
            values['odds'] = _odds(changes['odds'])

        with self.store.atomic():
            for field, value in values.items():
                setattr(bet, field, value)
            bet.account_id = new_account_id
            bet.potential_return = calculate_potential_return(bet.stake, bet.odds)
            self.store.update('bets', bet)
            self.accounts.recompute_statistics(old_account_id)
            if new_account_id != old_account_id:
                self.accounts.recompute_statistics(new_account_id)
        return bet

    def delete(self, bet_id):
        """Drop the bet record. The reserved stake is not refunded; see ``undo``."""
        bet = self.get_or_raise(bet_id)
        account_id = bet.account_id
        with self.store.atomic():
            self.store.delete('bets', bet.id)
            self.accounts.recompute_statistics(account_id)

    def undo(self, bet_id):
        """Cancel a pending bet, refunding its stake to the account."""
        bet = self.get_or_raise(bet_id)
        if bet.status != BetStatus.PENDING:
            raise ConflictError('Only pending bets can be undone')
        account = self.accounts.get_or_raise(bet.account_id)

        with self.store.atomic():
            entry = self.accounts.apply_change(account, bet.stake, TransactionType.BET_UNDO,
                                               _entry_description(TransactionType.BET_UNDO, bet))
            self.store.delete('bets', bet.id)
            self.accounts.recompute_statistics(account.id)
        return entry

    def total_profit(self):
        return calculate_total_profit(self.list_all())

    def overall_roi(self):
        return calculate_roi(self.list_all())

    def total_pending_value(self):
        return round_money(sum(bet.stake for bet in self.by_status(BetStatus.PENDING)))

    def profit_statement(self):
        """
        Settled bets newest first, with each bet's profit and the profit
        accumulated up to it in chronological order.
        """
        settled = [bet for bet in self.list_all() if bet.is_settled]
        settled.sort(key=lambda bet: (bet.event_date, bet.created_at, bet.id))
        names = {account.id: account.name for account in self.accounts.list_all()}

        rows = []
        accumulated = 0.0
        for bet in settled:
            profit = calculate_profit(bet.stake, bet.odds, bet.status == BetStatus.WON)
            accumulated = round_money(accumulated + profit)
            row = bet.to_dict()
            row['account_name'] = names.get(bet.account_id, 'Unknown')
            row['profit'] = profit
            row['accumulated_profit'] = accumulated
            rows.append(row)
        rows.reverse()
        return rows

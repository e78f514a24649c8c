from flask_sqlalchemy import SQLAlchemy
from datetime import datetime
from enum import Enum

# This will be initialized in app.py
db = SQLAlchemy()

class BetStatus(Enum):
    PENDING = 'pending'
    WON = 'won'
    LOST = 'lost'

class TransactionType(Enum):
    DEPOSIT = 'deposit'
    WITHDRAW = 'withdraw'
    TRANSFER_OUT = 'transfer_out'
    TRANSFER_IN = 'transfer_in'
    BET_RESERVED = 'bet_reserved'
    BET_RETURN = 'bet_return'
    BET_LOST = 'bet_lost'
    BET_PENDING = 'bet_pending'
    RETURN_REVERSAL = 'return_reversal'
    BET_UNDO = 'bet_undo'

SETTLED_STATUSES = (BetStatus.WON, BetStatus.LOST)

def _iso(value):
    return value.isoformat() if value else None

class Account(db.Model):
    __tablename__ = 'account'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    balance = db.Column(db.Float, nullable=False, default=0.0)
    roi = db.Column(db.Float, nullable=False, default=0.0)
    bet_count = db.Column(db.Integer, nullable=False, default=0)
    hit_rate = db.Column(db.Float, nullable=False, default=0.0)
    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'balance': self.balance,
            'roi': self.roi,
            'bet_count': self.bet_count,
            'hit_rate': self.hit_rate,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Account {self.name} ${self.balance:.2f}>'

class Bet(db.Model):
    __tablename__ = 'bet'

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey('account.id'), nullable=False, index=True)
    event_date = db.Column(db.Date, nullable=False, index=True)
    event_name = db.Column(db.String(200), nullable=False)
    market = db.Column(db.String(200), nullable=False)
    stake = db.Column(db.Float, nullable=False)
    odds = db.Column(db.Float, nullable=False)
    potential_return = db.Column(db.Float, nullable=False)
    status = db.Column(db.Enum(BetStatus), nullable=False, default=BetStatus.PENDING, index=True)
    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    account = db.relationship('Account', backref=db.backref('bets', lazy=True))

    @property
    def is_settled(self):
        return self.status in SETTLED_STATUSES

    def to_dict(self):
        return {
            'id': self.id,
            'account_id': self.account_id,
            'event_date': _iso(self.event_date),
            'event_name': self.event_name,
            'market': self.market,
            'stake': self.stake,
            'odds': self.odds,
            'potential_return': self.potential_return,
            'status': self.status.value,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Bet {self.event_name} ${self.stake:.2f} @ {self.odds} {self.status.value}>'

class Transaction(db.Model):
    __tablename__ = 'ledger_transaction'

    # Entries are never updated; account_id is a plain column so history
    # survives the removal of its account.
    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, nullable=False, index=True)
    type = db.Column(db.Enum(TransactionType), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    timestamp = db.Column(db.DateTime, default=datetime.now, index=True)
    description = db.Column(db.String(500), default='')
    counterparty_account_id = db.Column(db.Integer, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'account_id': self.account_id,
            'type': self.type.value,
            'amount': self.amount,
            'timestamp': _iso(self.timestamp),
            'description': self.description,
            'counterparty_account_id': self.counterparty_account_id,
        }

    def __repr__(self):
        return f'<Transaction {self.type.value} ${self.amount:.2f}>'

class Setting(db.Model):
    __tablename__ = 'setting'

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.JSON)

    # The store addresses every record by ``id``.
    @property
    def id(self):
        return self.key

    def __repr__(self):
        return f'<Setting {self.key}={self.value!r}>'

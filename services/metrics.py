"""Pure statistics over a set of bets."""
from models import BetStatus
from services.odds import round_money


def settled_bets(bets):
    return [bet for bet in bets if bet.is_settled]


def investment_and_returns(bets):
    """Sum stakes of settled bets and stake x odds of the won ones."""
    investment = 0.0
    returns = 0.0
    for bet in settled_bets(bets):
        investment += bet.stake
        if bet.status == BetStatus.WON:
            returns += bet.stake * bet.odds
    return investment, returns


def calculate_roi(bets):
    """
    ROI in percent over settled bets.

    (returns - investment) / investment x 100, or 0 with nothing settled.
    """
    investment, returns = investment_and_returns(bets)
    if investment == 0:
        return 0.0
    return round_money((returns - investment) / investment * 100)


def calculate_hit_rate(bets):
    settled = settled_bets(bets)
    if not settled:
        return 0.0
    won = sum(1 for bet in settled if bet.status == BetStatus.WON)
    return round_money(won / len(settled) * 100)


def calculate_total_profit(bets):
    investment, returns = investment_and_returns(bets)
    return round_money(returns - investment)

def round_money(value):
    """
    Round a money amount to two decimal places

    Args:
        value (float): Amount in currency units

    Returns:
        float: Amount rounded to cents
    """
    return round(float(value), 2)

def calculate_potential_return(stake, decimal_odds):
    """
    Calculate the payout of a winning single bet

    Args:
        stake (float): Stake amount
        decimal_odds (float): Decimal odds (> 1)

    Returns:
        float: stake x odds, rounded to cents
    """
    return round_money(stake * decimal_odds)

def calculate_profit(stake, decimal_odds, won):
    """
    Calculate the net result of a settled bet

    Args:
        stake (float): Stake amount
        decimal_odds (float): Decimal odds
        won (bool): Whether the bet won

    Returns:
        float: Return minus stake when won, minus the stake when lost
    """
    if won:
        return round_money(calculate_potential_return(stake, decimal_odds) - stake)
    return round_money(-stake)

def ledger_sum(services, account_id):
    """Sum of every ledger entry written for an account."""
    return round(sum(t.amount for t in services.transactions.by_account(account_id)), 2)


def assert_balances_match_ledger(services):
    for account in services.accounts.list_all():
        assert account.balance == ledger_sum(services, account.id), account.name


def entry_types(services, account_id):
    return [t.type for t in sorted(services.transactions.by_account(account_id), key=lambda t: t.id)]

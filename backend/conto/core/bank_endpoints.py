"""Bank endpoint URL templates and account-id extraction."""

ACCOUNTS_MARKER = "/accounts/"


def balance_url(base_url: str, account_id: str) -> str:
    return f"{base_url.rstrip('/')}/accounts/{account_id}/balance"


def transactions_url(
    base_url: str, account_id: str, from_date: str, to_date: str,
) -> str:
    return (
        f"{base_url.rstrip('/')}/accounts/{account_id}/transactions"
        f"?fromAccountingDate={from_date}&toAccountingDate={to_date}"
    )


def money_transfer_url(base_url: str, account_id: str) -> str:
    return f"{base_url.rstrip('/')}/accounts/{account_id}/payments/money-transfers"


def extract_account_id(url: str) -> str | None:
    """Return the path segment after the first /accounts/ marker, or None."""
    _, marker, rest = url.partition(ACCOUNTS_MARKER)
    if not marker:
        return None
    account_id = rest.split("/", 1)[0].split("?", 1)[0]
    return account_id or None


def base_url_of(url: str) -> str | None:
    """Return everything before the /accounts/ marker (the API base), or None."""
    base, marker, _ = url.partition(ACCOUNTS_MARKER)
    return base if marker else None

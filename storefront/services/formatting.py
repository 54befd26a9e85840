"""Display formatting for prices, statuses and roles"""

import re

CURRENCY_SYMBOLS = {
    "PHP": "₱",
    "USD": "$",
}

_WORD_START = re.compile(r"\b\w")


def format_price(amount: float, currency: str = "PHP") -> str:
    """Format an amount as currency, e.g. 1234.5 -> '₱1,234.50'"""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_status(status: str) -> str:
    """'awaiting_payment' -> 'Awaiting Payment'"""
    return _WORD_START.sub(lambda m: m.group(0).upper(), status.replace("_", " "))


def format_role(role: str) -> str:
    if role == "superuser":
        return "Super User"
    return role[:1].upper() + role[1:]


def format_live_status(status: str) -> str:
    if status == "live":
        return "Live Now"
    return status[:1].upper() + status[1:]

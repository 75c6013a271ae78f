"""
Jinja2 templates and display filters for the mini app page.
"""
from datetime import datetime, timezone
from pathlib import Path

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

# Minor units per major unit
_TON_NANOTONS = 1_000_000_000
_EUR_CENTS = 100


def format_amount(amount: int, currency: str) -> str:
    """Format an amount in minor units, e.g. (100, "eur") -> "1.00 EUR"."""
    if (currency or "").lower() == "ton":
        return f"{amount / _TON_NANOTONS:.2f} TON"
    return f"{amount / _EUR_CENTS:.2f} EUR"


def format_time(timestamp: int) -> str:
    """
    Format unix seconds as UTC 'YYYY-MM-DD HH:MM:SS'.

    Values outside the platform's datetime range are shown as given.
    """
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return str(timestamp)


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["format_amount"] = format_amount
templates.env.filters["format_time"] = format_time

"""
Unit tests for the page display filters.
"""
import pytest

from app.core.templating import format_amount, format_time, templates


@pytest.mark.parametrize(
    "amount, currency, expected",
    [
        (100, "eur", "1.00 EUR"),
        (1999, "eur", "19.99 EUR"),
        (5, "EUR", "0.05 EUR"),
        (1_500_000_000, "ton", "1.50 TON"),
        (1_000_000_000, "TON", "1.00 TON"),
        (250, "usd", "2.50 EUR"),
        (0, "", "0.00 EUR"),
    ],
)
def test_format_amount(amount, currency, expected):
    assert format_amount(amount, currency) == expected


def test_format_time_is_utc():
    assert format_time(0) == "1970-01-01 00:00:00"
    assert format_time(1_700_000_000) == "2023-11-14 22:13:20"


@pytest.mark.parametrize("timestamp", [10 ** 20, -(10 ** 20)])
def test_format_time_out_of_range_falls_back_to_raw_value(timestamp):
    assert format_time(timestamp) == str(timestamp)


def test_filters_registered():
    assert templates.env.filters["format_amount"] is format_amount
    assert templates.env.filters["format_time"] is format_time


def test_templates_autoescape():
    rendered = templates.env.from_string("{{ name }}").render(name="<b>x</b>")
    assert rendered == "&lt;b&gt;x&lt;/b&gt;"

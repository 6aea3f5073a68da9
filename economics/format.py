"""
Unit Economics: Formatting Helpers
Single fixed currency (USD). Formatted strings are part of the result contract:
flag messages embed them.
"""

CURRENCY_SYMBOL = '$'

PAYBACK_UNITS = {
    'months': 'mo',
    'transactions': 'purchases',
    'projects': 'projects',
    'deals': 'deals',
}

BREAK_EVEN_UNITS = {
    'clients': 'clients',
    'sales': 'sales',
    'projects': 'projects',
    'deals': 'deals',
}


def format_money(value):
    sign = '-' if round(value) < 0 else ''
    return f"{sign}{CURRENCY_SYMBOL}{abs(value):,.0f}"


def format_percent(value, decimals=1):
    return f"{value:.{decimals}f}%"


def format_ratio(value):
    return f"{value:.2f}x"


def format_number(value, decimals=1):
    """Trim trailing zeros: 12 -> '12', 14.2857 -> '14.3', 2e7 -> '20,000,000'."""
    text = f"{round(value, decimals):,.{decimals}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def format_payback(value, unit_kind, months=None):
    unit = PAYBACK_UNITS[unit_kind]
    if months is not None and unit_kind != 'months':
        return f"{value:.2f} {unit} (≈ {months:.1f} mo)"
    return f"{value:.2f} {unit}"


def format_break_even(needed, current, unit_kind):
    unit = BREAK_EVEN_UNITS[unit_kind]
    if current is None:
        return f"{format_number(needed)} {unit} needed to cover fixed costs"
    gap = needed - current
    if gap <= 0:
        return 'Covered'
    return f"{format_number(gap)} more {unit} needed"

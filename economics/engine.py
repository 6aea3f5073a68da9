"""
Unit Economics: Calculation Engine
guards -> contribution margin -> LTV & LTV/CAC -> payback -> break-even -> flags -> verdict.
Stateless: one call in, one fresh result dict out.
"""
import logging

from economics.core import (
    calculate_cm, calculate_cm_percent, calculate_ltv, calculate_payback,
    calculate_break_even, calculate_ltv_cac_ratio, payback_months,
)
from economics.flags import generate_flags
from economics.format import (
    format_money, format_percent, format_ratio, format_payback,
    format_break_even, format_number,
)
from economics.guards import run_guards
from economics.verdict import generate_verdict

# Ascending upper bounds; the first band whose bound exceeds the value wins.
LTV_CAC_BANDS = [
    (1, 'loss', 'Loss-making'),
    (2, 'critical', 'Critical'),
    (3, 'below_norm', 'Below norm'),
    (5, 'good', 'Good'),
    (float('inf'), 'excellent', 'Excellent'),
]
PAYBACK_MONTH_BANDS = [
    (6, 'fast', 'Fast'),
    (12, 'normal', 'Normal'),
    (float('inf'), 'slow', 'Slow'),
]
PAYBACK_RAW_BANDS = [
    (2, 'fast', 'Fast'),
    (float('inf'), 'slow', 'Slow'),
]

PAYBACK_UNIT_KIND = {
    'subscription': 'months', 'transaction': 'transactions',
    'project': 'projects', 'deal': 'deals',
}
BREAK_EVEN_UNIT_KIND = {
    'subscription': 'clients', 'transaction': 'clients',
    'project': 'projects', 'deal': 'deals',
}


def classify(value, bands):
    for bound, band, label in bands:
        if value < bound:
            return band, label
    return bands[-1][1], bands[-1][2]


def calculate(inputs):
    """NormalizedInputs -> CalculationResult | CalculationError."""
    err = run_guards(inputs)
    if err:
        logging.info("calculation rejected for %s: %s", inputs.template_id, err['message'])
        return err

    cm = calculate_cm(inputs)
    cm_pct = calculate_cm_percent(cm, inputs.revenue)
    metrics = {
        'contributionMargin': {
            'value': round(cm),
            'percent': round(cm_pct, 1),
            'formatted': f"{format_money(cm)} ({format_percent(cm_pct)})",
        },
    }

    if inputs.lifetime:
        metrics.update(_ltv_metrics(cm, inputs))

    metrics['payback'] = _payback_metric(cm, inputs)

    if inputs.fixed_costs_monthly is not None:
        metrics['breakEven'] = _break_even_metric(cm, inputs)

    flags = generate_flags(inputs, metrics)
    verdict = generate_verdict(metrics, flags)
    logging.debug("calculated %s: verdict=%s flags=%d", inputs.template_id, verdict['status'], len(flags))
    return {'metrics': metrics, 'flags': flags, 'verdict': verdict}


def _ltv_metrics(cm, inputs):
    ltv = calculate_ltv(cm, inputs.lifetime)
    # band and flags both read the reported (rounded) ratio
    ratio = round(calculate_ltv_cac_ratio(ltv, inputs.cac), 2)
    band, label = classify(ratio, LTV_CAC_BANDS)
    return {
        'ltv': {
            'value': round(ltv),
            'formula': f"{format_money(cm)} × {format_number(inputs.lifetime)} mo = {format_money(ltv)}",
            'formatted': format_money(ltv),
        },
        'ltvCacRatio': {
            'value': ratio,
            'band': band,
            'benchmark': label,
            'formatted': format_ratio(ratio),
        },
    }


def _payback_metric(cm, inputs):
    value = calculate_payback(inputs.cac, cm)
    months = payback_months(value, inputs)
    kind = PAYBACK_UNIT_KIND[inputs.unit_type]
    if months is not None:
        band, label = classify(months, PAYBACK_MONTH_BANDS)
    else:
        band, label = classify(value, PAYBACK_RAW_BANDS)
    metric = {
        'value': round(value, 2),
        'unit': format_payback(value, kind, months),
        'band': band,
        'benchmark': label,
    }
    if months is not None:
        metric['months'] = round(months, 2)
    return metric


def _break_even_metric(cm, inputs):
    needed = calculate_break_even(inputs.fixed_costs_monthly, cm)
    current = inputs.current_volume
    metric = {
        'unitsNeeded': needed,
        'status': format_break_even(needed, current, BREAK_EVEN_UNIT_KIND[inputs.unit_type]),
    }
    if current is not None:
        metric['currentVolume'] = current
        metric['gap'] = needed - current
    return metric

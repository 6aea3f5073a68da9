"""
Unit Economics: Metric Calculators
Pure arithmetic. The guard layer has already rejected CM <= 0 and CAC <= 0;
the zero fallbacks below only matter when a calculator is called on its own.
"""
import math


def calculate_cm(inputs):
    return inputs.revenue - inputs.variable_cost


def calculate_cm_percent(cm, revenue):
    return cm / revenue * 100 if revenue > 0 else 0


def calculate_ltv(cm, lifetime):
    return cm * lifetime


def calculate_payback(cac, cm):
    """Repeat-cycles needed to recoup CAC (months for subscriptions)."""
    return cac / cm if cm > 0 else 0


def calculate_break_even(fixed_costs, cm):
    # fractional units of sale are not deliverable
    return math.ceil(fixed_costs / cm) if cm > 0 else 0


def calculate_ltv_cac_ratio(ltv, cac):
    return ltv / cac if cac > 0 else 0


def payback_months(payback, inputs):
    """Months-equivalent of a payback figure, or None when the unit type can't be resolved."""
    if inputs.unit_type == 'subscription':
        return payback
    if inputs.unit_type in ('transaction', 'deal'):
        if inputs.repeat_frequency:
            return payback / (inputs.repeat_frequency / 12)
        return None
    if inputs.unit_type == 'project':
        if inputs.duration_days:
            return payback * (inputs.duration_days / 30)
        return None
    return None

"""
Unit Economics: Flag Rule Engine
Declarative rule tables: a universal tier for every model, then one tier per
template. Every matching rule fires, in tier then table order.
Ladders over one metric use half-open ranges so exactly one band fires.
"""
import logging

from economics.format import format_money, format_number


def _ratio(metrics):
    r = metrics.get('ltvCacRatio')
    return r['value'] if r else None


def _margin_pct(metrics):
    return metrics['contributionMargin']['percent']


def _in(value, lo, hi):
    """lo <= value < hi, None never matches."""
    return value is not None and lo <= value < hi


# ══════════════════════════════════════════════════════════════
#  RULE TABLES
# ══════════════════════════════════════════════════════════════

UNIVERSAL_RULES = [
    {
        'id': 'ltv_less_than_cac',
        'check': lambda i, m: _in(_ratio(m), float('-inf'), 1),
        'severity': 'critical',
        'message': 'Loss-making model: LTV ({ltv}) is below CAC ({cac}), every customer loses money',
        'recommendation': 'Urgent: double customer lifetime, cut CAC by 50%+, or raise the price',
    },
    {
        'id': 'ltv_cac_critical',
        'check': lambda i, m: _in(_ratio(m), 1, 2),
        'severity': 'critical',
        'message': 'LTV/CAC is critically low ({ltvCac}); the model pays back, but barely',
        'recommendation': 'Extend customer lifetime or cut CAC by 30-50%',
    },
    {
        'id': 'ltv_cac_low',
        'check': lambda i, m: _in(_ratio(m), 2, 3),
        'severity': 'warning',
        'message': 'LTV/CAC is below the norm ({ltvCac}, norm is above 3x)',
        'recommendation': 'Improve retention: reactivation campaigns, loyalty program',
    },
    {
        'id': 'low_margin',
        'check': lambda i, m: _in(_margin_pct(m), 20, 40),
        'severity': 'warning',
        'message': 'Low contribution margin ({marginPercent}, below 40%)',
        'recommendation': 'Raise the price or reduce variable cost',
    },
    {
        'id': 'very_low_margin',
        'check': lambda i, m: _margin_pct(m) < 20,
        'severity': 'critical',
        'message': 'Critically low contribution margin ({marginPercent}, below 20%)',
        'recommendation': 'Urgently revisit pricing or unit cost',
    },
]

SUBSCRIPTION_RULES = [
    {
        'id': 'churn_critical',
        'check': lambda i, m: i.churn_rate is not None and i.churn_rate > 10,
        'severity': 'critical',
        'message': 'Critical churn ({churn} per month, above 10%)',
        'recommendation': 'Run exit interviews and build a reactivation funnel',
    },
    {
        'id': 'churn_high',
        'check': lambda i, m: i.churn_rate is not None and 5 < i.churn_rate <= 10,
        'severity': 'warning',
        'message': 'Churn above the norm ({churn} per month, norm is 2-5%)',
        'recommendation': 'Improve onboarding in the first 30 days',
    },
    {
        'id': 'payback_long',
        'check': lambda i, m: (m['payback'].get('months') or 0) > 12,
        'severity': 'warning',
        'message': 'Long payback period ({payback}, above 12 months)',
        'recommendation': 'Lower CAC or raise ARPU',
    },
]

TRANSACTION_RULES = [
    {
        'id': 'very_low_repeat_frequency',
        'check': lambda i, m: (i.repeat_frequency or 0) < 1,
        'severity': 'critical',
        'message': 'Critically low purchase frequency ({repeat} per year, below 1)',
        'recommendation': 'Rethink the model: what would make customers come back?',
    },
    {
        'id': 'low_repeat_frequency',
        'check': lambda i, m: _in(i.repeat_frequency or 0, 1, 3),
        'severity': 'warning',
        'message': 'Low repeat purchase frequency ({repeat} per year, below 3)',
        'recommendation': 'Strengthen the loyalty program and email marketing',
    },
    {
        'id': 'high_cac_for_transaction',
        'check': lambda i, m: i.cac > i.revenue * 0.5,
        'severity': 'warning',
        'message': 'CAC ({cac}) is above 50% of the average order value ({revenue})',
        'recommendation': 'Optimize acquisition channels or raise the average order value',
    },
]

PROJECT_RULES = [
    {
        'id': 'capacity_low',
        'check': lambda i, m: bool(m.get('breakEven') and (m['breakEven'].get('gap') or 0) > 0),
        'severity': 'critical',
        'message': 'Capacity does not cover fixed costs ({gap} more projects per month needed)',
        'recommendation': 'Run more projects in parallel or raise project prices',
    },
    {
        'id': 'very_low_project_margin',
        'check': lambda i, m: _margin_pct(m) < 30,
        'severity': 'critical',
        'message': 'Critically low project margin ({marginPercent}, below 30%)',
        'recommendation': 'Urgently revisit pricing or subcontracting',
    },
    {
        'id': 'low_project_margin',
        'check': lambda i, m: _in(_margin_pct(m), 30, 50),
        'severity': 'warning',
        'message': 'Low project margin ({marginPercent}, below 50%)',
        'recommendation': 'Reduce variable cost or raise the project price',
    },
]

TEMPLATE_RULES = {
    'subscription': SUBSCRIPTION_RULES,
    'transaction': TRANSACTION_RULES,
    'project': PROJECT_RULES,
}


# ══════════════════════════════════════════════════════════════
#  EVALUATION
# ══════════════════════════════════════════════════════════════

def generate_flags(inputs, metrics):
    ctx = _message_context(inputs, metrics)
    flags = []
    tiers = (UNIVERSAL_RULES, TEMPLATE_RULES.get(inputs.template_id, []))
    for rules in tiers:
        for rule in rules:
            if rule['check'](inputs, metrics):
                flags.append({
                    'id': rule['id'],
                    'severity': rule['severity'],
                    'message': rule['message'].format(**ctx),
                    'recommendation': rule['recommendation'].format(**ctx),
                })
    if flags:
        logging.debug("flags for %s: %s", inputs.template_id, [f['id'] for f in flags])
    return flags


def _message_context(inputs, metrics):
    """Formatted values a rule message may reference; blanks where a metric is absent."""
    cm = metrics['contributionMargin']
    ltv = metrics.get('ltv') or {}
    ratio = metrics.get('ltvCacRatio') or {}
    be = metrics.get('breakEven') or {}
    churn = getattr(inputs, 'churn_rate', None)
    return {
        'margin': cm['formatted'],
        'marginPercent': f"{cm['percent']:.1f}%",
        'ltv': ltv.get('formatted', ''),
        'ltvCac': ratio.get('formatted', ''),
        'payback': metrics['payback']['unit'],
        'cac': format_money(inputs.cac),
        'revenue': format_money(inputs.revenue),
        'churn': f"{format_number(churn)}%" if churn is not None else '',
        'repeat': format_number(inputs.repeat_frequency or 0),
        'gap': format_number(be['gap']) if be.get('gap') is not None else '',
    }

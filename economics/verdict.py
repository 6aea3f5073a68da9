"""
Unit Economics: Verdict Classifier
One overall health state from flags first, then raw metric thresholds.
"""

VERDICT_MESSAGES = {
    'critical': 'Model needs urgent improvement.',
    'warning': 'Model works, but has room for improvement.',
    'healthy': 'Healthy model: strong margin, LTV/CAC and payback.',
    'monitor': 'Model works; monitor key metrics.',
}

HEALTHY_LTV_CAC = 3
HEALTHY_PAYBACK_MONTHS = 12
HEALTHY_PAYBACK_RAW = 2
HEALTHY_MARGIN_PCT = 50


def generate_verdict(metrics, flags):
    severities = {f['severity'] for f in flags}
    if 'critical' in severities:
        return {'status': 'critical', 'message': VERDICT_MESSAGES['critical']}
    if 'warning' in severities:
        return {'status': 'warning', 'message': VERDICT_MESSAGES['warning']}

    ratio = metrics.get('ltvCacRatio')
    good_ltv_cac = bool(ratio) and ratio['value'] > HEALTHY_LTV_CAC
    payback = metrics['payback']
    if payback.get('months') is not None:
        good_payback = payback['months'] < HEALTHY_PAYBACK_MONTHS
    else:
        good_payback = payback['value'] < HEALTHY_PAYBACK_RAW
    good_margin = metrics['contributionMargin']['percent'] > HEALTHY_MARGIN_PCT

    if good_ltv_cac and good_payback and good_margin:
        return {'status': 'healthy', 'message': VERDICT_MESSAGES['healthy']}
    return {'status': 'warning', 'message': VERDICT_MESSAGES['monitor']}

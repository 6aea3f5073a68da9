import unittest

from economics.flags import generate_flags, UNIVERSAL_RULES, TEMPLATE_RULES
from economics.types import SubscriptionInputs, TransactionInputs, ProjectInputs, CommissionInputs


def _metrics(percent=60.0, ratio=None, months=None, gap=None):
    m = {
        'contributionMargin': {'value': 1000, 'percent': percent, 'formatted': f'$1,000 ({percent:.1f}%)'},
        'payback': {'value': 1.0, 'unit': '1.00 mo', 'band': 'fast', 'benchmark': 'Fast'},
    }
    if ratio is not None:
        m['ltv'] = {'value': 600, 'formula': '', 'formatted': '$600'}
        m['ltvCacRatio'] = {'value': ratio, 'band': '', 'benchmark': '', 'formatted': f'{ratio:.2f}x'}
    if months is not None:
        m['payback']['months'] = months
    if gap is not None:
        m['breakEven'] = {'unitsNeeded': 9, 'currentVolume': 9 - gap, 'gap': gap, 'status': ''}
    return m


def _ids(flags):
    return [f['id'] for f in flags]


# commission has no model-specific tier, so only universal rules fire
NEUTRAL = CommissionInputs(revenue=6000, variable_cost=1000, cac=1000,
                           commission_percent=3, avg_deal_size=200000)


class TestMarginLadder(unittest.TestCase):
    def test_boundaries_are_mutually_exclusive(self):
        expected = {
            19.9: ['very_low_margin'],
            20: ['low_margin'],
            20.1: ['low_margin'],
            39.9: ['low_margin'],
            40: [],
            40.1: [],
        }
        for pct, want in expected.items():
            ids = _ids(generate_flags(NEUTRAL, _metrics(percent=pct)))
            self.assertEqual(ids, want, pct)
            self.assertLessEqual(len({'low_margin', 'very_low_margin'} & set(ids)), 1)

    def test_margin_message_embeds_percent(self):
        flags = generate_flags(NEUTRAL, _metrics(percent=12.5))
        self.assertIn('12.5%', flags[0]['message'])
        self.assertEqual(flags[0]['severity'], 'critical')


class TestLtvCacLadder(unittest.TestCase):
    def test_bands(self):
        expected = {
            0.12: ['ltv_less_than_cac'],
            0.99: ['ltv_less_than_cac'],
            1: ['ltv_cac_critical'],
            1.99: ['ltv_cac_critical'],
            2: ['ltv_cac_low'],
            2.99: ['ltv_cac_low'],
            3: [],
            14: [],
        }
        for ratio, want in expected.items():
            self.assertEqual(_ids(generate_flags(NEUTRAL, _metrics(ratio=ratio))), want, ratio)

    def test_absent_ratio_never_fires(self):
        self.assertEqual(generate_flags(NEUTRAL, _metrics()), [])

    def test_loss_message_embeds_values(self):
        flags = generate_flags(NEUTRAL, _metrics(ratio=0.6))
        self.assertIn('$600', flags[0]['message'])
        self.assertIn('$1,000', flags[0]['message'])


class TestSubscriptionTier(unittest.TestCase):
    def _sub(self, churn):
        return SubscriptionInputs(revenue=5000, variable_cost=1500, cac=3000, lifetime=10, churn_rate=churn)

    def test_churn_ladder(self):
        expected = {12: ['churn_critical'], 10.1: ['churn_critical'], 10: ['churn_high'],
                    5.1: ['churn_high'], 5: [], 2: [], None: []}
        for churn, want in expected.items():
            self.assertEqual(_ids(generate_flags(self._sub(churn), _metrics())), want, churn)

    def test_long_payback(self):
        flags = generate_flags(self._sub(None), _metrics(months=13))
        self.assertEqual(_ids(flags), ['payback_long'])
        self.assertEqual(flags[0]['severity'], 'warning')
        self.assertEqual(generate_flags(self._sub(None), _metrics(months=12)), [])

    def test_universal_flags_come_first(self):
        ids = _ids(generate_flags(self._sub(15), _metrics(percent=10, ratio=0.5, months=40)))
        self.assertEqual(ids, ['ltv_less_than_cac', 'very_low_margin', 'churn_critical', 'payback_long'])


class TestTransactionTier(unittest.TestCase):
    def _tx(self, freq, cac=100):
        return TransactionInputs(revenue=1000, variable_cost=400, cac=cac, lifetime=12, repeat_frequency=freq)

    def test_repeat_frequency_ladder(self):
        expected = {0.5: ['very_low_repeat_frequency'], 1: ['low_repeat_frequency'],
                    2.9: ['low_repeat_frequency'], 3: [], 12: []}
        for freq, want in expected.items():
            self.assertEqual(_ids(generate_flags(self._tx(freq), _metrics())), want, freq)

    def test_high_cac_relative_to_order(self):
        self.assertEqual(_ids(generate_flags(self._tx(6, cac=600), _metrics())), ['high_cac_for_transaction'])
        self.assertEqual(generate_flags(self._tx(6, cac=500), _metrics()), [])


class TestProjectTier(unittest.TestCase):
    INPUTS = ProjectInputs(revenue=100000, variable_cost=40000, cac=10000, duration_days=15, parallel_units=2)

    def test_capacity_gap(self):
        flags = generate_flags(self.INPUTS, _metrics(gap=4))
        self.assertEqual(_ids(flags), ['capacity_low'])
        self.assertIn('4 more projects', flags[0]['message'])
        self.assertEqual(generate_flags(self.INPUTS, _metrics(gap=0)), [])
        self.assertEqual(generate_flags(self.INPUTS, _metrics(gap=-3)), [])

    def test_project_margin_ladder(self):
        expected = {
            25: ['low_margin', 'very_low_project_margin'],
            29.9: ['low_margin', 'very_low_project_margin'],
            30: ['low_margin', 'low_project_margin'],
            49.9: ['low_project_margin'],
            50: [],
        }
        for pct, want in expected.items():
            self.assertEqual(_ids(generate_flags(self.INPUTS, _metrics(percent=pct))), want, pct)


class TestRuleTables(unittest.TestCase):
    def test_rule_records_are_complete(self):
        tables = [UNIVERSAL_RULES] + list(TEMPLATE_RULES.values())
        seen = set()
        for rules in tables:
            for rule in rules:
                self.assertIn(rule['severity'], ('info', 'warning', 'critical'))
                self.assertTrue(callable(rule['check']))
                self.assertTrue(rule['message'] and rule['recommendation'])
                self.assertNotIn(rule['id'], seen)
                seen.add(rule['id'])


if __name__ == "__main__":
    unittest.main()

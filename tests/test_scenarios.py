import unittest

from economics.scenarios import apply_override, apply_overrides, run_scenarios
from economics.types import SubscriptionInputs, ProjectInputs

BASE = SubscriptionInputs(revenue=1000, variable_cost=900, cac=5000, lifetime=6)


class TestOverrides(unittest.TestCase):
    def test_set_multiply_add(self):
        self.assertEqual(apply_override(BASE, {'field': 'cac', 'value': 300, 'operator': 'set'}).cac, 300)
        self.assertAlmostEqual(apply_override(BASE, {'field': 'revenue', 'value': 1.2, 'operator': 'multiply'}).revenue, 1200)
        self.assertEqual(apply_override(BASE, {'field': 'lifetime', 'value': 6, 'operator': 'add'}).lifetime, 12)

    def test_original_untouched(self):
        apply_override(BASE, {'field': 'cac', 'value': 1, 'operator': 'set'})
        self.assertEqual(BASE.cac, 5000)

    def test_camel_case_field_and_default_operator(self):
        out = apply_override(BASE, {'field': 'variableCost', 'value': 500})
        self.assertEqual(out.variable_cost, 500)
        self.assertIsInstance(out, SubscriptionInputs)

    def test_chained(self):
        out = apply_overrides(BASE, [
            {'field': 'cac', 'value': 0.5, 'operator': 'multiply'},
            {'field': 'cac', 'value': 100, 'operator': 'add'},
        ])
        self.assertEqual(out.cac, 2600)
        self.assertIs(apply_overrides(BASE, None), BASE)

    def test_churn_override_moves_derived_lifetime(self):
        churned = SubscriptionInputs(revenue=1000, variable_cost=200, cac=500, lifetime=20, churn_rate=5)
        out = apply_override(churned, {'field': 'churnRate', 'value': 2, 'operator': 'multiply'})
        self.assertEqual(out.churn_rate, 10)
        self.assertAlmostEqual(out.lifetime, 10)
        self.assertEqual(apply_override(churned, {'field': 'churn_rate', 'value': 0}).lifetime, 60)
        with self.assertRaises(ValueError):
            apply_override(churned, {'field': 'churn_rate', 'value': -6, 'operator': 'add'})

    def test_churn_override_keeps_stated_lifetime(self):
        stated = SubscriptionInputs(revenue=1000, variable_cost=200, cac=500, lifetime=12,
                                    original_lifetime=12, churn_rate=5)
        out = apply_override(stated, {'field': 'churn_rate', 'value': 15})
        self.assertEqual(out.lifetime, 12)
        self.assertEqual(out.churn_rate, 15)

    def test_malformed_overrides(self):
        bad = [
            {'field': 'churn_rate', 'value': 5},              # not on project inputs
            {'field': 'cac', 'value': 5, 'operator': 'divide'},
            {'field': 'cac', 'value': '5'},
            {'field': 'cac', 'value': float('inf')},
            {'field': 'fixed_costs_monthly', 'value': 2, 'operator': 'multiply'},  # absent field
        ]
        project = ProjectInputs(revenue=100, variable_cost=40, cac=10)
        for ov in bad:
            with self.assertRaises(ValueError, msg=ov):
                apply_override(project, ov)


class TestRunScenarios(unittest.TestCase):
    def test_each_scenario_calculated_independently(self):
        results = run_scenarios(BASE, [
            {'id': 'base', 'name': 'Base', 'overrides': []},
            {'id': 'cheap-cac', 'name': 'Cheaper acquisition', 'overrides': [
                {'field': 'cac', 'value': 100, 'operator': 'set'},
                {'field': 'revenue', 'value': 2000, 'operator': 'set'},
                {'field': 'lifetime', 'value': 24, 'operator': 'set'},
            ]},
            {'id': 'broken', 'overrides': [{'field': 'variable_cost', 'value': 1500}]},
        ])
        self.assertEqual([r['id'] for r in results], ['base', 'cheap-cac', 'broken'])
        self.assertEqual(results[0]['result']['verdict']['status'], 'critical')
        self.assertEqual(results[1]['result']['verdict']['status'], 'healthy')
        self.assertEqual(results[1]['inputs']['cac'], 100)
        self.assertTrue(results[2]['result']['error'])
        self.assertEqual(results[2]['name'], 'broken')


if __name__ == "__main__":
    unittest.main()

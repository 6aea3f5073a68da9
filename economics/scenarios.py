"""
Unit Economics: Scenario Overrides
What-if primitive: set / multiply / add one numeric input, then recalculate.
Each scenario is an independent calculate() call; results are not diffed.
"""
import dataclasses
import logging
import math

from economics.engine import calculate
from economics.templates import lifetime_from_churn
from economics.types import OVERRIDE_OPERATORS, snake


def apply_override(inputs, override):
    """Return a copy of inputs with one override applied. Raises ValueError on a malformed override."""
    name = snake(str(override.get('field', '')))
    op = override.get('operator', 'set')
    value = override.get('value')

    if name not in inputs.field_names():
        raise ValueError(f"Unknown field '{override.get('field')}' for {inputs.template_id} inputs")
    if op not in OVERRIDE_OPERATORS:
        raise ValueError(f"Unknown operator '{op}'")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"Override value for '{name}' must be a finite number")

    current = getattr(inputs, name)
    if op == 'set':
        new = value
    elif current is None:
        raise ValueError(f"Cannot {op} '{name}': field is not set")
    elif op == 'multiply':
        new = current * value
    else:
        new = current + value
    changes = {name: new}

    # a churn-derived lifetime follows the churn; a stated lifetime stands
    if name == 'churn_rate' and inputs.original_lifetime is None:
        if new < 0:
            raise ValueError("churn_rate cannot be negative")
        changes['lifetime'] = lifetime_from_churn(new)
    return dataclasses.replace(inputs, **changes)


def apply_overrides(inputs, overrides):
    for ov in overrides or []:
        inputs = apply_override(inputs, ov)
    return inputs


def run_scenarios(inputs, scenarios):
    results = []
    for sc in scenarios:
        adjusted = apply_overrides(inputs, sc.get('overrides', []))
        results.append({
            'id': sc.get('id'),
            'name': sc.get('name', sc.get('id', '')),
            'inputs': adjusted.to_dict(),
            'result': calculate(adjusted),
        })
    logging.info("ran %d scenario(s) for %s", len(results), inputs.template_id)
    return results

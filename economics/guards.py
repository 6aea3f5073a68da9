"""
Unit Economics: Guard Layer
Pre-flight checks that reject economically meaningless inputs before any
division happens. First failing guard wins.
"""
import dataclasses
import math

from economics.core import calculate_cm
from economics.types import calc_error, camel


def guard_non_finite(inputs):
    for f in dataclasses.fields(inputs):
        value = getattr(inputs, f.name)
        if isinstance(value, float) and not math.isfinite(value):
            return calc_error(f"{camel(f.name)} must be a finite number", camel(f.name))
    return None


def guard_invalid_cac(cac):
    if cac <= 0:
        return calc_error('CAC must be greater than 0', 'cac')
    return None


def guard_negative_cm(cm):
    if cm <= 0:
        return calc_error('Margin is negative or zero; raise price or cut cost.', 'variableCost')
    return None


GUARDS = (
    guard_non_finite,
    lambda inputs: guard_invalid_cac(inputs.cac),
    lambda inputs: guard_negative_cm(calculate_cm(inputs)),
)


def run_guards(inputs):
    for guard in GUARDS:
        err = guard(inputs)
        if err:
            return err
    return None

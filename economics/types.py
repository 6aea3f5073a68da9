"""
Unit Economics: Input & Result Types
NormalizedInputs is a tagged family of frozen dataclasses, one per business model.
Results travel as JSON-ready dicts (camelCase keys) so the API can return them as-is.
"""
from dataclasses import dataclass, asdict, fields
from typing import ClassVar, Optional

TEMPLATE_IDS = ('subscription', 'transaction', 'project', 'commission')
UNIT_TYPES = ('subscription', 'transaction', 'project', 'deal')
SEVERITIES = ('info', 'warning', 'critical')
VERDICT_STATUSES = ('healthy', 'warning', 'critical')
OVERRIDE_OPERATORS = ('set', 'multiply', 'add')


@dataclass(frozen=True, kw_only=True)
class NormalizedInputs:
    """Canonical shape consumed by every calculator and flag rule."""
    template_id: ClassVar[str] = ''
    unit_type: ClassVar[str] = ''

    revenue: float
    variable_cost: float
    cac: float

    lifetime: Optional[float] = None
    repeat_frequency: Optional[float] = None

    duration_days: Optional[float] = None
    parallel_units: Optional[float] = None

    fixed_costs_monthly: Optional[float] = None
    current_volume: Optional[float] = None

    def to_dict(self):
        out = {'templateId': self.template_id, 'unitType': self.unit_type}
        for k, v in asdict(self).items():
            out[camel(k)] = v
        return out

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]


@dataclass(frozen=True, kw_only=True)
class SubscriptionInputs(NormalizedInputs):
    template_id: ClassVar[str] = 'subscription'
    unit_type: ClassVar[str] = 'subscription'

    churn_rate: Optional[float] = None
    original_lifetime: Optional[float] = None


@dataclass(frozen=True, kw_only=True)
class TransactionInputs(NormalizedInputs):
    template_id: ClassVar[str] = 'transaction'
    unit_type: ClassVar[str] = 'transaction'


@dataclass(frozen=True, kw_only=True)
class ProjectInputs(NormalizedInputs):
    template_id: ClassVar[str] = 'project'
    unit_type: ClassVar[str] = 'project'

    # projects the team can deliver per month
    capacity_monthly: Optional[float] = None


@dataclass(frozen=True, kw_only=True)
class CommissionInputs(NormalizedInputs):
    template_id: ClassVar[str] = 'commission'
    unit_type: ClassVar[str] = 'deal'

    commission_percent: float
    avg_deal_size: float


def calc_error(message, field=None):
    """Build a CalculationError dict."""
    err = {'error': True, 'message': message}
    if field:
        err['field'] = field
    return err


def is_error(obj):
    return isinstance(obj, dict) and obj.get('error') is True


def camel(name):
    head, *rest = name.split('_')
    return head + ''.join(p.capitalize() for p in rest)


def snake(name):
    """camelCase -> snake_case, used when callers address fields by wire name."""
    out = []
    for ch in name:
        if ch.isupper():
            out.append('_')
            out.append(ch.lower())
        else:
            out.append(ch)
    return ''.join(out)

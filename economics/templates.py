"""
Unit Economics: Template Catalog
Per business model: field descriptors for the form, a pydantic schema behind
validate(), and a pure normalize() into the engine's canonical inputs.
"""
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from economics.types import (
    SubscriptionInputs, TransactionInputs, ProjectInputs, CommissionInputs, calc_error,
)

# churn == 0 would mean an infinite lifetime; cap it instead
ZERO_CHURN_LIFETIME_MONTHS = 60
# horizon used for LTV on repeat-purchase models
ANNUAL_HORIZON_MONTHS = 12
DAYS_PER_MONTH = 30

LIFETIME_OR_CHURN = 'Provide either the average customer lifetime or the churn rate'


def parse_number(value):
    """Form value -> float | None. Blank or unparsable strings count as absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else value
    text = str(value).strip().replace(',', '')
    if not text:
        return None
    try:
        num = float(text)
    except ValueError:
        return None
    return None if math.isnan(num) else num


def parse_raw(raw):
    return {k: parse_number(v) for k, v in (raw or {}).items()}


def _field(fid, label, unit, tooltip, required=True, ftype='number', **bounds):
    f = {'id': fid, 'label': label, 'type': ftype, 'unit': unit,
         'required': required, 'tooltip': tooltip}
    f.update(bounds)
    return f


def _make_validate(schema, fields, messages, cross_field=None):
    labels = {f['id']: f['label'] for f in fields}

    def validate(raw):
        """ValidationResult: {'success': bool, 'errors': [{'field', 'message'}]}. Never raises."""
        data = {k: v for k, v in parse_raw(raw).items() if v is not None}
        try:
            schema.model_validate(data)
        except ValidationError as e:
            errors = []
            for item in e.errors():
                field = str(item['loc'][0]) if item['loc'] else (cross_field or '')
                if item['type'] == 'missing':
                    msg = f"{labels.get(field, field)} is required"
                elif item['type'] == 'finite_number':
                    msg = f"{labels.get(field, field)} must be a finite number"
                elif not item['loc']:
                    msg = item['msg'].removeprefix('Value error, ')
                else:
                    msg = messages.get(field) or item['msg'].removeprefix('Value error, ')
                errors.append({'field': field, 'message': msg})
            return {'success': False, 'errors': errors}
        return {'success': True, 'errors': []}

    return validate


class _RawSchema(BaseModel):
    model_config = ConfigDict(extra='ignore', allow_inf_nan=False)


# ══════════════════════════════════════════════════════════════
#  SUBSCRIPTION
# ══════════════════════════════════════════════════════════════

class SubscriptionSchema(_RawSchema):
    arpu: float = Field(gt=0)
    variable_cost: float = Field(ge=0)
    cac: float = Field(gt=0)
    avg_lifetime_months: Optional[float] = Field(default=None, gt=0)
    churn_rate: Optional[float] = Field(default=None, ge=0, le=100)
    fot_monthly: Optional[float] = Field(default=None, ge=0)
    current_clients: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode='after')
    def _lifetime_or_churn(self):
        if not self.avg_lifetime_months and self.churn_rate is None:
            raise ValueError(LIFETIME_OR_CHURN)
        return self


SUBSCRIPTION_FIELDS = [
    _field('arpu', 'Average revenue per user (ARPU)', '$', 'Monthly subscription or membership price'),
    _field('variable_cost', 'Variable cost per client', '$', 'Cost of serving one client per month'),
    _field('cac', 'CAC (acquisition cost)', '$', 'What it costs to acquire one client'),
    _field('avg_lifetime_months', 'Average client lifetime', 'months',
           'How many months a client stays on average', required=False),
    _field('churn_rate', 'Churn rate', '%', 'Share of clients leaving each month',
           required=False, ftype='percentage', max=100),
    _field('fot_monthly', 'Monthly payroll (optional)', '$',
           'Team salaries, used for break-even', required=False),
    _field('current_clients', 'Current clients (optional)', 'pcs', 'Current client base', required=False),
]

SUBSCRIPTION_MESSAGES = {
    'arpu': 'ARPU must be greater than 0',
    'variable_cost': 'Variable cost cannot be negative',
    'cac': 'CAC must be greater than 0',
    'avg_lifetime_months': 'Average lifetime must be greater than 0',
    'churn_rate': 'Churn rate must be between 0 and 100',
    'fot_monthly': 'Payroll cannot be negative',
    'current_clients': 'Current clients must be a whole number, 0 or more',
}


def lifetime_from_churn(churn):
    """Monthly churn % -> expected lifetime in months."""
    if churn == 0:
        return ZERO_CHURN_LIFETIME_MONTHS
    return 1 / (churn / 100)


def normalize_subscription(raw):
    r = parse_raw(raw)
    lifetime_in = r.get('avg_lifetime_months')
    churn = r.get('churn_rate')
    original = None
    if lifetime_in:
        lifetime = lifetime_in
        original = lifetime_in
    elif churn is not None:
        lifetime = lifetime_from_churn(churn)
    else:
        return calc_error(LIFETIME_OR_CHURN, 'avg_lifetime_months')
    return SubscriptionInputs(
        revenue=r['arpu'], variable_cost=r['variable_cost'], cac=r['cac'],
        lifetime=lifetime, original_lifetime=original, churn_rate=churn,
        fixed_costs_monthly=r.get('fot_monthly'), current_volume=r.get('current_clients'),
    )


# ══════════════════════════════════════════════════════════════
#  TRANSACTION (one-time sales with repeat purchases)
# ══════════════════════════════════════════════════════════════

class TransactionSchema(_RawSchema):
    avg_check: float = Field(gt=0)
    variable_cost: float = Field(ge=0)
    cac: float = Field(gt=0)
    repeat_frequency: float = Field(gt=0)
    fot_monthly: Optional[float] = Field(default=None, ge=0)
    current_clients: Optional[int] = Field(default=None, ge=0)


TRANSACTION_FIELDS = [
    _field('avg_check', 'Average order value', '$', 'Average amount of one purchase'),
    _field('variable_cost', 'Variable cost per purchase', '$', 'Cost of goods, shipping and packaging'),
    _field('cac', 'CAC (acquisition cost)', '$', 'What it costs to acquire one buyer'),
    _field('repeat_frequency', 'Purchases per year', 'times/yr',
           'How often a customer buys per year (6 = every two months)'),
    _field('fot_monthly', 'Monthly payroll (optional)', '$',
           'Team salaries, used for break-even', required=False),
    _field('current_clients', 'Active customers (optional)', 'pcs',
           'Customers currently buying', required=False),
]

TRANSACTION_MESSAGES = {
    'avg_check': 'Average order value must be greater than 0',
    'variable_cost': 'Variable cost cannot be negative',
    'cac': 'CAC must be greater than 0',
    'repeat_frequency': 'Purchases per year must be greater than 0',
    'fot_monthly': 'Payroll cannot be negative',
    'current_clients': 'Active customers must be a whole number, 0 or more',
}


def normalize_transaction(raw):
    r = parse_raw(raw)
    return TransactionInputs(
        revenue=r['avg_check'], variable_cost=r['variable_cost'], cac=r['cac'],
        lifetime=ANNUAL_HORIZON_MONTHS, repeat_frequency=r.get('repeat_frequency'),
        fixed_costs_monthly=r.get('fot_monthly'), current_volume=r.get('current_clients'),
    )


# ══════════════════════════════════════════════════════════════
#  PROJECT (agencies, consulting, studios)
# ══════════════════════════════════════════════════════════════

class ProjectSchema(_RawSchema):
    project_revenue: float = Field(gt=0)
    project_cost: float = Field(ge=0)
    cac: float = Field(gt=0)
    project_duration_days: float = Field(gt=0)
    parallel_projects: float = Field(ge=1)
    fot_monthly: Optional[float] = Field(default=None, ge=0)
    current_projects: Optional[int] = Field(default=None, ge=0)


PROJECT_FIELDS = [
    _field('project_revenue', 'Project revenue', '$', 'Average price of one project'),
    _field('project_cost', 'Project cost', '$', 'Variable cost per project: subcontractors, materials, software'),
    _field('cac', 'CAC (acquisition cost)', '$', 'What it costs to win one project client'),
    _field('project_duration_days', 'Project duration', 'days', 'Average days to deliver one project'),
    _field('parallel_projects', 'Parallel projects', 'pcs',
           'How many projects the team runs at once', min=1),
    _field('fot_monthly', 'Monthly payroll', '$',
           'Team salaries, used for break-even', required=False),
    _field('current_projects', 'Projects per month now', 'pcs',
           'Projects currently delivered per month', required=False),
]

PROJECT_MESSAGES = {
    'project_revenue': 'Project revenue must be greater than 0',
    'project_cost': 'Project cost cannot be negative',
    'cac': 'CAC must be greater than 0',
    'project_duration_days': 'Duration must be greater than 0',
    'parallel_projects': 'Run at least 1 project in parallel',
    'fot_monthly': 'Payroll cannot be negative',
    'current_projects': 'Projects per month must be a whole number, 0 or more',
}


def normalize_project(raw):
    r = parse_raw(raw)
    duration = r.get('project_duration_days')
    parallel = r.get('parallel_projects')
    if not duration or not parallel:
        return calc_error('Project duration and parallel projects are needed to size capacity',
                          'project_duration_days' if not duration else 'parallel_projects')
    capacity = DAYS_PER_MONTH / duration * parallel
    current = r.get('current_projects')
    if current is None:
        current = math.floor(capacity)
    return ProjectInputs(
        revenue=r['project_revenue'], variable_cost=r['project_cost'], cac=r['cac'],
        duration_days=duration, parallel_units=parallel, capacity_monthly=capacity,
        fixed_costs_monthly=r.get('fot_monthly'), current_volume=current,
    )


# ══════════════════════════════════════════════════════════════
#  COMMISSION (brokers, agents, deal-based sales)
# ══════════════════════════════════════════════════════════════

class CommissionSchema(_RawSchema):
    avg_deal_size: float = Field(gt=0)
    commission_percent: float = Field(gt=0, le=100)
    variable_cost: float = Field(ge=0)
    cac: float = Field(gt=0)
    deals_per_year: float = Field(gt=0)
    fot_monthly: Optional[float] = Field(default=None, ge=0)
    current_deals: Optional[int] = Field(default=None, ge=0)


COMMISSION_FIELDS = [
    _field('avg_deal_size', 'Average deal size', '$', 'Value of the deal the commission is taken from'),
    _field('commission_percent', 'Commission', '%', 'Your share of the deal value',
           ftype='percentage', max=100),
    _field('variable_cost', 'Variable cost per deal', '$', 'Cost of closing and servicing one deal'),
    _field('cac', 'CAC (acquisition cost)', '$', 'What it costs to acquire one client'),
    _field('deals_per_year', 'Deals per client per year', 'deals/yr', 'How many deals one client brings per year'),
    _field('fot_monthly', 'Monthly payroll (optional)', '$',
           'Team salaries, used for break-even', required=False),
    _field('current_deals', 'Deals per month now (optional)', 'pcs',
           'Deals currently closed per month', required=False),
]

COMMISSION_MESSAGES = {
    'avg_deal_size': 'Average deal size must be greater than 0',
    'commission_percent': 'Commission must be above 0 and at most 100%',
    'variable_cost': 'Variable cost cannot be negative',
    'cac': 'CAC must be greater than 0',
    'deals_per_year': 'Deals per year must be greater than 0',
    'fot_monthly': 'Payroll cannot be negative',
    'current_deals': 'Deals per month must be a whole number, 0 or more',
}


def normalize_commission(raw):
    r = parse_raw(raw)
    deal = r['avg_deal_size']; pct = r['commission_percent']
    return CommissionInputs(
        revenue=deal * pct / 100, variable_cost=r['variable_cost'], cac=r['cac'],
        lifetime=ANNUAL_HORIZON_MONTHS, repeat_frequency=r.get('deals_per_year'),
        commission_percent=pct, avg_deal_size=deal,
        fixed_costs_monthly=r.get('fot_monthly'), current_volume=r.get('current_deals'),
    )


# ══════════════════════════════════════════════════════════════
#  REGISTRY
# ══════════════════════════════════════════════════════════════

TEMPLATES = {
    'subscription': {
        'id': 'subscription',
        'name': 'Subscription',
        'description': 'Fitness clubs, online schools, SaaS, memberships',
        'icon': '📅',
        'fields': SUBSCRIPTION_FIELDS,
        'validate': _make_validate(SubscriptionSchema, SUBSCRIPTION_FIELDS, SUBSCRIPTION_MESSAGES,
                                   cross_field='avg_lifetime_months'),
        'normalize': normalize_subscription,
        'calculations': {'contributionMargin': True, 'ltv': True, 'payback': True, 'breakEven': True},
    },
    'transaction': {
        'id': 'transaction',
        'name': 'One-time sales',
        'description': 'Marketplaces, e-commerce, retail with repeat purchases',
        'icon': '💰',
        'fields': TRANSACTION_FIELDS,
        'validate': _make_validate(TransactionSchema, TRANSACTION_FIELDS, TRANSACTION_MESSAGES),
        'normalize': normalize_transaction,
        'calculations': {'contributionMargin': True, 'ltv': True, 'payback': True, 'breakEven': True},
    },
    'project': {
        'id': 'project',
        'name': 'Projects',
        'description': 'Agencies, consulting, design and development studios',
        'icon': '📊',
        'fields': PROJECT_FIELDS,
        'validate': _make_validate(ProjectSchema, PROJECT_FIELDS, PROJECT_MESSAGES),
        'normalize': normalize_project,
        # no repeat purchases, so no LTV
        'calculations': {'contributionMargin': True, 'ltv': False, 'payback': True, 'breakEven': True},
    },
    'commission': {
        'id': 'commission',
        'name': 'Commission',
        'description': 'Brokers, agents and other deal-based businesses',
        'icon': '🤝',
        'fields': COMMISSION_FIELDS,
        'validate': _make_validate(CommissionSchema, COMMISSION_FIELDS, COMMISSION_MESSAGES),
        'normalize': normalize_commission,
        'calculations': {'contributionMargin': True, 'ltv': True, 'payback': True, 'breakEven': True},
    },
}


def get_template(template_id):
    return TEMPLATES.get(template_id)


def describe_template(template):
    """Catalog entry without the callables, safe to serialize."""
    return {k: v for k, v in template.items() if not callable(v)}

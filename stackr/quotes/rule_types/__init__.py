# Ensure registration happens by importing modules
from .base import Rule, RuleResult, rule_registry  # noqa
from . import (  # noqa
    competitive_position,
    seasonal_incentive,
    experience_band,
    total_threshold,
    job_type_upsell,
)

"""
Ranking package: lifecycle classification, title-prefix priority and the report policy.
"""

from .phases import is_relevant, lifecycle_phase, rank_items
from .policy import DEFAULT_POLICY, ReportPolicy, load_policy

__all__ = ["is_relevant", "lifecycle_phase", "rank_items", "DEFAULT_POLICY", "ReportPolicy", "load_policy"]

"""Audit analysis: rule catalogs, recommendations, scoring and regressions."""

from .engine import DEFAULT_CHECKLIST, audit_snapshot, run_snapshot_audit
from .onpage_rules import ONPAGE_RULES, evaluate_onpage_rules
from .recommendations import generate_recommendations, reprioritize
from .regression_detector import TRACKED_METRICS, detect_regressions, significant_regressions
from .rules import PERFORMANCE_RULE_IDS, RULE_CATEGORIES, RULES, evaluate_rules, get_rule
from .scoring import compute_public_scores, compute_scores

__all__ = [
    "DEFAULT_CHECKLIST",
    "ONPAGE_RULES",
    "PERFORMANCE_RULE_IDS",
    "RULES",
    "RULE_CATEGORIES",
    "TRACKED_METRICS",
    "audit_snapshot",
    "compute_public_scores",
    "compute_scores",
    "detect_regressions",
    "evaluate_onpage_rules",
    "evaluate_rules",
    "generate_recommendations",
    "get_rule",
    "reprioritize",
    "run_snapshot_audit",
    "significant_regressions",
]

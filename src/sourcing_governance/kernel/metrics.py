"""
Prometheus metrics collection for Sourcing Governance.

Provides observability into remote calls, lifecycle transitions and award
rule outcomes.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# Remote Call Metrics
# ============================================================================

remote_calls_total = Counter(
    "sgov_remote_calls_total",
    "Total number of remote gateway calls",
    ["operation", "outcome"],  # outcome: success, soft_failure, hard_failure
)

remote_call_duration_seconds = Histogram(
    "sgov_remote_call_duration_seconds",
    "Duration of remote gateway calls in seconds",
    ["operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# ============================================================================
# Lifecycle Metrics
# ============================================================================

transitions_total = Counter(
    "sgov_transitions_total",
    "Total number of applied lifecycle transitions",
    ["action", "to_status"],
)

illegal_transitions_total = Counter(
    "sgov_illegal_transitions_total",
    "Total number of rejected lifecycle transitions",
    ["action", "from_status"],
)

# ============================================================================
# Award Metrics
# ============================================================================

award_rule_triggers_total = Counter(
    "sgov_award_rule_triggers_total",
    "Total number of triggered award rules",
    ["kind"],
)

award_rules_skipped_total = Counter(
    "sgov_award_rules_skipped_total",
    "Total number of malformed award rule entries skipped",
)

awards_initiated_total = Counter(
    "sgov_awards_initiated_total",
    "Total number of award initiations by outcome",
    ["outcome"],  # auto_approved, workflow_initiated
)

# ============================================================================
# Modification Metrics
# ============================================================================

modification_requests_total = Counter(
    "sgov_modification_requests_total",
    "Total number of modification sessions closed by outcome",
    ["outcome"],  # submitted, refused, no_changes, cancelled
)
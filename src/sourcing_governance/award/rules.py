"""
Award Rule Engine - decides whether a proposed award needs escalated approval

Rules come from administrator configuration as loosely typed records. They
are parsed into a closed set of rule models; anything unrecognized or
malformed is skipped with a warning instead of failing the award. Every rule
is evaluated (no short-circuit) so the approver sees every reason at once.

Rule kinds:
- value_threshold: estimated value above a threshold
- category_threshold: same, but only for events in given categories
- require_higher_approval_on_split: more than one winner selected
"""

import json
import re
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from sourcing_governance.award.models import AwardCheckResult
from sourcing_governance.award.value import format_amount, to_cost
from sourcing_governance.kernel.logging import get_logger
from sourcing_governance.kernel.metrics import award_rule_triggers_total, award_rules_skipped_total
from sourcing_governance.kernel.policy import DEFAULT_AWARD_THRESHOLD

logger = get_logger(__name__)


class ValueThreshold(BaseModel):
    """Triggers when the estimated award value exceeds the threshold"""

    kind: Literal["value_threshold"] = "value_threshold"
    threshold: Decimal

    model_config = {"frozen": True}

    def evaluate(self, value: Decimal, categories: Iterable[str], supplier_count: int) -> str | None:
        if value > self.threshold:
            return (
                f"Estimated award value {format_amount(value)} "
                f"exceeds threshold {format_amount(self.threshold)}."
            )
        return None


class CategoryThreshold(BaseModel):
    """Triggers when the event is in one of the categories and the value exceeds the threshold"""

    kind: Literal["category_threshold"] = "category_threshold"
    categories: list[str] = Field(default_factory=list)
    threshold: Decimal

    model_config = {"frozen": True}

    def evaluate(self, value: Decimal, categories: Iterable[str], supplier_count: int) -> str | None:
        if not self.categories or not set(self.categories) & set(categories):
            return None
        if value > self.threshold:
            return (
                "Category-specific threshold exceeded for categories: "
                f"{', '.join(self.categories)}."
            )
        return None


class RequireHigherApprovalOnSplit(BaseModel):
    """Triggers when the award is split across more than one supplier"""

    kind: Literal["require_higher_approval_on_split"] = "require_higher_approval_on_split"

    model_config = {"frozen": True}

    def evaluate(self, value: Decimal, categories: Iterable[str], supplier_count: int) -> str | None:
        if supplier_count > 1:
            return f"Split award to {supplier_count} suppliers requires higher-level approval."
        return None


AwardRule = Annotated[
    Union[ValueThreshold, CategoryThreshold, RequireHigherApprovalOnSplit],
    Field(discriminator="kind"),
]

_award_rule_adapter: TypeAdapter[Any] = TypeAdapter(AwardRule)

_RULE_TYPES = (ValueThreshold, CategoryThreshold, RequireHigherApprovalOnSplit)


class AwardConfig(BaseModel):
    """
    Parsed award workflow configuration

    Attributes:
        rules: Parsed rules; None means "not configured" (implicit default applies)
        notification_mapping: Notification kind -> template/channel settings
    """

    rules: list[AwardRule] | None = None
    notification_mapping: dict[str, Any] = Field(default_factory=dict)


def _normalize_kind(raw_kind: Any) -> str:
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", str(raw_kind).strip())
    return re.sub(r"[\s\-]+", "_", text).lower()


def _parse_categories(raw: Any) -> list[str] | None:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [part.strip() for part in raw.split(",") if part.strip()]
    if isinstance(raw, (list, tuple, set)):
        return [str(item).strip() for item in raw if str(item).strip()]
    return None


def _skip(entry: Any, reason: str) -> None:
    award_rules_skipped_total.inc()
    logger.warning("Skipping malformed award rule", rule=repr(entry)[:200], reason=reason)


def parse_award_rule(entry: Any) -> Any | None:
    """
    Map one loosely typed rule record to a rule model

    Accepts rule instances or dicts keyed by `kind` or `type`; the threshold
    may be under `threshold` or `value`; categories may be a list or a
    comma-separated string.

    Returns:
        The rule, or None when the entry is unknown or malformed (logged)
    """
    if isinstance(entry, _RULE_TYPES):
        return entry
    if not isinstance(entry, dict):
        _skip(entry, "not a mapping")
        return None

    raw_kind = entry.get("kind", entry.get("type"))
    if raw_kind is None:
        _skip(entry, "missing kind")
        return None
    kind = _normalize_kind(raw_kind)

    data: dict[str, Any] = {"kind": kind}
    if kind in ("value_threshold", "category_threshold"):
        raw_threshold = entry.get("threshold", entry.get("value"))
        threshold = to_cost(raw_threshold)
        if threshold is None:
            _skip(entry, "missing or non-numeric threshold")
            return None
        data["threshold"] = threshold
    if kind == "category_threshold":
        categories = _parse_categories(entry.get("categories"))
        if categories is None:
            _skip(entry, "categories must be a list or comma-separated string")
            return None
        data["categories"] = categories

    try:
        return _award_rule_adapter.validate_python(data)
    except PydanticValidationError:
        _skip(entry, f"unknown rule kind {kind!r}")
        return None


def parse_award_rules(raw: Any) -> list[Any] | None:
    """
    Parse a rule list, skipping malformed entries

    Returns:
        None when rules are not configured (raw is None or not a list),
        otherwise the list of valid rules (possibly empty)
    """
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        logger.warning("Award rules are not a list, using default", rules_type=type(raw).__name__)
        return None
    rules = []
    for entry in raw:
        rule = parse_award_rule(entry)
        if rule is not None:
            rules.append(rule)
    return rules


def parse_award_config(raw: Any) -> AwardConfig:
    """
    Parse an award workflow configuration document

    Accepts a JSON string, a {"rules": [...], "notificationMapping": {...}}
    document, or a bare rule list. An unparseable document counts as "not
    configured".
    """
    document = raw
    if isinstance(raw, (bytes, str)):
        try:
            document = json.loads(raw) if raw.strip() else None
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse award workflow config", error=str(exc))
            return AwardConfig()

    if document is None:
        return AwardConfig()
    if isinstance(document, (list, tuple)):
        return AwardConfig(rules=parse_award_rules(document))
    if not isinstance(document, dict):
        logger.warning(
            "Unsupported award workflow config", config_type=type(document).__name__
        )
        return AwardConfig()

    mapping = document.get("notification_mapping", document.get("notificationMapping"))
    return AwardConfig(
        rules=parse_award_rules(document.get("rules")),
        notification_mapping=mapping if isinstance(mapping, dict) else {},
    )


def default_rules(threshold: Decimal = DEFAULT_AWARD_THRESHOLD) -> list[Any]:
    """The implicit rule set used when nothing is configured"""
    return [ValueThreshold(threshold=threshold)]


def evaluate_award_rules(
    rules: Sequence[Any] | None,
    computed_value: Decimal,
    event_categories: Iterable[str],
    selected_supplier_count: int,
    default_threshold: Decimal = DEFAULT_AWARD_THRESHOLD,
) -> AwardCheckResult:
    """
    Evaluate award rules against a proposed award

    Args:
        rules: Configured rules (models or raw records); None means the
            implicit default [ValueThreshold(default_threshold)]
        computed_value: Estimated award value
        event_categories: Categories of the event
        selected_supplier_count: Number of distinct winners

    Returns:
        AwardCheckResult with one reason per triggered rule, in rule order

    Example:
        >>> evaluate_award_rules([ValueThreshold(threshold=100)], Decimal(190), [], 1).reasons
        ['Estimated award value 190 exceeds threshold 100.']
    """
    parsed = parse_award_rules(rules)
    if parsed is None:
        parsed = default_rules(default_threshold)

    categories = list(event_categories)
    reasons: list[str] = []
    for rule in parsed:
        reason = rule.evaluate(computed_value, categories, selected_supplier_count)
        if reason is not None:
            award_rule_triggers_total.labels(kind=rule.kind).inc()
            reasons.append(reason)

    if reasons:
        logger.info(
            "Award rules triggered",
            value=str(computed_value),
            triggered=len(reasons),
            evaluated=len(parsed),
        )
    return AwardCheckResult(reasons=reasons)

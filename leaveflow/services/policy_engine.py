"""
Policy rule engine

The engine is an explicit instance holding an ordered rule set. It evaluates
every rule that applies to the request's leave type (no short-circuiting),
partitions the failures by severity and ranks the merged remediation
suggestions. Evaluation reads nothing but the ValidationContext, so the same
context always yields an equal ValidationResult.
"""
import enum
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from leaveflow.models.leave import LeaveStatus, LeaveType, IN_CHAIN_STATUSES
from leaveflow.services.working_days import DEFAULT_WEEKEND_DAYS, calendar_days, is_working_day
from leaveflow.utils.json_serializer import to_json_safe

logger = logging.getLogger(__name__)

ALL = "ALL"

INACTIVE_LEAVE_STATUSES = frozenset({LeaveStatus.CANCELLED, LeaveStatus.REJECTED})


class Severity(str, enum.Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class SuggestionAction(str, enum.Enum):
    SWAP_DATES = "SWAP_DATES"
    ADJUST_DATES = "ADJUST_DATES"
    CHANGE_TYPE = "CHANGE_TYPE"
    SPLIT_REQUEST = "SPLIT_REQUEST"
    REDUCE_DAYS = "REDUCE_DAYS"
    ADD_ATTACHMENT = "ADD_ATTACHMENT"
    SUBMIT_EARLIER = "SUBMIT_EARLIER"


@dataclass(frozen=True)
class Suggestion:
    action: SuggestionAction
    message: str
    priority: int
    leave_type: Optional[LeaveType] = None


@dataclass(frozen=True)
class RuleResult:
    rule_id: str
    passed: bool
    severity: Severity
    code: str
    message: str
    priority: int = 0
    suggestions: Tuple[Suggestion, ...] = ()
    details: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class RequesterProfile:
    id: int
    role: str
    join_date: Optional[date] = None
    retirement_date: Optional[date] = None


@dataclass(frozen=True)
class BalanceSnapshot:
    leave_type: LeaveType
    year: int
    opening: float = 0.0
    accrued: float = 0.0
    used: float = 0.0

    @property
    def available(self) -> float:
        return self.opening + self.accrued - self.used


@dataclass(frozen=True)
class LeaveRecord:
    """A sibling leave from the requester's history."""
    id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    status: LeaveStatus
    working_days: int = 0

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_LEAVE_STATUSES

    @property
    def is_in_chain(self) -> bool:
        return self.status in IN_CHAIN_STATUSES


@dataclass(frozen=True)
class ValidationContext:
    leave_type: LeaveType
    start_date: Optional[date]
    end_date: Optional[date]
    working_days: int
    current_date: date
    requester: RequesterProfile
    reason: Optional[str] = None
    has_certificate: bool = False
    balance: Optional[BalanceSnapshot] = None
    other_balances: Tuple[BalanceSnapshot, ...] = ()
    # Working days held by the requester's other in-chain requests of the same type
    pending_days: float = 0.0
    holidays: FrozenSet[date] = frozenset()
    existing_leaves: Tuple[LeaveRecord, ...] = ()
    weekend_days: Tuple[int, ...] = DEFAULT_WEEKEND_DAYS

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @property
    def has_valid_range(self) -> bool:
        return self.has_dates and self.start_date <= self.end_date

    @property
    def calendar_days(self) -> int:
        if not self.has_valid_range:
            return 0
        return calendar_days(self.start_date, self.end_date)

    @property
    def notice_days(self) -> Optional[int]:
        """Days between today and the start date; negative when backdated."""
        if self.start_date is None:
            return None
        return (self.start_date - self.current_date).days

    def is_working_day(self, day: date) -> bool:
        return is_working_day(day, self.holidays, self.weekend_days)

    def active_leaves(self, leave_type: Optional[LeaveType] = None) -> Tuple[LeaveRecord, ...]:
        return tuple(
            leave for leave in self.existing_leaves
            if leave.is_active and (leave_type is None or leave.leave_type == leave_type)
        )

    def balance_for(self, leave_type: LeaveType) -> Optional[BalanceSnapshot]:
        if self.balance is not None and self.balance.leave_type == leave_type:
            return self.balance
        for snapshot in self.other_balances:
            if snapshot.leave_type == leave_type:
                return snapshot
        return None


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    violations: Tuple[RuleResult, ...] = ()
    warnings: Tuple[RuleResult, ...] = ()
    infos: Tuple[RuleResult, ...] = ()
    suggestions: Tuple[Suggestion, ...] = ()

    @property
    def violation_codes(self) -> List[str]:
        return [v.code for v in self.violations]

    @property
    def warning_codes(self) -> List[str]:
        return [w.code for w in self.warnings]

    def to_dict(self) -> Dict[str, Any]:
        return to_json_safe({
            "is_valid": self.is_valid,
            "violations": list(self.violations),
            "warnings": list(self.warnings),
            "infos": list(self.infos),
            "suggestions": list(self.suggestions),
        })

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


@dataclass(frozen=True)
class PolicyConfig:
    """Thresholds for one policy version."""
    max_advance_days: int = 90
    low_balance_reserve_days: float = 3
    weekend_days: Tuple[int, ...] = DEFAULT_WEEKEND_DAYS
    max_suggestions: int = 5

    cl_max_days: int = 3
    cl_min_notice_days: int = 5

    el_max_days: int = 21
    el_min_notice_days: int = 3
    el_extended_days: int = 10

    ml_certificate_after_days: int = 3
    ml_extended_days: int = 10
    ml_max_backdate_days: int = 7
    ml_reclassify_after_days: int = 14

    maternity_max_days: int = 56
    maternity_full_service_months: int = 6
    paternity_max_days: int = 6
    paternity_max_occasions: int = 2
    paternity_interval_months: int = 36
    study_standard_max_days: int = 365
    study_lifetime_max_days: int = 730
    study_retirement_buffer_days: int = 365
    quarantine_max_days: int = 30
    special_disability_max_days: int = 180
    extraordinary_short_service_max_days: int = 180
    extraordinary_long_service_max_days: int = 365
    extraordinary_long_service_years: int = 5

    min_service_years: Tuple[Tuple[LeaveType, float], ...] = (
        (LeaveType.STUDY, 3),
        (LeaveType.EXTRAWITHPAY, 1),
    )
    # Days a start date may lie in the past. MEDICAL is governed by ML_003,
    # other types are not limited.
    backdate_windows: Tuple[Tuple[LeaveType, int], ...] = (
        (LeaveType.CASUAL, 0),
        (LeaveType.EARNED, 30),
    )

    @classmethod
    def from_settings(cls, settings) -> "PolicyConfig":
        return cls(
            max_advance_days=settings.MAX_ADVANCE_DAYS,
            low_balance_reserve_days=settings.LOW_BALANCE_RESERVE_DAYS,
            weekend_days=settings.get_weekend_days(),
            max_suggestions=settings.MAX_SUGGESTIONS,
        )

    def min_service_for(self, leave_type: LeaveType) -> Optional[float]:
        return dict(self.min_service_years).get(leave_type)

    def backdate_window_for(self, leave_type: LeaveType) -> Optional[int]:
        return dict(self.backdate_windows).get(leave_type)


class Rule:
    """
    Base class for a policy rule.

    Subclasses set ``id``, ``description``, ``applies_to`` (a tuple of leave
    types or the ``ALL`` sentinel) and ``priority``, and implement
    ``validate``. Priority orders evaluation and ranks suggestions; it never
    stops evaluation.
    """

    id: str = ""
    description: str = ""
    applies_to: Union[str, Tuple[LeaveType, ...]] = ALL
    priority: int = 50

    def __init__(self, policy: Optional[PolicyConfig] = None):
        self.policy = policy or PolicyConfig()

    def applies(self, leave_type: LeaveType) -> bool:
        return self.applies_to == ALL or leave_type in self.applies_to

    def validate(self, context: ValidationContext) -> RuleResult:
        raise NotImplementedError

    def explain(self, context: ValidationContext) -> str:
        return self.description

    def passed(self, message: str = "") -> RuleResult:
        return RuleResult(
            rule_id=self.id,
            passed=True,
            severity=Severity.INFO,
            code=f"{self.id}_PASSED",
            message=message or self.description,
            priority=self.priority,
        )

    def failed(
        self,
        code: str,
        message: str,
        severity: Severity = Severity.ERROR,
        suggestions: Iterable[Suggestion] = (),
        details: Optional[Dict[str, Any]] = None,
    ) -> RuleResult:
        return RuleResult(
            rule_id=self.id,
            passed=False,
            severity=severity,
            code=code,
            message=message,
            priority=self.priority,
            suggestions=tuple(suggestions),
            details=details,
        )

    def __repr__(self) -> str:
        return f"<Rule {self.id} priority={self.priority}>"


class PolicyEngine:
    """Evaluates a fixed, ordered rule set against validation contexts."""

    def __init__(self, rules: Sequence[Rule], max_suggestions: int = 5, policy: Optional[PolicyConfig] = None):
        seen = set()
        for rule in rules:
            if not rule.id:
                raise ValueError(f"rule {rule!r} has no id")
            if rule.id in seen:
                raise ValueError(f"duplicate rule id: {rule.id}")
            seen.add(rule.id)
        self._rules: Tuple[Rule, ...] = tuple(sorted(rules, key=lambda r: (-r.priority, r.id)))
        self.max_suggestions = max_suggestions
        self.policy = policy or PolicyConfig()

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def applicable_rules(self, leave_type: LeaveType) -> Tuple[Rule, ...]:
        return tuple(rule for rule in self._rules if rule.applies(leave_type))

    def evaluate(self, context: ValidationContext) -> Tuple[RuleResult, ...]:
        """Run every applicable rule; results come back in evaluation order."""
        return tuple(rule.validate(context) for rule in self.applicable_rules(context.leave_type))

    def validate(self, context: ValidationContext) -> ValidationResult:
        results = self.evaluate(context)

        violations = []
        warnings = []
        infos = []
        for result in results:
            if result.passed:
                continue
            if result.severity == Severity.ERROR:
                violations.append(result)
            elif result.severity == Severity.WARNING:
                warnings.append(result)
            else:
                infos.append(result)

        validation = ValidationResult(
            is_valid=not violations,
            violations=tuple(violations),
            warnings=tuple(warnings),
            infos=tuple(infos),
            suggestions=self._rank_suggestions(results),
        )
        logger.debug(
            "policy validation: leave_type=%s requester_id=%s valid=%s violations=%s warnings=%s",
            context.leave_type.value,
            context.requester.id,
            validation.is_valid,
            validation.violation_codes,
            validation.warning_codes,
        )
        return validation

    def explain(self, context: ValidationContext) -> List[Dict[str, Any]]:
        return [
            {
                "rule_id": rule.id,
                "priority": rule.priority,
                "description": rule.description,
                "explanation": rule.explain(context),
            }
            for rule in self.applicable_rules(context.leave_type)
        ]

    def _rank_suggestions(self, results: Iterable[RuleResult]) -> Tuple[Suggestion, ...]:
        ranked = []
        for result in results:
            if result.passed:
                continue
            for suggestion in result.suggestions:
                ranked.append((-suggestion.priority, -result.priority, result.rule_id, suggestion))
        ranked.sort(key=lambda item: item[:3])

        merged: List[Suggestion] = []
        seen = set()
        for _, _, _, suggestion in ranked:
            key = (suggestion.action, suggestion.leave_type)
            if key in seen:
                continue
            seen.add(key)
            merged.append(suggestion)
        return tuple(merged[: self.max_suggestions])


def describe_rules(rules: Iterable[Rule]) -> List[Mapping[str, Any]]:
    """Static catalogue listing for the rules endpoint."""
    return [
        {
            "rule_id": rule.id,
            "description": rule.description,
            "applies_to": ALL if rule.applies_to == ALL else [t.value for t in rule.applies_to],
            "priority": rule.priority,
        }
        for rule in rules
    ]

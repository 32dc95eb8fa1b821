"""
Eligibility and duration ceilings for specialized leave categories
"""
import math

from leaveflow.models.leave import BALANCE_LEAVE_TYPES, EXTRAORDINARY_LEAVE_TYPES, LeaveStatus, LeaveType
from leaveflow.services.policy_engine import (
    Rule,
    RuleResult,
    Severity,
    Suggestion,
    SuggestionAction,
    ValidationContext,
)
from leaveflow.utils.datetime_utils import months_between, years_between


class ServiceEligibilityRule(Rule):
    id = "ELIG_001"
    description = "Some leave types need a minimum length of service"
    applies_to = (LeaveType.STUDY, LeaveType.EXTRAWITHPAY)
    priority = 98

    def validate(self, context: ValidationContext) -> RuleResult:
        required = self.policy.min_service_for(context.leave_type)
        join_date = context.requester.join_date
        if required is None or join_date is None:
            return self.passed()
        service = years_between(join_date, context.current_date)
        if service >= required:
            return self.passed()
        return self.failed(
            "INSUFFICIENT_SERVICE",
            f"{context.leave_type.value} leave requires {required:g} years of service",
            details={"service_years": round(service, 2), "required_years": required},
        )


class MaternityDurationRule(Rule):
    id = "MAT_001"
    description = "Maternity leave ceiling, prorated for short service"
    applies_to = (LeaveType.MATERNITY,)
    priority = 90

    def allowance(self, context: ValidationContext) -> int:
        full = self.policy.maternity_max_days
        join_date = context.requester.join_date
        if join_date is None or context.start_date is None:
            return full
        months = max(months_between(join_date, context.start_date), 0)
        if months >= self.policy.maternity_full_service_months:
            return full
        return math.floor(full * months / self.policy.maternity_full_service_months)

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        allowed = self.allowance(context)
        if context.calendar_days <= allowed:
            return self.passed()
        return self.failed(
            "MATERNITY_MAX_EXCEEDED",
            f"Maternity leave is limited to {allowed} days for this employee",
            suggestions=[
                Suggestion(SuggestionAction.REDUCE_DAYS, f"Reduce the request to {allowed} days", 90),
            ],
            details={"requested_days": context.calendar_days, "allowed_days": allowed},
        )

    def explain(self, context: ValidationContext) -> str:
        return (
            f"Maternity leave allows {self.policy.maternity_max_days} days, prorated below "
            f"{self.policy.maternity_full_service_months} months of service; allowed here: {self.allowance(context)}."
        )


class PaternityRule(Rule):
    id = "PAT_001"
    description = "Paternity leave per-occasion ceiling, occasion count and interval"
    applies_to = (LeaveType.PATERNITY,)
    priority = 90

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        if context.calendar_days > self.policy.paternity_max_days:
            return self.failed(
                "PATERNITY_MAX_DAYS_EXCEEDED",
                f"Paternity leave is limited to {self.policy.paternity_max_days} days per occasion",
                details={"requested_days": context.calendar_days},
            )
        previous = sorted(
            (leave for leave in context.active_leaves(LeaveType.PATERNITY)),
            key=lambda leave: leave.start_date,
        )
        if len(previous) >= self.policy.paternity_max_occasions:
            return self.failed(
                "PATERNITY_MAX_OCCASIONS",
                f"Paternity leave may be taken at most {self.policy.paternity_max_occasions} times",
                details={"previous_occasions": len(previous)},
            )
        if previous:
            last = previous[-1]
            gap = months_between(last.start_date, context.start_date)
            if gap < self.policy.paternity_interval_months:
                return self.failed(
                    "PATERNITY_INTERVAL_NOT_MET",
                    f"Paternity leave occasions must be {self.policy.paternity_interval_months} months apart",
                    details={"months_since_last": gap},
                )
        return self.passed()


class StudyLeaveRule(Rule):
    id = "STD_001"
    description = "Study leave lifetime ceiling and retirement buffer"
    applies_to = (LeaveType.STUDY,)
    priority = 90

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        retirement = context.requester.retirement_date
        if retirement is not None:
            days_left = (retirement - context.start_date).days
            if days_left < self.policy.study_retirement_buffer_days:
                return self.failed(
                    "STUDY_NEAR_RETIREMENT",
                    "Study leave cannot start within a year of retirement",
                    details={"days_until_retirement": days_left},
                )
        previous = sum(
            leave.end_date.toordinal() - leave.start_date.toordinal() + 1
            for leave in context.active_leaves(LeaveType.STUDY)
            if leave.status == LeaveStatus.APPROVED
        )
        total = previous + context.calendar_days
        if total > self.policy.study_lifetime_max_days:
            return self.failed(
                "STUDY_LIFETIME_EXCEEDED",
                f"Total study leave cannot exceed {self.policy.study_lifetime_max_days} days",
                details={"previous_days": previous, "total_days": total},
            )
        if total > self.policy.study_standard_max_days:
            return self.failed(
                "STUDY_BOARD_APPROVAL_REQUIRED",
                f"Study leave beyond {self.policy.study_standard_max_days} days needs board approval",
                severity=Severity.WARNING,
                details={"previous_days": previous, "total_days": total},
            )
        return self.passed()


class QuarantineDurationRule(Rule):
    id = "QUA_001"
    description = "Quarantine leave ceiling"
    applies_to = (LeaveType.QUARANTINE,)
    priority = 90

    def validate(self, context: ValidationContext) -> RuleResult:
        limit = self.policy.quarantine_max_days
        if context.calendar_days <= limit:
            return self.passed()
        return self.failed(
            "QUARANTINE_MAX_EXCEEDED",
            f"Quarantine leave is limited to {limit} days",
            details={"requested_days": context.calendar_days, "max_days": limit},
        )


class SpecialDisabilityDurationRule(Rule):
    id = "SDL_001"
    description = "Special disability leave ceiling"
    applies_to = (LeaveType.SPECIAL_DISABILITY,)
    priority = 90

    def validate(self, context: ValidationContext) -> RuleResult:
        limit = self.policy.special_disability_max_days
        if context.calendar_days <= limit:
            return self.passed()
        return self.failed(
            "SPECIAL_DISABILITY_MAX_EXCEEDED",
            f"Special disability leave is limited to {limit} days",
            details={"requested_days": context.calendar_days, "max_days": limit},
        )


class ExtraordinaryDurationRule(Rule):
    id = "EXT_001"
    description = "Extraordinary leave ceiling depends on length of service"
    applies_to = EXTRAORDINARY_LEAVE_TYPES
    priority = 90

    def limit(self, context: ValidationContext) -> int:
        join_date = context.requester.join_date
        if join_date is not None and years_between(join_date, context.current_date) >= self.policy.extraordinary_long_service_years:
            return self.policy.extraordinary_long_service_max_days
        return self.policy.extraordinary_short_service_max_days

    def validate(self, context: ValidationContext) -> RuleResult:
        limit = self.limit(context)
        if context.calendar_days <= limit:
            return self.passed()
        return self.failed(
            "EXTRAORDINARY_MAX_EXCEEDED",
            f"Extraordinary leave is limited to {limit} days for this length of service",
            details={"requested_days": context.calendar_days, "max_days": limit},
        )


class ExtraordinaryPrerequisiteRule(Rule):
    id = "EXT_002"
    description = "Extraordinary leave only after regular balances are used up"
    applies_to = EXTRAORDINARY_LEAVE_TYPES
    priority = 92

    def validate(self, context: ValidationContext) -> RuleResult:
        remaining = sorted(
            (
                snapshot for snapshot in context.other_balances
                if snapshot.leave_type in BALANCE_LEAVE_TYPES and snapshot.available > 0
            ),
            key=lambda s: (-s.available, s.leave_type.value),
        )
        if not remaining:
            return self.passed()
        best = remaining[0]
        return self.failed(
            "EXTRAORDINARY_BALANCE_REMAINING",
            "Extraordinary leave is granted only when casual, earned and medical balances are exhausted",
            suggestions=[
                Suggestion(
                    SuggestionAction.CHANGE_TYPE,
                    f"Use {best.leave_type.value.lower()} leave first ({best.available:g} days available)",
                    90,
                    best.leave_type,
                ),
            ],
            details={"remaining": {s.leave_type.value: s.available for s in remaining}},
        )

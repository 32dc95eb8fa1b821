"""
Earned leave rules
"""
from leaveflow.models.leave import LeaveType
from leaveflow.services.policy_engine import (
    Rule,
    RuleResult,
    Severity,
    Suggestion,
    SuggestionAction,
    ValidationContext,
)

EARNED = (LeaveType.EARNED,)


class EarnedMaxDaysRule(Rule):
    id = "EL_001"
    description = "Earned leave has a maximum duration per request"
    applies_to = EARNED
    priority = 80

    def validate(self, context: ValidationContext) -> RuleResult:
        limit = self.policy.el_max_days
        if context.working_days <= limit:
            return self.passed()
        return self.failed(
            "EL_MAX_DURATION_EXCEEDED",
            f"Earned leave cannot exceed {limit} days per request (requested {context.working_days})",
            suggestions=[
                Suggestion(SuggestionAction.SPLIT_REQUEST, f"Split into requests of at most {limit} days", 80),
            ],
            details={"requested_days": context.working_days, "max_days": limit},
        )


class EarnedNoticeRule(Rule):
    id = "EL_002"
    description = "Earned leave requires advance notice"
    applies_to = EARNED
    priority = 90

    def validate(self, context: ValidationContext) -> RuleResult:
        notice = context.notice_days
        required = self.policy.el_min_notice_days
        if notice is None or notice < 0 or notice >= required:
            return self.passed()
        suggestions = [
            Suggestion(SuggestionAction.ADJUST_DATES, f"Start the leave at least {required} days from today", 90),
        ]
        if context.working_days <= self.policy.cl_max_days:
            suggestions.append(
                Suggestion(SuggestionAction.CHANGE_TYPE, "Short absences can use casual leave", 70, LeaveType.CASUAL)
            )
        return self.failed(
            "EL_INSUFFICIENT_NOTICE",
            f"Earned leave must be requested at least {required} days in advance ({notice} days given)",
            suggestions=suggestions,
            details={"notice_days": notice, "required_notice_days": required},
        )

    def explain(self, context: ValidationContext) -> str:
        return f"Earned leave needs {self.policy.el_min_notice_days} days of notice; {context.notice_days} given."


class EarnedWorkingBoundaryRule(Rule):
    id = "EL_003"
    description = "Earned leave must start and end on working days"
    applies_to = EARNED
    priority = 85

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        bad = [day for day in (context.start_date, context.end_date) if not context.is_working_day(day)]
        if not bad:
            return self.passed()
        return self.failed(
            "EL_NON_WORKING_BOUNDARY",
            "Earned leave cannot start or end on a weekend or holiday",
            suggestions=[
                Suggestion(SuggestionAction.ADJUST_DATES, "Start and end the leave on working days", 85),
            ],
            details={"non_working_days": sorted(set(bad))},
        )


class EarnedExtendedLeaveRule(Rule):
    id = "EL_004"
    description = "Long earned leave is flagged for planning"
    applies_to = EARNED
    priority = 50

    def validate(self, context: ValidationContext) -> RuleResult:
        if context.working_days <= self.policy.el_extended_days:
            return self.passed()
        return self.failed(
            "EL_EXTENDED_LEAVE",
            f"Earned leave longer than {self.policy.el_extended_days} days needs handover planning",
            severity=Severity.WARNING,
        )

"""
Casual leave rules
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
from leaveflow.services.working_days import next_working_day, previous_working_day, shift_days

CASUAL = (LeaveType.CASUAL,)


class CasualMaxDaysRule(Rule):
    id = "CL_001"
    description = "Casual leave is limited to a few consecutive working days"
    applies_to = CASUAL
    priority = 100

    def validate(self, context: ValidationContext) -> RuleResult:
        limit = self.policy.cl_max_days
        if context.working_days <= limit:
            return self.passed()
        return self.failed(
            "CL_MAX_CONSECUTIVE_EXCEEDED",
            f"Casual leave cannot exceed {limit} consecutive days (requested {context.working_days})",
            suggestions=[
                Suggestion(
                    SuggestionAction.CHANGE_TYPE,
                    "Apply for earned leave instead",
                    90,
                    LeaveType.EARNED,
                ),
                Suggestion(
                    SuggestionAction.SPLIT_REQUEST,
                    f"Split into requests of at most {limit} days",
                    70,
                ),
            ],
            details={"requested_days": context.working_days, "max_days": limit},
        )

    def explain(self, context: ValidationContext) -> str:
        return (
            f"Casual leave is limited to {self.policy.cl_max_days} consecutive working days; "
            f"this request has {context.working_days}."
        )


class CasualHolidayAdjacencyRule(Rule):
    id = "CL_002"
    description = "Casual leave cannot be taken next to a holiday"
    applies_to = CASUAL
    priority = 95

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        touching = sorted(
            day for day in (shift_days(context.start_date, -1), shift_days(context.end_date, 1))
            if day in context.holidays
        )
        if not touching:
            return self.passed()
        return self.failed(
            "CL_HOLIDAY_ADJACENT",
            "Casual leave cannot be adjacent to a holiday",
            suggestions=[
                Suggestion(SuggestionAction.CHANGE_TYPE, "Use earned leave next to holidays", 80, LeaveType.EARNED),
                Suggestion(SuggestionAction.ADJUST_DATES, "Move the leave away from the holiday", 75),
            ],
            details={"holidays": touching},
        )


class CasualNoticeRule(Rule):
    id = "CL_003"
    description = "Casual leave should be requested in advance"
    applies_to = CASUAL
    priority = 50

    def validate(self, context: ValidationContext) -> RuleResult:
        notice = context.notice_days
        required = self.policy.cl_min_notice_days
        # backdated requests are judged by DATE_006
        if notice is None or notice < 0 or notice >= required:
            return self.passed()
        return self.failed(
            "CL_SHORT_NOTICE",
            f"Casual leave is usually requested {required} days ahead ({notice} days given)",
            severity=Severity.WARNING,
            suggestions=[
                Suggestion(
                    SuggestionAction.CHANGE_TYPE,
                    "If you are unwell, apply for medical leave",
                    60,
                    LeaveType.MEDICAL,
                ),
            ],
            details={"notice_days": notice, "recommended_notice_days": required},
        )


class CasualWorkingBoundaryRule(Rule):
    id = "CL_004"
    description = "Casual leave must start and end on working days"
    applies_to = CASUAL
    priority = 90

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        bad = [day for day in (context.start_date, context.end_date) if not context.is_working_day(day)]
        if not bad:
            return self.passed()
        return self.failed(
            "CL_NON_WORKING_BOUNDARY",
            "Casual leave cannot start or end on a weekend or holiday",
            suggestions=[
                Suggestion(SuggestionAction.ADJUST_DATES, "Start and end the leave on working days", 90),
            ],
            details={"non_working_days": sorted(set(bad))},
        )


class CasualCombinationRule(Rule):
    id = "CL_005"
    description = "Casual leave cannot be combined with another leave"
    applies_to = CASUAL
    priority = 88

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        before = previous_working_day(context.start_date, context.holidays, context.weekend_days)
        after = next_working_day(context.end_date, context.holidays, context.weekend_days)
        touching = sorted(
            leave.id for leave in context.active_leaves()
            if before <= leave.end_date < context.start_date or context.end_date < leave.start_date <= after
        )
        if not touching:
            return self.passed()
        return self.failed(
            "CL_COMBINED_WITH_OTHER_LEAVE",
            "Casual leave cannot directly precede or follow another leave",
            suggestions=[
                Suggestion(
                    SuggestionAction.CHANGE_TYPE,
                    "Extend the adjacent leave or use earned leave",
                    85,
                    LeaveType.EARNED,
                ),
            ],
            details={"adjacent_leave_ids": touching},
        )

"""
Date-range rules shared by every leave type
"""
from leaveflow.models.leave import LeaveType
from leaveflow.services.policy_engine import (
    Rule,
    RuleResult,
    Suggestion,
    SuggestionAction,
    ValidationContext,
)


class ValidDatesRule(Rule):
    id = "DATE_001"
    description = "Start and end dates must be valid calendar dates"
    priority = 100

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_dates:
            return self.failed("INVALID_DATES", "Both a start date and an end date are required")
        return self.passed()


class StartBeforeEndRule(Rule):
    id = "DATE_002"
    description = "Start date must be on or before the end date"
    priority = 99

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_dates or context.start_date <= context.end_date:
            return self.passed()
        return self.failed(
            "START_AFTER_END",
            f"Start date {context.start_date} is after end date {context.end_date}",
            suggestions=[
                Suggestion(SuggestionAction.SWAP_DATES, "Swap the start and end dates", 99),
            ],
        )


class AdvanceLimitRule(Rule):
    id = "DATE_003"
    description = "Leave cannot be requested too far in advance"
    priority = 70

    def validate(self, context: ValidationContext) -> RuleResult:
        limit = self.policy.max_advance_days
        if context.notice_days is None or context.notice_days <= limit:
            return self.passed()
        return self.failed(
            "TOO_FAR_IN_ADVANCE",
            f"Leave cannot be requested more than {limit} days in advance",
            suggestions=[
                Suggestion(
                    SuggestionAction.SUBMIT_EARLIER,
                    f"Submit this request within {limit} days of the start date",
                    70,
                ),
            ],
            details={"days_ahead": context.notice_days, "max_advance_days": limit},
        )

    def explain(self, context: ValidationContext) -> str:
        return f"Requests may start at most {self.policy.max_advance_days} days after {context.current_date}."


class WorkingDaysRule(Rule):
    id = "DATE_004"
    description = "The range must contain at least one working day"
    priority = 85

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        if 0 < context.working_days <= context.calendar_days:
            return self.passed()
        return self.failed(
            "INVALID_WORKING_DAYS",
            "The selected range contains no working days" if context.working_days <= 0
            else "Working days exceed the calendar span of the request",
            suggestions=[
                Suggestion(SuggestionAction.ADJUST_DATES, "Choose a range that includes a working day", 85),
            ],
            details={"working_days": context.working_days, "calendar_days": context.calendar_days},
        )


class OverlapRule(Rule):
    id = "DATE_005"
    description = "Leave cannot overlap another active leave of the same employee"
    priority = 95

    def validate(self, context: ValidationContext) -> RuleResult:
        if not context.has_valid_range:
            return self.passed()
        clashes = [
            leave for leave in context.active_leaves()
            if leave.start_date <= context.end_date and leave.end_date >= context.start_date
        ]
        if not clashes:
            return self.passed()
        return self.failed(
            "OVERLAPPING_LEAVE",
            f"Dates overlap {len(clashes)} existing leave request(s)",
            suggestions=[
                Suggestion(SuggestionAction.ADJUST_DATES, "Pick dates that do not overlap existing leave", 95),
            ],
            details={"overlapping_leave_ids": sorted(leave.id for leave in clashes)},
        )


class BackdateLimitRule(Rule):
    id = "DATE_006"
    description = "Casual leave cannot be backdated; earned leave only within a window"
    applies_to = (LeaveType.CASUAL, LeaveType.EARNED)
    priority = 96

    def validate(self, context: ValidationContext) -> RuleResult:
        notice = context.notice_days
        window = self.policy.backdate_window_for(context.leave_type)
        if notice is None or notice >= 0 or window is None or -notice <= window:
            return self.passed()
        details = {"days_backdated": -notice, "max_backdate_days": window}
        if window == 0:
            return self.failed(
                "BACKDATE_NOT_ALLOWED",
                f"{context.leave_type.value.title()} leave cannot start before {context.current_date}",
                suggestions=[
                    Suggestion(SuggestionAction.ADJUST_DATES, "Start the leave today or later", 96),
                ],
                details=details,
            )
        return self.failed(
            "BACKDATE_WINDOW_EXCEEDED",
            f"{context.leave_type.value.title()} leave can be backdated at most {window} days "
            f"({-notice} days given)",
            suggestions=[
                Suggestion(
                    SuggestionAction.ADJUST_DATES,
                    f"Start the leave no earlier than {window} days before today",
                    96,
                ),
            ],
            details=details,
        )

    def explain(self, context: ValidationContext) -> str:
        window = self.policy.backdate_window_for(context.leave_type)
        if not window:
            return f"{context.leave_type.value.title()} leave must start on or after {context.current_date}."
        return f"{context.leave_type.value.title()} leave may start up to {window} days before {context.current_date}."

"""
Tests for individual policy rules
"""
from datetime import date

from leaveflow.models.leave import LeaveStatus, LeaveType
from leaveflow.services.policy_engine import (
    BalanceSnapshot,
    LeaveRecord,
    RequesterProfile,
    Severity,
    SuggestionAction,
    ValidationContext,
)
from leaveflow.services.policy_rules.balance import LowBalanceRule, PendingRequestsRule, SufficientBalanceRule
from leaveflow.services.policy_rules.casual import (
    CasualCombinationRule,
    CasualHolidayAdjacencyRule,
    CasualNoticeRule,
)
from leaveflow.services.policy_rules.dates import BackdateLimitRule, OverlapRule, ValidDatesRule
from leaveflow.services.policy_rules.earned import EarnedMaxDaysRule, EarnedNoticeRule
from leaveflow.services.policy_rules.medical import (
    MedicalBackdateRule,
    MedicalReclassificationRule,
    MedicalSameDayRule,
)
from leaveflow.services.policy_rules.special import (
    ExtraordinaryDurationRule,
    ExtraordinaryPrerequisiteRule,
    MaternityDurationRule,
    PaternityRule,
    QuarantineDurationRule,
    ServiceEligibilityRule,
    StudyLeaveRule,
)
from leaveflow.services.working_days import count_working_days

TODAY = date(2026, 3, 2)
VETERAN = RequesterProfile(id=1, role="EMPLOYEE", join_date=date(2015, 1, 1))


def context(leave_type, start, end, requester=VETERAN, available=None, holidays=frozenset(), **kwargs):
    balance = None
    if available is not None:
        balance = BalanceSnapshot(leave_type=leave_type, year=TODAY.year, opening=available)
    return ValidationContext(
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        working_days=count_working_days(start, end, holidays),
        current_date=TODAY,
        requester=requester,
        balance=balance,
        holidays=holidays,
        **kwargs,
    )


def leave(leave_id, leave_type, start, end, status=LeaveStatus.APPROVED):
    return LeaveRecord(
        id=leave_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        status=status,
        working_days=count_working_days(start, end),
    )


class TestDateRules:
    def test_overlap_with_active_leave(self):
        ctx = context(
            LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 13),
            existing_leaves=(leave(7, LeaveType.CASUAL, date(2026, 3, 12), date(2026, 3, 12), LeaveStatus.PENDING),),
        )
        result = OverlapRule().validate(ctx)
        assert not result.passed
        assert result.code == "OVERLAPPING_LEAVE"
        assert result.details["overlapping_leave_ids"] == [7]

    def test_cancelled_and_rejected_leave_do_not_overlap(self):
        ctx = context(
            LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 13),
            existing_leaves=(
                leave(7, LeaveType.CASUAL, date(2026, 3, 12), date(2026, 3, 12), LeaveStatus.CANCELLED),
                leave(8, LeaveType.CASUAL, date(2026, 3, 9), date(2026, 3, 9), LeaveStatus.REJECTED),
            ),
        )
        assert OverlapRule().validate(ctx).passed

    def test_backdated_casual_is_rejected(self):
        ctx = context(LeaveType.CASUAL, date(2026, 1, 6), date(2026, 1, 7))
        result = BackdateLimitRule().validate(ctx)
        assert not result.passed
        assert result.code == "BACKDATE_NOT_ALLOWED"
        assert result.severity == Severity.ERROR
        assert result.suggestions[0].action == SuggestionAction.ADJUST_DATES
        assert result.details == {"days_backdated": 55, "max_backdate_days": 0}

    def test_casual_from_today_is_not_backdated(self):
        assert BackdateLimitRule().validate(context(LeaveType.CASUAL, TODAY, TODAY)).passed

    def test_earned_backdate_window(self):
        within = context(LeaveType.EARNED, date(2026, 2, 9), date(2026, 2, 10))
        assert BackdateLimitRule().validate(within).passed

        beyond = context(LeaveType.EARNED, date(2026, 1, 26), date(2026, 1, 27))
        result = BackdateLimitRule().validate(beyond)
        assert result.code == "BACKDATE_WINDOW_EXCEEDED"
        assert result.details["max_backdate_days"] == 30

    def test_backdate_limit_skips_medical(self):
        rule = BackdateLimitRule()
        assert not rule.applies(LeaveType.MEDICAL)
        assert rule.validate(context(LeaveType.MEDICAL, date(2026, 1, 6), date(2026, 1, 7))).passed

    def test_extreme_dates_do_not_overflow(self):
        ctx = context(LeaveType.CASUAL, date(1, 1, 1), date.max)
        assert ctx.working_days > 0
        assert ValidDatesRule().validate(ctx).passed
        assert CasualHolidayAdjacencyRule().validate(ctx).passed
        assert CasualCombinationRule().validate(ctx).passed
        assert BackdateLimitRule().validate(ctx).code == "BACKDATE_NOT_ALLOWED"


class TestCasualRules:
    def test_holiday_adjacent(self):
        ctx = context(
            LeaveType.CASUAL, date(2026, 3, 10), date(2026, 3, 11),
            holidays=frozenset({date(2026, 3, 9)}),
        )
        result = CasualHolidayAdjacencyRule().validate(ctx)
        assert result.code == "CL_HOLIDAY_ADJACENT"

    def test_backdated_casual_is_not_a_notice_warning(self):
        ctx = context(LeaveType.CASUAL, date(2026, 1, 6), date(2026, 1, 7))
        assert CasualNoticeRule().validate(ctx).passed
        assert result.severity == Severity.ERROR
        assert result.details["holidays"] == [date(2026, 3, 9)]

    def test_short_notice_is_a_warning(self):
        ctx = context(LeaveType.CASUAL, date(2026, 3, 4), date(2026, 3, 4))
        result = CasualNoticeRule().validate(ctx)
        assert result.code == "CL_SHORT_NOTICE"
        assert result.severity == Severity.WARNING
        assert result.suggestions[0].leave_type == LeaveType.MEDICAL

    def test_combined_across_weekend(self):
        # Earned leave ends Friday 6 March; casual starts Monday 9 March
        ctx = context(
            LeaveType.CASUAL, date(2026, 3, 9), date(2026, 3, 10),
            existing_leaves=(leave(3, LeaveType.EARNED, date(2026, 3, 2), date(2026, 3, 6)),),
        )
        result = CasualCombinationRule().validate(ctx)
        assert result.code == "CL_COMBINED_WITH_OTHER_LEAVE"
        assert result.details["adjacent_leave_ids"] == [3]

    def test_gap_of_a_working_day_is_not_combined(self):
        ctx = context(
            LeaveType.CASUAL, date(2026, 3, 10), date(2026, 3, 11),
            existing_leaves=(leave(3, LeaveType.EARNED, date(2026, 3, 2), date(2026, 3, 6)),),
        )
        assert CasualCombinationRule().validate(ctx).passed


class TestEarnedRules:
    def test_max_duration(self):
        ctx = context(LeaveType.EARNED, date(2026, 3, 9), date(2026, 4, 10))
        result = EarnedMaxDaysRule().validate(ctx)
        assert result.code == "EL_MAX_DURATION_EXCEEDED"
        assert result.suggestions[0].action == SuggestionAction.SPLIT_REQUEST

    def test_short_notice_suggests_casual_for_short_leave(self):
        ctx = context(LeaveType.EARNED, date(2026, 3, 3), date(2026, 3, 4))
        result = EarnedNoticeRule().validate(ctx)
        assert result.code == "EL_INSUFFICIENT_NOTICE"
        assert result.severity == Severity.ERROR
        assert [s.action for s in result.suggestions] == [SuggestionAction.ADJUST_DATES, SuggestionAction.CHANGE_TYPE]
        assert result.suggestions[1].leave_type == LeaveType.CASUAL

    def test_backdate_is_not_a_notice_violation(self):
        ctx = context(LeaveType.EARNED, date(2026, 2, 23), date(2026, 2, 24))
        assert EarnedNoticeRule().validate(ctx).passed


class TestMedicalRules:
    def test_backdated_within_limit_is_a_warning(self):
        ctx = context(LeaveType.MEDICAL, date(2026, 2, 26), date(2026, 2, 27))
        result = MedicalBackdateRule().validate(ctx)
        assert result.code == "ML_BACKDATED"
        assert result.severity == Severity.WARNING
        assert result.details["backdated_days"] == 4

    def test_backdated_beyond_limit_is_a_violation(self):
        ctx = context(LeaveType.MEDICAL, date(2026, 2, 16), date(2026, 2, 17))
        result = MedicalBackdateRule().validate(ctx)
        assert result.code == "ML_BACKDATE_LIMIT_EXCEEDED"
        assert result.severity == Severity.ERROR

    def test_same_day_is_informational(self):
        ctx = context(LeaveType.MEDICAL, TODAY, TODAY)
        result = MedicalSameDayRule().validate(ctx)
        assert result.code == "ML_SAME_DAY"
        assert result.severity == Severity.INFO

    def test_excess_days_are_reclassified(self):
        ctx = context(LeaveType.MEDICAL, date(2026, 3, 9), date(2026, 3, 31), has_certificate=True)
        result = MedicalReclassificationRule().validate(ctx)
        assert result.code == "ML_EXCESS_RECLASSIFIED"
        assert result.details["reclassified_days"] == ctx.working_days - 14


class TestBalanceRules:
    def test_insufficient_balance_suggests_other_type(self):
        ctx = context(
            LeaveType.CASUAL, date(2026, 3, 9), date(2026, 3, 11), available=1,
            other_balances=(BalanceSnapshot(LeaveType.EARNED, TODAY.year, opening=12),),
        )
        result = SufficientBalanceRule().validate(ctx)
        assert result.code == "INSUFFICIENT_BALANCE"
        assert [s.action for s in result.suggestions] == [SuggestionAction.REDUCE_DAYS, SuggestionAction.CHANGE_TYPE]
        assert result.suggestions[1].leave_type == LeaveType.EARNED

    def test_missing_balance_is_a_warning(self):
        ctx = context(LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 11))
        result = SufficientBalanceRule().validate(ctx)
        assert result.code == "BALANCE_NOT_AVAILABLE"
        assert result.severity == Severity.WARNING

    def test_low_balance_after_request(self):
        ctx = context(LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 11), available=4)
        result = LowBalanceRule().validate(ctx)
        assert result.code == "LOW_BALANCE_AFTER_REQUEST"
        assert result.details["remaining_days"] == 1

    def test_pending_requests_exceeding_balance(self):
        ctx = context(LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 11), available=5, pending_days=3)
        result = PendingRequestsRule().validate(ctx)
        assert result.code == "PENDING_EXCEEDS_BALANCE"
        assert result.severity == Severity.ERROR

    def test_pending_requests_within_balance_warn(self):
        ctx = context(LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 11), available=10, pending_days=3)
        result = PendingRequestsRule().validate(ctx)
        assert result.code == "PENDING_REQUESTS_EXIST"
        assert result.severity == Severity.WARNING


class TestSpecialLeaveRules:
    def test_study_leave_needs_service(self):
        junior = RequesterProfile(id=2, role="EMPLOYEE", join_date=date(2025, 1, 1))
        ctx = context(LeaveType.STUDY, date(2026, 4, 1), date(2026, 6, 30), requester=junior)
        result = ServiceEligibilityRule().validate(ctx)
        assert result.code == "INSUFFICIENT_SERVICE"

    def test_maternity_is_prorated_for_short_service(self):
        recent = RequesterProfile(id=2, role="EMPLOYEE", join_date=date(2025, 12, 2))
        # Three completed months of six: half of the 56-day allowance
        ctx = context(LeaveType.MATERNITY, date(2026, 3, 2), date(2026, 4, 30), requester=recent)
        rule = MaternityDurationRule()
        assert rule.allowance(ctx) == 28
        result = rule.validate(ctx)
        assert result.code == "MATERNITY_MAX_EXCEEDED"
        assert result.details["allowed_days"] == 28

    def test_maternity_full_allowance(self):
        ctx = context(LeaveType.MATERNITY, date(2026, 3, 2), date(2026, 4, 26))
        assert MaternityDurationRule().validate(ctx).passed

    def test_paternity_interval(self):
        ctx = context(
            LeaveType.PATERNITY, date(2026, 3, 9), date(2026, 3, 13),
            existing_leaves=(leave(4, LeaveType.PATERNITY, date(2025, 1, 6), date(2025, 1, 10)),),
        )
        result = PaternityRule().validate(ctx)
        assert result.code == "PATERNITY_INTERVAL_NOT_MET"

    def test_paternity_occasions(self):
        ctx = context(
            LeaveType.PATERNITY, date(2026, 3, 9), date(2026, 3, 13),
            existing_leaves=(
                leave(4, LeaveType.PATERNITY, date(2018, 1, 8), date(2018, 1, 12)),
                leave(5, LeaveType.PATERNITY, date(2021, 6, 7), date(2021, 6, 11)),
            ),
        )
        assert PaternityRule().validate(ctx).code == "PATERNITY_MAX_OCCASIONS"

    def test_study_leave_near_retirement(self):
        retiring = RequesterProfile(
            id=3, role="EMPLOYEE", join_date=date(1995, 1, 1), retirement_date=date(2026, 12, 31)
        )
        ctx = context(LeaveType.STUDY, date(2026, 4, 1), date(2026, 6, 30), requester=retiring)
        assert StudyLeaveRule().validate(ctx).code == "STUDY_NEAR_RETIREMENT"

    def test_study_leave_lifetime_ceiling(self):
        ctx = context(
            LeaveType.STUDY, date(2026, 4, 1), date(2026, 12, 31),
            existing_leaves=(leave(9, LeaveType.STUDY, date(2020, 1, 1), date(2021, 6, 30)),),
        )
        result = StudyLeaveRule().validate(ctx)
        assert result.code == "STUDY_LIFETIME_EXCEEDED"

    def test_quarantine_ceiling(self):
        ctx = context(LeaveType.QUARANTINE, date(2026, 3, 2), date(2026, 4, 10))
        assert QuarantineDurationRule().validate(ctx).code == "QUARANTINE_MAX_EXCEEDED"

    def test_extraordinary_ceiling_grows_with_service(self):
        start, end = date(2026, 4, 1), date(2026, 12, 31)
        junior = RequesterProfile(id=2, role="EMPLOYEE", join_date=date(2024, 1, 1))
        assert ExtraordinaryDurationRule().validate(
            context(LeaveType.EXTRAWITHOUTPAY, start, end, requester=junior)
        ).code == "EXTRAORDINARY_MAX_EXCEEDED"
        assert ExtraordinaryDurationRule().validate(
            context(LeaveType.EXTRAWITHOUTPAY, start, end)
        ).passed

    def test_extraordinary_requires_exhausted_balances(self):
        ctx = context(
            LeaveType.EXTRAWITHPAY, date(2026, 4, 1), date(2026, 4, 30),
            other_balances=(
                BalanceSnapshot(LeaveType.CASUAL, TODAY.year, opening=2),
                BalanceSnapshot(LeaveType.EARNED, TODAY.year, opening=6, used=6),
            ),
        )
        result = ExtraordinaryPrerequisiteRule().validate(ctx)
        assert result.code == "EXTRAORDINARY_BALANCE_REMAINING"
        assert result.suggestions[0].leave_type == LeaveType.CASUAL

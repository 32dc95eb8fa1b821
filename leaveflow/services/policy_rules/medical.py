"""
Medical leave rules
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

MEDICAL = (LeaveType.MEDICAL,)


class MedicalCertificateRule(Rule):
    id = "ML_001"
    description = "Medical leave above a few days needs a medical certificate"
    applies_to = MEDICAL
    priority = 100

    def validate(self, context: ValidationContext) -> RuleResult:
        threshold = self.policy.ml_certificate_after_days
        if context.working_days <= threshold or context.has_certificate:
            return self.passed()
        return self.failed(
            "MEDICAL_CERTIFICATE_REQUIRED",
            f"A medical certificate is required for medical leave over {threshold} days",
            suggestions=[
                Suggestion(SuggestionAction.ADD_ATTACHMENT, "Attach a medical certificate", 100),
                Suggestion(
                    SuggestionAction.SPLIT_REQUEST,
                    f"Request at most {threshold} days without a certificate",
                    60,
                ),
            ],
            details={"requested_days": context.working_days, "certificate_after_days": threshold},
        )

    def explain(self, context: ValidationContext) -> str:
        state = "attached" if context.has_certificate else "missing"
        return (
            f"Certificates are required above {self.policy.ml_certificate_after_days} days; "
            f"this request has {context.working_days} days and the certificate is {state}."
        )


class MedicalExtendedLeaveRule(Rule):
    id = "ML_002"
    description = "Long medical leave is flagged for review"
    applies_to = MEDICAL
    priority = 80

    def validate(self, context: ValidationContext) -> RuleResult:
        if context.working_days <= self.policy.ml_extended_days:
            return self.passed()
        return self.failed(
            "ML_EXTENDED_LEAVE",
            f"Medical leave over {self.policy.ml_extended_days} days may need a fitness certificate on return",
            severity=Severity.WARNING,
        )


class MedicalBackdateRule(Rule):
    id = "ML_003"
    description = "Medical leave may be backdated only a limited number of days"
    applies_to = MEDICAL
    priority = 90

    def validate(self, context: ValidationContext) -> RuleResult:
        notice = context.notice_days
        if notice is None or notice >= 0:
            return self.passed()
        backdated = -notice
        limit = self.policy.ml_max_backdate_days
        if backdated > limit:
            return self.failed(
                "ML_BACKDATE_LIMIT_EXCEEDED",
                f"Medical leave cannot be backdated more than {limit} days ({backdated} days)",
                suggestions=[
                    Suggestion(
                        SuggestionAction.ADJUST_DATES,
                        f"Start the leave within the last {limit} days",
                        90,
                    ),
                ],
                details={"backdated_days": backdated, "max_backdate_days": limit},
            )
        return self.failed(
            "ML_BACKDATED",
            f"Medical leave is backdated by {backdated} day(s)",
            severity=Severity.WARNING,
            details={"backdated_days": backdated},
        )


class MedicalSameDayRule(Rule):
    id = "ML_004"
    description = "Same-day medical leave is recorded for the approver"
    applies_to = MEDICAL
    priority = 40

    def validate(self, context: ValidationContext) -> RuleResult:
        if context.notice_days != 0:
            return self.passed()
        return self.failed(
            "ML_SAME_DAY",
            "Medical leave starting today; approvers are notified immediately",
            severity=Severity.INFO,
        )


class MedicalReclassificationRule(Rule):
    id = "ML_005"
    description = "Medical leave beyond the yearly allowance is reclassified"
    applies_to = MEDICAL
    priority = 75

    def validate(self, context: ValidationContext) -> RuleResult:
        limit = self.policy.ml_reclassify_after_days
        if context.working_days <= limit:
            return self.passed()
        excess = context.working_days - limit
        return self.failed(
            "ML_EXCESS_RECLASSIFIED",
            f"{excess} day(s) above {limit} will be reclassified as earned leave",
            severity=Severity.WARNING,
            suggestions=[
                Suggestion(
                    SuggestionAction.SPLIT_REQUEST,
                    f"Request {limit} days of medical leave and the rest as earned leave",
                    65,
                ),
            ],
            details={"medical_days": limit, "reclassified_days": excess, "reclassified_to": LeaveType.EARNED.value},
        )

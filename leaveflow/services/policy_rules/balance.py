"""
Balance sufficiency rules for ledger-tracked leave types
"""
from typing import List

from leaveflow.models.leave import BALANCE_LEAVE_TYPES
from leaveflow.services.policy_engine import (
    Rule,
    RuleResult,
    Severity,
    Suggestion,
    SuggestionAction,
    ValidationContext,
)


def _alternative_types(context: ValidationContext, needed: float) -> List[Suggestion]:
    candidates = sorted(
        (
            snapshot for snapshot in context.other_balances
            if snapshot.leave_type != context.leave_type
            and snapshot.leave_type in BALANCE_LEAVE_TYPES
            and snapshot.available >= needed
        ),
        key=lambda s: (-s.available, s.leave_type.value),
    )
    return [
        Suggestion(
            SuggestionAction.CHANGE_TYPE,
            f"{snapshot.leave_type.value.title()} leave has {snapshot.available:g} days available",
            80,
            snapshot.leave_type,
        )
        for snapshot in candidates[:1]
    ]


class SufficientBalanceRule(Rule):
    id = "BAL_001"
    description = "Requested days must not exceed the available balance"
    applies_to = BALANCE_LEAVE_TYPES
    priority = 100

    def validate(self, context: ValidationContext) -> RuleResult:
        if context.balance is None:
            return self.failed(
                "BALANCE_NOT_AVAILABLE",
                f"No {context.leave_type.value} balance is provisioned for this year",
                severity=Severity.WARNING,
            )
        available = context.balance.available
        if context.working_days <= available:
            return self.passed()
        suggestions = [
            Suggestion(
                SuggestionAction.REDUCE_DAYS,
                f"Reduce the request to {max(available, 0):g} days",
                100,
            ),
        ]
        suggestions.extend(_alternative_types(context, context.working_days))
        return self.failed(
            "INSUFFICIENT_BALANCE",
            f"Insufficient balance: requested {context.working_days}, available {available:g}",
            suggestions=suggestions,
            details={"requested_days": context.working_days, "available_days": available},
        )

    def explain(self, context: ValidationContext) -> str:
        if context.balance is None:
            return "No balance is provisioned for this leave type; the request cannot be checked."
        return f"Available balance is {context.balance.available:g} days; {context.working_days} requested."


class LowBalanceRule(Rule):
    id = "BAL_002"
    description = "Warn when the request leaves only a small reserve"
    applies_to = BALANCE_LEAVE_TYPES
    priority = 60

    def validate(self, context: ValidationContext) -> RuleResult:
        if context.balance is None:
            return self.passed()
        available = context.balance.available
        if context.working_days > available:
            return self.passed()
        remaining = available - context.working_days
        reserve = self.policy.low_balance_reserve_days
        if remaining >= reserve:
            return self.passed()
        return self.failed(
            "LOW_BALANCE_AFTER_REQUEST",
            f"Only {remaining:g} day(s) will remain after this request",
            severity=Severity.WARNING,
            details={"remaining_days": remaining, "reserve_days": reserve},
        )


class PendingRequestsRule(Rule):
    id = "BAL_003"
    description = "Pending requests of the same type count against the balance"
    applies_to = BALANCE_LEAVE_TYPES
    priority = 95

    def validate(self, context: ValidationContext) -> RuleResult:
        if context.balance is None or context.pending_days <= 0:
            return self.passed()
        available = context.balance.available
        committed = context.pending_days + context.working_days
        if committed > available:
            return self.failed(
                "PENDING_EXCEEDS_BALANCE",
                f"Pending requests ({context.pending_days:g} days) plus this request exceed the "
                f"available balance of {available:g} days",
                suggestions=[
                    Suggestion(
                        SuggestionAction.REDUCE_DAYS,
                        f"Reduce the request to {max(available - context.pending_days, 0):g} days",
                        95,
                    ),
                ],
                details={
                    "pending_days": context.pending_days,
                    "requested_days": context.working_days,
                    "available_days": available,
                },
            )
        return self.failed(
            "PENDING_REQUESTS_EXIST",
            f"{context.pending_days:g} day(s) of this leave type are still awaiting approval",
            severity=Severity.WARNING,
            details={"pending_days": context.pending_days},
        )

"""
Default rule catalogue
"""
from typing import List, Optional

from leaveflow.services.policy_engine import PolicyConfig, PolicyEngine, Rule
from leaveflow.services.policy_rules.balance import LowBalanceRule, PendingRequestsRule, SufficientBalanceRule
from leaveflow.services.policy_rules.casual import (
    CasualCombinationRule,
    CasualHolidayAdjacencyRule,
    CasualMaxDaysRule,
    CasualNoticeRule,
    CasualWorkingBoundaryRule,
)
from leaveflow.services.policy_rules.dates import (
    AdvanceLimitRule,
    BackdateLimitRule,
    OverlapRule,
    StartBeforeEndRule,
    ValidDatesRule,
    WorkingDaysRule,
)
from leaveflow.services.policy_rules.earned import (
    EarnedExtendedLeaveRule,
    EarnedMaxDaysRule,
    EarnedNoticeRule,
    EarnedWorkingBoundaryRule,
)
from leaveflow.services.policy_rules.medical import (
    MedicalBackdateRule,
    MedicalCertificateRule,
    MedicalExtendedLeaveRule,
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
    SpecialDisabilityDurationRule,
    StudyLeaveRule,
)

DEFAULT_RULE_CLASSES = (
    ValidDatesRule,
    StartBeforeEndRule,
    AdvanceLimitRule,
    WorkingDaysRule,
    OverlapRule,
    BackdateLimitRule,
    CasualMaxDaysRule,
    CasualHolidayAdjacencyRule,
    CasualNoticeRule,
    CasualWorkingBoundaryRule,
    CasualCombinationRule,
    EarnedMaxDaysRule,
    EarnedNoticeRule,
    EarnedWorkingBoundaryRule,
    EarnedExtendedLeaveRule,
    MedicalCertificateRule,
    MedicalExtendedLeaveRule,
    MedicalBackdateRule,
    MedicalSameDayRule,
    MedicalReclassificationRule,
    SufficientBalanceRule,
    LowBalanceRule,
    PendingRequestsRule,
    ServiceEligibilityRule,
    MaternityDurationRule,
    PaternityRule,
    StudyLeaveRule,
    QuarantineDurationRule,
    SpecialDisabilityDurationRule,
    ExtraordinaryDurationRule,
    ExtraordinaryPrerequisiteRule,
)


def default_rules(policy: Optional[PolicyConfig] = None) -> List[Rule]:
    policy = policy or PolicyConfig()
    return [rule_class(policy) for rule_class in DEFAULT_RULE_CLASSES]


def build_policy_engine(policy: Optional[PolicyConfig] = None) -> PolicyEngine:
    """Engine with the default catalogue for one policy version."""
    policy = policy or PolicyConfig()
    return PolicyEngine(default_rules(policy), max_suggestions=policy.max_suggestions, policy=policy)

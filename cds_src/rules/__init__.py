"""Clinical checking rules."""

from .adverse_risk_rules import AdverseRisk, AdverseRiskEntry, estimate_adverse_risks
from .dosage_rules import DosageChecker, DosageCheckResult, DosageStatus, time_to_steady_state
from .interaction_rules import InteractionMatcher, PairwiseInteractionCheck
from .safety_rules import SafetyWarning, screen_medication

__all__ = [
    "AdverseRisk",
    "AdverseRiskEntry",
    "estimate_adverse_risks",
    "DosageChecker",
    "DosageCheckResult",
    "DosageStatus",
    "time_to_steady_state",
    "InteractionMatcher",
    "PairwiseInteractionCheck",
    "SafetyWarning",
    "screen_medication",
]

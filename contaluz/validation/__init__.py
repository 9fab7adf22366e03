"""
Validation Package

Checks user input at the boundary before it reaches the tracker state.
"""

from contaluz.validation.validator import (
    ValidationIssue,
    ValidationResult,
    get_user_friendly_summary,
    validate_appliance_draft,
    validate_profile_changes,
    validate_recharge_amount,
)

__all__ = [
    "ValidationIssue",
    "ValidationResult",
    "get_user_friendly_summary",
    "validate_appliance_draft",
    "validate_profile_changes",
    "validate_recharge_amount",
]

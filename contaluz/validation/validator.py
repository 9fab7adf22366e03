"""
Boundary Validation

DESIGN DECISION: Invalid user input never reaches the core state.
Validation happens where the user hands data to the tracker, and has two
kinds of findings:

ERRORS:
- Missing appliance name or power
- Non-positive recharge amounts
- Profile values the projection cannot work with (tariff <= 0, negative
  thresholds)
An error means the operation is simply not performed.

WARNINGS:
- Suspicious but possible values (a 15 kW appliance, an unknown province)
A warning never blocks the operation.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the caller can show them.
"""

import math
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from contaluz.models.constants import PROVINCES, RESIDENCE_TYPES
from contaluz.models.energy import ApplianceDraft, Profile


# Appliances above this draw are unusual in a household
SUSPICIOUS_POWER_WATTS = 10000


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one piece of user input."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    def issue_dicts(self) -> list[dict]:
        return [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in self.issues
        ]


def _error(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type=issue_type, message=message, severity="error")


def _warning(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type=issue_type, message=message, severity="warning")


def validate_appliance_draft(draft: ApplianceDraft) -> ValidationResult:
    """
    Check an appliance before it is added or saved over an existing one.

    Name and power are mandatory; a zero power is treated as missing.
    """
    issues = []

    if not draft.name:
        issues.append(_error("name", "missing", "Appliance name is required"))

    if not math.isfinite(draft.power_watts) or draft.power_watts <= 0:
        issues.append(_error("power_watts", "missing", "Power (W) is required and must be positive"))
    elif draft.power_watts > SUSPICIOUS_POWER_WATTS:
        issues.append(_warning(
            "power_watts",
            "suspicious_value",
            f"Power ({draft.power_watts:g} W) seems unusually high for a household appliance",
        ))

    if not math.isfinite(draft.hours_per_day) or draft.hours_per_day < 0:
        issues.append(_error("hours_per_day", "invalid_value", "Hours per day cannot be negative"))
    elif draft.hours_per_day > 24:
        issues.append(_error("hours_per_day", "invalid_value", "A day has at most 24 hours"))

    if draft.quantity is not None and draft.quantity < 0:
        issues.append(_error("quantity", "invalid_value", "Quantity cannot be negative"))

    return ValidationResult(issues=issues)


def validate_recharge_amount(amount: float, balance: float = 0.0) -> ValidationResult:
    """
    A recharge must be a finite, positive amount, and the balance it
    produces must still be a finite number.
    """
    if not isinstance(amount, (int, float)) or isinstance(amount, bool):
        return ValidationResult(issues=[
            _error("amount", "invalid_value", "Recharge amount must be a number")
        ])

    issues = []
    try:
        value = float(amount)
    except OverflowError:
        value = math.inf

    if math.isnan(value) or value <= 0:
        issues.append(_error("amount", "invalid_value", "Recharge amount must be greater than zero"))
    elif not math.isfinite(value) or not math.isfinite(balance + value):
        issues.append(_error("amount", "out_of_range", "Recharge amount is too large"))
    return ValidationResult(issues=issues)


def validate_profile_changes(profile: Profile, changes: dict[str, Any]) -> ValidationResult:
    """
    Check a set of profile edits against the current profile.

    Stage 1 rejects unknown fields; stage 2 re-validates the merged profile
    so every field constraint (tariff > 0, thresholds >= 0) applies.
    """
    issues = []

    unknown = sorted(set(changes) - set(Profile.model_fields))
    for field in unknown:
        issues.append(_error(field, "unknown_field", f"Unknown profile field: {field}"))
    if issues:
        return ValidationResult(issues=issues)

    merged = {**profile.model_dump(), **changes}
    try:
        Profile.model_validate(merged)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"]) or "profile"
            issues.append(_error(field, "invalid_value", err["msg"]))

    if "province" in changes and changes["province"] not in PROVINCES:
        issues.append(_warning("province", "unknown_value", f"Unknown province: {changes['province']}"))

    if "residence_type" in changes and changes["residence_type"] not in RESIDENCE_TYPES:
        issues.append(_warning(
            "residence_type",
            "unknown_value",
            f"Unknown residence type: {changes['residence_type']}",
        ))

    return ValidationResult(issues=issues)


def get_user_friendly_summary(result: ValidationResult) -> str:
    """Summary of validation results suitable for showing to the user."""
    if result.is_valid and not result.warnings:
        return "✅ Tudo certo."

    lines = []
    errors = [issue for issue in result.issues if issue.severity == "error"]
    if errors:
        lines.append("❌ Não foi possível guardar:")
        for issue in errors:
            lines.append(f"   • {issue.message}")

    if result.warnings:
        lines.append("⚠️ Verifique:")
        for warning in result.warnings:
            lines.append(f"   • {warning}")

    return "\n".join(lines)

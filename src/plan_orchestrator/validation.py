"""Interpretation of validation command results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationResult:
    success: bool
    processed_output: str | None = None


def interpret_validation_result(exit_code: int, output: str) -> ValidationResult:
    """Map a validation command's exit code and output to an outcome.

    Exit code 0 is success; anything else is failure. The output is kept
    as-is in both cases.
    """
    return ValidationResult(success=exit_code == 0, processed_output=output)

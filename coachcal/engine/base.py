"""Base classes for engine check results.

Advisory checks (for example DST checks on a lesson time) return results with
a consistent ``passed`` / ``message`` / ``to_dict()`` interface so callers can
surface them uniformly next to hard errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class BaseValidationResult:
    """Frozen dataclass foundation for check results.

    Subclasses add fields specific to their check and extend ``to_dict``.

    Example:
        ```python
        @dataclass(frozen=True)
        class MyCheckResult(BaseValidationResult):
            offset_minutes: int

            def to_dict(self) -> dict[str, Any]:
                return {**super().to_dict(), "offset_minutes": self.offset_minutes}
        ```
    """

    passed: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"passed": self.passed, "message": self.message}


class ValidationMixin:
    """Mixin providing message builders shared by checks."""

    @staticmethod
    def _build_pass_message(
        validation_name: str,
        entity_id: int | str,
        details: str | None = None,
    ) -> str:
        message = f"{validation_name} passed for {entity_id}"
        if details:
            message += f". {details}"
        return message

    @staticmethod
    def _build_fail_message(
        validation_name: str,
        entity_id: int | str,
        reasons: list[str],
        recommendations: list[str] | None = None,
    ) -> str:
        """Build a standardized fail message.

        Args:
            validation_name: Name of the check
            entity_id: ID of the entity being checked
            reasons: List of failure reasons
            recommendations: Optional list of recommendations

        Returns:
            Formatted fail message
        """
        message = f"{validation_name} failed for {entity_id}. "
        message += f"Reasons: {'; '.join(reasons)}."
        if recommendations:
            message += f" Recommendations: {'; '.join(recommendations)}."
        return message

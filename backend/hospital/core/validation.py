"""
Common validation utilities.

Validators collect messages into a ``ValidationResult`` instead of raising
on the first problem; callers decide whether to raise ``ValidationFailed``.
"""

import logging
from typing import Any, List, Optional

from .exceptions import ValidationFailed

logger = logging.getLogger(__name__)


class ValidationResult:
    """Container for validation results."""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.is_valid: bool = True

    def add_error(self, message: str, field: Optional[str] = None):
        """Add validation error."""
        error_msg = f"{field}: {message}" if field else message
        self.errors.append(error_msg)
        self.is_valid = False
        logger.warning(f"Validation error: {error_msg}")

    def add_warning(self, message: str, field: Optional[str] = None):
        """Add validation warning."""
        warning_msg = f"{field}: {message}" if field else message
        self.warnings.append(warning_msg)
        logger.info(f"Validation warning: {warning_msg}")

    def raise_if_invalid(self) -> None:
        if not self.is_valid:
            raise ValidationFailed(self.errors)

    def __bool__(self) -> bool:
        return self.is_valid


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty once stripped."""
    return value is None or (isinstance(value, str) and value.strip() == "")

"""Custom exceptions for the WealthWise finance engine.

This module provides a hierarchy of exception classes for consistent error
handling across the ledger, investment and planning operations. All
exceptions inherit from WealthWiseError, making it easy to catch all
application-specific errors.

Operations in this package never mutate state in place, so catching any of
these errors means the caller's state is exactly as it was before the call.

Example:
    try:
        session.pay_bill(card.id)
    except FundsSourceError as e:
        show_message(e.message)
    except WealthWiseError as e:
        logger.error("operation_failed", error=str(e))
"""

from typing import Any, Optional


class WealthWiseError(Exception):
    """Base exception for all WealthWise errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize WealthWiseError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                user correction. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(WealthWiseError):
    """Error raised when an operation is rejected before touching state.

    Raised for self-transfers, unknown accounts or investments, missing
    redemption destinations, over-redemptions in strict mode and duplicate
    budget categories.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (if safe to include).
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Cannot transfer to the same account",
        ...     field="to_account_id",
        ...     value="acc_1",
        ...     constraint="must differ from from_account_id",
        ... )
        ValidationError: Cannot transfer to the same account
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class FundsSourceError(WealthWiseError):
    """Error raised when no account can fund a requested payment.

    Attributes:
        account_id: The account that was going to be settled.
        required_type: The account type that was searched for.

    Example:
        >>> raise FundsSourceError(
        ...     "A checking account is required to pay the card bill",
        ...     account_id="acc_card",
        ...     required_type="checking",
        ... )
        FundsSourceError: A checking account is required to pay the card bill
    """

    def __init__(
        self,
        message: str,
        *,
        account_id: Optional[str] = None,
        required_type: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize FundsSourceError.

        Args:
            message: Human-readable error description.
            account_id: Identifier of the account being paid.
            required_type: Account type needed as a funds source.
            details: Optional dictionary with additional context.
            recoverable: Defaults to True since the user can add an account.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.account_id = account_id
        self.required_type = required_type

        if account_id:
            self.details["account_id"] = account_id
        if required_type:
            self.details["required_type"] = required_type


class OnboardingRequiredError(WealthWiseError):
    """Error raised when an operation needs a completed onboarding."""

    def __init__(
        self,
        message: str = "Complete onboarding before using the ledger",
        *,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=True)
        self.operation = operation
        if operation:
            self.details["operation"] = operation


class SnapshotError(WealthWiseError):
    """Error raised when a state snapshot cannot be loaded.

    Loading is all-or-nothing: this error means no part of the snapshot
    was applied.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=True)
        self.errors = errors or []
        if self.errors:
            self.details["errors"] = self.errors


class AdvisorError(WealthWiseError):
    """Error raised when an advisory text-generation call fails.

    The advisor catches this internally and answers with a fallback, so
    callers of the advisor never see it.

    Attributes:
        operation: The advisory operation being attempted.
        api_error: The underlying API error message (if applicable).
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        api_error: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.operation = operation
        self.api_error = api_error

        if operation:
            self.details["operation"] = operation
        if api_error:
            self.details["api_error"] = api_error


class ConfigurationError(WealthWiseError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Missing required API key",
        ...     config_key="WEALTHWISE_LLM_API_KEY",
        ...     expected="Valid Anthropic API key",
        ... )
        ConfigurationError: Missing required API key
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "WealthWiseError",
    "ValidationError",
    "FundsSourceError",
    "OnboardingRequiredError",
    "SnapshotError",
    "AdvisorError",
    "ConfigurationError",
]

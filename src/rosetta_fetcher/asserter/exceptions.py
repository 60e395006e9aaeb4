"""
Asserter exceptions.

All asserter failures are terminal VALIDATION-kind fetcher errors: the data
the server returned is non-conforming, so repeating the request is
pointless.
"""

from typing import Any

from rosetta_fetcher.errors import ErrorKind, FetcherError


class AsserterError(FetcherError):
    """
    Base exception for all asserter rejections.

    Details carry the violated rule, the offending value and where it was
    found, e.g. ``transactions[2].operations[0].type``.
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        rule_name: str | None = None,
        invalid_value: Any | None = None,
        field_path: str | None = None,
        expected_values: list[str] | None = None,
    ):
        """
        Initialize asserter error.

        Args:
            message: Error description
            rule_name: Name of the violated rule (e.g., "operation_type_allowed")
            invalid_value: The value that caused the violation
            field_path: Path to the violating field
            expected_values: Valid values (for enum-like violations)
        """
        details: dict[str, Any] = {}
        if rule_name:
            details["rule_name"] = rule_name
        if invalid_value is not None:
            details["invalid_value"] = str(invalid_value)
        if field_path:
            details["field_path"] = field_path
        if expected_values:
            details["expected_values"] = expected_values[:20]

        self.rule_name = rule_name
        self.field_path = field_path
        super().__init__(message, details)

    def at(self, prefix: str) -> "AsserterError":
        """Prefix the field path with the location of the enclosing object."""
        if self.field_path:
            self.field_path = f"{prefix}.{self.field_path}"
        else:
            self.field_path = prefix
        self.details["field_path"] = self.field_path
        return self


class NetworkAssertionError(AsserterError):
    """Network list, status or options rejected."""


class BlockAssertionError(AsserterError):
    """Block header or block-level transaction set rejected."""


class TransactionAssertionError(AsserterError):
    """Transaction, operation, account or amount rejected."""

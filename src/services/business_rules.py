"""Business rules and validation logic for the storefront ledger."""

from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from src.models.order import OrderStatus
from src.utils.validators import PhoneValidator, ValidationError, ValidationResult


class StorefrontError(Exception):
    """Base class for expected, user-facing service outcomes."""

    code = "STOREFRONT_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.meta = meta or {}


class NotFoundError(StorefrontError):
    """Resource is absent, hidden, or owned by another tenant.

    The three cases are deliberately reported the same way.
    """

    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class InvalidInputError(StorefrontError):
    """Request fields failed a format or consistency rule."""

    code = "INVALID_INPUT"

    def __init__(self, message: str, errors: Optional[List[ValidationError]] = None, code: Optional[str] = None):
        super().__init__(message, code=code)
        self.errors = errors or []


class LimitExceededError(StorefrontError):
    """A plan ceiling has been reached."""

    code = "LIMIT_EXCEEDED"

    def __init__(self, message: str, limit: int):
        super().__init__(message, meta={"limit": limit})
        self.limit = limit


class ForbiddenError(StorefrontError):
    """The tenant's plan does not include the requested feature."""

    code = "PLAN_FEATURE_FORBIDDEN"


class AuthenticationError(StorefrontError):
    """Credentials or token did not identify a user."""

    code = "AUTHENTICATION_FAILED"


class InvalidTransitionError(StorefrontError):
    """Order status change not allowed by the transition table."""

    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot change order status from '{current}' to '{target}'",
            meta={"from": current, "to": target},
        )


class OrderStatusRules:
    """
    Order status state machine.

    ``new -> confirmed -> shipped -> delivered``; ``cancelled`` can be reached
    from every other state and is terminal. Rewriting the current status is a
    no-op. The table is only enforced with ``strict=True``; by default any
    status may be written so sellers can correct orders by hand.
    """

    TRANSITIONS: Mapping[OrderStatus, FrozenSet[OrderStatus]] = {
        OrderStatus.NEW: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
        OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
        OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
        OrderStatus.DELIVERED: frozenset({OrderStatus.CANCELLED}),
        OrderStatus.CANCELLED: frozenset(),
    }

    def __init__(self, strict: bool = False):
        self.strict = strict

    @staticmethod
    def parse_status(value: str) -> OrderStatus:
        try:
            return OrderStatus(value)
        except ValueError:
            raise InvalidInputError(
                f"Invalid order status '{value}'",
                code="INVALID_ORDER_STATUS",
            )

    def is_allowed(self, current: str, target: str) -> bool:
        current_status = OrderStatus(current)
        target_status = OrderStatus(target)
        if current_status == target_status or not self.strict:
            return True
        return target_status in self.TRANSITIONS[current_status]

    def ensure_allowed(self, current: str, target: str) -> None:
        if not self.is_allowed(current, target):
            raise InvalidTransitionError(current, target)


class CheckoutRules:
    """Format rules for storefront checkout fields."""

    MIN_CUSTOMER_NAME_LENGTH = 2
    MAX_QUANTITY = 10000

    def __init__(self, min_address_length: int = 10):
        self.min_address_length = min_address_length

    def validate(self, checkout: Dict[str, Any]) -> ValidationResult:
        errors: List[ValidationError] = []

        customer_name = (checkout.get("customer_name") or "").strip()
        if len(customer_name) < self.MIN_CUSTOMER_NAME_LENGTH:
            errors.append(ValidationError(
                field="customer_name",
                code="NAME_TOO_SHORT",
                message=f"Name must be at least {self.MIN_CUSTOMER_NAME_LENGTH} characters",
            ))

        errors.extend(PhoneValidator.validate(checkout.get("phone")))

        address = (checkout.get("address") or "").strip()
        if len(address) < self.min_address_length:
            errors.append(ValidationError(
                field="address",
                code="ADDRESS_TOO_SHORT",
                message="Please enter a complete address",
                details={"min_length": self.min_address_length},
            ))

        quantity = checkout.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= self.MAX_QUANTITY:
            errors.append(ValidationError(
                field="quantity",
                code="INVALID_QUANTITY",
                message=f"Quantity must be between 1 and {self.MAX_QUANTITY}",
                details={"max": self.MAX_QUANTITY},
            ))

        return ValidationResult(is_valid=len(errors) == 0, errors=errors)

    def ensure_valid(self, checkout: Dict[str, Any]) -> None:
        result = self.validate(checkout)
        if not result.is_valid:
            # The first failing rule is the one reported to the shopper
            raise InvalidInputError(result.errors[0].message, errors=result.errors, code=result.errors[0].code)

"""
Failure kinds of the order workflow.

Every operation of OrderOrchestrator either returns its result or raises
exactly one of the OrderServiceError subclasses below. The order app renders
them with a single exception handler (see main.py), so callers always get a
specific `error` code plus the context needed to build a useful message.
"""
from typing import Any, Dict, Optional


class OrderServiceError(Exception):
    status_code: int = 400
    code: str = "order_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.message, **self.context}


class UserNotFound(OrderServiceError):
    status_code = 404
    code = "user_not_found"

    def __init__(self, user_id: int):
        super().__init__(f"User not found with id: {user_id}", user_id=user_id)
        self.user_id = user_id


class ProductUnavailable(OrderServiceError):
    status_code = 409
    code = "product_unavailable"

    def __init__(self, product_id: int, reason: Optional[str] = None):
        message = f"Product not available with id: {product_id}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, product_id=product_id)
        self.product_id = product_id


class InsufficientStock(OrderServiceError):
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, product_id: int, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Available: {available}, Requested: {requested}",
            product_id=product_id,
            available=available,
            requested=requested,
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class OrderNotFound(OrderServiceError):
    status_code = 404
    code = "order_not_found"

    def __init__(self, order_id: int):
        super().__init__(f"Order not found with id: {order_id}", order_id=order_id)
        self.order_id = order_id


class InvalidTransition(OrderServiceError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, order_id: int, current: str, target: str):
        super().__init__(
            f"Cannot move order {order_id} from {current} to {target}",
            order_id=order_id,
            current=current,
            target=target,
        )
        self.current = current
        self.target = target

from .setup import setup_observability
from .metrics import (
    orders_created_total,
    order_creation_duration_seconds,
    stock_reservations_total,
    saga_compensation_total,
    order_status_changes_total
)

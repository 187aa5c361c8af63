from prometheus_client import Counter, Histogram

# Business Metrics
orders_created_total = Counter(
    "orders_created_total",
    "Total order creation attempts",
    ["status"] # Labels: 'success', 'user_not_found', 'product_unavailable', ...
)

order_creation_duration_seconds = Histogram(
    "order_creation_duration_seconds",
    "Order creation workflow duration in seconds"
)

stock_reservations_total = Counter(
    "stock_reservations_total",
    "Remote stock decrements issued by the order workflow",
    ["outcome"] # Labels: 'reserved', 'failed'
)

saga_compensation_total = Counter(
    "saga_compensation_total",
    "Total saga compensations triggered",
    ["step_name"]
)

order_status_changes_total = Counter(
    "order_status_changes_total",
    "Order status changes applied",
    ["status"]
)

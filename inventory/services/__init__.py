from .fifo_costing import (
    CostLayerConsumedError,
    InsufficientStockError,
    StockRestorationError,
    get_inventory_valuation,
    issue_stock_fifo,
    plan_fifo_issue,
    receive_stock,
    remove_receipt_layers,
    reverse_issue,
)

__all__ = [
    "CostLayerConsumedError",
    "InsufficientStockError",
    "StockRestorationError",
    "get_inventory_valuation",
    "issue_stock_fifo",
    "plan_fifo_issue",
    "receive_stock",
    "remove_receipt_layers",
    "reverse_issue",
]

# =============================================================================
# utils/__init__.py
# =============================================================================
# PURPOSE:
#   Makes the utils folder a package and provides easy imports:
#       from utils import allocate_shipment_goods_payment
#
# WHAT LIVES HERE:
#   - money.py: Parsing and rounding amounts (Decimal, 2 places)
#   - allocation.py: The supplier payment allocation engine
#   - calculations.py: Statuses, balances and summaries
#   - styling.py: Shared Streamlit look (imported by pages only)
# =============================================================================

from .money import (
    parse_amount_or_zero,
    round_amount,
    to_float,
    format_amount,
)

from .allocation import (
    SupplierAllocationError,
    ZERO_BASIS,
    EXCEEDS_OUTSTANDING,
    INVALID_AMOUNT,
    build_supplier_goods_totals,
    allocate_shipment_goods_payment,
    preview_payment_allocation,
)

from .calculations import (
    calculate_payment_status,
    calculate_supplier_goods_summary,
    build_supplier_balances,
    summarize_payment_allocations,
)

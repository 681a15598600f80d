# =============================================================================
# utils/calculations.py
# =============================================================================
# PURPOSE:
#   Business rules built on top of the allocation engine:
#   - Is a supplier unpaid, partly paid or fully paid for their goods?
#   - What does one supplier's goods balance look like on a shipment?
#   - A supplier balance table for the dashboard
#   - How much of each payment has been allocated?
#
# WHY SEPARATE FROM DATABASE QUERIES?
#   - Queries are about GETTING data
#   - Calculations are about PROCESSING data
#   These functions take plain lists / DataFrames and never hit the database.
# =============================================================================

import pandas as pd

from config import AMOUNT_TOLERANCE
from .allocation import build_supplier_goods_totals
from .money import parse_amount_or_zero, round_amount, to_float


def calculate_payment_status(paid_amount, total_amount):
    """
    Calculate the payment status of a supplier's goods balance.

    PARAMETERS:
        paid_amount: How much has been paid/allocated
        total_amount: How much was due

    RETURNS:
        str: One of 'UNPAID', 'PART PAID', 'PAID', 'OVERPAID'

    EXAMPLE:
        calculate_payment_status(0, 1000)      → 'UNPAID'
        calculate_payment_status(500, 1000)    → 'PART PAID'
        calculate_payment_status(1000, 1000)   → 'PAID'
        calculate_payment_status(1100, 1000)   → 'OVERPAID'
    """
    paid_amount = float(parse_amount_or_zero(paid_amount))
    total_amount = float(parse_amount_or_zero(total_amount))

    if paid_amount < AMOUNT_TOLERANCE:
        return "UNPAID"
    elif paid_amount + AMOUNT_TOLERANCE < total_amount:
        return "PART PAID"
    elif abs(paid_amount - total_amount) <= AMOUNT_TOLERANCE:
        return "PAID"
    else:
        return "OVERPAID"


def calculate_supplier_goods_summary(supplier_id, items, prior_allocations=None):
    """
    Goods balance for ONE supplier on a shipment.

    RETURNS:
        dict: {'supplier_id', 'goods_total', 'goods_paid', 'remaining', 'status'}
        None if the supplier has no goods lines on this shipment

    NOTE:
        'goods_paid' is the raw sum of allocations, so it can be larger than
        'goods_total' (status OVERPAID). 'remaining' never goes below zero.
    """
    totals = build_supplier_goods_totals(items, prior_allocations)
    for supplier in totals["supplier_totals"]:
        if supplier["supplier_id"] == supplier_id:
            return {
                "supplier_id": supplier_id,
                "goods_total": supplier["goods_total"],
                "goods_paid": supplier["goods_paid"],
                "remaining": supplier["outstanding"],
                "status": calculate_payment_status(
                    supplier["goods_paid"], supplier["goods_total"]
                ),
            }
    return None


def build_supplier_balances(totals, supplier_names=None):
    """
    Turn the output of build_supplier_goods_totals() into a table.

    PARAMETERS:
        totals (dict): Result of build_supplier_goods_totals()
        supplier_names (dict): Optional {supplier_id: name}

    RETURNS:
        pd.DataFrame: One row per supplier with columns
            supplier_id, supplier_name, goods_total, goods_paid,
            outstanding, share, status
        Amounts are floats so Streamlit can display and sort them.
    """
    columns = [
        "supplier_id", "supplier_name", "goods_total", "goods_paid",
        "outstanding", "share", "status",
    ]
    supplier_names = supplier_names or {}
    shipment_total = totals["shipment_goods_total"]

    rows = []
    for supplier in totals["supplier_totals"]:
        supplier_id = supplier["supplier_id"]
        if shipment_total > 0:
            share = float(round_amount(supplier["goods_total"] / shipment_total, 4))
        else:
            share = 0.0
        rows.append({
            "supplier_id": supplier_id,
            "supplier_name": supplier_names.get(supplier_id, f"Supplier #{supplier_id}"),
            "goods_total": to_float(supplier["goods_total"]),
            "goods_paid": to_float(supplier["goods_paid"]),
            "outstanding": to_float(supplier["outstanding"]),
            "share": share,
            "status": calculate_payment_status(
                supplier["goods_paid"], supplier["goods_total"]
            ),
        })

    return pd.DataFrame(rows, columns=columns)


def summarize_payment_allocations(payments_df, allocations_df):
    """
    How much of each payment has been split across suppliers?

    PARAMETERS:
        payments_df (pd.DataFrame): Payments (needs 'payment_id')
        allocations_df (pd.DataFrame): Allocation rows
            (needs 'payment_id' and 'allocated_amount')

    RETURNS:
        pd.DataFrame: payments_df with added columns:
            - allocation_count: Number of allocation rows
            - total_allocated: Sum of allocated amounts (2 decimals)
            - has_allocations: True if at least one row exists
    """
    if len(payments_df) == 0:
        return pd.DataFrame()

    result = payments_df.copy()

    if len(allocations_df) > 0:
        amounts = allocations_df["allocated_amount"].map(
            lambda v: float(parse_amount_or_zero(v))
        )
        grouped = (
            allocations_df.assign(allocated_amount=amounts)
            .groupby("payment_id")["allocated_amount"]
            .agg(["count", "sum"])
        )
        counts = result["payment_id"].map(grouped["count"])
        sums = result["payment_id"].map(grouped["sum"])
    else:
        counts = pd.Series(0, index=result.index)
        sums = pd.Series(0.0, index=result.index)

    result["allocation_count"] = counts.fillna(0).astype(int)
    result["total_allocated"] = sums.fillna(0.0).map(
        lambda v: to_float(round_amount(v))
    )
    result["has_allocations"] = result["allocation_count"] > 0

    return result

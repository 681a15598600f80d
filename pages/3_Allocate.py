# =============================================================================
# pages/3_Allocate.py
# =============================================================================
# PURPOSE:
#   Record a goods-cost payment for a shipment and see how it is split
#   between the suppliers.
#
# FLOW:
#   1. Pick a shipment
#   2. Type an amount → live preview (never fails, clamps to what is owed)
#   3. Record → the allocation engine runs again on fresh data inside a
#      transaction and the payment + allocation rows are saved
# =============================================================================

import pandas as pd
import streamlit as st

from config import GOODS_CURRENCY, PAYMENT_METHODS
from database import (
    init_db,
    load_allocation_inputs,
    load_shipments,
    load_supplier_names,
    record_goods_payment,
)
from utils import (
    EXCEEDS_OUTSTANDING,
    SupplierAllocationError,
    format_amount,
    preview_payment_allocation,
    to_float,
)
from utils.styling import setup_page

setup_page("Allocate", "💸")
init_db()

st.title("Goods Payment")
st.caption("Split a goods payment across the shipment's suppliers.")

shipments_df = load_shipments()
if len(shipments_df) == 0:
    st.info("No shipments yet. Create one on the Import page.")
    st.stop()

supplier_names = load_supplier_names()

# -----------------------------------------------------------------------------
# SHIPMENT SELECTOR
# -----------------------------------------------------------------------------
shipment_options = {
    int(row["shipment_id"]): f"{row['shipment_code']} - {row['shipment_name'] or 'Unnamed'}"
    for _, row in shipments_df.iterrows()
}
shipment_id = st.selectbox(
    "Shipment",
    options=list(shipment_options.keys()),
    format_func=lambda x: shipment_options[x],
)

items, prior_allocations = load_allocation_inputs(shipment_id)

# -----------------------------------------------------------------------------
# PAYMENT DETAILS
# -----------------------------------------------------------------------------
col1, col2, col3 = st.columns(3)
with col1:
    amount = st.number_input(
        f"Amount ({GOODS_CURRENCY})", min_value=0.0, step=100.0, format="%.2f"
    )
with col2:
    payment_method = st.selectbox("Method", PAYMENT_METHODS)
with col3:
    payment_date = st.date_input("Payment date")

reference_number = st.text_input("Reference")
note = st.text_area("Note", height=80)

# -----------------------------------------------------------------------------
# PREVIEW
# -----------------------------------------------------------------------------
preview = preview_payment_allocation(amount, items, prior_allocations)

st.write("### Preview")

m1, m2, m3 = st.columns(3)
m1.metric("Goods total", format_amount(preview["shipment_goods_total"], GOODS_CURRENCY))
m2.metric("Outstanding", format_amount(preview["total_outstanding"], GOODS_CURRENCY))
m3.metric("Will allocate", format_amount(preview["effective_amount"], GOODS_CURRENCY))

if preview["amount"] > preview["effective_amount"]:
    st.warning(
        "The amount is more than is owed to the suppliers. Only "
        f"{format_amount(preview['effective_amount'], GOODS_CURRENCY)} can be allocated."
    )

if preview["suppliers"]:
    st.dataframe(
        pd.DataFrame([
            {
                "supplier": supplier_names.get(s["supplier_id"], f"Supplier #{s['supplier_id']}"),
                "goods_total": to_float(s["goods_total"]),
                "outstanding": to_float(s["outstanding"]),
                "allocated": to_float(s["allocated"]),
            }
            for s in preview["suppliers"]
        ]),
        use_container_width=True,
        hide_index=True,
    )
else:
    st.caption("No goods lines with a supplier on this shipment.")

# -----------------------------------------------------------------------------
# RECORD
# -----------------------------------------------------------------------------
if st.button("Record payment", disabled=amount <= 0):
    try:
        result = record_goods_payment(
            shipment_id,
            amount,
            payment_date=payment_date.isoformat() if payment_date else None,
            payment_method=payment_method,
            reference_number=reference_number or None,
            note=note or None,
        )
    except SupplierAllocationError as e:
        st.error(e.message)
        if e.code == EXCEEDS_OUTSTANDING:
            st.caption(
                f"Requested {format_amount(e.details['payment_amount'], GOODS_CURRENCY)}, "
                f"outstanding {format_amount(e.details['total_outstanding'], GOODS_CURRENCY)}."
            )
    except Exception as e:
        st.error(f"Could not record the payment: {e}")
    else:
        st.success(
            f"Recorded payment #{result['payment_id']} across "
            f"{len(result['allocations'])} supplier(s)."
        )
        for allocation in result["allocations"]:
            name = supplier_names.get(allocation["supplier_id"], f"Supplier #{allocation['supplier_id']}")
            st.write(f"- {name}: {format_amount(allocation['allocated_amount'], GOODS_CURRENCY)}")

# =============================================================================
# pages/4_Payments.py
# =============================================================================
# PURPOSE:
#   All payments with a summary of how each was split between suppliers.
#   Deleting a payment also deletes its allocation rows, which puts the
#   amounts back on the suppliers' outstanding balances.
# =============================================================================

import streamlit as st

from database import (
    delete_shipment_payment,
    init_db,
    load_payment_allocations,
    load_shipment_payments,
)
from utils import summarize_payment_allocations
from utils.styling import setup_page

setup_page("Payments", "💳")
init_db()

st.title("Payments")
st.caption("Payments and their supplier allocations.")

payments_df = load_shipment_payments()
if len(payments_df) == 0:
    st.info("No payments recorded yet.")
    st.stop()

allocations_df = load_payment_allocations()
summary_df = summarize_payment_allocations(payments_df, allocations_df)

st.dataframe(
    summary_df[[
        "payment_id", "shipment_code", "payment_date", "component", "currency",
        "amount", "allocation_count", "total_allocated", "payment_method",
        "reference_number",
    ]],
    use_container_width=True,
    hide_index=True,
)

# -----------------------------------------------------------------------------
# PAYMENT DETAIL
# -----------------------------------------------------------------------------
st.write("---")
st.write("### Payment Detail")

payment_id = st.selectbox(
    "Payment",
    options=summary_df["payment_id"].tolist(),
    format_func=lambda x: f"#{x}",
)

payment_allocations = allocations_df[allocations_df["payment_id"] == payment_id] \
    if len(allocations_df) > 0 else allocations_df

if len(payment_allocations) > 0:
    st.dataframe(
        payment_allocations[["supplier_name", "allocated_amount", "currency", "created_at"]],
        use_container_width=True,
        hide_index=True,
    )
else:
    st.caption("This payment was not split between suppliers.")

confirm = st.checkbox("I want to delete this payment")
if st.button("Delete payment", disabled=not confirm):
    deleted = delete_shipment_payment(payment_id)
    if deleted is None:
        st.error("Could not delete the payment.")
    else:
        st.success(f"Deleted payment #{payment_id} and {deleted} allocation row(s).")
        st.rerun()

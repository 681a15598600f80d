# =============================================================================
# pages/1_Dashboard.py
# =============================================================================
# PURPOSE:
#   Overview of shipments and what is still owed to each supplier for goods.
#
# WHAT IT SHOWS:
#   - Quick stats (shipments, suppliers, goods payments)
#   - Per shipment: goods total, outstanding, supplier balance table
# =============================================================================

import streamlit as st

from config import GOODS_CURRENCY
from database import (
    init_db,
    load_allocation_inputs,
    load_shipment_payments,
    load_shipments,
    load_supplier_names,
)
from utils import build_supplier_balances, build_supplier_goods_totals, format_amount
from utils.styling import setup_page

setup_page("Dashboard", "📊")
init_db()

st.title("Dashboard")
st.caption(f"Shipments and supplier goods balances ({GOODS_CURRENCY})")

# -----------------------------------------------------------------------------
# LOAD DATA
# -----------------------------------------------------------------------------
shipments_df = load_shipments()
payments_df = load_shipment_payments()
supplier_names = load_supplier_names()

if len(shipments_df) == 0:
    st.info("No shipments yet. Create one on the Import page.")
    st.stop()

# -----------------------------------------------------------------------------
# QUICK STATS
# -----------------------------------------------------------------------------
st.write("### Quick Stats")

col1, col2, col3 = st.columns(3)
with col1:
    st.metric("📦 Shipments", len(shipments_df))
with col2:
    st.metric("🏭 Suppliers", len(supplier_names))
with col3:
    st.metric("💳 Payments", len(payments_df))

# -----------------------------------------------------------------------------
# SHIPMENT BALANCES
# -----------------------------------------------------------------------------
st.write("---")
st.write("### Supplier Balances by Shipment")

for _, shipment in shipments_df.iterrows():
    items, prior_allocations = load_allocation_inputs(shipment["shipment_id"])
    totals = build_supplier_goods_totals(items, prior_allocations)

    label = (
        f"{shipment['shipment_code']} - {shipment['shipment_name'] or 'Unnamed'} "
        f"| goods {format_amount(totals['shipment_goods_total'], GOODS_CURRENCY)} "
        f"| outstanding {format_amount(totals['total_outstanding'], GOODS_CURRENCY)}"
    )

    with st.expander(label):
        if not totals["supplier_totals"]:
            st.caption("No goods lines with a supplier on this shipment.")
            continue

        balances = build_supplier_balances(totals, supplier_names)
        st.dataframe(
            balances.drop(columns=["supplier_id"]),
            use_container_width=True,
            hide_index=True,
        )

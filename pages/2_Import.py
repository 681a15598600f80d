# =============================================================================
# pages/2_Import.py
# =============================================================================
# PURPOSE:
#   Create shipments and load their goods lines.
#
# FEATURES:
#   - New shipment form
#   - Goods line CSV upload (Supplier, Product, Cartons, Total Cost)
#   - Preview of the file before importing
# =============================================================================

import pandas as pd
import streamlit as st

from config import SHIPMENT_STATUSES
from database import create_shipment, init_db, load_shipment_items, load_shipments
from importers import GoodsImporter
from utils.styling import setup_page

setup_page("Import", "📥")
init_db()

st.title("Import")
st.caption("Create a shipment, then upload its goods lines.")

# -----------------------------------------------------------------------------
# NEW SHIPMENT
# -----------------------------------------------------------------------------
st.write("### New Shipment")

with st.form("new_shipment"):
    col1, col2, col3 = st.columns(3)
    with col1:
        shipment_code = st.text_input("Shipment code", placeholder="SHP-2026-001")
    with col2:
        shipment_name = st.text_input("Name")
    with col3:
        status = st.selectbox("Status", SHIPMENT_STATUSES)
    purchase_date = st.date_input("Purchase date", value=None)
    submitted = st.form_submit_button("Create shipment")

if submitted:
    shipment_id = create_shipment({
        "shipment_code": shipment_code,
        "shipment_name": shipment_name,
        "status": status,
        "purchase_date": purchase_date.isoformat() if purchase_date else None,
    })
    if shipment_id:
        st.success(f"Created shipment #{shipment_id}")
    else:
        st.error("Could not create shipment. Is the code empty or already used?")

# -----------------------------------------------------------------------------
# GOODS LINES
# -----------------------------------------------------------------------------
st.write("---")
st.write("### Goods Lines")

shipments_df = load_shipments()
if len(shipments_df) == 0:
    st.info("Create a shipment first.")
    st.stop()

shipment_options = {
    int(row["shipment_id"]): f"{row['shipment_code']} - {row['shipment_name'] or 'Unnamed'}"
    for _, row in shipments_df.iterrows()
}
shipment_id = st.selectbox(
    "Shipment",
    options=list(shipment_options.keys()),
    format_func=lambda x: shipment_options[x],
)

uploaded = st.file_uploader("Goods lines CSV", type=["csv"])

if uploaded is not None:
    preview_df = pd.read_csv(uploaded)
    st.caption(f"{len(preview_df)} rows in file")
    st.dataframe(preview_df.head(20), use_container_width=True, hide_index=True)
    uploaded.seek(0)

    if st.button("Import goods lines"):
        importer = GoodsImporter(uploaded, shipment_id)
        success, message, count = importer.import_items()
        if success:
            st.success(message)
        else:
            st.error(message)

        summary = importer.get_import_summary()
        if summary["skipped"] or summary["errors"]:
            with st.expander("Details"):
                for line in summary["errors"]:
                    st.write(f"❌ {line}")
                for line in summary["skipped"]:
                    st.write(f"⏭️ {line}")

items_df = load_shipment_items(shipment_id)
if len(items_df) > 0:
    st.write("#### Current goods lines")
    st.dataframe(
        items_df[["item_id", "supplier_name", "product_name", "cartons", "total_purchase_cost"]],
        use_container_width=True,
        hide_index=True,
    )

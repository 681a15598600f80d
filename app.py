# =============================================================================
# app.py - MAIN ENTRY POINT
# =============================================================================
# PURPOSE:
#   Entry point for the Streamlit application.
#   Run with:
#       streamlit run app.py
#
# WHAT IT DOES:
#   1. Configures the page
#   2. Makes sure the database tables exist
#   3. Redirects to the Dashboard page
#
# PAGES (files in pages/ become sidebar entries, ordered by filename):
#   1_Dashboard.py  - Shipments and supplier goods balances
#   2_Import.py     - Create shipments, import goods lines
#   3_Allocate.py   - Preview and record goods payments
#   4_Payments.py   - Payments with their supplier allocations
# =============================================================================

import streamlit as st

from config import LAYOUT, PAGE_ICON, PAGE_TITLE
from database import init_db

st.set_page_config(
    page_title=PAGE_TITLE,
    page_icon=PAGE_ICON,
    layout=LAYOUT,
)

init_db()

st.switch_page("pages/1_Dashboard.py")

# =============================================================================
# config/settings.py
# =============================================================================
# PURPOSE:
#   Central configuration for the shipment ledger.
#   Constants used by the allocation engine, the database layer and the UI
#   live here so nothing is hardcoded elsewhere.
#
# OVERRIDING IN TESTS:
#   Tests point the app at a throwaway database with:
#       import config
#       config.DB_PATH = "/tmp/test.db"
#   The connection reads config.DB_PATH every time it connects.
# =============================================================================

# -----------------------------------------------------------------------------
# DATABASE CONFIGURATION
# -----------------------------------------------------------------------------
DB_PATH = "shipment_ledger.db"

# -----------------------------------------------------------------------------
# CURRENCY CONFIGURATION
# -----------------------------------------------------------------------------
# Goods are bought and allocated in a single currency.
GOODS_CURRENCY = "RMB"

# Every amount is rounded to this many decimal places
MONEY_PLACES = 2

# Two amounts closer than this are treated as equal when deciding statuses.
# Also the threshold for redistributing a rounding remainder (one cent).
AMOUNT_TOLERANCE = 0.01

# How far a payment may exceed the total outstanding before it is rejected
OVERPAYMENT_TOLERANCE = 0.0001

# -----------------------------------------------------------------------------
# PAYMENT COMPONENTS
# -----------------------------------------------------------------------------
# Only allocations recorded against this component count as goods payments
PURCHASE_COST_COMPONENT = "Goods Cost"

PAYMENT_COMPONENTS = [
    "Goods Cost",       # Purchase cost owed to suppliers (allocated)
    "Shipping",         # Freight paid to the shipping company
    "Commission",       # Buying agent commission
    "Customs",          # Duties paid at the port
    "Clearance",        # Clearance / handling fees
]

PAYMENT_METHODS = [
    "Cash",
    "Bank Transfer",
    "Cheque",
    "Wallet",
]

# -----------------------------------------------------------------------------
# SHIPMENT STATUS OPTIONS
# -----------------------------------------------------------------------------
SHIPMENT_STATUSES = [
    "New",              # Created, goods still being added
    "In Transit",       # Left the supplier
    "Arrived",          # At the port / warehouse
    "Closed",           # Fully paid and received
]

# -----------------------------------------------------------------------------
# UI CONFIGURATION
# -----------------------------------------------------------------------------
PAGE_TITLE = "Shipment Ledger"
PAGE_ICON = "📦"
LAYOUT = "wide"

# =============================================================================
# database/__init__.py
# =============================================================================
# PURPOSE:
#   Makes the database folder a package and re-exports the functions pages
#   and importers need:
#       from database import init_db, load_shipments, record_goods_payment
# =============================================================================

from .connection import get_db_connection

from .schema import init_db, get_table_info

from .queries import (
    # Suppliers
    load_suppliers,
    load_supplier_names,
    check_supplier_exists,
    create_supplier,

    # Shipments
    load_shipments,
    load_shipment_by_id,
    check_shipment_exists,
    create_shipment,

    # Goods lines
    load_shipment_items,
    create_shipment_item,

    # Payments
    load_shipment_payments,
    create_shipment_payment,
    delete_shipment_payment,

    # Allocations
    load_payment_allocations,
    load_allocation_inputs,
    record_goods_payment,
)

# =============================================================================
# database/queries.py
# =============================================================================
# PURPOSE:
#   All database queries - loading and saving data.
#   This is the "data access layer" - the only code that talks SQL.
#
# ORGANIZATION:
#   Functions are grouped by table:
#   - Suppliers
#   - Shipments
#   - Shipment items (goods lines)
#   - Payments
#   - Payment allocations
#   - Goods payment recording (ties the allocation engine to the tables)
#
# NAMING CONVENTION:
#   - load_X() → Read data (SELECT), returns a DataFrame
#   - create_X() → Insert new data (INSERT), returns the new id or None
#   - delete_X() → Remove data (DELETE)
#   - check_X_exists() → Look up an id by a unique field
#
# ERROR HANDLING:
#   Loaders and creators print an [ERROR] line and return an empty
#   DataFrame / None so a page can carry on. record_goods_payment() is
#   different: it makes a money decision, so its errors are raised.
# =============================================================================

import pandas as pd
from datetime import datetime

from config import GOODS_CURRENCY, PURCHASE_COST_COMPONENT
from utils.allocation import (
    INVALID_AMOUNT,
    SupplierAllocationError,
    allocate_shipment_goods_payment,
)
from utils.money import parse_amount_or_zero, round_amount, to_float
from .connection import get_db_connection


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _safe_int(value, default=None):
    """
    Safely convert a value to integer.
    Handles numpy types and NaN from pandas DataFrames.
    """
    if value is None:
        return default
    try:
        # Handle numpy types (from pandas)
        if hasattr(value, 'item'):
            value = value.item()
        return int(value)
    except (ValueError, TypeError):
        return default


def _now():
    return datetime.now().isoformat()


def _read_allocation_inputs(cursor, shipment_id):
    """
    Read goods lines and prior goods allocations for a shipment using an
    open cursor, in the shape the allocation engine expects.
    """
    cursor.execute("""
        SELECT supplier_id, total_purchase_cost
        FROM shipment_items
        WHERE shipment_id = ?
        ORDER BY item_id
    """, (shipment_id,))
    items = [
        {'supplier_id': supplier_id, 'total_purchase_cost': cost}
        for supplier_id, cost in cursor.fetchall()
    ]

    cursor.execute("""
        SELECT supplier_id, allocated_amount
        FROM payment_allocations
        WHERE shipment_id = ? AND component = ? AND currency = ?
        ORDER BY allocation_id
    """, (shipment_id, PURCHASE_COST_COMPONENT, GOODS_CURRENCY))
    prior_allocations = [
        {'supplier_id': supplier_id, 'allocated_amount': amount}
        for supplier_id, amount in cursor.fetchall()
    ]

    return items, prior_allocations


# =============================================================================
# SUPPLIERS QUERIES
# =============================================================================

def load_suppliers(active_only=False):
    """
    Load all suppliers.

    RETURNS:
        pd.DataFrame: suppliers ordered by name
    """
    try:
        conn = get_db_connection()
        query = "SELECT * FROM suppliers"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY name"
        df = pd.read_sql_query(query, conn)
        conn.close()
        return df
    except Exception as e:
        print(f"[ERROR] Error loading suppliers: {e}")
        return pd.DataFrame()


def load_supplier_names():
    """
    RETURNS:
        dict: {supplier_id: name} - handy for labelling tables
    """
    suppliers = load_suppliers()
    if len(suppliers) == 0:
        return {}
    return {
        int(row['supplier_id']): row['name']
        for _, row in suppliers.iterrows()
    }


def check_supplier_exists(name):
    """
    Look up a supplier by name (case-insensitive, trimmed).

    RETURNS:
        int: supplier_id if found, None otherwise
    """
    try:
        conn = get_db_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT supplier_id FROM suppliers WHERE LOWER(TRIM(name)) = LOWER(TRIM(?))",
            (name,)
        )
        row = cursor.fetchone()
        conn.close()
        return row[0] if row else None
    except Exception as e:
        print(f"[ERROR] Error checking supplier: {e}")
        return None


def create_supplier(supplier_data):
    """
    Create a new supplier.

    PARAMETERS:
        supplier_data (dict): needs 'name'; optional contact_name, phone,
            email, notes

    RETURNS:
        int: The new supplier_id, or None if it failed or already exists
    """
    try:
        name = (supplier_data.get('name') or '').strip()
        if not name:
            print("[WARN] Supplier name is required")
            return None

        if check_supplier_exists(name):
            print(f"[WARN] Supplier {name} already exists!")
            return None

        conn = get_db_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO suppliers (name, contact_name, phone, email, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (
            name,
            supplier_data.get('contact_name'),
            supplier_data.get('phone'),
            supplier_data.get('email'),
            supplier_data.get('notes'),
            _now(),
        ))
        supplier_id = cursor.lastrowid
        conn.commit()
        conn.close()

        print(f"[OK] Created supplier #{supplier_id}: {name}")
        return supplier_id

    except Exception as e:
        print(f"[ERROR] Error creating supplier: {e}")
        return None


# =============================================================================
# SHIPMENTS QUERIES
# =============================================================================

def load_shipments(status=None):
    """
    Load shipments, newest first.

    PARAMETERS:
        status (str): Optional status filter, e.g. "Arrived"
    """
    try:
        conn = get_db_connection()
        query = "SELECT * FROM shipments"
        params = []
        if status:
            query += " WHERE status = ?"
            params.append(status)
        query += " ORDER BY shipment_id DESC"
        df = pd.read_sql_query(query, conn, params=params)
        conn.close()
        return df
    except Exception as e:
        print(f"[ERROR] Error loading shipments: {e}")
        return pd.DataFrame()


def load_shipment_by_id(shipment_id):
    """
    RETURNS:
        dict: The shipment row, or None if not found
    """
    try:
        conn = get_db_connection()
        df = pd.read_sql_query(
            "SELECT * FROM shipments WHERE shipment_id = ?",
            conn,
            params=[_safe_int(shipment_id)]
        )
        conn.close()
        if len(df) == 0:
            return None
        return df.iloc[0].to_dict()
    except Exception as e:
        print(f"[ERROR] Error loading shipment {shipment_id}: {e}")
        return None


def check_shipment_exists(shipment_code):
    """
    RETURNS:
        int: shipment_id if a shipment with this code exists, None otherwise
    """
    try:
        conn = get_db_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT shipment_id FROM shipments WHERE shipment_code = ?",
            (shipment_code,)
        )
        row = cursor.fetchone()
        conn.close()
        return row[0] if row else None
    except Exception as e:
        print(f"[ERROR] Error checking shipment: {e}")
        return None


def create_shipment(shipment_data):
    """
    Create a new shipment.

    PARAMETERS:
        shipment_data (dict): needs 'shipment_code'; optional
            shipment_name, status, purchase_date, arrival_date, notes

    RETURNS:
        int: The new shipment_id, or None if it failed or already exists
    """
    try:
        code = (shipment_data.get('shipment_code') or '').strip()
        if not code:
            print("[WARN] Shipment code is required")
            return None

        if check_shipment_exists(code):
            print(f"[WARN] Shipment {code} already exists!")
            return None

        conn = get_db_connection()
        cursor = conn.cursor()
        now = _now()
        cursor.execute("""
            INSERT INTO shipments
            (shipment_code, shipment_name, status, purchase_date, arrival_date,
             notes, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            code,
            shipment_data.get('shipment_name'),
            shipment_data.get('status') or 'New',
            shipment_data.get('purchase_date'),
            shipment_data.get('arrival_date'),
            shipment_data.get('notes'),
            now,
            now,
        ))
        shipment_id = cursor.lastrowid
        conn.commit()
        conn.close()

        print(f"[OK] Created shipment #{shipment_id}: {code}")
        return shipment_id

    except Exception as e:
        print(f"[ERROR] Error creating shipment: {e}")
        return None


# =============================================================================
# SHIPMENT ITEMS (GOODS LINES) QUERIES
# =============================================================================

def load_shipment_items(shipment_id):
    """
    Load the goods lines of a shipment with supplier names.

    RETURNS:
        pd.DataFrame: item_id, supplier_id, supplier_name, product_name,
            cartons, total_purchase_cost, ...
    """
    try:
        conn = get_db_connection()
        df = pd.read_sql_query("""
            SELECT i.*, s.name AS supplier_name
            FROM shipment_items i
            LEFT JOIN suppliers s ON s.supplier_id = i.supplier_id
            WHERE i.shipment_id = ?
            ORDER BY i.item_id
        """, conn, params=[_safe_int(shipment_id)])
        conn.close()
        return df
    except Exception as e:
        print(f"[ERROR] Error loading shipment items: {e}")
        return pd.DataFrame()


def create_shipment_item(item_data):
    """
    Add a goods line to a shipment.

    PARAMETERS:
        item_data (dict): shipment_id, product_name, supplier_id (optional),
            cartons, total_purchase_cost, import_batch

    RETURNS:
        int: The new item_id, or None if failed
    """
    try:
        conn = get_db_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO shipment_items
            (shipment_id, supplier_id, product_name, cartons,
             total_purchase_cost, import_batch, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            _safe_int(item_data.get('shipment_id')),
            _safe_int(item_data.get('supplier_id')),
            item_data.get('product_name'),
            _safe_int(item_data.get('cartons'), 0),
            to_float(parse_amount_or_zero(item_data.get('total_purchase_cost'))),
            item_data.get('import_batch'),
            _now(),
        ))
        item_id = cursor.lastrowid
        conn.commit()
        conn.close()
        return item_id

    except Exception as e:
        print(f"[ERROR] Error creating shipment item: {e}")
        return None


# =============================================================================
# PAYMENTS QUERIES
# =============================================================================

def load_shipment_payments(shipment_id=None):
    """
    Load payments, optionally for one shipment, newest first.
    """
    try:
        conn = get_db_connection()
        query = """
            SELECT p.*, sh.shipment_code
            FROM shipment_payments p
            LEFT JOIN shipments sh ON sh.shipment_id = p.shipment_id
        """
        params = []
        if shipment_id is not None:
            query += " WHERE p.shipment_id = ?"
            params.append(_safe_int(shipment_id))
        query += " ORDER BY p.payment_id DESC"
        df = pd.read_sql_query(query, conn, params=params)
        conn.close()
        return df
    except Exception as e:
        print(f"[ERROR] Error loading payments: {e}")
        return pd.DataFrame()


def create_shipment_payment(payment_data):
    """
    Record a payment that is NOT split between suppliers
    (shipping, customs, commission...).

    Goods-cost payments must go through record_goods_payment() so they
    get allocation rows.

    RETURNS:
        int: The new payment_id, or None if failed
    """
    component = payment_data.get('component')
    if component == PURCHASE_COST_COMPONENT:
        print("[WARN] Goods payments must be recorded with record_goods_payment()")
        return None

    try:
        conn = get_db_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO shipment_payments
            (shipment_id, payment_date, component, currency, amount,
             payment_method, reference_number, note, created_by, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            _safe_int(payment_data.get('shipment_id')),
            payment_data.get('payment_date'),
            component,
            payment_data.get('currency') or GOODS_CURRENCY,
            to_float(parse_amount_or_zero(payment_data.get('amount'))),
            payment_data.get('payment_method'),
            payment_data.get('reference_number'),
            payment_data.get('note'),
            payment_data.get('created_by'),
            _now(),
        ))
        payment_id = cursor.lastrowid
        conn.commit()
        conn.close()

        print(f"[OK] Created payment #{payment_id}: {component}")
        return payment_id

    except Exception as e:
        print(f"[ERROR] Error creating payment: {e}")
        return None


def delete_shipment_payment(payment_id):
    """
    Delete a payment together with its allocation rows.

    RETURNS:
        int: Number of allocation rows removed, or None if it failed
    """
    conn = None
    try:
        payment_id = _safe_int(payment_id)
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(
            "DELETE FROM payment_allocations WHERE payment_id = ?",
            (payment_id,)
        )
        allocations_deleted = cursor.rowcount

        cursor.execute(
            "DELETE FROM shipment_payments WHERE payment_id = ?",
            (payment_id,)
        )
        if cursor.rowcount == 0:
            conn.rollback()
            conn.close()
            print(f"[WARN] Payment #{payment_id} not found")
            return None

        conn.commit()
        conn.close()

        print(f"[OK] Deleted payment #{payment_id} ({allocations_deleted} allocations)")
        return allocations_deleted

    except Exception as e:
        if conn is not None:
            conn.rollback()
            conn.close()
        print(f"[ERROR] Error deleting payment {payment_id}: {e}")
        return None


# =============================================================================
# PAYMENT ALLOCATIONS QUERIES
# =============================================================================

def load_payment_allocations(shipment_id=None, payment_id=None):
    """
    Load allocation rows with supplier names.

    PARAMETERS:
        shipment_id (int): Only rows for this shipment
        payment_id (int): Only rows for this payment
    """
    try:
        conn = get_db_connection()
        query = """
            SELECT a.*, s.name AS supplier_name
            FROM payment_allocations a
            LEFT JOIN suppliers s ON s.supplier_id = a.supplier_id
            WHERE 1=1
        """
        params = []
        if shipment_id is not None:
            query += " AND a.shipment_id = ?"
            params.append(_safe_int(shipment_id))
        if payment_id is not None:
            query += " AND a.payment_id = ?"
            params.append(_safe_int(payment_id))
        query += " ORDER BY a.allocation_id"
        df = pd.read_sql_query(query, conn, params=params)
        conn.close()
        return df
    except Exception as e:
        print(f"[ERROR] Error loading payment allocations: {e}")
        return pd.DataFrame()


def load_allocation_inputs(shipment_id):
    """
    Goods lines and prior goods allocations for a shipment, ready for
    build_supplier_goods_totals() / allocate_shipment_goods_payment().

    Only allocations for the goods-cost component in the goods currency
    count as "already paid".

    RETURNS:
        tuple: (items, prior_allocations) - two lists of dicts
    """
    try:
        conn = get_db_connection()
        cursor = conn.cursor()
        items, prior_allocations = _read_allocation_inputs(cursor, _safe_int(shipment_id))
        conn.close()
        return items, prior_allocations
    except Exception as e:
        print(f"[ERROR] Error loading allocation inputs: {e}")
        return [], []


# =============================================================================
# GOODS PAYMENT RECORDING
# =============================================================================

def record_goods_payment(shipment_id, payment_amount, payment_date=None,
                         payment_method=None, reference_number=None,
                         note=None, created_by=None):
    """
    Record a goods-cost payment and split it across the suppliers.

    WHAT THIS DOES (all in one transaction):
        1. Lock the database for writing
        2. Read the shipment's goods lines and earlier goods allocations
        3. Run the allocation engine on that snapshot
        4. Insert the payment
        5. Insert one allocation row per supplier that receives money

    RETURNS:
        dict: {
            'payment_id': int,
            'shipment_id': int,
            'amount': Decimal,
            'allocations': [{'supplier_id', 'allocated_amount'}, ...],
            'supplier_totals': [...],   # before this payment
            'shipment_goods_total': Decimal,
            'total_outstanding': Decimal,
        }

    RAISES:
        SupplierAllocationError: The amount is not positive, or the payment
            can't be allocated (nothing is written)
        Exception: Any database error (nothing is written)
    """
    shipment_id = _safe_int(shipment_id)
    amount = round_amount(parse_amount_or_zero(payment_amount))
    if amount <= 0:
        print(f"[WARN] Goods payment for shipment #{shipment_id} needs a positive amount")
        raise SupplierAllocationError(
            "The payment amount must be greater than zero.",
            INVALID_AMOUNT,
            {'payment_amount': amount},
        )

    conn = get_db_connection()
    try:
        cursor = conn.cursor()

        # Holding the write lock while reading keeps the snapshot consistent
        cursor.execute("BEGIN IMMEDIATE")

        items, prior_allocations = _read_allocation_inputs(cursor, shipment_id)
        result = allocate_shipment_goods_payment(amount, items, prior_allocations)

        now = _now()
        cursor.execute("""
            INSERT INTO shipment_payments
            (shipment_id, payment_date, component, currency, amount,
             payment_method, reference_number, note, created_by, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            shipment_id,
            payment_date or now[:10],
            PURCHASE_COST_COMPONENT,
            GOODS_CURRENCY,
            to_float(amount),
            payment_method,
            reference_number,
            note,
            created_by,
            now,
        ))
        payment_id = cursor.lastrowid

        for allocation in result['allocations']:
            cursor.execute("""
                INSERT INTO payment_allocations
                (payment_id, shipment_id, supplier_id, component, currency,
                 allocated_amount, created_by, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                payment_id,
                shipment_id,
                allocation['supplier_id'],
                PURCHASE_COST_COMPONENT,
                GOODS_CURRENCY,
                to_float(allocation['allocated_amount']),
                created_by,
                now,
            ))

        conn.commit()
        print(
            f"[OK] Recorded goods payment #{payment_id}: {to_float(amount):.2f} "
            f"{GOODS_CURRENCY} across {len(result['allocations'])} supplier(s)"
        )

        return {
            'payment_id': payment_id,
            'shipment_id': shipment_id,
            'amount': amount,
            **result,
        }

    except Exception as e:
        conn.rollback()
        print(f"[ERROR] Goods payment for shipment #{shipment_id} not recorded: {e}")
        raise
    finally:
        conn.close()

# =============================================================================
# database/schema.py
# =============================================================================
# PURPOSE:
#   Defines the database schema - the structure of all tables.
#
# DATA MODEL:
#   The central concept is a SHIPMENT. Goods on a shipment are bought from
#   one or more SUPPLIERS, and goods-cost payments are split between them.
#
#   [SHIPMENTS] ←── One row per shipment
#      ├── [SHIPMENT_ITEMS] ←── Goods lines (supplier + purchase cost)
#      ├── [SHIPMENT_PAYMENTS] ←── Money paid against the shipment
#      └── [PAYMENT_ALLOCATIONS] ←── How a goods payment was split
#                                    across suppliers
#   [SUPPLIERS] ←── Who we buy goods from
#
# MONEY COLUMNS:
#   Amounts are stored as REAL rounded to 2 decimals. The allocation engine
#   reads them back through parse_amount_or_zero(), which turns them into
#   exact Decimals again.
# =============================================================================

from .connection import get_db_connection


def init_db():
    """
    Initialize the database by creating all tables.

    SAFE TO CALL MULTIPLE TIMES:
        "CREATE TABLE IF NOT EXISTS" does nothing when the table is there.

    RETURNS:
        bool: True if successful, False if error
    """
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        # =====================================================================
        # TABLE 1: SUPPLIERS
        # =====================================================================
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS suppliers (
                supplier_id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                contact_name TEXT,
                phone TEXT,
                email TEXT,
                notes TEXT,
                is_active INTEGER DEFAULT 1,
                created_at TEXT
            )
        """)

        # =====================================================================
        # TABLE 2: SHIPMENTS
        # =====================================================================
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS shipments (
                shipment_id INTEGER PRIMARY KEY AUTOINCREMENT,

                -- Human reference, e.g. "SHP-2026-014"
                shipment_code TEXT NOT NULL UNIQUE,
                shipment_name TEXT,
                status TEXT DEFAULT 'New',

                purchase_date TEXT,
                arrival_date TEXT,
                notes TEXT,

                created_at TEXT,
                updated_at TEXT
            )
        """)

        # =====================================================================
        # TABLE 3: SHIPMENT_ITEMS (goods lines)
        # =====================================================================
        # supplier_id may be NULL - such lines carry cost but are ignored
        # when a goods payment is split between suppliers.
        # =====================================================================
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS shipment_items (
                item_id INTEGER PRIMARY KEY AUTOINCREMENT,
                shipment_id INTEGER NOT NULL,
                supplier_id INTEGER,

                product_name TEXT NOT NULL,
                cartons INTEGER DEFAULT 0,
                total_purchase_cost REAL DEFAULT 0,

                import_batch TEXT,
                created_at TEXT,

                FOREIGN KEY(shipment_id) REFERENCES shipments(shipment_id),
                FOREIGN KEY(supplier_id) REFERENCES suppliers(supplier_id)
            )
        """)

        # =====================================================================
        # TABLE 4: SHIPMENT_PAYMENTS
        # =====================================================================
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS shipment_payments (
                payment_id INTEGER PRIMARY KEY AUTOINCREMENT,
                shipment_id INTEGER NOT NULL,

                payment_date TEXT,
                component TEXT NOT NULL,     -- e.g. 'Goods Cost', 'Shipping'
                currency TEXT NOT NULL,
                amount REAL NOT NULL,
                payment_method TEXT,
                reference_number TEXT,
                note TEXT,

                created_by TEXT,
                created_at TEXT,

                FOREIGN KEY(shipment_id) REFERENCES shipments(shipment_id)
            )
        """)

        # =====================================================================
        # TABLE 5: PAYMENT_ALLOCATIONS
        # =====================================================================
        # One row per supplier that received part of a goods payment.
        # The rows for one payment always add up to the payment amount.
        # =====================================================================
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS payment_allocations (
                allocation_id INTEGER PRIMARY KEY AUTOINCREMENT,
                payment_id INTEGER NOT NULL,
                shipment_id INTEGER NOT NULL,
                supplier_id INTEGER NOT NULL,

                component TEXT NOT NULL,
                currency TEXT NOT NULL,
                allocated_amount REAL NOT NULL,

                created_by TEXT,
                created_at TEXT,

                FOREIGN KEY(payment_id) REFERENCES shipment_payments(payment_id),
                FOREIGN KEY(shipment_id) REFERENCES shipments(shipment_id),
                FOREIGN KEY(supplier_id) REFERENCES suppliers(supplier_id)
            )
        """)

        # =====================================================================
        # CREATE INDEXES
        # =====================================================================
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_items_shipment ON shipment_items(shipment_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_items_supplier ON shipment_items(supplier_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_payments_shipment ON shipment_payments(shipment_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_allocations_payment ON payment_allocations(payment_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_allocations_shipment ON payment_allocations(shipment_id)")

        conn.commit()
        conn.close()

        print("[OK] Database initialized successfully!")
        print("   Tables: suppliers, shipments, shipment_items,")
        print("           shipment_payments, payment_allocations")
        return True

    except Exception as e:
        print(f"[ERROR] Database initialization error: {e}")
        return False


def get_table_info():
    """
    Get column information for every table.

    RETURNS:
        dict: {table_name: [(cid, name, type, notnull, default, pk), ...]}
    """
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute("""
            SELECT name FROM sqlite_master
            WHERE type='table' AND name NOT LIKE 'sqlite_%'
            ORDER BY name
        """)
        tables = [row[0] for row in cursor.fetchall()]

        table_info = {}
        for table in tables:
            cursor.execute(f"PRAGMA table_info({table})")
            table_info[table] = cursor.fetchall()

        conn.close()
        return table_info

    except Exception as e:
        print(f"[ERROR] Error getting table info: {e}")
        return {}

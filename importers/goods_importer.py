# =============================================================================
# importers/goods_importer.py
# =============================================================================
# PURPOSE:
#   Imports a shipment's goods lines from a CSV (supplier packing lists,
#   purchase sheets) into the database.
#
# EXPECTED FORMAT (column names are detected loosely):
#   Supplier,Product,Cartons,Total Cost
#   Guangzhou Textiles,Cotton shirts,40,12500.00
#   Yiwu Trading,Phone cases,12,"3,200.50"
#   ,Sample pack,1,150
#
# WHAT THIS IMPORTER DOES:
#   1. Reads the CSV with pandas
#   2. Detects which column holds what
#   3. For each row:
#      - Skips rows with no product name
#      - Finds the supplier by name (creates it if new)
#      - Parses the purchase cost (bad values count as 0)
#   4. Inserts the goods lines for the shipment
#   5. Reports success/failures
#
# LINES WITHOUT A SUPPLIER:
#   Kept. They are part of the shipment cost but are ignored when a goods
#   payment is split between suppliers.
# =============================================================================

import pandas as pd
from datetime import datetime

from database import (
    check_supplier_exists,
    create_shipment_item,
    create_supplier,
    load_shipment_by_id,
)
from utils.money import parse_amount_or_zero


class GoodsImporter:
    """
    Imports goods lines for one shipment.

    USAGE:
        importer = GoodsImporter("packing_list.csv", shipment_id=3)
        success, message, count = importer.import_items()

        # From a Streamlit uploaded file
        importer = GoodsImporter(uploaded_file, shipment_id=3)

    ATTRIBUTES:
        source: The file path or file object to import
        shipment_id: Shipment the lines belong to
        batch_id: Unique identifier for this import batch
        errors: Rows that could not be imported
        skipped: Rows intentionally skipped (with reasons)
        new_suppliers: Supplier names created during this import
    """

    COLUMN_MAPPINGS = {
        'supplier': ['supplier', 'vendor', 'factory', 'seller'],
        'product': ['product', 'item', 'description', 'goods'],
        'cartons': ['cartons', 'ctn', 'boxes'],
        'total_cost': ['total purchase cost', 'total cost', 'purchase cost', 'cost', 'amount', 'total'],
    }

    def __init__(self, source, shipment_id):
        self.source = source
        self.shipment_id = shipment_id
        self.batch_id = datetime.now().strftime("goods_%Y%m%d_%H%M%S")

        self.errors = []
        self.skipped = []
        self.new_suppliers = []

    def import_items(self):
        """
        Parse the CSV and insert goods lines.

        RETURNS:
            tuple: (success: bool, message: str, count: int)
        """
        try:
            if not load_shipment_by_id(self.shipment_id):
                return False, f"Shipment #{self.shipment_id} not found", 0

            df = pd.read_csv(self.source)
            print(f"[INFO] Read CSV with {len(df)} rows")

            rows = self._parse_rows(df)
            if rows is None:
                return False, "; ".join(self.errors), 0

            count = self._insert_rows(rows)

            message_parts = [f"Imported {count} goods line(s)"]
            if self.new_suppliers:
                message_parts.append(f"{len(self.new_suppliers)} new supplier(s)")
            if self.skipped:
                message_parts.append(f"{len(self.skipped)} skipped")
            if self.errors:
                message_parts.append(f"{len(self.errors)} errors")

            return count > 0, ", ".join(message_parts), count

        except Exception as e:
            print(f"[ERROR] Goods import failed: {e}")
            return False, f"Import failed: {e}", 0

    def _parse_rows(self, df):
        """
        Turn DataFrame rows into goods line dicts.

        RETURNS:
            list: [{'supplier_name', 'product_name', 'cartons',
                    'total_purchase_cost'}, ...]
            None if a required column is missing
        """
        col_map = self._detect_columns(df)

        if not col_map.get('product'):
            self.errors.append("Missing required column: Product")
            return None
        if not col_map.get('total_cost'):
            self.errors.append("Missing required column: Total Cost")
            return None

        rows = []
        for idx, row in df.iterrows():
            row_num = idx + 2  # header is row 1

            product = self._get_value(row, col_map.get('product'))
            if not product:
                self.skipped.append(f"Row {row_num}: No product")
                continue

            rows.append({
                'row_num': row_num,
                'supplier_name': self._get_value(row, col_map.get('supplier')),
                'product_name': product,
                'cartons': self._get_int(row, col_map.get('cartons')),
                'total_purchase_cost': parse_amount_or_zero(
                    self._get_value(row, col_map.get('total_cost'))
                ),
            })

        return rows

    def _detect_columns(self, df):
        """
        Map our field names to the CSV's actual column names.
        The first matching column wins; matching is case-insensitive
        and by substring.
        """
        col_map = {}
        for field, possible_names in self.COLUMN_MAPPINGS.items():
            for name in possible_names:
                for col in df.columns:
                    if col in col_map.values():
                        continue
                    if name in str(col).lower().strip():
                        col_map[field] = col
                        break
                if field in col_map:
                    break

        print("[INFO] Column mapping:")
        for field, col in col_map.items():
            print(f"   {field} -> {col}")

        return col_map

    def _get_value(self, row, col_name, default=None):
        """Safely get a string value from a row."""
        if not col_name or col_name not in row.index:
            return default

        value = row[col_name]
        if pd.isna(value):
            return default

        str_val = str(value).strip()
        if not str_val or str_val.lower() in ('nan', 'none'):
            return default
        return str_val

    def _get_int(self, row, col_name, default=0):
        """Safely get a whole number (cartons) from a row."""
        value = self._get_value(row, col_name)
        if value is None:
            return default
        try:
            return int(float(value.replace(',', '')))
        except ValueError:
            return default

    def _insert_rows(self, rows):
        """
        Insert parsed rows, creating suppliers as needed.

        RETURNS:
            int: Number of goods lines inserted
        """
        supplier_ids = {}
        count = 0

        for row in rows:
            supplier_id = None
            name = row['supplier_name']
            if name:
                key = name.lower()
                if key not in supplier_ids:
                    supplier_ids[key] = self._resolve_supplier(name)
                supplier_id = supplier_ids[key]
                if supplier_id is None:
                    self.errors.append(f"Row {row['row_num']}: Could not save supplier {name}")
                    continue

            item_id = create_shipment_item({
                'shipment_id': self.shipment_id,
                'supplier_id': supplier_id,
                'product_name': row['product_name'],
                'cartons': row['cartons'],
                'total_purchase_cost': row['total_purchase_cost'],
                'import_batch': self.batch_id,
            })
            if item_id:
                count += 1
            else:
                self.errors.append(f"Row {row['row_num']}: Could not save goods line")

        print(f"[INFO] Inserted {count} goods line(s) into shipment #{self.shipment_id}")
        return count

    def _resolve_supplier(self, name):
        """Find a supplier by name, creating it (and noting it) if new."""
        supplier_id = check_supplier_exists(name)
        if supplier_id:
            return supplier_id

        supplier_id = create_supplier({'name': name})
        if supplier_id:
            self.new_suppliers.append(name)
        return supplier_id

    def get_import_summary(self):
        """Get detailed import summary."""
        return {
            'batch_id': self.batch_id,
            'errors': self.errors,
            'skipped': self.skipped,
            'new_suppliers': self.new_suppliers,
        }

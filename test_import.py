# =============================================================================
# test_import.py - Goods line import from CSV
# =============================================================================
# Imports a small packing list into a temporary database and checks the
# lines, the suppliers it created and the resulting supplier totals.
#
# Run: pytest test_import.py
# =============================================================================

import io
from decimal import Decimal

from database import (
    create_shipment,
    create_supplier,
    load_allocation_inputs,
    load_shipment_items,
    load_suppliers,
)
from importers import GoodsImporter
from utils import build_supplier_goods_totals

PACKING_LIST = """Supplier,Product,Cartons,Total Cost
Guangzhou Textiles,Cotton shirts,40,12500.00
Yiwu Trading,Phone cases,12,"3,200.50"
,Sample pack,1,150
Guangzhou Textiles,Linen shirts,10,500
Yiwu Trading,,1,99
"""


def test_import_goods_lines(temp_db):
    shipment_id = create_shipment({"shipment_code": "SHP-IMPORT"})

    importer = GoodsImporter(io.StringIO(PACKING_LIST), shipment_id)
    success, message, count = importer.import_items()

    assert success, message
    assert count == 4
    assert sorted(importer.new_suppliers) == ["Guangzhou Textiles", "Yiwu Trading"]
    assert importer.skipped == ["Row 6: No product"]

    items = load_shipment_items(shipment_id)
    assert items["product_name"].tolist() == [
        "Cotton shirts", "Phone cases", "Sample pack", "Linen shirts",
    ]
    assert items["cartons"].tolist() == [40, 12, 1, 10]
    assert items["supplier_id"].isna().sum() == 1
    assert set(items["import_batch"]) == {importer.batch_id}

    totals = build_supplier_goods_totals(*load_allocation_inputs(shipment_id))
    names = {
        row["supplier_id"]: row["name"] for _, row in load_suppliers().iterrows()
    }
    goods = {names[s["supplier_id"]]: s["goods_total"] for s in totals["supplier_totals"]}

    assert goods == {
        "Guangzhou Textiles": Decimal("13000.00"),
        "Yiwu Trading": Decimal("3200.50"),
    }
    # the unassigned sample pack is not owed to anyone
    assert totals["shipment_goods_total"] == Decimal("16200.50")


def test_import_reuses_existing_suppliers(temp_db):
    existing_id = create_supplier({"name": "Yiwu Trading"})
    shipment_id = create_shipment({"shipment_code": "SHP-IMPORT"})

    importer = GoodsImporter(io.StringIO(PACKING_LIST), shipment_id)
    importer.import_items()

    assert importer.new_suppliers == ["Guangzhou Textiles"]
    items = load_shipment_items(shipment_id)
    assert (items["supplier_id"] == existing_id).sum() == 1
    assert len(load_suppliers()) == 2


def test_import_requires_cost_column(temp_db):
    shipment_id = create_shipment({"shipment_code": "SHP-IMPORT"})
    csv_text = "Supplier,Product\nYiwu Trading,Phone cases\n"

    success, message, count = GoodsImporter(io.StringIO(csv_text), shipment_id).import_items()

    assert not success
    assert count == 0
    assert "Total Cost" in message
    assert len(load_shipment_items(shipment_id)) == 0


def test_import_into_unknown_shipment(temp_db):
    success, message, count = GoodsImporter(io.StringIO(PACKING_LIST), 42).import_items()

    assert not success
    assert message == "Shipment #42 not found"
    assert count == 0

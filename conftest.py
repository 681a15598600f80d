"""
Pytest fixtures shared by the test modules
"""
import pytest

import config
from database import create_shipment, create_shipment_item, create_supplier, init_db


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite file for one test"""
    db_path = str(tmp_path / "shipment_ledger_test.db")
    monkeypatch.setattr(config, "DB_PATH", db_path)
    assert init_db(), "init_db failed"
    return db_path


@pytest.fixture
def two_supplier_shipment(temp_db):
    """Shipment with two suppliers owning 100 of goods each"""
    supplier_a = create_supplier({"name": "Guangzhou Textiles"})
    supplier_b = create_supplier({"name": "Yiwu Trading"})
    shipment_id = create_shipment({"shipment_code": "SHP-TEST-1", "shipment_name": "Test"})

    create_shipment_item({
        "shipment_id": shipment_id, "supplier_id": supplier_a,
        "product_name": "Shirts", "total_purchase_cost": "100",
    })
    create_shipment_item({
        "shipment_id": shipment_id, "supplier_id": supplier_b,
        "product_name": "Cases", "total_purchase_cost": "100",
    })

    return {"shipment_id": shipment_id, "supplier_a": supplier_a, "supplier_b": supplier_b}

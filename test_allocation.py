# =============================================================================
# test_allocation.py - Supplier goods totals and payment allocation
# =============================================================================
# Run: pytest test_allocation.py
# =============================================================================

import random
from decimal import Decimal

import pytest

from utils.allocation import (
    EXCEEDS_OUTSTANDING,
    ZERO_BASIS,
    SupplierAllocationError,
    allocate_shipment_goods_payment,
    build_supplier_goods_totals,
    preview_payment_allocation,
)


def goods(*lines):
    """goods((1, 100), (2, "50.5")) → goods line dicts"""
    return [{"supplier_id": sid, "total_purchase_cost": cost} for sid, cost in lines]


def paid(*rows):
    """paid((1, 90)) → prior allocation dicts"""
    return [{"supplier_id": sid, "allocated_amount": amount} for sid, amount in rows]


def by_supplier(result):
    return {a["supplier_id"]: a["allocated_amount"] for a in result["allocations"]}


def total_allocated(result):
    return sum((a["allocated_amount"] for a in result["allocations"]), Decimal("0"))


# -----------------------------------------------------------------------------
# TOTALS
# -----------------------------------------------------------------------------

def test_totals_sum_lines_per_supplier_in_first_appearance_order():
    totals = build_supplier_goods_totals(
        goods((7, "60.10"), (3, 40), (7, "39.90")),
        paid((7, 25), (3, "10.50")),
    )

    assert [s["supplier_id"] for s in totals["supplier_totals"]] == [7, 3]
    first, second = totals["supplier_totals"]
    assert first == {
        "supplier_id": 7,
        "goods_total": Decimal("100.00"),
        "goods_paid": Decimal("25.00"),
        "outstanding": Decimal("75.00"),
    }
    assert second["goods_paid"] == Decimal("10.50")
    assert second["outstanding"] == Decimal("29.50")
    assert totals["shipment_goods_total"] == Decimal("140.00")
    assert totals["total_outstanding"] == Decimal("104.50")


def test_totals_ignore_lines_without_supplier():
    totals = build_supplier_goods_totals(
        goods((None, 500), ("", 300), (1, 100)),
        paid((None, 50)),
    )

    assert [s["supplier_id"] for s in totals["supplier_totals"]] == [1]
    assert totals["shipment_goods_total"] == Decimal("100.00")


def test_totals_ignore_lines_with_nan_supplier():
    totals = build_supplier_goods_totals(goods((float("nan"), 500), (1, 100)))
    assert totals["shipment_goods_total"] == Decimal("100.00")


def test_totals_treat_malformed_amounts_as_zero():
    totals = build_supplier_goods_totals(
        goods((1, "abc"), (1, None), (1, -40), (1, "1,000.50"), (2, float("inf"))),
        paid((1, "n/a")),
    )

    supplier_1, supplier_2 = totals["supplier_totals"]
    assert supplier_1["goods_total"] == Decimal("1000.50")
    assert supplier_1["goods_paid"] == Decimal("0.00")
    assert supplier_2["goods_total"] == Decimal("0.00")
    assert supplier_2["outstanding"] == Decimal("0.00")


def test_totals_treat_absurdly_large_amounts_as_zero():
    totals = build_supplier_goods_totals(
        goods((1, "1e30"), (1, 100), (2, 1e27)),
        paid((1, "1e29")),
    )

    supplier_1, supplier_2 = totals["supplier_totals"]
    assert supplier_1["goods_total"] == Decimal("100.00")
    assert supplier_1["goods_paid"] == Decimal("0.00")
    assert supplier_2["goods_total"] == Decimal("0.00")
    assert totals["total_outstanding"] == Decimal("100.00")


def test_totals_of_large_lines_beyond_default_precision():
    totals = build_supplier_goods_totals(goods((1, "9e25"), (1, "9e25")))
    assert totals["supplier_totals"][0]["goods_total"] == Decimal("1.8e26")


def test_preview_with_absurd_line_does_not_raise():
    preview = preview_payment_allocation("1e30", goods((1, "1e30"), (2, 50)))
    assert preview["effective_amount"] == Decimal("0.00")
    assert preview["suppliers"][1]["outstanding"] == Decimal("50.00")


def test_totals_floor_outstanding_at_zero_when_overpaid():
    totals = build_supplier_goods_totals(goods((1, 100), (2, 50)), paid((1, 120)))

    supplier_1 = totals["supplier_totals"][0]
    assert supplier_1["goods_paid"] == Decimal("120.00")
    assert supplier_1["outstanding"] == Decimal("0.00")
    assert totals["total_outstanding"] == Decimal("50.00")
    assert totals["total_outstanding"] <= totals["shipment_goods_total"]


def test_totals_ignore_prior_allocations_for_unknown_suppliers():
    totals = build_supplier_goods_totals(goods((1, 100)), paid((99, 40)))
    assert [s["supplier_id"] for s in totals["supplier_totals"]] == [1]
    assert totals["total_outstanding"] == Decimal("100.00")


def test_totals_are_idempotent():
    items = goods((1, "10.10"), (2, "20.20"), (1, "0.01"))
    priors = paid((2, 5))
    assert build_supplier_goods_totals(items, priors) == build_supplier_goods_totals(items, priors)


def test_totals_for_empty_shipment():
    totals = build_supplier_goods_totals([], None)
    assert totals == {
        "supplier_totals": [],
        "shipment_goods_total": Decimal("0.00"),
        "total_outstanding": Decimal("0.00"),
    }


# -----------------------------------------------------------------------------
# ALLOCATION SCENARIOS
# -----------------------------------------------------------------------------

def test_simple_proportional_split():
    result = allocate_shipment_goods_payment(50, goods((1, 100), (2, 100)))

    assert by_supplier(result) == {1: Decimal("25.00"), 2: Decimal("25.00")}
    assert result["shipment_goods_total"] == Decimal("200.00")
    assert result["total_outstanding"] == Decimal("200.00")


def test_capped_supplier_remainder_flows_to_others():
    result = allocate_shipment_goods_payment(
        50, goods((1, 100), (2, 100)), paid((1, 90))
    )

    assert by_supplier(result) == {1: Decimal("10.00"), 2: Decimal("40.00")}
    assert total_allocated(result) == Decimal("50.00")


def test_overpayment_is_rejected():
    with pytest.raises(SupplierAllocationError) as exc_info:
        allocate_shipment_goods_payment(200, goods((1, 60), (2, 50)), paid((1, 0)))

    error = exc_info.value
    assert error.code == EXCEEDS_OUTSTANDING
    assert error.details == {
        "payment_amount": Decimal("200.00"),
        "total_outstanding": Decimal("110.00"),
        "shipment_goods_total": Decimal("110.00"),
    }


@pytest.mark.parametrize("amount", [0, 50])
def test_zero_basis_is_rejected_for_any_amount(amount):
    with pytest.raises(SupplierAllocationError) as exc_info:
        allocate_shipment_goods_payment(amount, [])

    assert exc_info.value.code == ZERO_BASIS
    assert exc_info.value.details == {"shipment_goods_total": Decimal("0.00")}


def test_zero_basis_when_only_unassigned_lines_have_cost():
    with pytest.raises(SupplierAllocationError) as exc_info:
        allocate_shipment_goods_payment(10, goods((None, 500), (1, 0)))
    assert exc_info.value.code == ZERO_BASIS


def test_three_way_cascading_cap():
    result = allocate_shipment_goods_payment(
        95,
        goods((1, 100), (2, 100), (3, 100)),
        paid((1, 95), (2, 95), (3, 10)),
    )

    assert by_supplier(result) == {
        1: Decimal("5.00"),
        2: Decimal("5.00"),
        3: Decimal("85.00"),
    }
    assert total_allocated(result) == Decimal("95.00")


def test_payment_equal_to_outstanding_pays_everyone_off():
    result = allocate_shipment_goods_payment(
        "100", goods((1, 60), (2, 50)), paid((1, 10))
    )
    assert by_supplier(result) == {1: Decimal("50.00"), 2: Decimal("50.00")}
    assert total_allocated(result) == Decimal("100.00")


def test_payment_within_tolerance_of_outstanding_is_accepted():
    # rounds to 110.00, exactly the outstanding
    result = allocate_shipment_goods_payment(110.004, goods((1, 60), (2, 50)))
    assert total_allocated(result) == Decimal("110.00")


def test_payment_one_cent_over_outstanding_is_rejected():
    with pytest.raises(SupplierAllocationError):
        allocate_shipment_goods_payment("110.01", goods((1, 60), (2, 50)))


# -----------------------------------------------------------------------------
# ROUNDING
# -----------------------------------------------------------------------------

def test_uncapped_split_is_exactly_proportional():
    result = allocate_shipment_goods_payment(100, goods((1, 100), (2, 200), (3, 300)))
    assert by_supplier(result) == {
        1: Decimal("16.67"),
        2: Decimal("33.33"),
        3: Decimal("50.00"),
    }


def test_rounding_remainder_goes_to_first_of_tied_largest_shares():
    result = allocate_shipment_goods_payment(100, goods((1, 100), (2, 100), (3, 100)))
    assert by_supplier(result) == {
        1: Decimal("33.34"),
        2: Decimal("33.33"),
        3: Decimal("33.33"),
    }


def test_single_cent_goes_to_largest_share():
    # raw shares 0.0033.. and 0.0066.. → 0.00 + 0.01
    result = allocate_shipment_goods_payment("0.01", goods((1, 100), (2, 200)))
    assert by_supplier(result) == {2: Decimal("0.01")}


def test_many_tiny_shares_rounding_up_still_sum_exactly():
    # six shares of 0.005 each round up to 0.01 → 0.06 before correction
    result = allocate_shipment_goods_payment(
        "0.03", goods(*[(sid, 1) for sid in range(1, 7)])
    )

    assert total_allocated(result) == Decimal("0.03")
    assert len(result["allocations"]) == 3
    assert all(a["allocated_amount"] == Decimal("0.01") for a in result["allocations"])


def test_zero_allocations_are_dropped():
    result = allocate_shipment_goods_payment(
        30, goods((1, 100), (2, 100)), paid((1, 100))
    )
    assert by_supplier(result) == {2: Decimal("30.00")}


def test_zero_payment_allocates_nothing():
    result = allocate_shipment_goods_payment(0, goods((1, 100)))
    assert result["allocations"] == []


def test_string_supplier_ids_are_supported():
    result = allocate_shipment_goods_payment(10, goods(("sup-a", 30), ("sup-b", 70)))
    assert by_supplier(result) == {"sup-a": Decimal("3.00"), "sup-b": Decimal("7.00")}


@pytest.mark.parametrize("seed", range(25))
def test_allocation_invariants_hold_for_random_shipments(seed):
    rng = random.Random(seed)
    supplier_count = rng.randint(1, 8)

    items = []
    priors = []
    for supplier_id in range(1, supplier_count + 1):
        for _ in range(rng.randint(1, 3)):
            cents = rng.randint(1, 500_000)
            items.append({"supplier_id": supplier_id, "total_purchase_cost": f"{cents / 100:.2f}"})
        if rng.random() < 0.6:
            priors.append({"supplier_id": supplier_id, "allocated_amount": rng.randint(0, 600_000) / 100})

    totals = build_supplier_goods_totals(items, priors)
    outstanding_cents = int(totals["total_outstanding"] * 100)
    if outstanding_cents == 0:
        pytest.skip("every supplier already paid")
    payment = Decimal(rng.randint(1, outstanding_cents)) / 100

    result = allocate_shipment_goods_payment(payment, items, priors)

    outstanding = {s["supplier_id"]: s["outstanding"] for s in result["supplier_totals"]}
    assert total_allocated(result) == payment
    for allocation in result["allocations"]:
        assert allocation["allocated_amount"] > 0
        assert allocation["allocated_amount"] <= outstanding[allocation["supplier_id"]]
        assert allocation["allocated_amount"] == allocation["allocated_amount"].quantize(Decimal("0.01"))


# -----------------------------------------------------------------------------
# PREVIEW
# -----------------------------------------------------------------------------

def test_preview_clamps_amount_to_outstanding():
    preview = preview_payment_allocation(500, goods((1, 60), (2, 50)), paid((1, 10)))

    assert preview["amount"] == Decimal("500.00")
    assert preview["effective_amount"] == Decimal("100.00")
    assert [(s["supplier_id"], s["allocated"]) for s in preview["suppliers"]] == [
        (1, Decimal("50.00")),
        (2, Decimal("50.00")),
    ]


def test_preview_lists_suppliers_that_receive_nothing():
    preview = preview_payment_allocation(30, goods((1, 100), (2, 100)), paid((1, 100)))

    assert preview["suppliers"][0] == {
        "supplier_id": 1,
        "goods_total": Decimal("100.00"),
        "outstanding": Decimal("0.00"),
        "allocated": Decimal("0.00"),
    }
    assert preview["suppliers"][1]["allocated"] == Decimal("30.00")


def test_preview_of_empty_shipment_does_not_raise():
    preview = preview_payment_allocation(100, [])

    assert preview["effective_amount"] == Decimal("0.00")
    assert preview["suppliers"] == []


def test_preview_of_bad_amount_is_zero():
    preview = preview_payment_allocation("oops", goods((1, 100)))
    assert preview["effective_amount"] == Decimal("0.00")
    assert preview["suppliers"][0]["allocated"] == Decimal("0.00")

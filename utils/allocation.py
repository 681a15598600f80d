# =============================================================================
# utils/allocation.py
# =============================================================================
# PURPOSE:
#   Splits one goods-cost payment across the suppliers of a shipment.
#
# THE RULES:
#   1. Each supplier gets a share proportional to their goods total
#      (supplier A owns 60% of the goods → A gets 60% of the payment)
#   2. Nobody gets more than they are still owed (their "outstanding")
#   3. The allocations add up to the payment EXACTLY - not 0.01 off
#
# WHY IS THIS HARD?
#   Rule 1 and rule 2 fight each other. If supplier A has already been
#   mostly paid, their proportional share can be bigger than what they are
#   still owed. A gets capped, and the part A can't take has to go to the
#   other suppliers - again proportionally. That can cap another supplier,
#   and so on. So we allocate in ROUNDS until the payment is used up.
#
# PURE FUNCTIONS:
#   Nothing in this file touches the database or the UI. Callers pass in
#   plain lists of dicts and get plain dicts back. That makes it safe to
#   call from anywhere and easy to test.
# =============================================================================

from config import AMOUNT_TOLERANCE, OVERPAYMENT_TOLERANCE
from .money import ZERO, parse_amount_or_zero, round_amount

# Error codes carried by SupplierAllocationError
ZERO_BASIS = "zero_basis"
EXCEEDS_OUTSTANDING = "exceeds_outstanding"
INVALID_AMOUNT = "invalid_amount"

_DRIFT_THRESHOLD = round_amount(AMOUNT_TOLERANCE)
_PAYMENT_EPSILON = parse_amount_or_zero(OVERPAYMENT_TOLERANCE)


class SupplierAllocationError(Exception):
    """
    Raised when a goods payment can't be allocated at all.

    ATTRIBUTES:
        message (str): Human-readable explanation
        code (str): ZERO_BASIS, EXCEEDS_OUTSTANDING or INVALID_AMOUNT
        details (dict): The figures behind the decision, for the UI
            ZERO_BASIS          → {'shipment_goods_total'}
            EXCEEDS_OUTSTANDING → {'payment_amount', 'total_outstanding',
                                   'shipment_goods_total'}
            INVALID_AMOUNT      → {'payment_amount'}
    """

    def __init__(self, message, code, details):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


def _has_supplier(supplier_id):
    if supplier_id is None or supplier_id == "":
        return False
    # NaN from a pandas column is not equal to itself
    return supplier_id == supplier_id


def build_supplier_goods_totals(items, prior_allocations=None):
    """
    Work out what each supplier is owed on a shipment.

    PARAMETERS:
        items (list of dict): Goods lines, each with
            'supplier_id' and 'total_purchase_cost'
        prior_allocations (list of dict): Goods payments already allocated,
            each with 'supplier_id' and 'allocated_amount'

    RETURNS:
        dict: {
            'supplier_totals': [
                {'supplier_id', 'goods_total', 'goods_paid', 'outstanding'},
                ...
            ],
            'shipment_goods_total': Decimal,
            'total_outstanding': Decimal,
        }

    BUSINESS RULES:
        - Lines without a supplier are ignored
        - Bad amounts count as zero (see parse_amount_or_zero)
        - outstanding = goods_total - goods_paid, but never below zero
          (over-recorded prior payments must not create a negative balance)
        - Suppliers are listed in the order they first appear in the lines

    EXAMPLE:
        build_supplier_goods_totals(
            [{'supplier_id': 1, 'total_purchase_cost': '100'}],
            [{'supplier_id': 1, 'allocated_amount': 30}],
        )
        → supplier 1: goods_total 100.00, goods_paid 30.00, outstanding 70.00
    """
    # Pass 1: goods cost per supplier (dicts keep insertion order)
    goods_by_supplier = {}
    for item in items or []:
        supplier_id = item.get("supplier_id")
        if not _has_supplier(supplier_id):
            continue
        current = goods_by_supplier.get(supplier_id, ZERO)
        goods_by_supplier[supplier_id] = current + parse_amount_or_zero(
            item.get("total_purchase_cost")
        )

    # Pass 2: what has already been paid per supplier
    paid_by_supplier = {}
    for allocation in prior_allocations or []:
        supplier_id = allocation.get("supplier_id")
        if not _has_supplier(supplier_id):
            continue
        current = paid_by_supplier.get(supplier_id, ZERO)
        paid_by_supplier[supplier_id] = current + parse_amount_or_zero(
            allocation.get("allocated_amount")
        )

    supplier_totals = []
    for supplier_id, goods_total in goods_by_supplier.items():
        goods_paid = paid_by_supplier.get(supplier_id, ZERO)
        supplier_totals.append({
            "supplier_id": supplier_id,
            "goods_total": round_amount(goods_total),
            "goods_paid": round_amount(goods_paid),
            "outstanding": round_amount(max(ZERO, goods_total - goods_paid)),
        })

    shipment_goods_total = round_amount(
        sum((s["goods_total"] for s in supplier_totals), ZERO)
    )
    total_outstanding = round_amount(
        sum((s["outstanding"] for s in supplier_totals), ZERO)
    )

    return {
        "supplier_totals": supplier_totals,
        "shipment_goods_total": shipment_goods_total,
        "total_outstanding": total_outstanding,
    }


def _adjust_remainder(rounded_shares, raw_shares, delta):
    """
    Give the rounding remainder of a round to the biggest raw share.

    Rounding each share on its own can leave the round a cent or two over
    or under. The supplier with the largest raw share absorbs the difference.
    Ties go to the supplier listed first.

    A share can't go below zero: when many tiny shares all round up, the
    part of a negative remainder the biggest share can't absorb moves on to
    the next biggest.
    """
    if abs(delta) < _DRIFT_THRESHOLD or not raw_shares:
        return

    # sorted() is stable, so equal raw shares keep supplier order
    by_size = sorted(raw_shares, key=lambda sid: raw_shares[sid], reverse=True)

    if delta > 0:
        target_id = by_size[0]
        rounded_shares[target_id] = round_amount(rounded_shares[target_id] + delta)
        return

    to_remove = -delta
    for supplier_id in by_size:
        if to_remove <= 0:
            break
        taken = min(rounded_shares[supplier_id], to_remove)
        rounded_shares[supplier_id] = round_amount(rounded_shares[supplier_id] - taken)
        to_remove = round_amount(to_remove - taken)


def allocate_shipment_goods_payment(payment_amount, items, prior_allocations=None):
    """
    Split a goods payment across a shipment's suppliers.

    PARAMETERS:
        payment_amount: The amount being paid (parsed and rounded to cents)
        items (list of dict): Goods lines (see build_supplier_goods_totals)
        prior_allocations (list of dict): Earlier goods allocations

    RETURNS:
        dict: {
            'allocations': [{'supplier_id', 'allocated_amount'}, ...],
            'supplier_totals': [...],       # before this payment
            'shipment_goods_total': Decimal,
            'total_outstanding': Decimal,   # before this payment
        }

    RAISES:
        SupplierAllocationError:
            - ZERO_BASIS when the shipment has no goods cost at all
            - EXCEEDS_OUTSTANDING when the payment is more than is owed

    HOW IT WORKS (each round):
        1. Eligible suppliers = those still owed something
        2. Share = remaining payment x (supplier goods / eligible goods)
        3. Round shares to cents, push any rounding remainder onto the
           biggest share so the round adds up
        4. Grant min(share, what the supplier is still owed)
        5. Whatever wasn't granted goes round again

    EXAMPLE:
        Supplier A: goods 100, already paid 90 (owed 10)
        Supplier B: goods 100, owed 100
        Payment 50:
            Round 1: shares 25 / 25 → A capped at 10, B gets 25
            Round 2: 15 left, only B eligible → B gets 15
        Result: A 10, B 40
    """
    totals = build_supplier_goods_totals(items, prior_allocations)
    supplier_totals = totals["supplier_totals"]
    shipment_goods_total = totals["shipment_goods_total"]
    total_outstanding = totals["total_outstanding"]

    if shipment_goods_total <= 0:
        raise SupplierAllocationError(
            "Cannot allocate the payment: this shipment has no goods cost.",
            ZERO_BASIS,
            {"shipment_goods_total": shipment_goods_total},
        )

    payment_amount = round_amount(parse_amount_or_zero(payment_amount))

    if payment_amount - total_outstanding > _PAYMENT_EPSILON:
        raise SupplierAllocationError(
            "The payment is larger than the amount still owed to the "
            "suppliers on this shipment.",
            EXCEEDS_OUTSTANDING,
            {
                "payment_amount": payment_amount,
                "total_outstanding": total_outstanding,
                "shipment_goods_total": shipment_goods_total,
            },
        )

    remaining_outstanding = {
        s["supplier_id"]: s["outstanding"] for s in supplier_totals
    }
    allocated = {}
    remaining_payment = payment_amount

    eligible = [s for s in supplier_totals if s["outstanding"] > 0]

    while remaining_payment > _PAYMENT_EPSILON and eligible:
        basis = sum((s["goods_total"] for s in eligible), ZERO)
        if basis <= 0:
            break

        raw_shares = {}
        rounded_shares = {}
        for supplier in eligible:
            raw_share = remaining_payment * supplier["goods_total"] / basis
            raw_shares[supplier["supplier_id"]] = raw_share
            rounded_shares[supplier["supplier_id"]] = round_amount(raw_share)

        sum_rounded = round_amount(sum(rounded_shares.values(), ZERO))
        delta = round_amount(remaining_payment - sum_rounded)
        _adjust_remainder(rounded_shares, raw_shares, delta)

        granted_this_round = ZERO
        for supplier in eligible:
            supplier_id = supplier["supplier_id"]
            desired = rounded_shares[supplier_id]
            owed = remaining_outstanding[supplier_id]
            if desired <= 0 or owed <= 0:
                continue

            grant = min(desired, owed)
            allocated[supplier_id] = round_amount(
                allocated.get(supplier_id, ZERO) + grant
            )
            remaining_outstanding[supplier_id] = round_amount(owed - grant)
            granted_this_round = round_amount(granted_this_round + grant)

        # No progress possible
        if granted_this_round <= 0:
            break

        remaining_payment = round_amount(remaining_payment - granted_this_round)
        eligible = [
            s for s in eligible if remaining_outstanding[s["supplier_id"]] > 0
        ]

    allocations = []
    for supplier_id, amount in allocated.items():
        amount = round_amount(amount)
        if amount > 0:
            allocations.append({
                "supplier_id": supplier_id,
                "allocated_amount": amount,
            })

    return {
        "allocations": allocations,
        "supplier_totals": supplier_totals,
        "shipment_goods_total": shipment_goods_total,
        "total_outstanding": total_outstanding,
    }


def preview_payment_allocation(payment_amount, items, prior_allocations=None):
    """
    Show how a payment WOULD be allocated, without ever failing.

    Used by the payment screen while the user is still typing an amount.
    Unlike allocate_shipment_goods_payment():
        - An amount above what is owed is clamped to the total outstanding
        - A shipment with no goods gives an all-zero preview

    RETURNS:
        dict: {
            'amount': Decimal,            # what was asked for
            'effective_amount': Decimal,  # what would actually be allocated
            'total_outstanding': Decimal,
            'shipment_goods_total': Decimal,
            'suppliers': [
                {'supplier_id', 'goods_total', 'outstanding', 'allocated'},
                ...
            ],
        }
    """
    amount = round_amount(parse_amount_or_zero(payment_amount))
    totals = build_supplier_goods_totals(items, prior_allocations)
    effective_amount = min(amount, totals["total_outstanding"])

    allocated_by_supplier = {}
    if effective_amount > 0 and totals["shipment_goods_total"] > 0:
        result = allocate_shipment_goods_payment(
            effective_amount, items, prior_allocations
        )
        allocated_by_supplier = {
            a["supplier_id"]: a["allocated_amount"] for a in result["allocations"]
        }

    suppliers = []
    for supplier in totals["supplier_totals"]:
        suppliers.append({
            "supplier_id": supplier["supplier_id"],
            "goods_total": supplier["goods_total"],
            "outstanding": supplier["outstanding"],
            "allocated": allocated_by_supplier.get(
                supplier["supplier_id"], round_amount(ZERO)
            ),
        })

    return {
        "amount": amount,
        "effective_amount": effective_amount,
        "total_outstanding": totals["total_outstanding"],
        "shipment_goods_total": totals["shipment_goods_total"],
        "suppliers": suppliers,
    }

from decimal import Decimal


def _coupon(client, code="Q5", usage_limit=5):
    r = client.post(
        "/coupons",
        json={"code": code, "discount_type": "percent", "amount": 100, "usage_limit": usage_limit, "count_by_quantity": True},
    )
    assert r.status_code == 200, r.text


def _place(client, quantity, unit_price="10.00", codes=("Q5",)):
    r = client.post(
        "/orders",
        json={"items": [{"product_id": 7, "quantity": quantity, "unit_price": unit_price}], "coupon_codes": list(codes)},
    )
    assert r.status_code == 200, r.text
    return r.json()


def _status(client, order_id, status):
    return client.post(f"/orders/{order_id}/status", json={"status": status})


def _usage(client, code="Q5"):
    return client.get(f"/coupons/{code}").json()["usage_count"]


def test_paid_order_counts_discounted_units(client):
    _coupon(client)
    order = _place(client, 3)
    assert order["status"] == "pending"
    assert order["usage_adjusted"] is False
    assert Decimal(order["discount_total"]) == Decimal("30.00")
    assert _usage(client) == 0

    r = _status(client, order["order_id"], "processing")
    assert r.status_code == 200, r.text
    assert r.json()["usage_adjusted"] is True
    assert _usage(client) == 3


def test_processing_then_completed_adjusts_once(client):
    _coupon(client)
    order = _place(client, 3)
    _status(client, order["order_id"], "processing")
    r = _status(client, order["order_id"], "completed")
    assert r.status_code == 200
    assert r.json()["status"] == "completed"
    assert _usage(client) == 3


def test_budget_runs_out_across_orders(client):
    _coupon(client)
    first = _place(client, 3)
    _status(client, first["order_id"], "completed")

    # quedan 2 unidades: 4 x 10 con 100% -> 20 de descuento
    second = _place(client, 4)
    assert Decimal(second["discount_total"]) == Decimal("20.00")
    _status(client, second["order_id"], "processing")
    assert _usage(client) == 5

    r = client.post(
        "/cart/calculate",
        json={"items": [{"product_id": 7, "quantity": 1, "unit_price": "10.00"}], "coupon_codes": ["Q5"]},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "COUPON_USAGE_LIMIT_REACHED"


def test_pending_and_cancelled_orders_do_not_count(client):
    _coupon(client)
    order = _place(client, 2)
    r = _status(client, order["order_id"], "cancelled")
    assert r.status_code == 200
    assert _usage(client) == 0
    assert _status(client, order["order_id"], "completed").status_code == 400


def test_invalid_transition(client):
    _coupon(client)
    order = _place(client, 1)
    _status(client, order["order_id"], "completed")
    r = _status(client, order["order_id"], "processing")
    assert r.status_code == 400
    assert r.json()["detail"] == "INVALID_STATUS_TRANSITION"


def test_unknown_order(client):
    assert client.get("/orders/424242").status_code == 404
    assert _status(client, 424242, "completed").status_code == 404


def test_partially_discounted_line_is_split(client):
    _coupon(client, usage_limit=1)
    order = _place(client, 2, unit_price="8.00")
    # una unidad con descuento y otra a precio completo
    assert [(ln["quantity"], Decimal(ln["subtotal"]), Decimal(ln["total"])) for ln in order["lines"]] == [
        (1, Decimal("8.00"), Decimal("0.00")),
        (1, Decimal("8.00"), Decimal("8.00")),
    ]
    assert Decimal(order["total"]) == Decimal("8.00")
    assert order["coupon_codes"] == ["Q5"]


def test_reports_show_usage_and_audit(client):
    _coupon(client)
    order = _place(client, 3)
    _status(client, order["order_id"], "processing")
    _status(client, order["order_id"], "completed")

    rep = client.get("/reports/coupons/usage").json()
    entry = next(e for e in rep["entries"] if e["code"] == "Q5")
    assert entry == {
        "code": "Q5",
        "usage_limit": 5,
        "usage_count": 3,
        "usage_remaining": 2,
        "count_by_quantity": True,
    }

    audit = client.get("/reports/coupons/audit", params={"code": "Q5"}).json()
    oid = order["order_id"]
    assert [(e["event"], e["notes"]) for e in audit["events"]] == [
        ("used", f"order:{oid}"),
        ("usage_reconciled", f"order:{oid} units:3"),
    ]

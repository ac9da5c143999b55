from datetime import date

from conftest import make_repayment
from loan_console.services.repayments import is_overdue, pending_amount, waivable_late_fee


def test_overdue_rules():
    today = date(2025, 2, 1)
    assert is_overdue({"status": "OVERDUE", "dueDate": "2030-01-01"}, today) is True
    assert is_overdue({"status": "PAID", "dueDate": "2020-01-01"}, today) is False
    assert is_overdue({"status": "PENDING", "dueDate": "2025-01-31"}, today) is True
    assert is_overdue({"status": "PENDING", "dueDate": "2025-02-01"}, today) is False
    assert is_overdue({"status": "PARTIAL"}, today) is False


def test_pending_amount_falls_back_to_balance():
    assert str(pending_amount({"amountToBePaid": 1000, "amountPaid": 400})) == "600"
    assert str(pending_amount({"amountToBePaid": 1000, "amountPaid": 1400})) == "0"


def test_waivable_late_fee_never_negative():
    assert str(waivable_late_fee(make_repayment())) == "150.00"
    assert str(waivable_late_fee(make_repayment(waivedLateFeeAmount=400))) == "0.00"


def test_list_repayments(client, fake_lending):
    fake_lending.responses["filter_repayments"] = {"content": [make_repayment()], "totalElements": 1}

    resp = client.get("/api/v1/repayments", params={"status": "overdue"})

    assert resp.status_code == 200
    assert fake_lending.called("filter_repayments") == [({"page": 0, "size": 10, "status": "OVERDUE"},)]
    row = resp.json()["data"]["items"][0]
    assert row["overdue"] is True
    assert row["dueOn"] == "20-01-2025"
    assert row["formattedAmount"] == "₹10,250.00"


def test_repayment_detail(client, fake_lending):
    fake_lending.responses["get_repayment"] = make_repayment(
        paymentHistory=[{"amount": 250, "paymentMode": "UPI", "paidAt": "2025-01-22T09:30:00"}]
    )

    resp = client.get("/api/v1/repayments/rp-1")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["formatted"]["pendingAmount"] == "₹10,000.00"
    assert data["formatted"]["dueDate"] == "20 January 2025"
    assert data["waivableLateFee"] == "150.00"
    assert data["paymentHistory"][0]["paymentModeLabel"] == "Upi"
    assert data["paymentHistory"][0]["paidOn"] == "22 January 2025, 9:30 am"


def test_unknown_repayment_is_404(client, fake_lending):
    resp = client.get("/api/v1/repayments/rp-404")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Repayment not found"


def test_record_upi_payment(client, fake_lending):
    fake_lending.responses["get_repayment"] = make_repayment()
    fake_lending.responses["admin_collect"] = {"id": "pay-1"}

    resp = client.post(
        "/api/v1/repayments/rp-1/payments",
        json={
            "paymentMode": "UPI",
            "amount": "2500.50",
            "paymentDate": "2025-01-25",
            "upiId": "asha@okhdfc",
            "transactionReference": "UPI123",
            "remark": "",
        },
    )

    assert resp.status_code == 201
    assert resp.json()["message"] == "Payment recorded successfully"
    assert fake_lending.called("admin_collect") == [
        (
            {
                "repaymentId": "rp-1",
                "loanId": "app-1",
                "amount": "2500.50",
                "paymentMode": "UPI",
                "paymentDate": "2025-01-25",
                "upiId": "asha@okhdfc",
                "transactionReference": "UPI123",
            },
        )
    ]


def test_payment_cannot_exceed_pending_amount(client, fake_lending):
    fake_lending.responses["get_repayment"] = make_repayment()

    resp = client.post(
        "/api/v1/repayments/rp-1/payments",
        json={"paymentMode": "CASH", "amount": 10001, "paymentDate": "2025-01-25", "receivedBy": "Ravi"},
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["message"] == "Please fill in the payment details for the selected mode."
    assert body["details"]["fields"] == {
        "amount": "Amount cannot exceed the pending amount of ₹10,000.00"
    }
    assert fake_lending.called("admin_collect") == []


def test_waive_late_fee(client, fake_lending):
    fake_lending.responses["get_repayment"] = make_repayment()
    fake_lending.responses["waive_late_fee"] = {"ok": True}

    resp = client.put(
        "/api/v1/repayments/rp-1/late-fee-waiver", json={"waiverAmount": 100, "remark": "Goodwill"}
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Late fee waived successfully"
    assert fake_lending.called("waive_late_fee") == [
        ("rp-1", {"waiverAmount": "100", "remark": "Goodwill"})
    ]


def test_waiver_over_outstanding_fee(client, fake_lending):
    fake_lending.responses["get_repayment"] = make_repayment()

    resp = client.put(
        "/api/v1/repayments/rp-1/late-fee-waiver", json={"waiverAmount": 200, "remark": "Goodwill"}
    )

    assert resp.status_code == 422
    assert resp.json()["details"]["fields"] == {
        "waiverAmount": "Waiver cannot exceed the outstanding late fee of ₹150.00"
    }
    assert fake_lending.called("waive_late_fee") == []

from conftest import make_application

WIZARD_DATA = {
    "borrowerMode": "EXISTING",
    "borrowerId": "b-1",
    "employmentType": "SALARIED",
    "companyName": "Acme",
    "designation": "Engineer",
    "takeHomeSalary": "85000",
    "loanAmount": "50000",
    "loanPurpose": "Medical",
    "addressLine1": "12 MG Road",
    "city": "Pune",
    "state": "Maharashtra",
    "pincode": "411001",
    "accountHolderName": "Asha Rao",
    "accountNumber": "123456789012",
    "ifscCode": "HDFC0001234",
}


def test_list_applications_passes_filters_upstream(client, fake_lending):
    fake_lending.responses["filter_applications"] = {
        "content": [make_application()],
        "totalElements": 11,
    }

    resp = client.get("/api/v1/applications", params={"status": "pending", "search": " asha ", "size": 5})

    assert resp.status_code == 200
    assert fake_lending.called("filter_applications") == [
        ({"page": 0, "size": 5, "search": "asha", "status": "PENDING"},)
    ]
    data = resp.json()["data"]
    assert data["total"] == 11
    assert data["totalPages"] == 3
    row = data["items"][0]
    assert row["borrowerName"] == "Asha Rao"
    assert row["formattedLoanAmount"] == "₹1,00,000.00"
    assert row["createdOn"] == "05-03-2025"
    assert row["statusLabel"] == "Pending"


def test_status_all_is_not_sent_upstream(client, fake_lending):
    fake_lending.responses["filter_applications"] = []

    resp = client.get("/api/v1/applications", params={"status": "all"})

    assert resp.status_code == 200
    assert fake_lending.called("filter_applications") == [({"page": 0, "size": 10},)]
    assert resp.json()["data"]["items"] == []


def test_application_detail_is_shaped(client, fake_lending):
    fake_lending.responses["get_application"] = make_application()

    resp = client.get("/api/v1/applications/app-1")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["formatted"]["loanAmount"] == "1,00,000"
    assert data["formatted"]["accountNumber"] == "XXXXXX9012"
    assert data["formatted"]["employmentType"] == "Salaried"
    assert data["breakdown"]["disbursingAmount"] == "96140.00"
    assert data["breakdown"]["gstOnProcessingFee"] == "360.00"
    assert data["availableDecisions"] == ["APPROVED", "APPROVED_WITH_CONDITION", "REJECTED"]
    assert data["availableActions"] == []
    documents = {doc["documentType"]: doc for doc in data["documents"]}
    assert documents["PAN"] == {"documentType": "PAN", "label": "Pan", "verified": True, "hasFiles": True}
    assert documents["SALARY_SLIP"]["hasFiles"] is False
    assert documents["BANK_STATEMENT"]["verified"] is False


def test_missing_application_is_404(client, fake_lending):
    fake_lending.responses["get_application"] = None

    resp = client.get("/api/v1/applications/app-404")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Application not found"


def test_document_preview(client, fake_lending):
    fake_lending.responses["get_application"] = make_application()

    resp = client.get("/api/v1/applications/app-1/documents/PAN")

    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "documentType": "PAN",
        "title": "PAN Preview",
        "urls": ["https://files.test/pan.pdf"],
        "verified": True,
    }


def test_document_preview_without_files(client, fake_lending):
    fake_lending.responses["get_application"] = make_application()

    resp = client.get("/api/v1/applications/app-1/documents/SALARY_SLIP")

    assert resp.status_code == 404
    body = resp.json()
    assert body["code"] == "document_not_found"
    assert body["message"] == "No documents available for preview for SALARY SLIP."


def test_document_preview_without_document_list(client, fake_lending):
    fake_lending.responses["get_application"] = make_application(loanDocuments=None)

    resp = client.get("/api/v1/applications/app-1/documents/PAN")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Loan documents are not available."


def test_reject_application(client, fake_lending):
    fake_lending.responses["get_application"] = make_application()
    fake_lending.responses["update_application_status"] = {"id": "app-1", "applicationStatus": "REJECTED"}

    resp = client.put(
        "/api/v1/applications/app-1/decision",
        json={"status": "REJECTED", "remark": "  Low score  "},
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Application rejected"
    assert fake_lending.called("update_application_status") == [
        ("app-1", {"status": "REJECTED", "remark": "Low score"})
    ]


def test_rejection_without_remark_is_422(client, fake_lending):
    resp = client.put("/api/v1/applications/app-1/decision", json={"status": "REJECTED"})

    assert resp.status_code == 422
    body = resp.json()
    assert body["message"] == "Please complete the decision before submitting."
    assert body["details"]["fields"] == {"remark": "Please provide a reason for rejection"}
    assert fake_lending.calls == []


def test_decided_application_cannot_be_decided_again(client, fake_lending):
    fake_lending.responses["get_application"] = make_application(applicationStatus="DISBURSED")

    resp = client.put("/api/v1/applications/app-1/decision", json={"status": "APPROVED"})

    assert resp.status_code == 409
    assert resp.json()["code"] == "decision_not_allowed"
    assert fake_lending.called("update_application_status") == []


def test_wizard_step_validation(client):
    resp = client.post("/api/v1/applications/wizard/validate", json={"step": 4, "data": {"loanAmount": "0"}})

    assert resp.status_code == 422
    body = resp.json()
    assert body["message"] == "Please fill in all required fields before proceeding."
    assert body["details"]["missingFields"] == ["loanPurpose"]
    assert body["details"]["invalidFields"] == {"loanAmount": "Loan amount must be a positive whole number"}

    ok = client.post("/api/v1/applications/wizard/validate", json={"step": 4, "data": WIZARD_DATA})
    assert ok.status_code == 200
    assert ok.json()["data"]["nextStep"] == 5


def test_create_application_for_existing_borrower(client, fake_lending):
    fake_lending.responses["create_application"] = {"id": "app-9"}

    resp = client.post("/api/v1/applications", json=WIZARD_DATA)

    assert resp.status_code == 201
    body = resp.json()
    assert body["code"] == "created"
    assert body["message"] == "Loan application created successfully!"
    (payload,) = fake_lending.called("create_application")[0]
    assert payload["borrowerId"] == "b-1"
    assert payload["loanAmount"] == 50000
    assert "borrower" not in payload


def test_incomplete_application_is_not_submitted(client, fake_lending):
    data = dict(WIZARD_DATA, city="")

    resp = client.post("/api/v1/applications", json=data)

    assert resp.status_code == 422
    body = resp.json()
    assert body["message"] == "Please fill in all required fields."
    assert body["details"]["fields"] == {"city": "This field is required"}
    assert fake_lending.called("create_application") == []

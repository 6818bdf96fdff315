"""HTTP surface — tests for the JSON API, error envelopes and HTML pages."""

from decimal import Decimal

from app.deps import format_currency


def create_account(client, **overrides):
    payload = {
        "name": "Checking",
        "initial_balance": "100.00",
        "account_type": "Checking",
        "currency": "USD",
        "notes": "",
    }
    payload.update(overrides)
    resp = client.post("/api/accounts", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def post_transaction(client, account_id, /, amount="30.00", kind="EXPENSE", **overrides):
    payload = {
        "amount": amount,
        "kind": kind,
        "category": "Food",
        "description": "groceries",
        "date": "2024-03-01T12:00:00",
        "account_id": account_id,
    }
    payload.update(overrides)
    return client.post("/api/transactions", json=payload)


def account_balance(client, account_id):
    return Decimal(client.get(f"/api/accounts/{account_id}").json()["balance"])


def test_account_lifecycle(client):
    account_id = create_account(client)

    body = client.get(f"/api/accounts/{account_id}").json()
    assert body["name"] == "Checking"
    assert Decimal(body["balance"]) == Decimal("100")

    resp = client.patch(f"/api/accounts/{account_id}", json={"notes": "main account"})
    assert resp.status_code == 200
    assert resp.json()["notes"] == "main account"
    assert resp.json()["name"] == "Checking"

    assert [a["id"] for a in client.get("/api/accounts").json()] == [account_id]

    assert client.delete(f"/api/accounts/{account_id}").status_code == 204
    assert client.get(f"/api/accounts/{account_id}").status_code == 404


def test_transaction_flow_keeps_balance_in_sync(client):
    account_id = create_account(client)

    expense = post_transaction(client, account_id, "30.00", "EXPENSE")
    assert expense.status_code == 201
    expense_id = expense.json()["id"]
    assert account_balance(client, account_id) == Decimal("70")

    assert post_transaction(client, account_id, "20.00", "INCOME").status_code == 201
    assert account_balance(client, account_id) == Decimal("90")

    resp = client.put(f"/api/transactions/{expense_id}", json={
        "amount": "50.00",
        "kind": "EXPENSE",
        "category": "Food",
        "description": "groceries",
        "date": "2024-03-01T12:00:00",
        "account_id": account_id,
    })
    assert resp.status_code == 200
    assert resp.json()["account_name"] == "Checking"
    assert account_balance(client, account_id) == Decimal("70")

    assert client.delete(f"/api/transactions/{expense_id}").status_code == 204
    assert account_balance(client, account_id) == Decimal("120")
    assert client.get(f"/api/transactions/{expense_id}").status_code == 404


def test_account_transactions_listing(client):
    account_id = create_account(client)
    post_transaction(client, account_id, date="2024-01-01T08:00:00")
    post_transaction(client, account_id, date="2024-02-01T08:00:00")

    rows = client.get(f"/api/accounts/{account_id}/transactions").json()
    assert [r["date"][:10] for r in rows] == ["2024-02-01", "2024-01-01"]
    assert all(r["account_name"] == "Checking" for r in rows)
    assert len(client.get("/api/transactions").json()) == 2


def test_adjust_balance_endpoint(client):
    account_id = create_account(client)
    resp = client.post(f"/api/accounts/{account_id}/adjust", json={"delta": "-15.5"})
    assert resp.status_code == 200
    assert Decimal(resp.json()["balance"]) == Decimal("84.50")


def test_validation_errors_use_error_envelope(client):
    account_id = create_account(client)

    resp = post_transaction(client, account_id, amount="0")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert resp.json()["error"]["field"] == "amount"

    resp = post_transaction(client, account_id, kind="TRANSFER")
    assert resp.status_code == 400
    assert resp.json()["error"]["field"] == "kind"

    resp = client.post("/api/accounts", json={"name": " ", "currency": "USD"})
    assert resp.status_code == 400
    assert account_balance(client, account_id) == Decimal("100")


def test_not_found_errors_use_error_envelope(client):
    resp = post_transaction(client, 999)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"

    assert client.get("/api/transactions/999").status_code == 404
    assert client.delete("/api/accounts/999").status_code == 404
    assert client.get("/api/reports", params={"account_id": 999}).status_code == 404


def test_report_endpoint(client):
    account_id = create_account(client)
    post_transaction(client, account_id, "10.00", category="Food")
    post_transaction(client, account_id, "15.00", category="Food")
    post_transaction(client, account_id, "200.00", "INCOME", category="Salary")

    body = client.get("/api/reports").json()
    assert Decimal(body["total_income"]) == Decimal("200")
    assert Decimal(body["total_expense"]) == Decimal("25")
    assert Decimal(body["net_balance"]) == Decimal("175")
    assert body["expenses_by_category"] == [{"category": "Food", "total": "25.00"}]
    assert body["income_by_category"][0]["category"] == "Salary"


def test_dashboard_and_history_pages(client):
    account_id = create_account(client)
    post_transaction(client, account_id, "30.00", category="Food")

    dashboard = client.get("/dashboard")
    assert dashboard.status_code == 200
    assert "Total Balance: 70.00 USD" in dashboard.text
    assert "Food" in dashboard.text

    history = client.get("/transactions", params={"account_id": account_id})
    assert history.status_code == 200
    assert "groceries" in history.text

    assert client.get("/transactions", params={"account_id": 999}).status_code == 404


def test_root_redirects_to_dashboard_and_health(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/dashboard"
    assert client.get("/health").json() == {"status": "ok"}


def test_format_currency():
    assert format_currency(Decimal("1234.5"), "USD") == "1,234.50 USD"
    assert format_currency(Decimal("-7")) == "-7.00"
    assert format_currency(None) == ""


def test_out_of_range_amounts_are_rejected_with_envelope(client):
    resp = client.post("/api/accounts", json={
        "name": "Checking", "initial_balance": "1e30", "currency": "USD",
    })
    assert resp.status_code == 400
    assert resp.json()["error"]["field"] == "initial_balance"
    assert client.get("/api/accounts").json() == []

    account_id = create_account(client)
    resp = post_transaction(client, account_id, amount="1e30")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert account_balance(client, account_id) == Decimal("100")


def test_malformed_payloads_use_error_envelope(client):
    account_id = create_account(client)

    for overrides, field in [
        ({"amount": "abc"}, "amount"),
        ({"date": "not a date"}, "date"),
        ({"account_id": "first"}, "account_id"),
    ]:
        resp = post_transaction(client, account_id, **overrides)
        assert resp.status_code == 400, resp.text
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["field"] == field
        assert error["details"][0]["field"] == field

    resp = client.post("/api/accounts", json={"name": "No currency"})
    assert resp.status_code == 400
    assert resp.json()["error"]["field"] == "currency"
    assert client.get("/api/transactions").json() == []

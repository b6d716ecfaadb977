import pytest

from crm_estimator.estimating.defaults import default_travel_data


@pytest.fixture
def saved_estimate(client, seeded, make_line):
    opportunity_id = seeded["opportunity_id"]
    document = client.get(f"/opportunities/{opportunity_id}/estimates/new").get_json()["document"]
    document["sovItems"][0] = make_line("Transformer testing", quantity=2, material=100, expense=10, men=2, hours=4)
    resp = client.post(f"/opportunities/{opportunity_id}/estimates",
                       json={"document": document, "travelData": None})
    assert resp.status_code == 201
    return resp.get_json()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "database": "ok"}


def test_new_estimate_is_prefilled(client, seeded):
    body = client.get(f"/opportunities/{seeded['opportunity_id']}/estimates/new").get_json()
    assert body["document"]["generalInfo"]["client"] == "Acme Power Cooperative"
    assert len(body["document"]["sovItems"]) == 5
    assert body["travelData"] is None
    assert body["opportunity"]["quoteNumber"] == "Q-2040"


def test_save_returns_priced_estimate(saved_estimate):
    assert saved_estimate["record"]["displayNumber"].isdigit()
    assert saved_estimate["pricing"]["final"] == 4318
    assert saved_estimate["document"]["hoursSummary"]["straightTimeHours"] == 16


def test_list_and_load(client, seeded, saved_estimate):
    records = client.get(f"/opportunities/{seeded['opportunity_id']}/estimates").get_json()
    assert [r["id"] for r in records] == [saved_estimate["record"]["id"]]

    body = client.get(f"/estimates/{saved_estimate['record']['id']}").get_json()
    assert body["document"]["sovItems"][0]["item"] == "Transformer testing"
    assert body["sovItemPrices"][0] == pytest.approx(2159)


def test_update_with_travel(client, saved_estimate):
    estimate_id = saved_estimate["record"]["id"]
    travel = client.post("/estimates/travel/change", json={
        "travelData": default_travel_data(),
        "ledger": "travelExpense",
        "field": "oneWayMiles",
        "value": 100,
    }).get_json()["travelData"]

    resp = client.put(f"/estimates/{estimate_id}",
                      json={"document": saved_estimate["document"], "travelData": travel})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["record"]["displayNumber"] == saved_estimate["record"]["displayNumber"]
    assert body["travelCost"] == 2520
    assert body["pricing"]["final"] == 6943


def test_calculate_does_not_persist(client, seeded, make_line):
    document = {"sovItems": [make_line("Relay", quantity=1, men=1, hours=10)],
                "hoursSummary": {"men": 1, "hoursPerDay": 10}}
    body = client.post("/estimates/calculate", json={"document": document}).get_json()
    assert body["document"]["hoursSummary"]["overtimeHours"] == 2
    assert body["pricing"]["laborCost"] == 8 * 240 + 2 * 360
    assert client.get(f"/opportunities/{seeded['opportunity_id']}/estimates").get_json() == []


def test_travel_change_reports_totals(client):
    body = client.post("/estimates/travel/change", json={
        "travelData": None,
        "ledger": "perDiem",
        "field": "numDays",
        "value": "4",
    }).get_json()
    assert body["travelData"]["lodging"][0]["numNights"] == 4
    assert body["travelCost"] == 4 * 65 * 2 + 4 * 2 * 210
    assert body["travelHours"] == 0


@pytest.mark.parametrize("payload", [
    {"travelData": None, "ledger": "boats", "field": "numMen", "value": 1},
    {"travelData": None, "ledger": "perDiem", "field": "numDays", "value": 1, "index": 2},
    {"travelData": None, "ledger": "perDiem", "field": "numDays", "value": 1, "index": "0"},
    {"travelData": None, "field": "numDays"},
])
def test_bad_travel_change_is_400(client, payload):
    resp = client.post("/estimates/travel/change", json=payload)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_view_renders_with_theme_tokens(client, saved_estimate):
    estimate_id = saved_estimate["record"]["id"]
    dark = client.get(f"/estimates/{estimate_id}/view?theme=dark")
    assert dark.status_code == 200
    html = dark.get_data(as_text=True)
    assert "--header-bg: #1C1E21;" in html
    assert "Transformer testing" in html
    assert "$4,318.00" in html

    light = client.get(f"/estimates/{estimate_id}/view?theme=sepia").get_data(as_text=True)
    assert "--header-bg: #F9FAFB;" in light


def test_not_found_is_json(client):
    resp = client.get("/estimates/12345")
    assert resp.status_code == 404
    assert resp.get_json()["type"] == "NotFoundError"

    resp = client.get("/no/such/route")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_invalid_bodies_are_400(client, seeded):
    url = f"/opportunities/{seeded['opportunity_id']}/estimates"
    assert client.post(url, data="nope", content_type="text/plain").status_code == 400
    assert client.post(url, json=[1, 2]).status_code == 400
    assert client.post(url, json={"document": "text"}).status_code == 400
    assert client.post(url, json={"document": {}, "travelData": 5}).status_code == 400


def test_concurrent_save_conflict_is_409(client, saved_estimate):
    from crm_estimator.services.persistence import EstimateStore

    key = ("estimate", saved_estimate["record"]["id"])
    EstimateStore._in_flight.add(key)
    try:
        resp = client.put(f"/estimates/{saved_estimate['record']['id']}",
                          json={"document": saved_estimate["document"]})
    finally:
        EstimateStore._in_flight.discard(key)
    assert resp.status_code == 409
    assert resp.get_json()["type"] == "SaveInProgressError"

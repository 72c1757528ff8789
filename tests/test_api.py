from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tiekunta.api import main as api_main
from tiekunta.api import routes
from tiekunta.settings import Settings


@pytest.fixture
def client() -> TestClient:
    return TestClient(api_main.app)


SEED_MEMBERS = [
    {
        "id": "member-seed-1",
        "name": "Matti Meikäläinen",
        "usageEntries": [
            {"id": "ue-1-1", "osakasId": "member-seed-1", "kind": "ASUNTO", "matkaKm": 1.2, "vakituinen": True}
        ],
    },
    {
        "id": "member-seed-2",
        "name": "Liisa Järvinen",
        "usageEntries": [
            {"id": "ue-2-1", "osakasId": "member-seed-2", "kind": "VAPAA", "matkaKm": 0.8, "tyyppi": "kesamokki750"}
        ],
    },
    {
        "id": "member-seed-3",
        "name": "Pekka Virtanen",
        "usageEntries": [
            {
                "id": "ue-3-1",
                "osakasId": "member-seed-3",
                "kind": "PELTO",
                "matkaKm": 2.5,
                "pintaAlaHa": "12.3",
                "tuotantosuunta": "kasvinviljely",
            },
            {"id": "ue-3-2", "osakasId": "member-seed-3", "kind": "METSA", "matkaKm": "3.1", "pintaAlaHa": 45},
        ],
    },
]


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert "cost_apportionment" in payload["features"]


def test_calculate_flat_entries(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculate",
        json={
            "annualCost": 10000,
            "baseFee": 0,
            "vyohyke": "3",
            "entries": [
                {"osakasId": "A", "kind": "ASUNTO", "matkaKm": 2, "vakituinen": True},
                {"osakasId": "B", "kind": "VAPAA", "matkaKm": 1, "tyyppi": "kesamokki750"},
            ],
        },
    )

    assert response.status_code == 200
    payload = response.json()
    fees = {r["osakas_id"]: r["fee"] for r in payload["results"]}
    tkm = {r["osakas_id"]: r["tkm"] for r in payload["results"]}
    assert fees == {"A": "8192.77", "B": "1807.23"}
    assert tkm == {"A": "3400.000", "B": "750.000"}
    assert payload["total_tkm"] == "4150.000"
    assert payload["owner_count"] == 2
    assert payload["total_fees"] == "10000.00"


def test_calculate_members_stamps_owner_ids(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculate",
        json={"annualCost": 25000, "baseFee": 15, "vyohyke": "4", "members": SEED_MEMBERS},
    )

    assert response.status_code == 200
    fees = {r["osakas_id"]: r["fee"] for r in response.json()["results"]}
    assert fees == {
        "member-seed-1": "9336.29",
        "member-seed-2": "2756.55",
        "member-seed-3": "12907.16",
    }


def test_member_id_wins_over_entry_owner(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculate",
        json={
            "annualCost": 500,
            "members": [
                {
                    "id": "m1",
                    "usageEntries": [
                        {"osakasId": "someone-else", "kind": "ASUNTO", "matkaKm": 1, "vakituinen": True}
                    ],
                }
            ],
        },
    )

    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["osakas_id"] for r in results] == ["m1"]
    assert results[0]["fee"] == "500.00"


def test_calculate_accepts_snake_case_names(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculate",
        json={
            "annual_cost": 900,
            "base_fee": 100,
            "forest_zone": "2",
            "entries": [
                {"osakas_id": "A", "kind": "METSA", "matka_km": 1, "pinta_ala_ha": 10},
                {
                    "osakas_id": "B",
                    "kind": "MUU",
                    "matka_km": 1,
                    "ajokerrat_vuosi": 100,
                    "ajoneuvon_tyhjapaino_ton": 2,
                    "hyotykuorma_ton_per_vuosi": 50,
                    "ajokerrat_sisaltaa_meno_paluu": False,
                },
            ],
        },
    )

    assert response.status_code == 200
    payload = response.json()
    tkm = {r["osakas_id"]: r["tkm"] for r in payload["results"]}
    assert tkm == {"A": "180.000", "B": "450.000"}
    # pool 700 split 180:450
    fees = {r["osakas_id"]: r["fee"] for r in payload["results"]}
    assert fees == {"A": "300.00", "B": "600.00"}


def test_calculate_without_zone_uses_zone_three(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(routes, "settings", Settings())
    response = client.post(
        "/api/v1/calculate",
        json={"annualCost": 0, "entries": [{"osakasId": "A", "kind": "METSA", "matkaKm": 1, "pintaAlaHa": 10}]},
    )
    assert response.status_code == 200
    assert response.json()["total_tkm"] == "110.000"


def test_calculate_without_zone_uses_configured_default(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(routes, "settings", Settings(DEFAULT_FOREST_ZONE="1"))
    response = client.post(
        "/api/v1/calculate",
        json={"annualCost": 0, "entries": [{"osakasId": "A", "kind": "METSA", "matkaKm": 1, "pintaAlaHa": 10}]},
    )
    assert response.status_code == 200
    assert response.json()["total_tkm"] == "210.000"


def test_calculate_with_no_entries(client: TestClient) -> None:
    response = client.post("/api/v1/calculate", json={"annualCost": 1000, "baseFee": 15})
    assert response.status_code == 200
    payload = response.json()
    assert payload["results"] == []
    assert payload["total_tkm"] == "0.000"
    assert payload["owner_count"] == 0


def test_flat_entry_without_owner_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculate",
        json={"annualCost": 1000, "entries": [{"kind": "ASUNTO", "matkaKm": 1, "vakituinen": True}]},
    )
    assert response.status_code == 422
    assert "osakasId" in response.json()["detail"]


@pytest.mark.parametrize(
    "body",
    [
        {"annualCost": -1},
        {"annualCost": 100, "vyohyke": "6"},
        {"annualCost": 100, "baseFee": -5},
        {"annualCost": 100, "entries": [{"osakasId": "A", "kind": "TALLI", "matkaKm": 1}]},
        {"annualCost": 100, "entries": [{"osakasId": "A", "kind": "ASUNTO", "matkaKm": -2}]},
        {"annualCost": 100, "entries": [{"osakasId": "A", "kind": "VAPAA", "matkaKm": 1, "tyyppi": "sauna"}]},
        {"annualCost": 100, "entries": [{"osakasId": "A", "kind": "PELTO", "matkaKm": 1, "pintaAlaHa": -1}]},
        {"annualCost": 100, "entries": [{"osakasId": "A", "kind": "MUU", "matkaKm": 1}]},
        {"annualCost": 100, "entries": [{"osakasId": "A", "kind": "ASUNTO", "matkaKm": 1, "vakituinen": False}]},
        {"annualCost": 100, "entries": [{"osakasId": "A", "kind": "ASUNTO", "matkaKm": 1}]},
        {"annualCost": 100, "entries": [{"osakasId": "A", "kind": "PELTO", "matkaKm": 1, "pintaAlaHa": 2}]},
    ],
)
def test_invalid_input_is_rejected(client: TestClient, body) -> None:
    response = client.post("/api/v1/calculate", json=body)
    assert response.status_code == 422


def test_breakdown(client: TestClient) -> None:
    response = client.post("/api/v1/breakdown", json={"vyohyke": "4", "members": SEED_MEMBERS})

    assert response.status_code == 200
    rows = response.json()["entries"]
    assert [(r["entry_id"], r["kind"], r["weight"], r["tkm"]) for r in rows] == [
        ("ue-1-1", "ASUNTO", "1700.000", "2040.000"),
        ("ue-2-1", "VAPAA", "750.000", "600.000"),
        ("ue-3-1", "PELTO", "738.000", "1845.000"),
        ("ue-3-2", "METSA", "315.000", "976.500"),
    ]
    assert {r["osakas_id"] for r in rows} == {"member-seed-1", "member-seed-2", "member-seed-3"}


def test_calculate_handles_very_large_distances(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculate",
        json={
            "annualCost": 100,
            "entries": [{"osakasId": "A", "kind": "ASUNTO", "matkaKm": "1e30", "vakituinen": True}],
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["total_tkm"] == "17" + "0" * 32 + ".000"
    assert payload["results"][0]["fee"] == "100.00"


def test_calculation_failure_returns_500(client: TestClient, monkeypatch) -> None:
    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(routes, "apportion", boom)
    response = client.post(
        "/api/v1/calculate",
        json={"annualCost": 1000, "entries": [{"osakasId": "A", "kind": "ASUNTO", "matkaKm": 1, "vakituinen": True}]},
    )
    assert response.status_code == 500
    assert response.json()["detail"] == "cost calculation failed"


def test_reference_tables(client: TestClient) -> None:
    response = client.get("/api/v1/reference-tables")
    assert response.status_code == 200
    payload = response.json()
    assert payload["forest_zone_per_ha"]["1"] == "21"
    assert payload["farmland_per_ha"]["nautakarja"] == "130"

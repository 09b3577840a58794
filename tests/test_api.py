"""
HTTP flows against in-memory stores.
"""

from __future__ import annotations

import pytest

from auth import security
from core.ids import new_id
from fakes import make_access_token
from store.registry import ResourceKind


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_compatible_crops_ranks_candidates(client, add_crop, add_edge):
    tomato = add_crop("Tomato", "Solanum lycopersicum")
    basil = add_crop("Basil", "Ocimum basilicum")
    carrot = add_crop("Carrot", "Daucus carota")
    fennel = add_crop("Fennel", "Foeniculum vulgare")
    onion = add_crop(None, "Allium cepa")
    add_edge(tomato, basil, 5)
    add_edge(carrot, basil, 4)
    add_edge(tomato, onion, 2)
    add_edge(tomato, fennel, 5)
    add_edge(carrot, fennel, -1)
    add_edge(tomato, carrot, 3)

    resp = client.get("/api/crops/compatible", params=[("ids", tomato["id"]), ("ids", carrot["id"])])

    assert resp.status_code == 200
    body = resp.json()
    assert [c["id"] for c in body["placed"]] == [tomato["id"], carrot["id"]]
    assert [c["crop"]["id"] for c in body["candidates"]] == [basil["id"], onion["id"]]
    assert body["candidates"][0]["score"] == pytest.approx(0.9)
    assert body["candidates"][0]["full_coverage"] is True
    assert body["candidates"][1] == {
        "crop": onion,
        "score": pytest.approx(0.2),
        "coverage": 1,
        "full_coverage": False,
    }
    assert body["incompatible"] == [fennel["id"]]
    assert [c["id"] for c in body["options"]] == [tomato["id"], carrot["id"], basil["id"], onion["id"]]


def test_compatible_crops_with_no_query_is_empty(client):
    body = client.get("/api/crops/compatible").json()
    assert body["candidates"] == [] and body["placed"] == [] and body["incompatible"] == []


def test_compatible_crops_errors(client, add_crop):
    resp = client.get("/api/crops/compatible", params={"ids": "garbage"})
    assert resp.status_code == 400
    assert resp.json() == {"status": 400, "message": "Malformed object ID"}

    resp = client.get("/api/crops/compatible", params=[("ids", add_crop("Pea", "Pisum sativum")["id"]), ("ids", new_id())])
    assert resp.status_code == 404
    assert resp.json()["message"] == "No crops with this ID found"


def test_get_crop_and_companionship(client, add_crop, add_edge):
    bean = add_crop("Bean", "Phaseolus vulgaris")
    corn = add_crop("Corn", "Zea mays")
    edge = add_edge(bean, corn, 5)

    crop = client.get(f"/api/crops/id/{bean['id']}").json()
    assert crop["companionships"] == [edge]

    pair = client.get(f"/api/companionships/id/{edge['id']}").json()
    assert {pair["crop1"]["id"], pair["crop2"]["id"]} == {bean["id"], corn["id"]}

    assert client.get(f"/api/crops/id/{new_id()}").status_code == 404
    assert client.get("/api/crops/id/xyz").status_code == 400


def test_list_crops_uses_escaped_search(client, monkeypatch):
    from crops import repository

    seen = {}

    async def fake_fetch_all(sql, *args):
        seen["args"] = args
        return [{"id": new_id(), "common_name": "Pepper (hot)", "binomial_name": "Capsicum annuum"}]

    monkeypatch.setattr(repository.db, "fetch_all", fake_fetch_all)
    body = client.get("/api/crops", params={"q": " pepper (hot) "}).json()

    assert seen["args"] == ("pepper\\ \\(hot\\)", 25, 0)
    assert body["count"] == 1


def test_create_companionship(client, stores, make_user, add_crop):
    _, headers = make_user()
    squash = add_crop("Squash", "Cucurbita pepo")
    potato = add_crop("Potato", "Solanum tuberosum")

    resp = client.post(
        "/api/companionships",
        json={"crop1": squash["id"], "crop2": potato["id"], "compatibility": -1},
        headers=headers,
    )
    assert resp.status_code == 201
    saved = resp.json()
    assert [saved["crop1"], saved["crop2"]] == sorted([squash["id"], potato["id"]])
    assert saved["id"] in stores[ResourceKind.COMPANIONSHIP].records


def test_create_companionship_rejects_bad_input(client, make_user, add_crop):
    _, headers = make_user()
    squash = add_crop("Squash", "Cucurbita pepo")

    resp = client.post(
        "/api/companionships",
        json={"crop1": squash["id"], "crop2": squash["id"], "compatibility": 9},
        headers=headers,
    )
    assert resp.status_code == 400
    assert set(resp.json()["errors"]) == {"compatibility", "crops"}

    resp = client.post(
        "/api/companionships",
        json={"crop1": squash["id"], "crop2": new_id(), "compatibility": 2},
        headers=headers,
    )
    assert resp.status_code == 404

    resp = client.post(
        "/api/companionships",
        json={"crop1": squash["id"], "crop2": new_id(), "compatibility": 2},
    )
    assert resp.status_code == 401


def test_user_lifecycle(client, stores):
    resp = client.post(
        "/api/users",
        json={"username": "rosa", "email": "Rosa@Example.com", "password": "plant-more-kale"},
    )
    assert resp.status_code == 201
    user_id = resp.json()["id"]

    stored = stores[ResourceKind.USER].records[user_id]
    assert stored["email"] == "rosa@example.com"
    assert security.verify_password("plant-more-kale", stored["password_hash"])

    body = client.get(f"/api/users/{user_id}").json()
    assert body["username"] == "rosa"
    assert "password_hash" not in body

    dup = client.post(
        "/api/users",
        json={"username": "rosa", "email": "rosa@example.com", "password": "another-password"},
    )
    assert dup.status_code == 409
    assert dup.json()["errors"] == {"username": "This username is taken", "email": "This email is taken"}


def test_user_validation_reports_every_field(client):
    resp = client.post("/api/users", json={"username": "x", "email": "nope", "password": "short"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Invalid user data"
    assert set(body["errors"]) == {"username", "email", "password"}


@pytest.fixture
def garden(client, make_user, add_crop):
    owner, headers = make_user("owner")
    location = client.post("/api/locations", json={"name": "Back yard"}, headers=headers).json()
    crops = [add_crop("Lettuce", "Lactuca sativa"), add_crop("Radish", "Raphanus sativus")]
    return owner, headers, location, crops


def test_bed_crud(client, garden, stores):
    owner, headers, location, crops = garden

    resp = client.post(
        "/api/beds",
        json={"location": location["id"], "name": "North", "crops": [crops[0]["id"]]},
        headers=headers,
    )
    assert resp.status_code == 201
    bed = resp.json()
    assert bed["user_id"] == owner["id"]

    got = client.get(f"/api/beds/id/{bed['id']}", headers=headers).json()
    assert got["crops"] == [crops[0]["id"]]

    updated = client.put(
        f"/api/beds/id/{bed['id']}",
        json={"crops": [c["id"] for c in crops]},
        headers=headers,
    ).json()
    assert updated["crops"] == [c["id"] for c in crops]
    assert updated["name"] == "North"

    with_beds = client.get(f"/api/locations/id/{location['id']}", headers=headers).json()
    assert [b["id"] for b in with_beds["beds"]] == [bed["id"]]

    assert client.delete(f"/api/beds/id/{bed['id']}", headers=headers).status_code == 200
    assert bed["id"] not in stores[ResourceKind.BED].records
    assert client.get(f"/api/beds/id/{bed['id']}", headers=headers).status_code == 404


def test_bed_rejects_unknown_crops_and_foreign_users(client, garden, make_user):
    _, headers, location, crops = garden

    resp = client.post(
        "/api/beds",
        json={"location": location["id"], "crops": [crops[0]["id"], new_id()]},
        headers=headers,
    )
    assert resp.status_code == 404

    bed = client.post("/api/beds", json={"location": location["id"]}, headers=headers).json()

    _, stranger = make_user("stranger")
    resp = client.get(f"/api/beds/id/{bed['id']}", headers=stranger)
    assert resp.status_code == 403
    assert resp.json() == {"status": 403, "message": "You don't have access to this bed"}

    resp = client.post("/api/beds", json={"location": location["id"]}, headers=stranger)
    assert resp.status_code == 403

    assert client.get(f"/api/users/{new_id()}/locations").status_code == 404


def test_bed_compatible_crops(client, garden, add_crop, add_edge):
    _, headers, location, crops = garden
    cucumber = add_crop("Cucumber", "Cucumis sativus")
    add_edge(crops[0], cucumber, 4)
    add_edge(crops[1], cucumber, 4)

    bed = client.post(
        "/api/beds",
        json={"location": location["id"], "crops": [c["id"] for c in crops]},
        headers=headers,
    ).json()
    body = client.get(f"/api/beds/id/{bed['id']}/compatible", headers=headers).json()

    assert body["bed_id"] == bed["id"]
    assert [c["crop"]["id"] for c in body["candidates"]] == [cucumber["id"]]
    assert body["candidates"][0]["score"] == pytest.approx(0.8)


def test_user_locations(client, garden):
    owner, _, location, _ = garden
    body = client.get(f"/api/users/{owner['id']}/locations").json()
    assert [loc["id"] for loc in body] == [location["id"]]


def test_invalid_tokens_are_rejected(client, make_user):
    assert client.get(f"/api/beds/id/{new_id()}").status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get(f"/api/beds/id/{new_id()}", headers=bad).status_code == 401
    ghost = make_access_token(user_id=new_id(), username="ghost")
    resp = client.get(f"/api/beds/id/{new_id()}", headers={"Authorization": f"Bearer {ghost}"})
    assert resp.status_code == 401


def test_uppercase_ids_resolve_like_lowercase(client, garden, add_crop, add_edge):
    _, headers, location, crops = garden
    kale = add_crop("Kale", "Brassica oleracea")
    edge = add_edge(kale, crops[0], 3)

    crop = client.get(f"/api/crops/id/{kale['id'].upper()}")
    assert crop.status_code == 200
    assert crop.json()["id"] == kale["id"]

    pair = client.get(f"/api/companionships/id/{edge['id'].upper()}")
    assert pair.status_code == 200

    bed = client.post(
        "/api/beds",
        json={"location": location["id"].upper(), "crops": [kale["id"].upper()]},
        headers=headers,
    )
    assert bed.status_code == 201
    assert bed.json()["crops"] == [kale["id"]]

    got = client.get(f"/api/beds/id/{bed.json()['id'].upper()}", headers=headers)
    assert got.status_code == 200
    assert client.get(f"/api/locations/id/{location['id'].upper()}", headers=headers).status_code == 200

"""
tests/test_car_routes.py -- Integration tests for the /api/car endpoints.

These tests exercise the full stack: FastAPI routing -> login-token dependency
-> CarDirectory/CarStore -> response model serialization.

Coverage:
  - Auth gate: 401 on POST/PUT/DELETE without a token; nothing is written
  - Add: owner stamped from the session, numbers coerced, bad numbers 400
  - List: txt and maxPrice filters, absent/junk maxPrice means no filter
  - Detail: 200, and 403 (not 404) for a missing car
  - Edit/remove: owner and admin allowed, others 400 with the record intact

Fixtures used (from conftest.py): client, sessions, login_as.
The module shares one database, so tests use unique vendor names.
"""

from __future__ import annotations

from fastapi.testclient import TestClient


def _add_car(client: TestClient, vendor: str, speed=100, price=10) -> dict:
    resp = client.post("/api/car", json={"vendor": vendor, "speed": speed, "price": price})
    assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
    return resp.json()


class TestCarAuthGate:
    """Mutating car routes must reject callers without a valid login token."""

    def test_add_car_unauthenticated(self, client: TestClient) -> None:
        resp = client.post("/api/car", json={"vendor": "gate-no-token", "speed": 1, "price": 1})
        assert resp.status_code == 401
        assert resp.text == "Cannot add car"
        listed = client.get("/api/car", params={"txt": "gate-no-token"}).json()
        assert listed == [], "No car may be created without a session"

    def test_add_car_with_tampered_token(self, client: TestClient) -> None:
        client.cookies.set("loginToken", "not-a-real-token")
        resp = client.post("/api/car", json={"vendor": "gate-bad-token", "speed": 1, "price": 1})
        assert resp.status_code == 401

    def test_update_car_unauthenticated(self, client: TestClient) -> None:
        resp = client.put("/api/car", json={"_id": "whatever", "vendor": "x", "speed": 1, "price": 1})
        assert resp.status_code == 401
        assert resp.text == "Cannot update car"

    def test_remove_car_unauthenticated(self, client: TestClient) -> None:
        resp = client.delete("/api/car/whatever")
        assert resp.status_code == 401
        assert resp.text == "Cannot delete car"

    def test_gate_runs_before_body_validation(self, client: TestClient) -> None:
        """A body of the wrong shape from an anonymous caller is still a 401, not a 422."""
        resp = client.post("/api/car", json=[1, 2, 3])
        assert resp.status_code == 401

    def test_gate_runs_before_json_decoding(self, client: TestClient) -> None:
        """Even a body that is not JSON at all gets the gate's 401."""
        headers = {"Content-Type": "application/json"}
        resp = client.post("/api/car", content="{not json", headers=headers)
        assert resp.status_code == 401
        assert resp.text == "Cannot add car"
        resp = client.put("/api/car", content="{not json", headers=headers)
        assert resp.status_code == 401
        assert resp.text == "Cannot update car"

    def test_bearer_header_accepted(self, client: TestClient, sessions) -> None:
        from auth.tokens import create_login_token

        token = create_login_token(sessions["puki"])
        resp = client.post(
            "/api/car",
            json={"vendor": "gate-bearer", "speed": 1, "price": 1},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 200


class TestAddCar:
    def test_add_car_stamps_owner(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.post("/api/car", json={"vendor": "Tesla", "speed": 250, "price": 5})
        assert resp.status_code == 200, resp.text
        car = resp.json()
        assert car["_id"]
        assert car["vendor"] == "Tesla"
        assert car["speed"] == 250
        assert car["price"] == 5
        assert car["owner"]["_id"] == sessions["puki"].id
        assert car["owner"]["fullname"] == "Puki Ja"

    def test_add_car_ignores_client_owner(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        body = {
            "vendor": "add-spoofed-owner",
            "speed": 10,
            "price": 10,
            "owner": {"_id": sessions["muki"].id, "fullname": "Muki Ba"},
        }
        car = client.post("/api/car", json=body).json()
        assert car["owner"]["_id"] == sessions["puki"].id

    def test_add_car_coerces_numeric_strings(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        car = _add_car(client, "add-strings", speed="180", price="12.5")
        assert car["speed"] == 180
        assert car["price"] == 12.5

    def test_add_car_rejects_non_numeric_price(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.post("/api/car", json={"vendor": "add-bad-price", "speed": 100, "price": "cheap"})
        assert resp.status_code == 400
        assert resp.text == "Cannot add car"
        assert client.get("/api/car", params={"txt": "add-bad-price"}).json() == []

    def test_add_car_rejects_missing_speed(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.post("/api/car", json={"vendor": "add-no-speed", "price": 3})
        assert resp.status_code == 400

    def test_add_car_rejects_missing_vendor(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.post("/api/car", json={"speed": 1, "price": 3})
        assert resp.status_code == 400

    def test_add_car_rejects_non_string_vendor(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.post("/api/car", json={"vendor": 123, "speed": 1, "price": 3})
        assert resp.status_code == 400
        assert resp.text == "Cannot add car"

    def test_add_car_rejects_overlong_vendor(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.post("/api/car", json={"vendor": "v" * 256, "speed": 1, "price": 3})
        assert resp.status_code == 400

    def test_add_car_malformed_json_with_session(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.post("/api/car", content="{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.text == "Cannot add car"

    def test_add_car_wrong_shape_with_session(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.post("/api/car", json=["vendor", 1, 2])
        assert resp.status_code == 400
        assert resp.text == "Cannot add car"

    def test_add_car_whole_numbers_stay_integers(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        car = _add_car(client, "add-int-wire", speed=250, price=5)
        assert isinstance(car["speed"], int) and isinstance(car["price"], int)
        fetched = client.get(f"/api/car/{car['_id']}").json()
        assert isinstance(fetched["speed"], int) and fetched["speed"] == 250

    def test_add_car_price_beyond_int64(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        car = _add_car(client, "add-huge-price", speed=1, price=1e19)
        assert car["price"] == 10**19


class TestListCars:
    def test_max_price_filter(self, login_as, sessions) -> None:
        client = login_as(sessions["muki"])
        for price in (5, 15, 9):
            _add_car(client, f"list-price-{price}", price=price)
        client.cookies.clear()

        resp = client.get("/api/car", params={"txt": "list-price", "maxPrice": 10})
        assert resp.status_code == 200
        prices = sorted(car["price"] for car in resp.json())
        assert prices == [5, 9]

    def test_absent_max_price_means_no_filter(self, login_as, sessions) -> None:
        client = login_as(sessions["muki"])
        for price in (1, 1000000):
            _add_car(client, f"list-nomax-{price}", price=price)
        resp = client.get("/api/car", params={"txt": "list-nomax"})
        assert len(resp.json()) == 2

    def test_junk_max_price_means_no_filter(self, login_as, sessions) -> None:
        client = login_as(sessions["muki"])
        _add_car(client, "list-junk-max", price=500)
        resp = client.get("/api/car", params={"txt": "list-junk-max", "maxPrice": "lots"})
        assert resp.status_code == 200
        assert len(resp.json()) == 1

    def test_text_filter_is_case_insensitive_substring(self, login_as, sessions) -> None:
        client = login_as(sessions["muki"])
        _add_car(client, "ListCase-Ferrari")
        _add_car(client, "listcase-fiat")
        resp = client.get("/api/car", params={"txt": "LISTCASE-F"})
        vendors = {car["vendor"] for car in resp.json()}
        assert vendors == {"ListCase-Ferrari", "listcase-fiat"}

    def test_list_is_public(self, client: TestClient) -> None:
        resp = client.get("/api/car")
        assert resp.status_code == 200
        assert isinstance(resp.json(), list)


class TestGetCar:
    def test_get_car(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        created = _add_car(client, "get-detail", speed=90, price=7)
        client.cookies.clear()
        resp = client.get(f"/api/car/{created['_id']}")
        assert resp.status_code == 200
        assert resp.json() == created

    def test_get_missing_car_is_403(self, client: TestClient) -> None:
        resp = client.get("/api/car/no-such-car")
        assert resp.status_code == 403, f"Expected 403, got {resp.status_code}: {resp.text}"
        assert "no-such-car" in resp.text


class TestUpdateCar:
    def test_owner_can_update(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        created = _add_car(client, "update-own", speed=100, price=10)
        body = {"_id": created["_id"], "vendor": "update-own-v2", "speed": "120", "price": 11}
        resp = client.put("/api/car", json=body)
        assert resp.status_code == 200, resp.text
        car = resp.json()
        assert car["vendor"] == "update-own-v2"
        assert car["speed"] == 120
        assert car["owner"]["_id"] == sessions["puki"].id

    def test_update_keeps_stored_owner(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        created = _add_car(client, "update-owner-kept")
        body = {**created, "owner": {"_id": sessions["muki"].id, "fullname": "Muki Ba"}}
        car = client.put("/api/car", json=body).json()
        assert car["owner"]["_id"] == sessions["puki"].id

    def test_non_owner_cannot_update(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        created = _add_car(client, "update-foreign")
        client = login_as(sessions["muki"])
        resp = client.put("/api/car", json={**created, "vendor": "stolen"})
        assert resp.status_code == 400
        assert resp.text == "Cannot update car"
        assert client.get(f"/api/car/{created['_id']}").json()["vendor"] == "update-foreign"

    def test_admin_can_update_any_car(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        created = _add_car(client, "update-by-admin")
        client = login_as(sessions["admin"])
        resp = client.put("/api/car", json={**created, "price": 99})
        assert resp.status_code == 200
        assert resp.json()["price"] == 99
        assert resp.json()["owner"]["_id"] == sessions["puki"].id

    def test_update_missing_car(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.put("/api/car", json={"_id": "ghost", "vendor": "x", "speed": 1, "price": 1})
        assert resp.status_code == 400

    def test_update_without_id(self, login_as, sessions) -> None:
        client = login_as(sessions["puki"])
        resp = client.put("/api/car", json={"vendor": "update-no-id", "speed": 1, "price": 1})
        assert resp.status_code == 400
        assert client.get("/api/car", params={"txt": "update-no-id"}).json() == []


class TestRemoveCar:
    def test_owner_can_remove(self, login_as, sessions) -> None:
        client = login_as(sessions["muki"])
        created = _add_car(client, "remove-own")
        resp = client.delete(f"/api/car/{created['_id']}")
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"msg": "Car removed", "carId": created["_id"]}
        assert client.get(f"/api/car/{created['_id']}").status_code == 403

    def test_non_owner_cannot_remove(self, login_as, sessions) -> None:
        client = login_as(sessions["muki"])
        created = _add_car(client, "remove-foreign")
        client = login_as(sessions["puki"])
        resp = client.delete(f"/api/car/{created['_id']}")
        assert resp.status_code == 400
        assert resp.text.startswith("Cannot remove car, ")
        assert "Not your car" in resp.text
        assert client.get(f"/api/car/{created['_id']}").status_code == 200

    def test_admin_can_remove_any_car(self, login_as, sessions) -> None:
        client = login_as(sessions["muki"])
        created = _add_car(client, "remove-by-admin")
        client = login_as(sessions["admin"])
        resp = client.delete(f"/api/car/{created['_id']}")
        assert resp.status_code == 200

    def test_remove_missing_car_is_400(self, login_as, sessions) -> None:
        client = login_as(sessions["muki"])
        resp = client.delete("/api/car/ghost")
        assert resp.status_code == 400
        assert "Cannot find car ghost" in resp.text

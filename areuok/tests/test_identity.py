def test_register_and_get_info(client, frozen_clock, make_device):
    device = make_device("alice", mode="supervisor")
    assert device["device_name"] == "alice"
    assert device["mode"] == "supervisor"
    assert device["hardware_id"] is None
    assert device["last_name_updated_at"] is None

    frozen_clock.advance(hours=5)
    info = client.get(f"/api/v1/devices/{device['device_id']}")
    assert info.status_code == 200, info.text
    body = info.json()
    assert body["device_id"] == device["device_id"]
    assert body["created_at"] == device["created_at"]
    assert body["last_seen_at"] > device["last_seen_at"]


def test_get_info_unknown_device(client):
    response = client.get("/api/v1/devices/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "device_not_found", "device_id": "does-not-exist"}


def test_register_recovers_by_hardware_id(client, make_device):
    first = make_device("alice", hardware_id="imei-123", mode="signin")
    again = make_device("someone-else", hardware_id="imei-123", mode="supervisor")

    assert again["device_id"] == first["device_id"]
    assert again["device_name"] == "alice"
    assert again["mode"] == "signin"


def test_register_name_conflict_is_case_and_width_insensitive(client, make_device):
    make_device("Alice")

    for name in ("alice", "ALICE", " alice ", "ａｌｉｃｅ"):
        response = client.post("/api/v1/devices/register", json={"device_name": name})
        assert response.status_code == 409, name
        assert response.json()["error"] == "name_conflict"


def test_devices_without_hardware_id_do_not_collide(client, make_device):
    a = make_device("alice")
    b = make_device("bob")
    assert a["device_id"] != b["device_id"]
    assert a["hardware_id"] is None and b["hardware_id"] is None


def test_register_rejects_blank_name(client):
    response = client.post("/api/v1/devices/register", json={"device_name": "   "})
    assert response.status_code == 422


def test_first_rename_is_exempt_then_cooldown_applies(client, frozen_clock, make_device):
    device = make_device("alice")
    device_id = device["device_id"]

    frozen_clock.advance(minutes=1)
    first = client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "alicia"})
    assert first.status_code == 200, first.text
    assert first.json()["device_name"] == "alicia"
    assert first.json()["last_name_updated_at"] is not None

    frozen_clock.advance(days=3)
    blocked = client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "ally"})
    assert blocked.status_code == 422
    assert blocked.json() == {"error": "cooldown_active", "days_left": 12}

    frozen_clock.advance(days=11)
    still_blocked = client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "ally"})
    assert still_blocked.json()["days_left"] == 1

    frozen_clock.advance(days=1)
    allowed = client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "ally"})
    assert allowed.status_code == 200, allowed.text
    assert allowed.json()["device_name"] == "ally"


def test_cooldown_counts_calendar_days(client, frozen_clock, settings, make_device):
    settings.name_cooldown_days = 1
    device = make_device("alice")
    device_id = device["device_id"]

    frozen_clock.set(frozen_clock.now.replace(hour=23, minute=50))
    client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "alicia"})

    frozen_clock.advance(minutes=20)
    response = client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "ally"})
    assert response.status_code == 200, response.text


def test_rename_to_current_name_is_noop(client, frozen_clock, make_device):
    device = make_device("alice")
    device_id = device["device_id"]

    same = client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "alice"})
    assert same.status_code == 200
    assert same.json()["last_name_updated_at"] is None

    client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "alicia"})
    frozen_clock.advance(days=1)
    again = client.patch(f"/api/v1/devices/{device_id}/name", json={"device_name": "alicia"})
    assert again.status_code == 200


def test_rename_to_taken_name_conflicts(client, make_device):
    make_device("bob")
    alice = make_device("alice")

    response = client.patch(f"/api/v1/devices/{alice['device_id']}/name", json={"device_name": "Bob"})
    assert response.status_code == 409
    assert response.json()["error"] == "name_conflict"


def test_rename_changing_only_case_is_allowed(client, make_device):
    alice = make_device("alice")
    response = client.patch(f"/api/v1/devices/{alice['device_id']}/name", json={"device_name": "Alice"})
    assert response.status_code == 200
    assert response.json()["device_name"] == "Alice"


def test_rename_unknown_device(client):
    response = client.patch("/api/v1/devices/missing/name", json={"device_name": "x1"})
    assert response.status_code == 404


def test_update_mode(client, make_device):
    device = make_device("alice")
    response = client.patch(f"/api/v1/devices/{device['device_id']}/mode", json={"mode": "supervisor"})
    assert response.status_code == 200
    assert response.json()["mode"] == "supervisor"

    invalid = client.patch(f"/api/v1/devices/{device['device_id']}/mode", json={"mode": "admin"})
    assert invalid.status_code == 422


def test_search_matches_substring_case_insensitively(client, make_device):
    make_device("Alice")
    make_device("Malik")
    make_device("bob")

    response = client.get("/api/v1/search/devices", params={"q": "LI"})
    assert response.status_code == 200
    assert [item["device_name"] for item in response.json()] == ["Alice", "Malik"]

    empty = client.get("/api/v1/search/devices", params={"q": "zz"})
    assert empty.status_code == 200
    assert empty.json() == []


def test_search_requires_two_characters(client):
    response = client.get("/api/v1/search/devices", params={"q": "a"})
    assert response.status_code == 422


def test_search_treats_wildcards_literally(client, make_device):
    make_device("al_ce")
    make_device("alice")

    response = client.get("/api/v1/search/devices", params={"q": "l_"})
    assert [item["device_name"] for item in response.json()] == ["al_ce"]


def test_search_defaults_to_configured_limit(client, settings, make_device):
    for name in ("alpha-1", "alpha-2", "alpha-3"):
        make_device(name)
    settings.search_limit = 2

    capped = client.get("/api/v1/search/devices", params={"q": "alpha"}).json()
    assert [item["device_name"] for item in capped] == ["alpha-1", "alpha-2"]

    explicit = client.get("/api/v1/search/devices", params={"q": "alpha", "limit": 3}).json()
    assert len(explicit) == 3


def test_name_expanding_past_key_length_is_rejected(client, make_device):
    # U+FDFA expands to 18 characters under NFKC
    too_long = "ﷺ" * 15
    response = client.post("/api/v1/devices/register", json={"device_name": too_long})
    assert response.status_code == 422

    device = make_device("ﷺ" * 3)
    rename = client.patch(f"/api/v1/devices/{device['device_id']}/name", json={"device_name": too_long})
    assert rename.status_code == 422

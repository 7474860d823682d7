from conftest import reload_user
from routely.models import JournalEntry


def _write(client, headers, **overrides):
    body = {"title": "Morning ride", "content": "Quiet roads along the river", "tags": ["bike"], "mood": "happy"}
    body.update(overrides)
    return client.post("/api/journal", json=body, headers=headers)


def test_requires_login(client):
    assert client.post("/api/journal", json={"title": "t", "content": "c"}).status_code == 401
    assert client.get("/api/journal").status_code == 401


def test_tiered_points_then_rejection(client, user_factory, auth_headers, app):
    uid = user_factory()
    headers = auth_headers(uid)

    awarded = []
    for _ in range(10):
        resp = _write(client, headers)
        assert resp.status_code == 201, resp.get_json()
        awarded.append(resp.get_json()["points_awarded"])
    assert awarded == [10] * 5 + [0] * 5

    assert _write(client, headers).status_code == 429
    assert _write(client, headers).status_code == 429

    with app.app_context():
        u = reload_user(uid)
        assert u.journal_entries_count == 10
        # 50 from entries + first_journal (10) + journal_enthusiast (50)
        assert u.points == 110
        assert JournalEntry.query.filter_by(user_id=uid).count() == 10


def test_validation(client, user_factory, auth_headers):
    headers = auth_headers(user_factory())
    assert _write(client, headers, title="").status_code == 400
    assert _write(client, headers, content=None).status_code == 400
    assert _write(client, headers, mood="furious").status_code == 400
    assert _write(client, headers, tags="bike").status_code == 400
    assert _write(client, headers, location={"name": "Park", "lat": "x"}).status_code == 400


def test_location_round_trip(client, user_factory, auth_headers):
    headers = auth_headers(user_factory())
    entry = _write(client, headers, location={"name": "East Coast Park", "lat": 1.30, "lng": 103.93}).get_json()["entry"]
    assert entry["location"] == {"name": "East Coast Park", "lat": 1.30, "lng": 103.93}
    assert entry["tags"] == ["bike"]


def test_list_and_get_are_private(client, user_factory, auth_headers):
    alice = auth_headers(user_factory(name="Alice"))
    bob = auth_headers(user_factory(name="Bob"))
    for i in range(3):
        _write(client, alice, title=f"Trip {i}")
    entry_id = _write(client, bob, title="Bob trip").get_json()["entry"]["id"]

    listing = client.get("/api/journal?limit=2&page=1", headers=alice).get_json()
    assert listing["total"] == 3
    assert listing["count"] == 2

    assert client.get(f"/api/journal/{entry_id}", headers=bob).status_code == 200
    assert client.get(f"/api/journal/{entry_id}", headers=alice).status_code == 404
    assert client.delete(f"/api/journal/{entry_id}", headers=alice).status_code == 404


def test_delete_refunds(client, user_factory, auth_headers, app):
    uid = user_factory()
    headers = auth_headers(uid)
    entry_id = _write(client, headers).get_json()["entry"]["id"]

    resp = client.delete(f"/api/journal/{entry_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["points_refunded"] == 10
    assert client.delete(f"/api/journal/{entry_id}", headers=headers).status_code == 404

    with app.app_context():
        u = reload_user(uid)
        assert u.points == 10  # the first_journal bonus stays
        assert u.journal_entries_count == 0

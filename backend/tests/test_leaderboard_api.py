def test_leaderboard_pagination(client, user_factory):
    for name, pts in [("A", 30), ("B", 20), ("C", 20), ("D", 0)]:
        user_factory(name=name, points=pts)

    data = client.get("/api/leaderboard?limit=2&page=2").get_json()
    assert [(i["name"], i["rank"]) for i in data["items"]] == [("C", 3), ("D", 4)]
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 4, "pages": 2}


def test_my_rank(client, user_factory, auth_headers):
    user_factory(name="A", points=30)
    b = user_factory(name="B", points=20)
    user_factory(name="C", points=20)

    assert client.get("/api/leaderboard/me").status_code == 401
    data = client.get("/api/leaderboard/me", headers=auth_headers(b)).get_json()
    assert data["rank"] == 2
    assert data["points"] == 20
    assert data["total_users"] == 3


def test_achievement_catalog_and_status(client, user_factory, auth_headers):
    catalog = client.get("/api/achievements").get_json()
    assert catalog["count"] == 9
    categories = [a["category"] for a in catalog["items"]]
    assert categories == sorted(categories)

    uid = user_factory()
    headers = auth_headers(uid)
    client.post("/api/incidents", json={"type": "Accident", "lat": 0, "lng": 0}, headers=headers)

    mine = client.get("/api/achievements/my", headers=headers).get_json()
    assert mine["total_count"] == 9
    assert mine["unlocked_count"] == 1
    unlocked = [a for a in mine["items"] if a["unlocked"]]
    assert unlocked[0]["id"] == "first_incident"
    assert unlocked[0]["unlocked_at"] is not None

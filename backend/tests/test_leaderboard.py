import itertools

from conftest import make_user
from routely.utils import leaderboard


def _seed(ctx):
    ids = {}
    for name, pts in [("Ana", 100), ("Ben", 50), ("Cy", 50), ("Dee", 10)]:
        ids[name] = make_user(name=name, points=pts).id
    return ids


def test_top_ranks_by_position(ctx):
    ids = _seed(ctx)
    rows = leaderboard.top(limit=10, offset=0)
    assert [r["name"] for r in rows] == ["Ana", "Ben", "Cy", "Dee"]
    assert [r["rank"] for r in rows] == [1, 2, 3, 4]
    assert rows[0]["id"] == ids["Ana"]
    assert "email" not in rows[0]


def test_top_pagination_continues_rank(ctx):
    _seed(ctx)
    rows = leaderboard.top(limit=2, offset=2)
    assert [r["name"] for r in rows] == ["Cy", "Dee"]
    assert [r["rank"] for r in rows] == [3, 4]


def test_my_rank_shares_rank_on_ties(ctx):
    from routely.models import User
    _seed(ctx)
    by_name = {u.name: u for u in User.query.all()}
    assert leaderboard.my_rank(by_name["Ana"]) == {"rank": 1, "points": 100, "total_users": 4}
    assert leaderboard.my_rank(by_name["Ben"])["rank"] == 2
    assert leaderboard.my_rank(by_name["Cy"])["rank"] == 2
    assert leaderboard.my_rank(by_name["Dee"])["rank"] == 4


def test_more_points_always_ranks_higher(ctx):
    from routely.models import User
    for i, pts in enumerate([0, 5, 5, 30, 7, 30, 100, 0]):
        make_user(name=f"U{i}", points=pts)
    users = User.query.all()
    for a, b in itertools.permutations(users, 2):
        if a.points > b.points:
            assert leaderboard.my_rank(a)["rank"] < leaderboard.my_rank(b)["rank"]

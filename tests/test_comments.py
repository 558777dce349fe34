import pytest


@pytest.fixture
def post(store):
    store.data["posts"] = {
        "post-1": {"id": "post-1", "username": "jane", "content": "hello", "created_at": 1, "tags": ["sleep"], "comment_count": 0}
    }
    return "post-1"


def comment(client, post_id, username="jane", content="Try white noise"):
    return client.post("/posts/comment", params={"post_id": post_id}, json={"username": username, "content": content})


def test_add_comment_snapshots_role(client, store, seed_user, post):
    seed_user("admin-uid", username="nurse", role="admin")
    response = comment(client, post, username="nurse")
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "admin"
    assert body["is_admin"] is True
    stored = store.data["posts"][post]["comments"][body["id"]]
    assert stored["content"] == "Try white noise"
    assert store.data["posts"][post]["comment_count"] == 1


def test_role_change_does_not_rewrite_comments(client, store, seed_user, post):
    seed_user("uid-1", username="jane", role="admin")
    comment_id = comment(client, post).json()["id"]
    store.data["users"]["uid-1"]["role"] = "user"
    later_id = comment(client, post).json()["id"]
    comments = store.data["posts"][post]["comments"]
    assert comments[comment_id]["is_admin"] is True
    assert comments[later_id]["is_admin"] is False
    assert store.data["posts"][post]["comment_count"] == 2


def test_add_comment_errors(client, store, seed_user, post):
    seed_user("uid-1", username="jane")
    assert comment(client, None).status_code == 400
    assert comment(client, post, username="ghost").status_code == 404
    assert comment(client, "missing").status_code == 404
    assert "missing" not in store.data["posts"]
    assert comment(client, post, content="  ").status_code == 400
    assert "comments" not in store.data["posts"][post]


def test_comment_write_failure_stores_nothing(client, store, seed_user, post):
    seed_user("uid-1", username="jane")
    store.failing.add("transaction")
    response = comment(client, post)
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to add comment"
    assert "comments" not in store.data["posts"][post]
    assert store.data["posts"][post]["comment_count"] == 0


def test_comment_on_deleted_post_does_not_recreate_it(client, store, seed_user, post):
    seed_user("uid-1", username="jane")
    # Only stray children remain once the post document itself is gone
    store.data["posts"][post] = {"likes": {"jane": True}}
    response = comment(client, post)
    assert response.status_code == 404
    assert store.data["posts"][post] == {"likes": {"jane": True}}
    assert "comment_count" not in store.data["posts"][post]


def seeded_comment(store, post_id):
    store.data["posts"][post_id]["comments"] = {
        "c1": {"id": "c1", "username": "john", "content": "hi", "created_at": 10, "role": "user", "is_admin": False}
    }
    return {"post_id": post_id, "comment_id": "c1"}


def test_like_comment_toggles(client, store, post):
    ids = seeded_comment(store, post)
    assert client.post("/comments/like", params=ids, json={"username": "jane"}).json()["like_count"] == 1
    assert client.post("/comments/like", params=ids, json={"username": "jane"}).json()["like_count"] == 0


def test_flag_comment_once_per_user(client, store, post):
    ids = seeded_comment(store, post)
    for _ in range(2):
        assert client.post("/comments/flag", params=ids, json={"username": "jane"}).json()["flag_count"] == 1
    assert client.post("/comments/flag", params=ids, json={"username": "john"}).json()["flag_count"] == 2


def test_comment_like_and_flag_errors(client, store, post):
    seeded_comment(store, post)
    missing = {"post_id": post, "comment_id": "nope"}
    assert client.post("/comments/like", params=missing, json={"username": "jane"}).status_code == 404
    assert client.post("/comments/flag", params=missing, json={"username": "jane"}).status_code == 404
    assert client.post("/comments/like", params={"post_id": post}, json={"username": "jane"}).status_code == 400


def test_flagged_comments_grouped_by_post(client, store, post, admin_headers):
    ids = seeded_comment(store, post)
    client.post("/comments/flag", params=ids, json={"username": "jane"})
    response = client.get("/comments/flag", headers=admin_headers)
    assert response.status_code == 200
    assert list(response.json()) == [post]
    assert response.json()[post]["c1"]["flag_count"] == 1
    assert client.get("/comments/flag").status_code == 401


def test_comment_routes_reject_path_like_ids(client, store, seed_user, post):
    seed_user("uid-1", username="jane")
    seeded_comment(store, post)
    assert comment(client, f"{post}/comments").status_code == 400
    nested = {"post_id": post, "comment_id": "c1/likes"}
    assert client.post("/comments/like", params=nested, json={"username": "jane"}).status_code == 400
    dotted = {"post_id": "post.1", "comment_id": "c1"}
    assert client.post("/comments/flag", params=dotted, json={"username": "jane"}).status_code == 400
    stored = store.data["posts"][post]
    assert "likes" not in stored["comments"]["c1"]
    assert len(stored["comments"]) == 1


def test_comment_like_key_is_escaped(client, store, post):
    ids = seeded_comment(store, post)
    client.post("/comments/like", params=ids, json={"username": "jane.d"})
    assert store.data["posts"][post]["comments"]["c1"]["likes"] == {"jane%2Ed": True}

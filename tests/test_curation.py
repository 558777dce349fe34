def test_saving_tip_replaces_previous_tips(client, store, admin_headers):
    store.data["tips"] = {"-old1": {"content": "old"}, "-old2": {"content": "older"}}
    response = client.post("/tips", json={"title": "Hydration", "content": "Drink water"}, headers=admin_headers)
    assert response.status_code == 201
    tips = client.get("/tips").json()
    assert list(tips) == [response.json()["id"]]
    assert tips[response.json()["id"]]["content"] == "Drink water"
    assert store.calls.index("delete") < store.calls.index("push")


def test_tips_require_admin(client, store, user_headers):
    store.data["tips"] = {"-old1": {"content": "old"}}
    assert client.post("/tips", json={"content": "x"}, headers=user_headers).status_code == 403
    assert list(store.data["tips"]) == ["-old1"]


def test_no_tips_is_empty_object(client):
    assert client.get("/tips").json() == {}


def test_saving_contest_replaces_previous(client, store, admin_headers):
    store.data["contest"] = {"title": "Old contest", "prize": "Toy"}
    response = client.post(
        "/contest", json={"title": "Best lullaby", "end_date": "2026-12-31"}, headers=admin_headers
    )
    assert response.status_code == 201
    assert store.data["contest"] == {"title": "Best lullaby", "description": "", "end_date": "2026-12-31"}
    body = client.get("/contest").json()
    assert body["title"] == "Best lullaby"
    assert body["prize"] is None


def test_contest_requires_admin_and_title(client, admin_headers):
    assert client.post("/contest", json={"title": "x"}).status_code == 401
    assert client.post("/contest", json={"title": ""}, headers=admin_headers).status_code == 400


def test_missing_contest_is_404(client):
    assert client.get("/contest").status_code == 404


def test_custom_notification(client, notifier, admin_headers):
    response = client.post("/custom-notif", json={"title": "Live Q&A", "body": "Starts at 6pm"}, headers=admin_headers)
    assert response.status_code == 200
    assert notifier.sent == [{"topic": "new-videos", "title": "Live Q&A", "body": "Starts at 6pm"}]
    client.post("/custom-notif", json={"title": "t", "body": "b", "topic": "moms"}, headers=admin_headers)
    assert notifier.sent[-1]["topic"] == "moms"


def test_custom_notification_failure(client, notifier, admin_headers):
    notifier.failing = True
    response = client.post("/custom-notif", json={"title": "t", "body": "b"}, headers=admin_headers)
    assert response.status_code == 500

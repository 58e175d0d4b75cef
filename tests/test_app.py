"""HTTP-level tests through the Flask test client."""

import io

import pytest

from conftest import FakeCompletion, FakeGeocoder
from route_planner.api.errors import UpstreamError
from route_planner.app import create_app

PARAMS = {
    "categories": ["история"],
    "duration": 2,
    "pace": "быстрый",
    "transportType": "пешком",
    "timeOfDay": "вечер",
    "accessibility": "нет",
    "preferences": "",
}


def _register(client, username="anna", email="anna@example.com", password="pw123456"):
    response = client.post("/api/auth/register", json={
        "username": username, "email": email, "password": password,
    })
    assert response.status_code == 200
    return response.get_json()


def test_health(client):
    assert client.get("/health").get_json()["status"] == "ok"


def test_generate_and_fetch_route(client, completion):
    response = client.post("/api/generate-route", json=dict(PARAMS, userId="u1"))
    assert response.status_code == 200
    route = response.get_json()

    assert route["name"] == "2-часовой история маршрут"
    assert len(route["points"]) == 3
    assert "Категории: история" in completion.calls[0][1]

    fetched = client.get(f"/api/route/{route['routeId']}")
    assert fetched.get_json() == route

    routes = client.get("/api/user-routes/u1").get_json()["routes"]
    assert [r["id"] for r in routes] == [route["routeId"]]


def test_unknown_route_is_404(client):
    response = client.get("/api/route/nope")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_upstream_failure_returns_502(tmp_path):
    app = create_app(
        completion=FakeCompletion(error=UpstreamError("quota exceeded")),
        geocoder=FakeGeocoder(),
        upload_dir=str(tmp_path),
        jwt_secret="test-secret",
    )
    client = app.test_client()

    response = client.post("/api/generate-route", json=PARAMS)

    assert response.status_code == 502
    body = response.get_json()
    assert body["success"] is False
    assert "quota exceeded" in body["details"]
    assert client.get("/api/user-routes/u1").get_json() == {"routes": []}


@pytest.mark.parametrize("payload", [None, {"duration": 2}, {"categories": "история", "duration": 2}])
def test_bad_generate_request_is_400(client, payload):
    if payload is None:
        response = client.post("/api/generate-route", data="not json", content_type="text/plain")
    else:
        response = client.post("/api/generate-route", json=payload)
    assert response.status_code == 400


def test_unexpected_error_is_500(tmp_path):
    class BrokenCompletion:
        def generate(self, system_prompt, user_prompt):
            raise KeyError("boom")

    app = create_app(completion=BrokenCompletion(), geocoder=FakeGeocoder(),
                     upload_dir=str(tmp_path), jwt_secret="test-secret")
    response = app.test_client().post("/api/generate-route", json=PARAMS)
    assert response.status_code == 500
    assert response.get_json()["error"] == "Внутренняя ошибка сервера"


def test_save_list_and_delete_route(client):
    route_id = client.post("/api/generate-route", json=PARAMS).get_json()["routeId"]

    assert client.post("/api/save-route", json={"userId": "u7", "routeId": route_id}).get_json() == {"success": True}
    assert len(client.get("/api/user-routes/u7").get_json()["routes"]) == 1

    assert client.delete(f"/api/routes/{route_id}").get_json() == {"success": True}
    assert client.get("/api/user-routes/u7").get_json() == {"routes": []}
    assert client.get(f"/api/route/{route_id}").status_code == 404


def test_auth_flow(client):
    registered = _register(client)
    token = registered["token"]
    assert registered["user"]["username"] == "anna"

    login = client.post("/api/auth/login", json={"email": "anna@example.com", "password": "pw123456"})
    assert login.status_code == 200

    headers = {"Authorization": f"Bearer {token}"}
    me = client.get("/api/auth/me", headers=headers).get_json()
    assert me["email"] == "anna@example.com"

    updated = client.put("/api/auth/update-profile", json={"avatar": "http://x/a.png"}, headers=headers)
    assert updated.get_json()["avatar"] == "http://x/a.png"


def test_auth_errors(client):
    _register(client)
    assert client.post("/api/auth/register", json={
        "username": "anna", "email": "x@example.com", "password": "pw",
    }).status_code == 400
    assert client.post("/api/auth/login", json={
        "email": "anna@example.com", "password": "nope",
    }).status_code == 401
    assert client.post("/api/auth/register", json={
        "username": "boris", "email": "boris@example.com", "password": "x" * 73,
    }).status_code == 400
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 403


def test_reviews_endpoints(client):
    user = _register(client)["user"]
    route_id = client.post("/api/generate-route", json=dict(PARAMS, userId=user["id"])).get_json()["routeId"]

    response = client.post("/api/reviews", json={
        "userId": user["id"], "routeId": route_id, "rating": 4,
        "likedAspects": ["виды"], "dislikedAspects": [], "comment": "хорошо",
    })
    assert response.status_code == 200
    assert response.get_json()["review"]["rating"] == 4

    assert client.get(f"/api/route/{route_id}").get_json()["averageRating"] == 4

    route_reviews = client.get(f"/api/route-reviews/{route_id}").get_json()["reviews"]
    assert route_reviews[0]["username"] == "anna"

    user_reviews = client.get(f"/api/user-reviews/{user['id']}").get_json()["reviews"]
    assert user_reviews[0]["routeName"] == "2-часовой история маршрут"

    missing = client.post("/api/reviews", json={"userId": "ghost", "routeId": route_id, "rating": 1})
    assert missing.status_code == 404


def test_upload_avatar(client, tmp_path):
    response = client.post(
        "/api/upload-avatar",
        data={"avatar": (io.BytesIO(b"\x89PNG fake"), "me.PNG")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    url = response.get_json()["avatarUrl"]
    assert url.endswith(".png")

    filename = url.rsplit("/", 1)[1]
    assert (tmp_path / "uploads" / filename).read_bytes() == b"\x89PNG fake"
    assert client.get(f"/uploads/{filename}").data == b"\x89PNG fake"


def test_upload_without_file_is_400(client):
    response = client.post("/api/upload-avatar", data={}, content_type="multipart/form-data")
    assert response.status_code == 400

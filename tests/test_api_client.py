import json

import httpx
import pytest

from flappy_arcade.api_client import (
    AuthError, BackendClient, NotFoundError, ServerError, TransportError,
    UserSession, ValidationError
)

USER = {"id": 1, "username": None, "displayName": "Alex",
        "createdAt": "2024-01-01T00:00:00+00:00"}


def make_client(handler):
    return BackendClient("http://scores.test", transport=httpx.MockTransport(handler))


def respond(status, body):
    return lambda request: httpx.Response(status, json=body)


def test_login_parses_user():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = request.content
        return httpx.Response(200, json={"user": USER})

    user = make_client(handler).login("Alex")
    assert user.id == 1
    assert user.display_name == "Alex"
    assert seen["path"] == "/api/login"
    assert b'"displayName"' in seen["body"]


@pytest.mark.parametrize("status, error_type", [
    (400, ValidationError),
    (409, ValidationError),
    (401, AuthError),
    (403, AuthError),
    (404, NotFoundError),
    (500, ServerError),
    (503, ServerError),
])
def test_status_codes_map_to_error_types(status, error_type):
    client = make_client(respond(status, {"error": "nope"}))
    with pytest.raises(error_type) as info:
        client.submit_score(3)
    assert info.value.status_code == status
    assert info.value.message == "nope"


def test_non_json_error_body_gets_a_generic_message():
    client = make_client(lambda request: httpx.Response(502, text="Bad Gateway"))
    with pytest.raises(ServerError) as info:
        client.leaderboard()
    assert "502" in info.value.message


def test_transport_failure_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        make_client(handler).me()


def test_leaderboard_sends_limit():
    def handler(request):
        assert request.url.params["limit"] == "5"
        return httpx.Response(200, json={"leaderboard": []})

    assert make_client(handler).leaderboard(5) == []


def test_session_login_success_and_failure():
    session = UserSession(make_client(respond(200, {"user": USER})))
    assert session.login("Alex") is True
    assert session.logged_in
    assert session.error is None
    session.close()

    failing = UserSession(make_client(respond(400, {"error": "Name is required"})))
    assert failing.login("x") is False
    assert not failing.logged_in
    assert failing.error == "Name is required"
    assert failing.login("   ") is False
    failing.close()


def test_submit_requires_login():
    session = UserSession(make_client(respond(201, {"score": {"id": 1}})))
    assert session.submit_score(4) is False
    assert session.error == "You must be logged in to submit scores"
    session.close()


def test_async_submission_swallows_errors():
    def handler(request):
        if request.url.path == "/api/login":
            return httpx.Response(200, json={"user": USER})
        raise httpx.ConnectError("offline", request=request)

    session = UserSession(make_client(handler))
    session.login("Alex")
    future = session.submit_score_async(9)
    assert future.result(timeout=5) is False
    assert session.error.startswith("Network error")
    assert session.logged_in
    session.close()


def test_auth_failure_drops_the_session_user():
    def handler(request):
        if request.url.path == "/api/login":
            return httpx.Response(200, json={"user": USER})
        return httpx.Response(401, json={"error": "Authentication required"})

    session = UserSession(make_client(handler))
    session.login("Alex")
    assert session.submit_score_async(9).result(timeout=5) is False
    assert not session.logged_in
    assert session.error == "Authentication required"
    session.close()


def test_refresh_leaderboard_keeps_name_and_score():
    rows = [{"id": 3, "score": 12, "userId": 1, "createdAt": USER["createdAt"], "user": USER}]
    session = UserSession(make_client(respond(200, {"leaderboard": rows})))
    assert session.refresh_leaderboard_async().result(timeout=5) is True
    assert session.leaderboard == [("Alex", 12)]
    session.close()


def test_close_finishes_queued_submissions():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        if request.url.path == "/api/login":
            return httpx.Response(200, json={"user": USER})
        return httpx.Response(201, json={"score": {"id": len(seen)}})

    session = UserSession(make_client(handler))
    session.login("Alex")
    futures = [session.submit_score_async(5), session.submit_score_async(8)]
    session.close()

    assert all(f.done() and f.result() is True for f in futures)
    assert seen.count("/api/scores") == 2
    assert session.error is None


def test_password_login_and_register_send_credentials():
    bodies = []

    def handler(request):
        bodies.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"user": dict(USER, username="alex")})

    client = make_client(handler)
    assert client.login_with_password("alex", "pw").username == "alex"
    assert client.register("alex", "pw", "Alex").display_name == "Alex"
    assert bodies == [
        ("/api/login", {"username": "alex", "password": "pw"}),
        ("/api/register", {"username": "alex", "password": "pw", "displayName": "Alex"}),
    ]


def test_profile_routes():
    score = {"id": 4, "userId": 1, "score": 9, "createdAt": USER["createdAt"]}

    def handler(request):
        if request.url.path == "/api/users/1":
            return httpx.Response(200, json={"user": USER})
        if request.url.path == "/api/users/1/scores":
            return httpx.Response(200, json={"scores": [score]})
        return httpx.Response(404, json={"error": "User not found"})

    client = make_client(handler)
    assert client.user(1).display_name == "Alex"
    assert client.user_scores(1) == [score]
    with pytest.raises(NotFoundError):
        client.user(2)


def test_clear_error_after_a_failed_login():
    session = UserSession(make_client(respond(400, {"error": "Name is required"})))
    session.login("x")
    assert session.error == "Name is required"
    session.clear_error()
    assert session.error is None
    session.close()

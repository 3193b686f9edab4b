from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from siteeditor.core.backend import AuthenticationError, BackendClient, BackendError, UploadError
from siteeditor.preview.dom import parse_html
from siteeditor.preview.uploads import MSG_UNEXPECTED, ImageReplacementFlow, ImageUploader, SelectedFile

BASE = "https://backend.example"


def make_client(handler, access_token: str = "token-1") -> BackendClient:
    return BackendClient(
        BASE,
        "anon-key",
        access_token=access_token,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def user_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/auth/v1/user":
        return httpx.Response(200, json={"id": "user-42", "email": "sanne@example.nl"})
    return httpx.Response(404)


def test_get_user_returns_the_signed_in_user() -> None:
    user = make_client(user_handler).get_user()
    assert user is not None
    assert user.id == "user-42"
    assert user.email == "sanne@example.nl"


def test_get_user_without_session() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected without a token")

    assert make_client(handler, access_token="").get_user() is None
    assert make_client(lambda request: httpx.Response(401)).get_user() is None
    with pytest.raises(AuthenticationError):
        make_client(lambda request: httpx.Response(403)).require_user()


def test_get_user_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(BackendError):
        make_client(handler).get_user()


def test_upload_posts_to_the_bucket_path() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Key": "site-assets/user-42/1-abc.png"})

    client = make_client(handler)
    stored = client.upload("user-42/1-abc.png", b"png-bytes", "image/png")

    assert stored == "user-42/1-abc.png"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE}/storage/v1/object/site-assets/user-42/1-abc.png"
    assert request.headers["authorization"] == "Bearer token-1"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["x-upsert"] == "false"
    assert request.headers["content-type"] == "image/png"
    assert request.content == b"png-bytes"


def test_upload_failures_raise_upload_error() -> None:
    with pytest.raises(UploadError):
        make_client(lambda request: httpx.Response(400, json={"error": "exists"})).upload("a/b.png", b"x", "image/png")

    def offline(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(UploadError):
        make_client(offline).upload("a/b.png", b"x", "image/png")


def test_public_url_round_trip() -> None:
    client = make_client(user_handler)
    url = client.public_url("user-42/1-abc.png")
    assert url == f"{BASE}/storage/v1/object/public/site-assets/user-42/1-abc.png"
    assert client.path_from_public_url(url) == "user-42/1-abc.png"
    assert client.path_from_public_url("https://cdn.example/foto.jpg") is None


def test_delete_only_within_own_namespace() -> None:
    deletes = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            deletes.append(json.loads(request.content))
            return httpx.Response(200, json=[])
        return user_handler(request)

    client = make_client(handler)
    client.delete(client.public_url("user-42/1-abc.png"))
    assert deletes == [{"prefixes": ["user-42/1-abc.png"]}]

    with pytest.raises(AuthenticationError):
        client.delete(client.public_url("someone-else/1-abc.png"))
    with pytest.raises(BackendError):
        client.delete("https://cdn.example/foto.jpg")
    assert len(deletes) == 1


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>proxy</html>"),
        httpx.Response(200, json=["user-42"]),
    ],
)
def test_get_user_rejects_unreadable_bodies(response) -> None:
    with pytest.raises(BackendError):
        make_client(lambda request: response).get_user()


def test_unreadable_auth_response_alerts_during_upload(notifier, recorder) -> None:
    client = make_client(lambda request: httpx.Response(200, text="<html>proxy</html>"))
    replaced = recorder()
    flow = ImageReplacementFlow(ImageUploader(client), notifier, replaced)
    soup = parse_html('<div><img src="oud.jpg"></div>')
    flow.arm("image-0", soup.img)

    assert flow.file_selected(SelectedFile("praktijk.png", b"\x89PNG", "image/png")) is None
    assert notifier.alerts == [MSG_UNEXPECTED]
    assert replaced.calls == []
    assert soup.img["src"] == "oud.jpg"

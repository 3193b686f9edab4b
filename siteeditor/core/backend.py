"""Client for the managed backend: current user lookup and object storage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from .settings import SettingsManager

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "site-assets"


class BackendError(Exception):
    """Base class for failures talking to the managed backend."""


class AuthenticationError(BackendError):
    """No authenticated user is available for the request."""


class UploadError(BackendError):
    """Object storage rejected the upload or could not be reached."""


@dataclass
class User:
    id: str
    email: str = ""


class BackendClient:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        access_token: str = "",
        bucket: str = DEFAULT_BUCKET,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.access_token = access_token
        self.bucket = bucket
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: SettingsManager, client: Optional[httpx.Client] = None) -> "BackendClient":
        return cls(
            base_url=settings.get("backend_url"),
            anon_key=settings.get("backend_anon_key"),
            access_token=settings.get("access_token"),
            bucket=settings.get("storage_bucket", DEFAULT_BUCKET) or DEFAULT_BUCKET,
            client=client,
        )

    def close(self) -> None:
        self._client.close()

    def _headers(self, **extra: str) -> dict:
        headers = {"apikey": self.anon_key}
        token = self.access_token or self.anon_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        headers.update(extra)
        return headers

    def _object_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(path)}"

    # ----------------------------------------------------------------- auth --
    def get_user(self) -> Optional[User]:
        """Return the signed-in user, or ``None`` when there is no session."""
        if not self.access_token:
            return None
        try:
            response = self._client.get(f"{self.base_url}/auth/v1/user", headers=self._headers())
        except httpx.HTTPError as exc:
            raise BackendError(f"Auth lookup failed: {exc}") from exc
        if response.status_code in (401, 403):
            return None
        if response.is_error:
            raise BackendError(f"Auth lookup failed with HTTP {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise BackendError("Auth lookup returned an unreadable response") from exc
        if not isinstance(data, dict):
            raise BackendError("Auth lookup returned an unexpected response")
        user_id = data.get("id")
        if not user_id:
            return None
        return User(id=str(user_id), email=data.get("email") or "")

    def require_user(self) -> User:
        user = self.get_user()
        if user is None:
            raise AuthenticationError("Not signed in")
        return user

    # -------------------------------------------------------------- storage --
    def upload(self, path: str, data: bytes, content_type: str, cache_control: str = "3600") -> str:
        """Upload ``data`` to ``path`` in the bucket and return the stored path."""
        headers = self._headers(**{
            "Content-Type": content_type,
            "cache-control": f"max-age={cache_control}",
            "x-upsert": "false",
        })
        try:
            response = self._client.post(self._object_url(path), content=data, headers=headers)
        except httpx.HTTPError as exc:
            raise UploadError(f"Upload failed: {exc}") from exc
        if response.is_error:
            logger.warning("Storage rejected %s: HTTP %s %s", path, response.status_code, response.text[:200])
            raise UploadError(f"Upload failed with HTTP {response.status_code}")
        return path

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    def path_from_public_url(self, url: str) -> Optional[str]:
        marker = f"/{self.bucket}/"
        if marker not in url:
            return None
        return url.split(marker, 1)[1]

    def delete(self, url: str) -> None:
        """Remove a previously uploaded file owned by the current user."""
        user = self.require_user()
        path = self.path_from_public_url(url)
        if path is None:
            raise BackendError("Not a storage URL")
        if not path.startswith(f"{user.id}/"):
            raise AuthenticationError("File belongs to another user")
        try:
            response = self._client.request(
                "DELETE",
                f"{self.base_url}/storage/v1/object/{self.bucket}",
                json={"prefixes": [path]},
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise BackendError(f"Delete failed: {exc}") from exc
        if response.is_error:
            raise BackendError(f"Delete failed with HTTP {response.status_code}")

"""Image replacement: validate a picked file, upload it, swap it in."""

from __future__ import annotations

import logging
import mimetypes
import random
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol

from bs4 import Tag

from ..core.backend import AuthenticationError, BackendError, UploadError, User
from .dom import get_style, remove_style, set_style

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

MSG_NOT_AN_IMAGE = "Alleen afbeeldingen"
MSG_TOO_LARGE = "Max 5MB"
MSG_NOT_SIGNED_IN = "Niet ingelogd"
MSG_UPLOAD_FAILED = "Upload mislukt"
MSG_UNEXPECTED = "Er ging iets mis"
MSG_UPLOAD_DISABLED = "Foto's uploaden kan na registratie"

ImageReplaceCallback = Callable[[str, str], None]


class ImageValidationError(ValueError):
    """The picked file is not an acceptable image."""


class StorageBackend(Protocol):
    def get_user(self) -> Optional[User]: ...

    def upload(self, path: str, data: bytes, content_type: str, cache_control: str = "3600") -> str: ...

    def public_url(self, path: str) -> str: ...

    def delete(self, url: str) -> None: ...


class Notifier(Protocol):
    """User-facing feedback supplied by the host."""

    def alert(self, message: str) -> None: ...

    def busy(self, active: bool) -> None: ...

    def notice(self, message: str) -> None: ...


class LoggingNotifier:
    """Headless notifier: everything goes to the log."""

    def alert(self, message: str) -> None:
        logger.warning("Alert: %s", message)

    def busy(self, active: bool) -> None:
        logger.debug("Busy: %s", active)

    def notice(self, message: str) -> None:
        logger.info("Notice: %s", message)


@dataclass
class SelectedFile:
    name: str
    data: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path) -> "SelectedFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, data=path.read_bytes(), content_type=content_type or "application/octet-stream")


def validate_image(file: SelectedFile, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    if not file.content_type.startswith("image/"):
        raise ImageValidationError(MSG_NOT_AN_IMAGE)
    if file.size > max_bytes:
        raise ImageValidationError(MSG_TOO_LARGE)


def _random_token(length: int = 11) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choice(alphabet) for _ in range(length))


def storage_path(user_id: str, filename: str, timestamp_ms: int, token: str) -> str:
    """``{user}/{timestamp}-{random}.{ext}``, namespaced per user."""
    ext = filename.split(".")[-1]
    return f"{user_id}/{timestamp_ms}-{token}.{ext}"


class ImageUploader:
    """Validates and stores one image, returning its public URL."""

    def __init__(
        self,
        backend: StorageBackend,
        max_bytes: int = MAX_UPLOAD_BYTES,
        cache_control: str = "3600",
        now_ms: Callable[[], int] = lambda: int(time.time() * 1000),
        token: Callable[[], str] = _random_token,
    ) -> None:
        self.backend = backend
        self.max_bytes = max_bytes
        self.cache_control = cache_control
        self.now_ms = now_ms
        self.token = token

    def validate(self, file: SelectedFile) -> None:
        validate_image(file, self.max_bytes)

    def upload(self, file: SelectedFile) -> str:
        self.validate(file)
        user = self.backend.get_user()
        if user is None:
            raise AuthenticationError(MSG_NOT_SIGNED_IN)
        path = storage_path(user.id, file.name, self.now_ms(), self.token())
        stored = self.backend.upload(path, file.data, file.content_type, self.cache_control)
        return self.backend.public_url(stored)


class ImageReplacementFlow:
    """Overlay flow: arm on click, upload on file pick, swap on success.

    Failures alert the user and leave the element and the overrides as
    they were; the host only ever hears about successful replacements.
    """

    def __init__(self, uploader: ImageUploader, notifier: Notifier, on_image_replace: ImageReplaceCallback) -> None:
        self.uploader = uploader
        self.notifier = notifier
        self.on_image_replace = on_image_replace
        self.identity: Optional[str] = None
        self.element: Optional[Tag] = None

    @property
    def armed(self) -> bool:
        return self.identity is not None

    def arm(self, identity: str, el: Tag) -> None:
        self.identity = identity
        self.element = el

    def disarm(self) -> None:
        self.identity = None
        self.element = None

    def rebind(self, el: Tag) -> None:
        if self.armed:
            self.element = el

    def file_selected(self, file: Optional[SelectedFile]) -> Optional[str]:
        identity, el = self.identity, self.element
        if file is None or identity is None:
            self.disarm()
            return None

        try:
            self.uploader.validate(file)
        except ImageValidationError as exc:
            logger.info("Rejected %s for %s: %s", file.name, identity, exc)
            self.disarm()
            self.notifier.alert(str(exc))
            return None

        self.notifier.busy(True)
        dimmed = self._dim(el)
        try:
            url = self.uploader.upload(file)
            if el is not None:
                self._swap(el, url)
            self.on_image_replace(identity, url)
            logger.info("Replaced %s with %s", identity, url)
            return url
        except AuthenticationError:
            self.notifier.alert(MSG_NOT_SIGNED_IN)
        except UploadError as exc:
            logger.warning("Upload for %s failed: %s", identity, exc)
            self.notifier.alert(MSG_UPLOAD_FAILED)
        except (BackendError, OSError) as exc:
            logger.error("Upload for %s failed: %s", identity, exc)
            self.notifier.alert(MSG_UNEXPECTED)
        finally:
            if el is not None:
                self._undim(el, dimmed)
            self.notifier.busy(False)
            self.disarm()
        return None

    @staticmethod
    def _dim(el: Optional[Tag]) -> dict:
        if el is None:
            return {}
        previous = {"opacity": get_style(el, "opacity"), "filter": get_style(el, "filter")}
        set_style(el, "opacity", "0.5")
        set_style(el, "filter", "blur(2px)")
        return previous

    @staticmethod
    def _undim(el: Tag, previous: dict) -> None:
        for prop in ("opacity", "filter"):
            value = previous.get(prop)
            if value:
                set_style(el, prop, value)
            else:
                remove_style(el, prop)

    @staticmethod
    def _swap(el: Tag, url: str) -> None:
        if el.name == "img":
            el["src"] = url
        else:
            set_style(el, "background-image", f"url({url})")


class ImageField:
    """Sidebar image input: same upload path, errors shown inline."""

    def __init__(self, uploader: ImageUploader, on_change: Callable[[Optional[str]], None], value: Optional[str] = None) -> None:
        self.uploader = uploader
        self.on_change = on_change
        self.value = value
        self.error = ""
        self.uploading = False

    def handle_file(self, file: SelectedFile) -> None:
        self.error = ""
        self.uploading = True
        try:
            url = self.uploader.upload(file)
        except ImageValidationError as exc:
            self.error = str(exc)
        except AuthenticationError:
            self.error = MSG_NOT_SIGNED_IN
        except UploadError as exc:
            logger.warning("Sidebar upload failed: %s", exc)
            self.error = MSG_UPLOAD_FAILED
        except (BackendError, OSError) as exc:
            logger.error("Sidebar upload failed: %s", exc)
            self.error = MSG_UNEXPECTED
        else:
            self.value = url
            self.on_change(url)
        finally:
            self.uploading = False

    def remove(self, delete_from_storage: bool = False) -> None:
        """Drop the reference; optionally delete the stored file as well.

        A failed delete is logged and otherwise ignored: the reference goes
        either way.
        """
        if delete_from_storage and self.value:
            try:
                self.uploader.backend.delete(self.value)
            except BackendError as exc:
                logger.warning("Could not delete %s: %s", self.value, exc)
        self.value = None
        self.error = ""
        self.on_change(None)

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from siteeditor.core.backend import AuthenticationError, BackendError, UploadError
from siteeditor.preview.dom import parse_html
from siteeditor.preview.uploads import (
    MSG_NOT_AN_IMAGE,
    MSG_NOT_SIGNED_IN,
    MSG_TOO_LARGE,
    MSG_UNEXPECTED,
    MSG_UPLOAD_FAILED,
    ImageField,
    ImageReplacementFlow,
    ImageUploader,
    ImageValidationError,
    SelectedFile,
    storage_path,
    validate_image,
)

PNG_200KB = SelectedFile("praktijk.png", b"\x89PNG" + b"\0" * (200 * 1024), "image/png")
PNG_6MB = SelectedFile("groot.png", b"\0" * (6 * 1024 * 1024), "image/png")


def make_uploader(backend) -> ImageUploader:
    return ImageUploader(backend, now_ms=lambda: 1700000000000, token=lambda: "abc123")


def test_storage_path_is_namespaced_per_user() -> None:
    assert storage_path("user-42", "foto.final.JPG", 17, "xyz") == "user-42/17-xyz.JPG"


def test_validation() -> None:
    validate_image(PNG_200KB)
    with pytest.raises(ImageValidationError, match=MSG_TOO_LARGE):
        validate_image(PNG_6MB)
    with pytest.raises(ImageValidationError, match=MSG_NOT_AN_IMAGE):
        validate_image(SelectedFile("cv.pdf", b"%PDF", "application/pdf"))


def test_selected_file_from_path(tmp_path: Path) -> None:
    target = tmp_path / "logo.png"
    target.write_bytes(b"\x89PNG")
    file = SelectedFile.from_path(target)
    assert file.content_type == "image/png"
    assert file.size == 4


def test_uploader_requires_a_user(backend) -> None:
    backend.user = None
    with pytest.raises(AuthenticationError):
        make_uploader(backend).upload(PNG_200KB)
    assert backend.uploads == []


def test_uploader_returns_public_url(backend) -> None:
    url = make_uploader(backend).upload(PNG_200KB)
    assert url.endswith("/site-assets/user-42/1700000000000-abc123.png")
    assert backend.uploads == [("user-42/1700000000000-abc123.png", len(PNG_200KB.data), "image/png")]


def flow_for(backend, notifier, recorder):
    replaced = recorder()
    flow = ImageReplacementFlow(make_uploader(backend), notifier, replaced)
    soup = parse_html('<div><img src="oud.jpg" style="width: 100%"></div>')
    flow.arm("image-0", soup.img)
    return flow, soup.img, replaced


def test_oversize_file_never_reaches_the_network(backend, notifier, recorder) -> None:
    flow, img, replaced = flow_for(backend, notifier, recorder)
    assert flow.file_selected(PNG_6MB) is None
    assert notifier.alerts == [MSG_TOO_LARGE]
    assert notifier.busy_calls == []
    assert backend.user_lookups == 0
    assert backend.uploads == []
    assert replaced.calls == []
    assert img["src"] == "oud.jpg"
    assert not flow.armed


def test_successful_upload_swaps_and_reports_once(backend, notifier, recorder) -> None:
    flow, img, replaced = flow_for(backend, notifier, recorder)
    url = flow.file_selected(PNG_200KB)
    assert replaced.calls == [("image-0", url)]
    assert "/user-42/" in url
    assert img["src"] == url
    assert img["style"] == "width: 100%"
    assert notifier.busy_calls == [True, False]
    assert notifier.alerts == []


@pytest.mark.parametrize(
    "failure, message",
    [
        (UploadError("HTTP 400"), MSG_UPLOAD_FAILED),
        (BackendError("boom"), MSG_UNEXPECTED),
        (OSError("disk"), MSG_UNEXPECTED),
    ],
)
def test_failed_upload_leaves_everything_as_it_was(backend, notifier, recorder, failure, message) -> None:
    backend.fail = failure
    flow, img, replaced = flow_for(backend, notifier, recorder)
    assert flow.file_selected(PNG_200KB) is None
    assert notifier.alerts == [message]
    assert notifier.busy_calls == [True, False]
    assert replaced.calls == []
    assert img["src"] == "oud.jpg"
    assert img["style"] == "width: 100%"


def test_signed_out_upload_alerts(backend, notifier, recorder) -> None:
    backend.user = None
    flow, _, replaced = flow_for(backend, notifier, recorder)
    flow.file_selected(PNG_200KB)
    assert notifier.alerts == [MSG_NOT_SIGNED_IN]
    assert replaced.calls == []


def test_closing_the_picker_is_a_no_op(backend, notifier, recorder) -> None:
    flow, img, replaced = flow_for(backend, notifier, recorder)
    assert flow.file_selected(None) is None
    assert notifier.alerts == []
    assert not flow.armed


def test_background_elements_get_background_image(backend, notifier, recorder) -> None:
    replaced = recorder()
    flow = ImageReplacementFlow(make_uploader(backend), notifier, replaced)
    soup = parse_html("<section style=\"background-image: url('oud.jpg')\"></section>")
    flow.arm("bg-0", soup.section)
    url = flow.file_selected(PNG_200KB)
    assert soup.section["style"] == f"background-image: url({url})"


def test_image_field_reports_errors_inline(backend, recorder) -> None:
    changes = recorder()
    field = ImageField(make_uploader(backend), changes)
    field.handle_file(PNG_6MB)
    assert field.error == MSG_TOO_LARGE
    assert changes.calls == []

    field.handle_file(PNG_200KB)
    assert field.error == ""
    assert field.value.endswith("1700000000000-abc123.png")
    assert changes.calls == [(field.value,)]


def test_image_field_remove_can_delete_from_storage(backend, recorder) -> None:
    changes = recorder()
    field = ImageField(make_uploader(backend), changes, value="https://backend.example/x.png")
    field.remove(delete_from_storage=True)
    assert backend.deleted == ["https://backend.example/x.png"]
    assert field.value is None
    assert changes.calls == [(None,)]

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from siteeditor.core.backend import User
from siteeditor.core.models import Site

PUBLIC_ROOT = "https://backend.example/storage/v1/object/public/site-assets/"


class FakeBackend:
    def __init__(self, user: Optional[User] = User(id="user-42"), fail: Optional[Exception] = None) -> None:
        self.user = user
        self.fail = fail
        self.user_lookups = 0
        self.uploads: List[tuple] = []
        self.deleted: List[str] = []

    def get_user(self) -> Optional[User]:
        self.user_lookups += 1
        return self.user

    def upload(self, path: str, data: bytes, content_type: str, cache_control: str = "3600") -> str:
        if self.fail is not None:
            raise self.fail
        self.uploads.append((path, len(data), content_type))
        return path

    def public_url(self, path: str) -> str:
        return PUBLIC_ROOT + path

    def delete(self, url: str) -> None:
        self.deleted.append(url)


class FakeNotifier:
    def __init__(self) -> None:
        self.alerts: List[str] = []
        self.busy_calls: List[bool] = []
        self.notices: List[str] = []

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def busy(self, active: bool) -> None:
        self.busy_calls.append(active)

    def notice(self, message: str) -> None:
        self.notices.append(message)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Recorder:
    """Collects host callback invocations."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def __call__(self, *args) -> None:
        self.calls.append(args)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder():
    return Recorder


@pytest.fixture
def site() -> Site:
    return Site(
        id="site-1",
        user_id="user-42",
        subdomain="praktijk-sanne",
        beroep="Fysiotherapeut",
        content={
            "naam": "Sanne de Vries",
            "tagline": "Zorg dichtbij",
            "foto": "https://cdn.example/foto.jpg",
            "sfeerfoto": "https://cdn.example/sfeer.jpg",
            "email": "sanne@example.nl",
        },
        generated_content={
            "hero": {"titel": "Praktijk Sanne de Vries", "subtitel": "Welkom bij mijn praktijk"},
            "overMij": {"intro": "Al tien jaar help ik mensen weer in beweging."},
            "diensten": {
                "items": [
                    {"naam": "Sportrevalidatie", "beschrijving": "Sterker terug na een blessure."},
                    {"naam": "Manuele therapie", "beschrijving": "Gerichte behandeling van gewrichten."},
                ],
            },
            "faq": {
                "items": [
                    {"vraag": "Heb ik een verwijzing nodig?", "antwoord": "Nee, dat hoeft niet."},
                ],
            },
            "cta": {"knop": "Maak een afspraak"},
        },
    )

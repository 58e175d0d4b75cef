"""Shared fixtures: canned completions and fake collaborators."""

import pytest

from route_planner.api.errors import UpstreamError
from route_planner.app import create_app

SAMPLE_COMPLETION = """Вот ваш маршрут!

🎯 КРАТКИЙ ОБЗОР МАРШРУТА
Прогулка по историческому центру Москвы. Красная площадь, Зарядье и Третьяковка.

📍 ТОЧКИ МАРШРУТА:

1. Красная площадь 🏛️
   ⏱️ Время: 1 час
   📝 Описание: Главная площадь страны
   🎯 Активности:
   - Осмотреть собор Василия Блаженного
   - Пройти вдоль ГУМа
   💡 Приходите рано утром
   🚶 Переход: 10 минут пешком через Варварку

2. Парк Зарядье 🌳
   ⏱️ Время: 45 минут
   📝 Описание: Современный парк у Кремля
   - Парящий мост
   🚶 Переход: 15 минут пешком по Большому Москворецкому мосту

3. Третьяковская галерея 🖼️
   ⏱️ Время: 2 часа
   📝 Описание: Собрание русского искусства
   - Посмотреть «Утро в сосновом лесу»
"""

COORDINATES = {
    "Красная площадь": (55.7539, 37.6208),
    "Парк Зарядье": (55.7512, 37.6285),
    "Третьяковская галерея": (55.7414, 37.6208),
}


class FakeCompletion:
    """Completion service returning a fixed text and recording prompts."""

    def __init__(self, text=SAMPLE_COMPLETION, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.text


class FakeGeocoder:
    """Geocoder answering by place-name prefix; prefixes in ``failing`` raise."""

    def __init__(self, coordinates=None, failing=()):
        self.coordinates = dict(COORDINATES if coordinates is None else coordinates)
        self.failing = set(failing)
        self.queries = []

    def lookup(self, place):
        self.queries.append(place)
        if any(place.startswith(prefix) for prefix in self.failing):
            raise ConnectionError(f"lookup failed for {place}")
        for prefix, coords in self.coordinates.items():
            if place.startswith(prefix):
                return coords
        return None


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def app(completion, geocoder, tmp_path):
    app = create_app(
        completion=completion,
        geocoder=geocoder,
        upload_dir=str(tmp_path / "uploads"),
        jwt_secret="test-secret",
    )
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def failing_completion():
    return FakeCompletion(error=UpstreamError("quota exceeded"))

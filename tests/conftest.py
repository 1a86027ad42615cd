"""
Shared fixtures: in-memory store, fake providers and dependency overrides
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Dict, Any

import pytest

from agrosat.api.core.security import CurrentUser
from agrosat.api.models import Profile, Field, Analysis, ActivityLog
from agrosat.api.models.profile import DEFAULT_PROFILE_SETTINGS
from agrosat.analysis.imagery import ImageryUnavailable, ImageryFailure
from agrosat.analysis.insight import InsightGenerator
from agrosat.analysis.models import WeatherSnapshot
from agrosat.analysis.orchestrator import AnalysisOrchestrator

FIXED_NOW = datetime(2024, 7, 15, 9, 30, tzinfo=timezone.utc)


class FakeStore:
    """In-memory stand-in for FieldStore with the same coroutine interface"""

    def __init__(self):
        self.fields: Dict[uuid.UUID, Field] = {}
        self.analyses: List[Analysis] = []
        self.activity: List[ActivityLog] = []
        self.profiles: Dict[uuid.UUID, Profile] = {}
        self.fail_add_analysis = False
        self._ticks = 0

    def _now(self) -> datetime:
        self._ticks += 1
        return FIXED_NOW + timedelta(seconds=self._ticks)

    def add_field(self, user_id, name="Поле 1", lat=55.75, lon=37.61, crop_type="Пшеница", **values) -> Field:
        field = Field(
            id=uuid.uuid4(),
            user_id=user_id,
            name=name,
            location={"type": "Point", "coordinates": [lon, lat]},
            polygon=values.pop("polygon", None),
            area_hectares=values.pop("area_hectares", 10.0),
            crop_type=crop_type,
            last_analysis=values.pop("last_analysis", None),
            created_at=self._now()
        )
        self.fields[field.id] = field
        return field

    async def list_fields(self, user_id):
        return [f for f in self.fields.values() if f.user_id == user_id]

    async def get_field(self, field_id, user_id):
        field = self.fields.get(field_id)
        if field is None or field.user_id != user_id:
            return None
        return field

    async def create_field(self, user_id, **values):
        field = Field(id=uuid.uuid4(), user_id=user_id, created_at=self._now(), **values)
        self.fields[field.id] = field
        return field

    async def delete_field(self, field_id, user_id):
        if await self.get_field(field_id, user_id) is None:
            return False
        del self.fields[field_id]
        self.analyses = [a for a in self.analyses if a.field_id != field_id]
        return True

    async def set_last_analysis(self, field_id, user_id, snapshot):
        field = await self.get_field(field_id, user_id)
        if field is not None:
            field.last_analysis = snapshot

    async def add_analysis(self, field_id, **values):
        if self.fail_add_analysis:
            raise RuntimeError("insert into analyses failed")
        analysis = Analysis(id=uuid.uuid4(), field_id=field_id, created_at=self._now(), **values)
        self.analyses.append(analysis)
        return analysis

    async def list_analyses(self, field_id, user_id):
        if await self.get_field(field_id, user_id) is None:
            return []
        return sorted(
            (a for a in self.analyses if a.field_id == field_id),
            key=lambda a: a.created_at
        )

    async def log_activity(self, user_id, activity_type, details):
        entry = ActivityLog(
            id=uuid.uuid4(),
            user_id=user_id,
            type=activity_type,
            details=details,
            created_at=self._now()
        )
        self.activity.append(entry)
        return entry

    async def list_activity(self, user_id):
        entries = [a for a in self.activity if a.user_id == user_id]
        return sorted(entries, key=lambda a: a.created_at, reverse=True)

    async def get_profile(self, user_id):
        return self.profiles.get(user_id)

    async def create_profile(self, user_id, email, name):
        profile = Profile(
            id=user_id,
            email=email,
            name=name,
            role="farmer",
            settings=dict(DEFAULT_PROFILE_SETTINGS),
            created_at=self._now()
        )
        self.profiles[user_id] = profile
        return profile

    async def update_profile(self, user_id, name=None, settings=None):
        profile = self.profiles.get(user_id)
        if profile is None:
            return None
        if name:
            profile.name = name
        if settings is not None:
            profile.settings = settings
        return profile

    async def ping(self):
        return None


class FakeImagery:
    """Imagery client returning a canned result"""

    def __init__(self, configured: bool = False, result=None):
        self.configured = configured
        self.result = result or ImageryUnavailable(ImageryFailure.NO_SCENE, "No satellite imagery found")
        self.calls = []

    def search_latest(self, lat, lon, date_from=None, date_to=None):
        self.calls.append((lat, lon, date_from, date_to))
        return self.result


class FakeWeather:
    """Weather service returning a fixed snapshot"""

    def __init__(self, snapshot: Optional[WeatherSnapshot] = None, is_live: bool = True):
        self.snapshot = snapshot or WeatherSnapshot(temp=22, condition="Clear", humidity=55, wind=3.2, rain_14d=12)
        self.is_live = is_live
        self.calls = 0

    def lookup(self, lat, lon, when):
        self.calls += 1
        return self.snapshot, self.is_live


class FakeLLM:
    """LLM client recording its calls"""

    provider = "fake"
    model = "fake-model"

    def __init__(self, reply: str = "", configured: bool = True, error: Optional[Exception] = None):
        self.reply = reply
        self.configured = configured
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def chat_completion(self, messages, temperature=None, max_tokens=None, json_mode=False):
        self.calls.append({
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "json_mode": json_mode
        })
        if self.error is not None:
            raise self.error
        return self.reply


class FakeCache:
    """Dict-backed cache with the CacheService coroutine interface"""

    def __init__(self, error: Optional[Exception] = None):
        self.data: Dict[str, Any] = {}
        self.ttls: Dict[str, int] = {}
        self.error = error

    async def get(self, key):
        if self.error is not None:
            raise self.error
        return self.data.get(key)

    async def set(self, key, value, ttl=None):
        if self.error is not None:
            raise self.error
        self.data[key] = value
        self.ttls[key] = ttl
        return True


def make_orchestrator(imagery=None, weather=None, llm=None, cache=None, clock=None) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(
        imagery=imagery or FakeImagery(),
        weather=weather or FakeWeather(),
        insight=InsightGenerator(llm or FakeLLM(configured=False)),
        cache=cache,
        synthetic_delay=0,
        rng=random.Random(42),
        clock=clock or (lambda: FIXED_NOW)
    )


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def user():
    return CurrentUser(
        id=uuid.uuid4(),
        email="farmer@example.com",
        user_metadata={"name": "Иван"}
    )


@pytest.fixture
def field(store, user):
    return store.add_field(user.id)


@pytest.fixture
def client(store):
    """Test client with the database replaced by the in-memory store"""
    from fastapi.testclient import TestClient
    from agrosat.api.main import app
    from agrosat.api.store import get_store

    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client, user):
    """Test client authenticated as `user`"""
    from agrosat.api.main import app
    from agrosat.api.core.security import get_current_user

    app.dependency_overrides[get_current_user] = lambda: user
    return client

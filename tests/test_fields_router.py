"""
Tests for field CRUD, activity feed and field history
"""

import uuid
from datetime import datetime

from agrosat.api.models import Analysis
from agrosat.api.models.activity import ACTIVITY_CREATE_FIELD, ACTIVITY_DELETE_FIELD


def _analysis(store, field, stressed, weather):
    return Analysis(
        id=uuid.uuid4(),
        field_id=field.id,
        ndvi_average=0.55,
        healthy_percent=70,
        moderate_percent=10,
        stressed_percent=stressed,
        weather_data=weather,
        ai_insight=None,
        created_at=store._now()
    )


class TestFieldsAuth:

    def test_list_requires_auth(self, client):
        response = client.get("/api/fields")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_activity_requires_auth(self, client):
        assert client.get("/api/activity").status_code == 401


class TestCreateField:

    def test_create_with_coordinates_and_polygon(self, auth_client, store, user):
        response = auth_client.post("/api/fields", json={
            "name": "Северное",
            "coordinates": {"lat": 50.1, "lon": 30.2},
            "polygon": [[50.0, 30.0], [50.0, 31.0], [51.0, 31.0]]
        })

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Северное"
        assert data["coordinates"] == {"lat": 50.1, "lon": 30.2}
        assert data["location"] == {"type": "Point", "coordinates": [30.2, 50.1]}
        assert data["polygon"] == [[50.0, 30.0], [50.0, 31.0], [51.0, 31.0], [50.0, 30.0]]
        assert data["crop_type"] == "Пшеница"
        assert data["area_hectares"] == 0
        assert data["last_analysis"]["ndvi_average"] == 0
        assert data["last_analysis"]["alert"] is False
        assert "date" in data["last_analysis"]

        entry = store.activity[0]
        assert entry.type == ACTIVITY_CREATE_FIELD
        assert entry.user_id == user.id
        assert entry.details == 'Добавлено новое поле "Северное" (0 га)'

    def test_create_with_lat_lon(self, auth_client, store):
        response = auth_client.post("/api/fields", json={
            "name": "Южное",
            "lat": 45.0,
            "lon": 39.0,
            "area_hectares": 12.5,
            "crop_type": "Кукуруза"
        })

        assert response.status_code == 200
        data = response.json()
        assert data["coordinates"] == {"lat": 45.0, "lon": 39.0}
        assert data["polygon"] == []
        assert data["crop_type"] == "Кукуруза"
        assert store.activity[0].details == 'Добавлено новое поле "Южное" (12.5 га)'

    def test_degenerate_polygon_is_dropped(self, auth_client):
        response = auth_client.post("/api/fields", json={
            "name": "Узкое",
            "lat": 45.0,
            "lon": 39.0,
            "polygon": [[45.0, 39.0], [45.1, 39.1]]
        })

        assert response.status_code == 200
        assert response.json()["polygon"] == []

    def test_missing_center(self, auth_client, store):
        response = auth_client.post("/api/fields", json={"name": "Без координат"})

        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"
        assert store.fields == {}


class TestListAndDelete:

    def test_list_only_own_fields(self, auth_client, store, user):
        own = store.add_field(user.id, name="Моё")
        store.add_field(uuid.uuid4(), name="Чужое")

        response = auth_client.get("/api/fields")

        assert response.status_code == 200
        data = response.json()
        assert [f["id"] for f in data] == [str(own.id)]
        assert data[0]["coordinates"] == {"lat": 55.75, "lon": 37.61}

    def test_delete(self, auth_client, store, field):
        response = auth_client.delete(f"/api/fields/{field.id}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert field.id not in store.fields
        assert store.activity[0].type == ACTIVITY_DELETE_FIELD
        assert store.activity[0].details == f"Удалено поле (ID: {field.id})"

    def test_delete_foreign_field(self, auth_client, store):
        foreign = store.add_field(uuid.uuid4())

        response = auth_client.delete(f"/api/fields/{foreign.id}")

        assert response.status_code == 404
        assert foreign.id in store.fields
        assert store.activity == []

    def test_delete_invalid_uuid(self, auth_client):
        assert auth_client.delete("/api/fields/not-a-uuid").status_code == 422


class TestActivity:

    def test_newest_first_with_date(self, auth_client):
        auth_client.post("/api/fields", json={"name": "Первое", "lat": 1, "lon": 1})
        auth_client.post("/api/fields", json={"name": "Второе", "lat": 2, "lon": 2})

        response = auth_client.get("/api/activity")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 2
        assert "Второе" in data[0]["details"]
        assert "Первое" in data[1]["details"]
        assert all(item["date"] == item["created_at"] for item in data)


class TestHistory:

    def test_background_plus_real_analyses(self, auth_client, store, field):
        store.analyses.append(_analysis(store, field, stressed=20, weather={"humidity": 70, "temp": 18, "condition": "Rain"}))
        store.analyses.append(_analysis(store, field, stressed=5, weather=None))

        response = auth_client.get(f"/api/fields/{field.id}/history")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 106

        dates = [datetime.fromisoformat(p["date"]) for p in data]
        assert dates == sorted(dates)

        real = [p for p in data if not p["is_mock"]]
        assert len(real) == 2
        assert real[0]["alert"] is True
        assert real[0]["moisture"] == 70
        assert real[0]["weather_condition"] == "Rain"
        assert real[1]["alert"] is False
        assert real[1]["moisture"] == 50
        assert real[1]["temp"] == 20
        assert real[1]["weather_condition"] == "Unknown"

    def test_new_field_has_background_only(self, auth_client, field):
        data = auth_client.get(f"/api/fields/{field.id}/history").json()

        assert len(data) == 104
        assert all(p["is_mock"] for p in data)

    def test_foreign_field(self, auth_client, store):
        foreign = store.add_field(uuid.uuid4())
        assert auth_client.get(f"/api/fields/{foreign.id}/history").status_code == 404

"""
Tests for the Copernicus imagery lookup
"""

import pytest
from unittest.mock import Mock
import requests

from agrosat.analysis.imagery import (
    CopernicusClient,
    ImageryFailure,
    ImageryScene,
    ImageryUnavailable,
    build_search_filter,
    scene_analysis_base
)


def _token_response(status_code=200, token="token-123"):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = {"access_token": token}
    return response


def _catalog_response(products):
    response = Mock()
    response.json.return_value = {"value": products}
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def client(session):
    return CopernicusClient(username="user@example.com", password="secret", session=session)


class TestCopernicusClient:

    def test_unconfigured_makes_no_calls(self, session):
        client = CopernicusClient(session=session)

        result = client.search_latest(55.75, 37.61)

        assert client.configured is False
        assert isinstance(result, ImageryUnavailable)
        assert result.reason == ImageryFailure.UNCONFIGURED
        session.post.assert_not_called()
        session.get.assert_not_called()

    def test_auth_failure(self, client, session):
        session.post.return_value = _token_response(status_code=401)

        result = client.search_latest(55.75, 37.61)

        assert result.reason == ImageryFailure.AUTH_FAILED
        session.get.assert_not_called()

    def test_network_error(self, client, session):
        session.post.side_effect = requests.ConnectionError("unreachable")

        result = client.search_latest(55.75, 37.61)

        assert result.reason == ImageryFailure.NETWORK_ERROR

    def test_no_scene(self, client, session):
        session.post.return_value = _token_response()
        session.get.return_value = _catalog_response([])

        result = client.search_latest(55.75, 37.61)

        assert result.reason == ImageryFailure.NO_SCENE

    def test_scene_found(self, client, session):
        session.post.return_value = _token_response()
        session.get.return_value = _catalog_response([
            {"Id": "a1b2", "ContentDate": {"Start": "2024-06-01T10:20:30.000Z"}}
        ])

        result = client.search_latest(55.75, 37.61, date_from="2024-05-01")

        assert isinstance(result, ImageryScene)
        assert result.product_id == "a1b2"
        assert result.acquisition_date == "2024-06-01T10:20:30.000Z"
        assert result.map_url == f"{CopernicusClient.CATALOG_URL}(a1b2)/$value"

        _, kwargs = session.get.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer token-123"
        assert kwargs["params"]["$top"] == 1
        assert "ContentDate/Start gt 2024-05-01T00:00:00.000Z" in kwargs["params"]["$filter"]


class TestSearchFilter:

    def test_point_is_lon_lat(self):
        query = build_search_filter(55.75, 37.61, "2023-01-01T00:00:00.000Z", "2024-01-01T00:00:00.000Z")

        assert "Collection/Name eq 'SENTINEL-2'" in query
        assert "POINT(37.61000 55.75000)" in query


class TestSceneAnalysisBase:

    def test_fixed_metrics(self):
        scene = ImageryScene(product_id="a1b2", map_url="https://example.com/a1b2", acquisition_date=None)

        base = scene_analysis_base(scene)

        assert base.ndvi_average == 0.62
        assert (base.healthy_percent, base.moderate_percent, base.stressed_percent) == (75, 15, 10)
        assert base.alert is False
        assert base.product_id == "a1b2"

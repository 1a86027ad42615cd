"""
Satellite imagery lookup against the Copernicus Data Space catalogue

The catalogue is only used to find the most recent scene over a point;
vegetation metrics for a found scene are fixed placeholders.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union
import requests

from .http import create_session
from .models import AnalysisBase
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ImageryFailure(str, Enum):
    """Why no scene could be used"""
    UNCONFIGURED = "unconfigured"
    AUTH_FAILED = "auth_failed"
    NO_SCENE = "no_scene"
    NETWORK_ERROR = "network_error"
    BAD_RESPONSE = "bad_response"


@dataclass(frozen=True)
class ImageryScene:
    product_id: str
    map_url: str
    acquisition_date: Optional[str]


@dataclass(frozen=True)
class ImageryUnavailable:
    reason: ImageryFailure
    message: str = ""


ImageryResult = Union[ImageryScene, ImageryUnavailable]


class ImageryAuthError(Exception):
    """Token exchange with the identity service failed"""


def scene_analysis_base(scene: ImageryScene) -> AnalysisBase:
    """Placeholder vegetation metrics labelled with the matched scene"""
    return AnalysisBase(
        ndvi_average=0.62,
        healthy_percent=75,
        moderate_percent=15,
        stressed_percent=10,
        alert=False,
        map_url=scene.map_url,
        product_id=scene.product_id,
        acquisition_date=scene.acquisition_date
    )


def build_search_filter(
    lat: float,
    lon: float,
    start: str,
    end: str,
    collection: str = "SENTINEL-2"
) -> str:
    """OData filter: collection, point intersection and acquisition window"""
    point = f"POINT({lon:.5f} {lat:.5f})"
    return (
        f"Collection/Name eq '{collection}' "
        f"and OData.CSC.Intersects(area=geography'SRID=4326;{point}') "
        f"and ContentDate/Start gt {start} "
        f"and ContentDate/Start lt {end}"
    )


class CopernicusClient:
    """
    Connector for the Copernicus Data Space Ecosystem catalogue
    """

    TOKEN_URL = "https://identity.dataspace.copernicus.eu/auth/realms/CDSE/protocol/openid-connect/token"
    CATALOG_URL = "https://catalogue.dataspace.copernicus.eu/odata/v1/Products"

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        client_id: str = "cdse-public",
        token_url: Optional[str] = None,
        catalog_url: Optional[str] = None,
        collection: str = "SENTINEL-2",
        default_start: str = "2023-01-01",
        timeout: float = 10.0,
        max_retries: int = 2,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Copernicus connector

        Args:
            username: Data Space account (lookup is skipped without it)
            password: Data Space password
            client_id: OAuth2 client used for the password grant
            token_url: Identity service token endpoint
            catalog_url: OData products endpoint
            collection: Collection name to search
            default_start: Window start date when none is requested
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            session: Pre-built session (tests)
        """
        self.username = username
        self.password = password
        self.client_id = client_id
        self.token_url = token_url or self.TOKEN_URL
        self.catalog_url = catalog_url or self.CATALOG_URL
        self.collection = collection
        self.default_start = default_start
        self.timeout = timeout
        self._max_retries = max_retries
        self._session = session

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = create_session(max_retries=self._max_retries)
        return self._session

    def get_token(self) -> str:
        """
        Obtain a bearer token with the OAuth2 password grant

        Raises:
            ImageryAuthError: If the identity service rejects the credentials
        """
        response = self.session.post(
            self.token_url,
            data={
                "grant_type": "password",
                "username": self.username,
                "password": self.password,
                "client_id": self.client_id
            },
            timeout=self.timeout
        )
        if response.status_code >= 400:
            raise ImageryAuthError(f"Token request failed with status {response.status_code}")

        token = response.json().get("access_token")
        if not token:
            raise ImageryAuthError("Token response has no access_token")
        return token

    def _window(self, date_from: Optional[str], date_to: Optional[str]) -> tuple:
        start = f"{date_from or self.default_start}T00:00:00.000Z"
        if date_to:
            end = date_to
        else:
            end = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return start, end

    def search_latest(
        self,
        lat: float,
        lon: float,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None
    ) -> ImageryResult:
        """
        Find the most recent scene intersecting a point

        Never raises: every failure is reported as ImageryUnavailable.
        """
        if not self.configured:
            return ImageryUnavailable(ImageryFailure.UNCONFIGURED, "Copernicus credentials not set")

        logger.info("Connecting to Copernicus API...")
        try:
            token = self.get_token()

            start, end = self._window(date_from, date_to)
            response = self.session.get(
                self.catalog_url,
                params={
                    "$filter": build_search_filter(lat, lon, start, end, self.collection),
                    "$top": 1,
                    "$orderby": "ContentDate/Start desc"
                },
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout
            )
            response.raise_for_status()
            products = response.json().get("value") or []

        except ImageryAuthError as e:
            logger.error(f"Copernicus authentication failed: {e}")
            return ImageryUnavailable(ImageryFailure.AUTH_FAILED, str(e))
        except requests.RequestException as e:
            logger.error(f"Copernicus request failed: {e}")
            return ImageryUnavailable(ImageryFailure.NETWORK_ERROR, str(e))
        except (ValueError, AttributeError) as e:
            logger.error(f"Copernicus returned an unreadable response: {e}")
            return ImageryUnavailable(ImageryFailure.BAD_RESPONSE, str(e))

        if not products:
            logger.warning("No satellite imagery found")
            return ImageryUnavailable(ImageryFailure.NO_SCENE, "No satellite imagery found")

        product = products[0]
        product_id = product.get("Id")
        if not product_id:
            return ImageryUnavailable(ImageryFailure.BAD_RESPONSE, "Product without Id")

        acquisition_date = (product.get("ContentDate") or {}).get("Start")
        logger.info(f"Found scene {product_id} acquired {acquisition_date}")

        return ImageryScene(
            product_id=product_id,
            map_url=f"{self.catalog_url}({product_id})/$value",
            acquisition_date=acquisition_date
        )

"""
Admin Repository - Single Responsibility: talk to the muroom API.

One method per backend endpoint. Bodies are parsed through
:mod:`muroom_admin.schemas`; create endpoints translate failures into
:class:`SubmissionError` and are never retried.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..errors import APIError, ParseError, SubmissionError, UrlIssuanceError
from ..models import ImageCategory
from ..protocols import IAPIClient
from ..schemas import (
    FilterOptions,
    NearbyStations,
    PresignedUpload,
    PresignedUrlBatch,
    StudioDetail,
    StudioPage,
    TermContent,
    TermItem,
    parse_data,
)

logger = logging.getLogger(__name__)

# Map bounds covering South Korea, used by the studio list.
KOREA_BOUNDS = {
    "minLatitude": "32",
    "maxLatitude": "39",
    "minLongitude": "124",
    "maxLongitude": "133",
}

ALL_TERMS_TYPES = (
    "TERMS_OF_USE",
    "PRIVACY_COLLECTION",
    "PRIVACY_PROCESSING",
    "MARKETING_RECEIVE",
)


def _json(response: Any, context: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ParseError(context, f"body is not JSON: {exc}") from exc


class AdminRepository:
    """
    Repository for the muroom admin API.

    Implements IStudioGateway.
    """

    def __init__(self, api_client: IAPIClient):
        """
        Initialize repository.

        Args:
            api_client: HTTP client for API calls
        """
        self._api = api_client

    async def _create(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        try:
            response = await self._api.post(endpoint, json=payload)
        except APIError as exc:
            body = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
            raise SubmissionError(endpoint, body, status_code=exc.status_code) from exc
        except httpx.HTTPError as exc:
            raise SubmissionError(endpoint, f"{type(exc).__name__}: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("data") if isinstance(body, dict) else body

    # --- studios -------------------------------------------------------

    async def fetch_filter_options(self) -> FilterOptions:
        endpoint = "/api/v1/studios/filter-options"
        response = await self._api.get(endpoint)
        return parse_data(_json(response, endpoint), FilterOptions, endpoint)

    async def find_nearby_stations(self, address: str) -> NearbyStations:
        endpoint = "/api/v1/subway/nearby"
        response = await self._api.get(endpoint, params={"address": address})
        return parse_data(_json(response, endpoint), NearbyStations, endpoint, allow_bare=True)

    async def request_upload_url(
        self,
        file_name: str,
        category: ImageCategory,
        content_type: str,
    ) -> PresignedUpload:
        """
        Request one pre-signed write URL for one file.

        Raises:
            UrlIssuanceError: backend refused or returned the wrong number of URLs
            ParseError: response did not match the presigned URL schema
        """
        endpoint = "/api/admin/studios/presigned-url"
        payload = {
            "studioImages": [
                {
                    "fileName": file_name,
                    "category": category.value,
                    "contentType": content_type,
                }
            ]
        }
        try:
            response = await self._api.post(endpoint, json=payload)
        except APIError as exc:
            raise UrlIssuanceError(file_name, category.value, str(exc.detail)) from exc
        except httpx.HTTPError as exc:
            raise UrlIssuanceError(file_name, category.value, f"{type(exc).__name__}: {exc}") from exc

        batch = parse_data(_json(response, endpoint), PresignedUrlBatch, endpoint)
        if len(batch.presigned_urls) != 1:
            raise UrlIssuanceError(
                file_name,
                category.value,
                f"expected 1 presigned URL, got {len(batch.presigned_urls)}",
            )
        return batch.presigned_urls[0]

    async def create_studio(self, payload: Dict[str, Any]) -> Any:
        return await self._create("/api/admin/studios", payload)

    async def list_studios(self, page: int = 0, size: int = 10, sort: str = "latest,desc") -> StudioPage:
        endpoint = "/api/v1/studios/map-list"
        params = dict(KOREA_BOUNDS, sort=sort, page=str(page), size=str(size))
        response = await self._api.get(endpoint, params=params)
        return parse_data(_json(response, endpoint), StudioPage, endpoint)

    async def get_studio(self, studio_id: int) -> StudioDetail:
        endpoint = f"/api/v1/studios/{studio_id}"
        response = await self._api.get(endpoint)
        return parse_data(_json(response, endpoint), StudioDetail, endpoint)

    # --- owners --------------------------------------------------------

    async def generate_nickname(self) -> str:
        endpoint = "/api/admin/owners/generate-nickname"
        response = await self._api.get(endpoint)
        return parse_data(_json(response, endpoint), str, endpoint)

    async def create_owner(self, payload: Dict[str, Any]) -> Any:
        return await self._create("/api/admin/owners", payload)

    # --- terms ---------------------------------------------------------

    async def list_terms(
        self,
        role: str = "musician",
        types: Optional[Sequence[str]] = None,
    ) -> List[TermItem]:
        endpoint = f"/api/v1/terms/{role.lower()}"
        params = {"types": ",".join(types or ALL_TERMS_TYPES)}
        response = await self._api.get(endpoint, params=params)
        return parse_data(_json(response, endpoint), List[TermItem], endpoint)

    async def list_signup_terms(self, role: str = "musician") -> List[TermItem]:
        endpoint = f"/api/v1/terms/{role.lower()}/signup"
        response = await self._api.get(endpoint)
        return parse_data(_json(response, endpoint), List[TermItem], endpoint)

    async def get_term(self, term_id: int) -> TermContent:
        endpoint = f"/api/v1/terms/{term_id}"
        response = await self._api.get(endpoint)
        return parse_data(_json(response, endpoint), TermContent, endpoint)

    async def create_terms(self, payload: Dict[str, Any]) -> Any:
        return await self._create("/api/v1/terms", payload)

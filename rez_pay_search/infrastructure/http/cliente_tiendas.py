"""Cliente HTTP para el servicio de búsqueda de tiendas (/stores)."""

import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ...core.cancelacion import CancellationToken
from ...core.exceptions import StoreApiResponseError
from ...models.busqueda import SortBy
from ...models.respuestas import StoreCategoriesResponse, StoreListResponse
from .cliente_base import BackendHttpClient

logger = logging.getLogger(__name__)

# IDs de categoría del backend (ObjectId de 24 hex)
_OBJECT_ID = re.compile(r"^[a-fA-F0-9]{24}$")


def is_object_id(value: str) -> bool:
    return bool(_OBJECT_ID.match(value or ""))


def _parse_store_list(payload: Dict[str, Any], operation: str) -> StoreListResponse:
    try:
        return StoreListResponse.model_validate(payload)
    except ValidationError as exc:
        raise StoreApiResponseError(f"Invalid {operation} response: {exc.error_count()} errors") from exc


def _location_params(location: Optional[str], radius: Optional[int]) -> Dict[str, Any]:
    if not location:
        return {}
    return {"location": location, "radius": radius}


class StoreSearchClient(BackendHttpClient):
    """Cliente para los endpoints de búsqueda de tiendas."""

    @property
    def stores_url(self) -> str:
        return "/stores"

    async def search_stores_by_category(
        self,
        category: str,
        *,
        location: Optional[str] = None,
        radius: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
        sort_by: SortBy = SortBy.RATING,
        cancel_token: Optional[CancellationToken] = None,
    ) -> StoreListResponse:
        """
        Lista tiendas de una categoría; `all` lista todas.

        Un ObjectId de categoría se resuelve con `/stores/category/{id}`,
        que no acepta ubicación.
        """
        if is_object_id(category):
            return await self.get_stores_by_category_id(
                category, page=page, limit=limit, sort_by=sort_by, cancel_token=cancel_token
            )

        params = {
            "page": page,
            "limit": limit,
            "sortBy": SortBy(sort_by).value,
            **_location_params(location, radius or self.settings.default_radius_km),
        }
        payload = await self._get_json(
            f"{self.stores_url}/search-by-category/{category}",
            operation="stores.search_by_category",
            params=params,
            cancel_token=cancel_token,
        )
        return _parse_store_list(payload, "search_by_category")

    async def get_stores_by_category_id(
        self,
        category_id: str,
        *,
        page: int = 1,
        limit: int = 20,
        sort_by: SortBy = SortBy.RATING,
        cancel_token: Optional[CancellationToken] = None,
    ) -> StoreListResponse:
        # El endpoint por ID no ordena por distancia
        if SortBy(sort_by) is SortBy.DISTANCE:
            sort_by = SortBy.RATING
        payload = await self._get_json(
            f"{self.stores_url}/category/{category_id}",
            operation="stores.by_category_id",
            params={"page": page, "limit": limit, "sortBy": SortBy(sort_by).value},
            cancel_token=cancel_token,
        )
        return _parse_store_list(payload, "by_category_id")

    async def get_nearby_stores(
        self,
        location: str,
        *,
        radius: Optional[int] = None,
        limit: int = 20,
    ) -> StoreListResponse:
        payload = await self._get_json(
            f"{self.stores_url}/nearby",
            operation="stores.nearby",
            params={
                "location": location,
                "radius": radius or self.settings.default_radius_km,
                "limit": limit,
            },
        )
        return _parse_store_list(payload, "nearby")

    async def get_featured_stores(
        self,
        *,
        location: Optional[str] = None,
        radius: Optional[int] = None,
        limit: int = 20,
    ) -> StoreListResponse:
        params = {
            "limit": limit,
            **_location_params(location, radius or self.settings.default_radius_km),
        }
        payload = await self._get_json(
            f"{self.stores_url}/featured", operation="stores.featured", params=params
        )
        return _parse_store_list(payload, "featured")

    async def advanced_store_search(
        self,
        *,
        search: Optional[str] = None,
        sort_by: SortBy = SortBy.RATING,
        location: Optional[str] = None,
        radius: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
        cancel_token: Optional[CancellationToken] = None,
    ) -> StoreListResponse:
        """Búsqueda por término, ordenada y opcionalmente acotada por ubicación."""
        params: Dict[str, Any] = {
            "page": page,
            "limit": limit,
            "sortBy": SortBy(sort_by).value,
            **_location_params(location, radius or self.settings.default_radius_km),
        }
        if search:
            params["search"] = search

        payload = await self._get_json(
            f"{self.stores_url}/search/advanced",
            operation="stores.advanced_search",
            params=params,
            cancel_token=cancel_token,
        )
        return _parse_store_list(payload, "advanced_search")

    async def get_store_categories(self) -> StoreCategoriesResponse:
        payload = await self._get_json(
            f"{self.stores_url}/categories/list", operation="stores.categories"
        )
        try:
            return StoreCategoriesResponse.model_validate(payload)
        except ValidationError as exc:
            raise StoreApiResponseError("Invalid categories response") from exc

    async def get_store_by_id(self, store_id: str) -> Dict[str, Any]:
        """Retorna el registro crudo de la tienda (`data`)."""
        payload = await self._get_json(
            f"{self.stores_url}/{store_id}", operation="stores.by_id"
        )
        data = payload.get("data")
        if not isinstance(data, dict):
            raise StoreApiResponseError(f"Store {store_id} response without data")
        return data

"""
HTTP client for the fleet ledger JSON API.

Covers the operations a dashboard needs around a settlement: loading a
driver's trips and calculations, saving, editing and deleting a
calculation, and moving a trip's POD forward. Failures are raised as
ApiError and never retried; the caller keeps whatever it computed and may
try again.
"""
import logging
from typing import Any, Dict, List, Optional
import httpx
from app.core.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when the backend rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class FleetApiClient:
    """Thin synchronous wrapper over the /api routes."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout or settings.API_TIMEOUT)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "FleetApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            try:
                detail = e.response.json().get("detail")
            except ValueError:
                detail = e.response.text
            logger.error(f"{method} {url} failed: {e.response.status_code} - {detail}")
            raise ApiError(
                f"{method} {path} failed with status {e.response.status_code}",
                status_code=e.response.status_code,
                detail=detail,
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} network error: {e}")
            raise ApiError(f"{method} {path} network error: {e}")

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get_trips_for_driver(self, driver_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", "/trips", params={"driver_id": driver_id})

    def get_calculations_for_driver(self, driver_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/calculations/driver/{driver_id}")

    def create_calculation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/calculations", json=payload)

    def update_calculation(self, calculation_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/calculations/{calculation_id}", json=payload)

    def delete_calculation(self, calculation_id: int) -> None:
        self._request("DELETE", f"/calculations/{calculation_id}")

    def update_trip_pod_status(self, trip_id: int, next_stage: Optional[str] = None) -> Dict[str, Any]:
        """Move a trip's POD forward; the response carries "success"."""
        return self._request("PUT", f"/trips/pod-status/{trip_id}", json={"status": next_stage})

    def preview_settlement(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/settlement/preview", json=payload)

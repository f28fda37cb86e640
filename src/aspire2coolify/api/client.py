"""Coolify REST API client (sync httpx)."""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger("aspire2coolify.client")

API_PREFIX = "/api/v1"


@dataclass
class ApiResponse:
    success: bool
    data: Any = None
    error: Optional[str] = None


def _error_message(resp: httpx.Response) -> str:
    """JSON `message`/`error`, then the raw body, then the status line."""
    text = resp.text
    try:
        body = json.loads(text)
    except ValueError:
        return text or f"HTTP {resp.status_code}: {resp.reason_phrase}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or text
    return text


class CoolifyApiClient:
    """
    Thin wrapper around the Coolify API. Calls never raise: every outcome,
    transport failures included, comes back as an ApiResponse.
    """

    def __init__(self, api_url: str, token: str, timeout: float = 30.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self._client = httpx.Client(
            base_url=self.api_url + API_PREFIX,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> ApiResponse:
        try:
            resp = self._client.request(method, path, json=body)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            return ApiResponse(success=False, error=str(exc) or exc.__class__.__name__)

        if resp.is_error:
            error = _error_message(resp)
            logger.debug("%s %s -> %d: %s", method, path, resp.status_code, error)
            return ApiResponse(success=False, error=error)

        if not resp.content:
            return ApiResponse(success=True, data={})
        try:
            return ApiResponse(success=True, data=resp.json())
        except ValueError:
            return ApiResponse(success=False, error=f"Invalid JSON response from {path}")

    def _get(self, path: str) -> ApiResponse:
        return self._request("GET", path)

    def _post(self, path: str, body: Dict[str, Any]) -> ApiResponse:
        return self._request("POST", path, body=body)

    # --- Connectivity ---

    def test_connection(self) -> ApiResponse:
        """GET /version; Coolify answers with plain text on some releases."""
        try:
            resp = self._client.get("/version")
        except httpx.HTTPError as exc:
            return ApiResponse(success=False, error=str(exc) or exc.__class__.__name__)
        if resp.is_error:
            return ApiResponse(success=False, error=_error_message(resp))
        try:
            data = resp.json()
        except ValueError:
            data = {"version": resp.text.strip()}
        if not isinstance(data, dict):
            data = {"version": str(data)}
        return ApiResponse(success=True, data=data)

    # --- Projects ---

    def list_projects(self) -> ApiResponse:
        return self._get("/projects")

    def create_project(self, name: str, description: Optional[str] = None) -> ApiResponse:
        body = {"name": name}
        if description:
            body["description"] = description
        return self._post("/projects", body)

    def create_environment(self, project_uuid: str, name: str) -> ApiResponse:
        return self._post(f"/projects/{project_uuid}/environments", {"name": name})

    # --- Inventory ---

    def list_databases(self) -> ApiResponse:
        return self._get("/databases")

    def list_applications(self) -> ApiResponse:
        return self._get("/applications")

    def list_services(self) -> ApiResponse:
        return self._get("/services")

    # --- Databases ---

    def create_postgres_database(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/databases/postgresql", payload)

    def create_mysql_database(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/databases/mysql", payload)

    def create_mariadb_database(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/databases/mariadb", payload)

    def create_mongo_database(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/databases/mongodb", payload)

    def create_redis_database(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/databases/redis", payload)

    # --- Applications ---

    def create_docker_image_application(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/applications/dockerimage", payload)

    def create_dockerfile_application(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/applications/dockerfile", payload)

    def create_public_application(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/applications/public", payload)

    def create_private_github_app_application(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/applications/private-github-app", payload)

    # --- Services ---

    def create_service(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post("/services", payload)

    def close(self):
        if not self._client.is_closed:
            self._client.close()


def names_to_uuids(response: ApiResponse) -> Dict[str, str]:
    """Turns a list response into a name -> uuid lookup; anything else is empty."""
    if not response.success or not isinstance(response.data, list):
        return {}
    items: List[Dict[str, Any]] = [i for i in response.data if isinstance(i, dict)]
    return {i["name"]: i.get("uuid", "") for i in items if i.get("name")}

import json

import httpx
import pytest

from aspire2coolify.api.client import ApiResponse, CoolifyApiClient, names_to_uuids


def make_client(handler, api_url="https://coolify.example.com/"):
    return CoolifyApiClient(api_url, "secret-token", transport=httpx.MockTransport(handler))


def test_requests_carry_base_url_and_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["accept"] = request.headers["Accept"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"uuid": "db-1"})

    with make_client(handler) as client:
        response = client.create_postgres_database({"name": "pg"})

    assert response == ApiResponse(success=True, data={"uuid": "db-1"})
    assert seen["url"] == "https://coolify.example.com/api/v1/databases/postgresql"
    assert seen["auth"] == "Bearer secret-token"
    assert seen["accept"] == "application/json"
    assert seen["body"] == {"name": "pg"}


@pytest.mark.parametrize("method, args, path", [
    ("create_mysql_database", ({},), "/api/v1/databases/mysql"),
    ("create_mariadb_database", ({},), "/api/v1/databases/mariadb"),
    ("create_mongo_database", ({},), "/api/v1/databases/mongodb"),
    ("create_redis_database", ({},), "/api/v1/databases/redis"),
    ("create_docker_image_application", ({},), "/api/v1/applications/dockerimage"),
    ("create_dockerfile_application", ({},), "/api/v1/applications/dockerfile"),
    ("create_public_application", ({},), "/api/v1/applications/public"),
    ("create_private_github_app_application", ({},), "/api/v1/applications/private-github-app"),
    ("create_service", ({},), "/api/v1/services"),
    ("create_environment", ("p-1", "staging"), "/api/v1/projects/p-1/environments"),
    ("list_projects", (), "/api/v1/projects"),
    ("list_databases", (), "/api/v1/databases"),
    ("list_applications", (), "/api/v1/applications"),
    ("list_services", (), "/api/v1/services"),
])
def test_endpoint_paths(method, args, path):
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json={})

    client = make_client(handler)
    assert getattr(client, method)(*args).success
    assert seen[0][1] == path
    assert seen[0][0] == ("GET" if method.startswith("list_") else "POST")
    client.close()


def test_create_project_includes_optional_description():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"uuid": "p-1"})

    client = make_client(handler)
    client.create_project("App")
    client.create_project("App", description="From Aspire")
    assert bodies == [{"name": "App"}, {"name": "App", "description": "From Aspire"}]


@pytest.mark.parametrize("response, expected", [
    (httpx.Response(422, json={"message": "Validation failed"}), "Validation failed"),
    (httpx.Response(400, json={"error": "Bad payload"}), "Bad payload"),
    (httpx.Response(500, text="upstream exploded"), "upstream exploded"),
    (httpx.Response(404), "HTTP 404: Not Found"),
])
def test_error_messages(response, expected):
    client = make_client(lambda request: response)
    result = client.list_services()
    assert not result.success
    assert result.error == expected


def test_transport_errors_never_raise():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = make_client(handler).list_databases()
    assert result == ApiResponse(success=False, error="connection refused")


def test_empty_and_invalid_bodies():
    assert make_client(lambda r: httpx.Response(204)).create_service({}).data == {}

    bad = make_client(lambda r: httpx.Response(200, text="<html>")).list_projects()
    assert not bad.success
    assert "Invalid JSON" in bad.error


def test_connection_accepts_json_or_plain_text():
    assert make_client(lambda r: httpx.Response(200, json={"version": "4.0"})).test_connection().data == {"version": "4.0"}
    assert make_client(lambda r: httpx.Response(200, text="4.0.0-beta\n")).test_connection().data == {"version": "4.0.0-beta"}

    denied = make_client(lambda r: httpx.Response(401, json={"message": "Unauthenticated."})).test_connection()
    assert (denied.success, denied.error) == (False, "Unauthenticated.")


def test_names_to_uuids():
    response = ApiResponse(success=True, data=[{"name": "pg", "uuid": "u1"}, {"uuid": "u2"}, "junk"])
    assert names_to_uuids(response) == {"pg": "u1"}
    assert names_to_uuids(ApiResponse(success=False, error="x")) == {}
    assert names_to_uuids(ApiResponse(success=True, data={"name": "pg"})) == {}

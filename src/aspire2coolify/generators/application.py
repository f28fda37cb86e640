"""
Application operation generator.

Three creation flavors, picked from the repository settings:

* private GitHub App repository  -> /applications/private-github-app
* public repository              -> /applications/public
* no repository                  -> /applications/dockerimage (placeholder image)
"""

import re
from typing import Any, Dict, Optional, Tuple

from aspire2coolify.core.models import (
    Application, AspireApp, Operation, GenerateOptions, RepositoryConfig,
)
from aspire2coolify.rules.mappings import DEFAULT_CONNECTION_STRING_ENV

DEFAULT_PORTS = "80"
DEFAULT_ENDPOINT_PORT = 3000
FALLBACK_BUILD_PACK = "nixpacks"
PASSTHROUGH_BUILD_PACKS = ("dockerfile", "static", "dockercompose")

APPLICATION_ENDPOINTS = {
    "private-github-app": "/applications/private-github-app",
    "public": "/applications/public",
    "dockerimage": "/applications/dockerimage",
}

_LEADING_RELATIVE = re.compile(r'^\.\.?/')


def ports_exposes(app: Application) -> str:
    """Comma-joined exposed ports; target_port wins over port."""
    ports = [str(e.target_port or e.port) for e in app.endpoints if (e.target_port or e.port)]
    return ",".join(ports) if ports else DEFAULT_PORTS


def base_directory(app: Application, base_path: Optional[str]) -> Optional[str]:
    base = base_path or ""
    if app.source_path:
        clean = _LEADING_RELATIVE.sub("", app.source_path)
        base = f"{base}/{clean}" if base else clean
    return base or None


def coolify_build_pack(build_pack: Optional[str]) -> str:
    return build_pack if build_pack in PASSTHROUGH_BUILD_PACKS else FALLBACK_BUILD_PACK


def application_payload(app: Application, target: Dict[str, str], instant_deploy=None,
                        repository: Optional[RepositoryConfig] = None,
                        build_pack: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
    """Returns (flavor, payload); flavor is a key of APPLICATION_ENDPOINTS."""
    payload: Dict[str, Any] = dict(target)

    if repository and repository.repository:
        flavor = "private-github-app" if repository.app_uuid else "public"
        if repository.app_uuid:
            payload["github_app_uuid"] = repository.app_uuid
        payload["git_repository"] = repository.repository
        payload["git_branch"] = repository.branch or "main"
        payload["build_pack"] = build_pack or coolify_build_pack(app.build_pack)
        payload["name"] = app.name
        payload["ports_exposes"] = ports_exposes(app)
        directory = base_directory(app, repository.base_path)
        if directory:
            payload["base_directory"] = directory
    else:
        flavor = "dockerimage"
        payload["docker_registry_image_name"] = app.project or app.name
        payload["docker_registry_image_tag"] = "latest"
        payload["name"] = app.name
        payload["ports_exposes"] = ports_exposes(app)

    payload["instant_deploy"] = False if instant_deploy is None else instant_deploy
    return flavor, payload


def application_environment(app: Application, model: AspireApp) -> Dict[str, str]:
    """
    Variables the application expects at runtime: its own WithEnvironment
    entries, one connection string per reference and endpoint port variables.
    """
    env: Dict[str, str] = {}
    for var in app.environment:
        env[var.key] = f"${{{var.value}}}" if var.is_expression else var.value

    for ref in model.references:
        if ref.from_resource == app.name:
            env[ref.connection_string_env or DEFAULT_CONNECTION_STRING_ENV] = f"${{{ref.to}.connectionString}}"

    for endpoint in app.endpoints:
        if endpoint.env_variable:
            env[endpoint.env_variable] = str(endpoint.port or DEFAULT_ENDPOINT_PORT)
    return env


def generate_application_operation(app: Application, model: AspireApp, options: GenerateOptions) -> Operation:
    flavor, payload = application_payload(
        app, options.target_fields(), options.instant_deploy,
        repository=options.repository, build_pack=options.build_pack,
    )
    return Operation(
        endpoint=APPLICATION_ENDPOINTS[flavor],
        payload=payload,
        display_name=app.name,
        category="application",
        annotation=f"Application: {app.name} ({app.type})" if options.include_comments else None,
        environment=application_environment(app, model),
    )

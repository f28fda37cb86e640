"""
Application extractor: project, npm/node, Dockerfile, container and
executable resources.
"""

import re
from types import MappingProxyType
from typing import Optional

from aspire2coolify.core.models import Application, FluentChain
from aspire2coolify.parser.lexer import extract_named_args
from aspire2coolify.parser.scanner import LambdaScanner
from aspire2coolify.parser.extractors.common import (
    MethodRule, OVERWRITE, ACCUMULATE,
    apply_method_rules, string_arg, constant, named_arg, first_positional,
    environment_variable, http_endpoint, https_endpoint, external_endpoint,
    service_binding, reference_target,
)

# root method -> (application type, default build pack)
APPLICATION_METHODS = MappingProxyType({
    "AddNpmApp": ("npm", "nixpacks"),
    "AddNodeApp": ("npm", "nixpacks"),
    "AddJavaScriptApp": ("npm", "nixpacks"),
    "AddProject": ("project", "dockerfile"),
    "AddDockerfile": ("dockerfile", "dockerfile"),
    "AddContainer": ("container", "dockerfile"),
    "AddExecutable": ("executable", "dockerfile"),
})

PROJECT_TYPE_PATTERN = re.compile(r'AddProject\s*<([^>]+)>')

_PUBLISH_AS_DOCKERFILE = (
    MethodRule("build_pack", constant("dockerfile"), OVERWRITE),
    MethodRule("publish_mode", constant("dockerfile"), OVERWRITE),
)

APPLICATION_RULES = MappingProxyType({
    "WithEnvironment": MethodRule("environment", environment_variable, ACCUMULATE),
    "WithHttpEndpoint": MethodRule("endpoints", http_endpoint, ACCUMULATE),
    "WithHttpsEndpoint": MethodRule("endpoints", https_endpoint, ACCUMULATE),
    "WithExternalHttpEndpoints": MethodRule("endpoints", external_endpoint, ACCUMULATE),
    "WithServiceBinding": MethodRule("endpoints", service_binding, ACCUMULATE),
    "WithReference": MethodRule("references", reference_target, ACCUMULATE),
    "WaitFor": MethodRule("wait_for", reference_target, ACCUMULATE),
    "PublishAsDockerFile": _PUBLISH_AS_DOCKERFILE,
    "PublishAsDockerfile": _PUBLISH_AS_DOCKERFILE,
    "PublishAsContainer": (
        MethodRule("build_pack", constant("dockerfile"), OVERWRITE),
        MethodRule("publish_mode", constant("container"), OVERWRITE),
    ),
    "WithRunScript": MethodRule("run_script", first_positional, OVERWRITE),
    "WithNpm": MethodRule("npm_install_command", named_arg("installCommand"), OVERWRITE),
})


def is_application_chain(chain: FluentChain) -> bool:
    return chain.root_method in APPLICATION_METHODS


def extract_application(chain: FluentChain, scanner: Optional[LambdaScanner] = None) -> Application:
    app_type, build_pack = APPLICATION_METHODS.get(chain.root_method, ("project", "dockerfile"))
    app = Application(
        name=chain.name,
        type=app_type,
        build_pack=build_pack,
        variable_name=chain.variable_name,
    )

    # 1. Second positional argument is a source path when it looks like one
    source_path = string_arg(chain.root_args, 1)
    if source_path and source_path.startswith(('.', '/')):
        app.source_path = source_path

    # 2. Named root arguments, e.g. runScriptName: "start"
    run_script = extract_named_args(chain.root_args).get("runScriptName")
    if run_script:
        app.run_script = run_script

    # 3. AddProject<Projects.Api> carries the project type in the annotation
    if chain.root_method == "AddProject":
        match = PROJECT_TYPE_PATTERN.search(chain.raw)
        if match:
            app.project = match.group(1).strip()

    return apply_method_rules(app, chain.chained_methods, APPLICATION_RULES, scanner)

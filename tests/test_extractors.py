#!/usr/bin/env python3
"""
ASPIRE2COOLIFY TEST SUITE - Extractors
--------------------------------------
Per-kind extraction: overwrite vs accumulate semantics, lambda replay,
child databases and the argument readers.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import pytest

from aspire2coolify.core.models import MethodCall, Service
from aspire2coolify.parser.lexer import extract_chains
from aspire2coolify.parser.extractors.common import (
    MethodRule, apply_method_rules, parse_port, reference_target, environment_variable,
)
from aspire2coolify.parser.extractors.database import (
    extract_database, extract_child_databases, remove_parent_servers, is_database_chain,
)
from aspire2coolify.parser.extractors.container import extract_container, is_container_chain
from aspire2coolify.parser.extractors.application import extract_application, is_application_chain


def _chain(source: str):
    chains = extract_chains(source)
    assert len(chains) == 1
    return chains[0]


# --- DATABASES ---

def test_database_image_last_call_wins_and_flag_is_idempotent():
    chain = _chain(
        'var pg = builder.AddPostgres("pg").WithImage("postgres").WithImage("pgvector/pgvector")'
        '.WithImageTag("pg17").WithDataVolume().WithDataVolume().WithHostPort(5432);'
    )
    db = extract_database(chain)

    assert db.type == "postgres"
    assert db.image == "pgvector/pgvector"
    assert db.image_tag == "pg17"
    assert db.host_port == 5432
    assert db.has_data_volume is True
    assert db.variable_name == "pg"


def test_database_invalid_port_is_ignored():
    db = extract_database(_chain('builder.AddMySql("my").WithHostPort(somePort);'))
    assert db.type == "mysql"
    assert db.host_port is None


def test_invalid_host_port_clears_an_earlier_one():
    db = extract_database(_chain('builder.AddPostgres("pg").WithHostPort(5432).WithHostPort(abc);'))
    assert db.host_port is None

    seq = extract_container(_chain('builder.AddSeq("logs").WithHostPort(5341).WithHostPort(port);'))
    assert seq.host_port is None

    db = extract_database(_chain('builder.AddPostgres("pg").WithHostPort(abc).WithHostPort(5433);'))
    assert db.host_port == 5433


def test_database_environment_accumulates_in_order():
    db = extract_database(_chain(
        'builder.AddSqlServer("sql").WithEnvironment("A", "1").WithEnvironment("B", secret).WithEnvironment(cb);'
    ))
    assert [(e.key, e.value, e.is_expression) for e in db.environment] == [
        ("A", "1", False),
        ("B", "secret", True),
    ]


def test_run_as_container_is_replayed():
    chain = _chain(
        'var pg = builder.AddAzurePostgresFlexibleServer("main")'
        '.RunAsContainer(c => c.WithImage("postgres").WithImageTag("16-alpine").WithDataVolume().WithHostPort(5432));'
    )
    db = extract_database(chain)

    assert db.type == "postgres"
    assert (db.image, db.image_tag, db.host_port, db.has_data_volume) == ("postgres", "16-alpine", 5432, True)


def test_child_databases_inherit_parent_configuration():
    chains = extract_chains(
        'var server = builder.AddPostgres("server").WithImage("postgres").WithHostPort(5432).WithDataVolume();\n'
        'var one = server.AddDatabase("one");\n'
        'var two = server.AddDatabase("two");\n'
        'var orphan = missing.AddDatabase("orphan");'
    )
    children = extract_child_databases(chains)

    assert [c.name for c in children] == ["one", "two", "orphan"]
    one = children[0]
    assert one.type == "postgres"
    assert one.image == "postgres"
    assert one.host_port == 5432
    assert one.has_data_volume is True
    assert one.server_name == "server"
    assert one.server_variable_name == "server"

    orphan = children[2]
    assert orphan.type == "postgres"
    assert orphan.image is None
    assert orphan.server_name is None
    assert orphan.server_variable_name == "missing"


def test_remove_parent_servers_drops_only_parents():
    chains = extract_chains(
        'var server = builder.AddPostgres("server");\n'
        'var cache = builder.AddRedis("cache");\n'
        'var one = server.AddDatabase("one");'
    )
    databases = [extract_database(c) for c in chains if is_database_chain(c)]
    children = extract_child_databases(chains)

    kept = remove_parent_servers(databases, children)
    assert [d.name for d in kept] == ["cache"]


# --- CONTAINERS ---

def test_generic_container_takes_image_from_second_argument():
    service = extract_container(_chain(
        'var search = builder.AddContainer("search", "elasticsearch:8.11.0")'
        '.WithEnvironment("discovery.type", "single-node").WithHostPort(9200);'
    ))
    assert service.type == "custom"
    assert service.image == "elasticsearch:8.11.0"
    assert service.host_port == 9200
    assert service.environment[0].key == "discovery.type"


def test_container_volumes_endpoints_and_references():
    chain = _chain(
        'var mq = builder.AddRabbitMQ("mq").WithDataVolume("/data").WithBindMount("./conf", "/etc/rabbitmq")'
        '.WithBindMount("only-one").WithHttpEndpoint(port: 15672, targetPort: 15672, name: "mgmt")'
        '.WithExternalHttpEndpoints().WithReference(db.Resource);'
    )
    assert is_container_chain(chain)
    service = extract_container(chain)

    assert service.type == "rabbitmq"
    assert [(v.is_data, v.name, v.mount_path) for v in service.volumes] == [
        (True, None, "/data"),
        (False, "./conf", "/etc/rabbitmq"),
    ]
    http, external = service.endpoints
    assert (http.port, http.target_port, http.name, http.is_external) == (15672, 15672, "mgmt", False)
    assert external.is_external is True and external.port is None
    assert service.references == ["db"]


# --- APPLICATIONS ---

def test_npm_app_source_path_environment_and_endpoint():
    chain = _chain(
        'builder.AddNpmApp("webapp", "../WebApp").WithEnvironment("NODE_ENV", "production")'
        '.WithHttpEndpoint(3000, env: "PORT").WithReference(db).PublishAsDockerFile();'
    )
    assert is_application_chain(chain)
    app = extract_application(chain)

    assert app.type == "npm"
    assert app.build_pack == "dockerfile"
    assert app.publish_mode == "dockerfile"
    assert app.source_path == "../WebApp"
    assert app.environment[0].value == "production"
    assert (app.endpoints[0].port, app.endpoints[0].env_variable) == (3000, "PORT")
    assert app.references == ["db"]


def test_npm_app_defaults_to_nixpacks():
    app = extract_application(_chain('builder.AddNodeApp("api", "./api/server.js");'))
    assert (app.type, app.build_pack, app.source_path) == ("npm", "nixpacks", "./api/server.js")


def test_project_type_from_generic_annotation():
    app = extract_application(_chain('builder.AddProject<Projects.ApiService>("api").PublishAsContainer();'))
    assert app.type == "project"
    assert app.project == "Projects.ApiService"
    assert app.build_pack == "dockerfile"
    assert app.publish_mode == "container"


def test_javascript_app_scripts_wait_for_and_npm():
    app = extract_application(_chain(
        'builder.AddJavaScriptApp("vue", "../Vue").WithRunScript("start").WithNpm(installCommand: "ci")'
        '.WaitFor(api).WaitFor(cache).WithServiceBinding(8080, "http");'
    ))
    assert app.run_script == "start"
    assert app.npm_install_command == "ci"
    assert app.wait_for == ["api", "cache"]
    assert app.endpoints[0].port == 8080 and not app.endpoints[0].is_external


def test_run_script_name_named_root_argument():
    app = extract_application(_chain('builder.AddJavaScriptApp("ng", "../Ng", runScriptName: "start");'))
    assert app.run_script == "start"
    assert app.source_path == "../Ng"


def test_non_path_second_argument_is_not_a_source_path():
    app = extract_application(_chain('builder.AddExecutable("tool", "dotnet", "run");'))
    assert app.type == "executable"
    assert app.source_path is None


# --- READERS & DISPATCH ---

@pytest.mark.parametrize("raw, expected", [
    ("5432", 5432),
    ("8080 ", 8080),
    ("0", None),
    ("port", None),
    ("", None),
    (None, None),
])
def test_parse_port(raw, expected):
    assert parse_port(raw) == expected


def test_reference_target_reads_leading_identifier():
    assert reference_target(MethodCall("WithReference", ["db.Resource.Name"])) == "db"
    assert reference_target(MethodCall("WithReference", ['"cache"'])) == "cache"
    assert reference_target(MethodCall("WithReference", [])) is None


def test_environment_variable_needs_two_arguments():
    assert environment_variable(MethodCall("WithEnvironment", ["ctx => {}"])) is None


def test_unknown_rule_mode_is_rejected():
    rules = {"WithImage": MethodRule("image", lambda call: "x", "sideways")}
    with pytest.raises(ValueError):
        apply_method_rules(Service(name="s"), [MethodCall("WithImage", ['"x"'])], rules)


def test_unknown_methods_are_ignored():
    service = extract_container(_chain('builder.AddSeq("logs").WithLifetime(ContainerLifetime.Persistent);'))
    assert service.type == "seq"
    assert service.image is None

"""
Data store extractor: AddPostgres / AddSqlServer / AddMySql / AddMongoDB /
AddRedis chains and the child databases declared on them.
"""

from types import MappingProxyType
from typing import List, Optional

from aspire2coolify.core.models import Database, FluentChain
from aspire2coolify.parser.scanner import LambdaScanner
from aspire2coolify.parser.extractors.common import (
    MethodRule, OVERWRITE, ACCUMULATE, FLAG, REPLAY,
    apply_method_rules, first_string, host_port, environment_variable,
)

DATABASE_METHODS = MappingProxyType({
    "AddPostgres": "postgres",
    "AddAzurePostgresFlexibleServer": "postgres",
    "AddPostgresContainer": "postgres",
    "AddSqlServer": "sqlserver",
    "AddAzureSqlServer": "sqlserver",
    "AddMySql": "mysql",
    "AddMySqlContainer": "mysql",
    "AddMongoDB": "mongodb",
    "AddMongoDBContainer": "mongodb",
    "AddRedis": "redis",
    "AddRedisContainer": "redis",
})

CHILD_DATABASE_METHOD = "AddDatabase"

DATABASE_RULES = MappingProxyType({
    "WithImage": MethodRule("image", first_string, OVERWRITE),
    "WithImageTag": MethodRule("image_tag", first_string, OVERWRITE),
    "WithHostPort": MethodRule("host_port", host_port, OVERWRITE, clear_on_none=True),
    "WithDataVolume": MethodRule("has_data_volume", None, FLAG),
    "WithEnvironment": MethodRule("environment", environment_variable, ACCUMULATE),
    "RunAsContainer": MethodRule(None, None, REPLAY),
})


def is_database_chain(chain: FluentChain) -> bool:
    return chain.root_method in DATABASE_METHODS


def extract_database(chain: FluentChain, scanner: Optional[LambdaScanner] = None) -> Database:
    database = Database(
        name=chain.name,
        type=DATABASE_METHODS.get(chain.root_method, "postgres"),
        variable_name=chain.variable_name,
    )
    return apply_method_rules(database, chain.chained_methods, DATABASE_RULES, scanner)


def extract_child_databases(chains: List[FluentChain]) -> List[Database]:
    """
    Builds one Database per `<server>.AddDatabase("name")` chain. The child
    takes the parent server's kind, image, tag, host port and volume flag.
    """
    by_variable = {c.variable_name: c for c in chains if c.variable_name}
    children: List[Database] = []

    for chain in chains:
        if chain.root_method != CHILD_DATABASE_METHOD:
            continue

        parent_chain = by_variable.get(chain.base_object)
        child = Database(
            name=chain.name,
            variable_name=chain.variable_name,
            server_name=parent_chain.name if parent_chain else None,
            server_variable_name=chain.base_object,
        )

        if parent_chain and is_database_chain(parent_chain):
            parent = extract_database(parent_chain)
            child.type = parent.type
            child.image = parent.image
            child.image_tag = parent.image_tag
            child.host_port = parent.host_port
            child.has_data_volume = parent.has_data_volume

        children.append(child)
    return children


def remove_parent_servers(databases: List[Database], children: List[Database]) -> List[Database]:
    """Drops every top-level store that is the parent of at least one child."""
    parents = {c.server_variable_name for c in children if c.server_variable_name}
    return [db for db in databases if not (db.variable_name and db.variable_name in parents)]

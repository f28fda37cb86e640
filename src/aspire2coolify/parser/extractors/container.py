"""
Container/service extractor: RabbitMQ, Keycloak, Seq, MailDev, Kafka,
Elasticsearch, MinIO and generic AddContainer chains.
"""

from types import MappingProxyType
from typing import Optional

from aspire2coolify.core.models import Service, FluentChain
from aspire2coolify.parser.scanner import LambdaScanner
from aspire2coolify.parser.extractors.common import (
    MethodRule, OVERWRITE, ACCUMULATE,
    apply_method_rules, string_arg, first_string, host_port, environment_variable,
    data_volume, bind_mount, http_endpoint, https_endpoint, external_endpoint,
    reference_target,
)

CONTAINER_METHODS = MappingProxyType({
    "AddMinio": "minio",
    "AddMinioContainer": "minio",
    "AddRabbitMQ": "rabbitmq",
    "AddRabbitMQContainer": "rabbitmq",
    "AddKeycloak": "keycloak",
    "AddKeycloakContainer": "keycloak",
    "AddSeq": "seq",
    "AddSeqContainer": "seq",
    "AddMailDev": "maildev",
    "AddMailDevContainer": "maildev",
    "AddKafka": "kafka",
    "AddKafkaContainer": "kafka",
    "AddElasticsearch": "elasticsearch",
    "AddElasticsearchContainer": "elasticsearch",
    # Redis-protocol servers; the assembler moves these into databases
    "AddGarnet": "redis",
    "AddValkey": "redis",
    "AddContainer": "custom",
})

CONTAINER_RULES = MappingProxyType({
    "WithImage": MethodRule("image", first_string, OVERWRITE),
    "WithImageTag": MethodRule("image_tag", first_string, OVERWRITE),
    "WithHostPort": MethodRule("host_port", host_port, OVERWRITE, clear_on_none=True),
    "WithEnvironment": MethodRule("environment", environment_variable, ACCUMULATE),
    "WithDataVolume": MethodRule("volumes", data_volume, ACCUMULATE),
    "WithBindMount": MethodRule("volumes", bind_mount, ACCUMULATE),
    "WithHttpEndpoint": MethodRule("endpoints", http_endpoint, ACCUMULATE),
    "WithHttpsEndpoint": MethodRule("endpoints", https_endpoint, ACCUMULATE),
    "WithExternalHttpEndpoints": MethodRule("endpoints", external_endpoint, ACCUMULATE),
    "WithReference": MethodRule("references", reference_target, ACCUMULATE),
})


def is_container_chain(chain: FluentChain) -> bool:
    return chain.root_method in CONTAINER_METHODS


def extract_container(chain: FluentChain, scanner: Optional[LambdaScanner] = None) -> Service:
    service = Service(
        name=chain.name,
        type=CONTAINER_METHODS.get(chain.root_method, "custom"),
        variable_name=chain.variable_name,
    )

    # AddContainer("name", "image")
    if chain.root_method == "AddContainer" and len(chain.root_args) > 1:
        service.image = string_arg(chain.root_args, 1)

    return apply_method_rules(service, chain.chained_methods, CONTAINER_RULES, scanner)

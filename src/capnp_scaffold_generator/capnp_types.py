"""Constants shared between the schema loader and the generators."""

from __future__ import annotations

CAPNP_SUFFIX = ".capnp"
JAVA_SUFFIX = ".java"
JS_SUFFIX = ".js"

# Separators used when deriving namespaces and their directory layout.
NAMESPACE_SEPARATOR = "."
PATH_SEPARATOR = "/"

# Layout of the generated client tree below the client root.
DEFAULT_CLIENT_ROOT = "src/main/webapp/"
CLIENT_SCRIPTS_DIR = "build/scripts/"
CLIENT_RESOURCES_DIR = "build/res/"
CONSTANTS_MODULE = "Constants"

HANDLERS_PACKAGE = "handlers"
LEGACY_DIALECT_PACKAGE = "nano"
DEFAULT_RUNTIME_PACKAGE = "org.capnp.rpc.rest"
GENERATED_BY = "by capnp-scaffold-generator"

# Size of the chunks used when copying the schema source.
COPY_CHUNK_SIZE = 1024


class CapnpFieldType:
    """Types of capnproto fields."""

    GROUP = "group"


class CapnpElementType:
    """Types of capnproto elements."""

    STRUCT = "struct"
    INTERFACE = "interface"

"""Load *.capnp schema files into the schema model.

Note: This loader requires pycapnp >= 2.0.0.
"""

from __future__ import annotations

import logging
import os.path
import re
from typing import Any

import capnp
from capnp.lib.capnp import _InterfaceSchema, _ParsedSchema, _StructSchema

from capnp_scaffold_generator import capnp_types, helper
from capnp_scaffold_generator.schema_model import Field, Message, Method, Schema, Service

if hasattr(capnp, "remove_import_hook"):
    capnp.remove_import_hook()

logger = logging.getLogger(__name__)

IMPLICIT_STRUCT_MARKER = "$"


class SchemaLoadError(Exception):
    """Raised when a schema file cannot be loaded."""

    pass


def get_display_name(schema: _ParsedSchema | _StructSchema | _InterfaceSchema) -> str:
    """Extract the short display name from a schema, e.g. `CreditCard`.

    Args:
        schema (Any): The schema to get the display name from.

    Returns:
        str: The display name of the schema.
    """
    return schema.node.displayName[schema.node.displayNamePrefixLength :]


def get_file_display_name(schema: _ParsedSchema | _StructSchema | _InterfaceSchema) -> str:
    """The display name of the file that declares a schema, e.g. `org/example/billing.capnp`."""
    return schema.node.displayName.split(":", 1)[0]


def get_scoped_name(schema: _ParsedSchema | _StructSchema | _InterfaceSchema) -> str:
    """The name of a schema inside its file, e.g. `Billing.charge$Params`."""
    return schema.node.displayName.split(":", 1)[-1]


def qualified_name_for_file(file_display_name: str, java_package: str | None = None) -> str:
    """Derive the dotted name of a schema file's outer container.

    The outer name is the camel-cased file stem. It is placed into the Java package, if
    one is given, or else into the dotted directory path of the file. For example,
    `org/example/billing-api.capnp` becomes `org.example.BillingApi`.

    Args:
        file_display_name (str): The path of the schema file as seen by the parser.
        java_package (str | None): Overrides the package derived from the directory path.

    Returns:
        str: The qualified name.
    """
    directory, file_name = os.path.split(file_display_name.replace("\\", "/"))
    outer_name = helper.camel_case(helper.replace_capnp_suffix(file_name))

    if java_package is not None:
        return helper.join_namespace(java_package, outer_name)

    segments = [re.sub(r"\W", "_", segment) for segment in directory.split("/") if segment not in ("", ".", "..")]
    return helper.join_namespace(*segments, outer_name)


def _field_kind(field: Any) -> str:
    if field.which() == capnp_types.CapnpFieldType.GROUP:
        return capnp_types.CapnpFieldType.GROUP
    return str(field.slot.type.which())


class SchemaLoader:
    """Turns *.capnp files into `Schema` trees.

    Top-level interfaces become services, their methods keep the declaration order and
    their parameter and result structs become messages. Top-level structs become the
    messages of the schema.
    """

    def __init__(self, import_paths: list[str] | None = None, java_package: str | None = None):
        """Initialize the loader.

        Args:
            import_paths (list[str] | None): Directories used to resolve absolute imports.
            java_package (str | None): Package of the messages declared in the loaded files.
        """
        self.import_paths = import_paths or []
        self.java_package = java_package
        self._parser = capnp.SchemaParser()

    def load(self, path: str, root_directory: str | None = None) -> Schema:
        """Load a schema file.

        Args:
            path (str): Path of the schema file.
            root_directory (str | None): Directory that namespaces are derived relative to.
                Defaults to the directory of the schema file.

        Returns:
            Schema: The schema tree.

        Raises:
            SchemaLoadError: If the file does not exist or cannot be parsed.
        """
        if not os.path.isfile(path):
            raise SchemaLoadError(f"Schema file not found: {path}")

        if root_directory is None:
            root_directory = os.path.dirname(os.path.abspath(path))
        display_name = os.path.relpath(os.path.abspath(path), os.path.abspath(root_directory)).replace(os.sep, "/")

        try:
            module = self._parser.load(path, display_name=display_name, imports=self.import_paths)
        except capnp.KjException as e:
            raise SchemaLoadError(f"Could not parse schema {path}: {e}") from e

        return _ModuleConverter(module, display_name, path, self.java_package).convert()


class _ModuleConverter:
    """Converts one loaded module. Messages are shared by node id."""

    def __init__(self, module: Any, display_name: str, source_path: str, java_package: str | None):
        self._module = module
        self._display_name = display_name
        self._source_path = source_path
        self._java_package = java_package
        self._messages: dict[int, Message] = {}

    def _package_of(self, schema: _StructSchema) -> str:
        file_display_name = get_file_display_name(schema)
        if file_display_name == self._display_name:
            return helper.truncate_namespace(qualified_name_for_file(file_display_name, self._java_package))
        return helper.truncate_namespace(qualified_name_for_file(file_display_name))

    def _message(self, schema: _StructSchema) -> Message:
        node_id = schema.node.id
        if node_id not in self._messages:
            name = get_display_name(schema)
            if IMPLICIT_STRUCT_MARKER in name:
                # Implicit parameter and result structs, e.g. `charge$Params`.
                name = helper.upper_first(name.replace(IMPLICIT_STRUCT_MARKER, ""))
            fields = tuple(Field(name=field.name, kind=_field_kind(field)) for field in schema.node.struct.fields)
            self._messages[node_id] = Message(
                name=name,
                package=self._package_of(schema),
                fields=fields,
                schema_name=get_scoped_name(schema),
                schema_file=os.path.basename(get_file_display_name(schema)),
            )
        return self._messages[node_id]

    def _service(self, schema: _InterfaceSchema) -> Service:
        methods = []
        for method_node in schema.node.interface.methods:
            runtime_method = schema.methods[method_node.name]
            methods.append(
                Method(
                    name=helper.upper_first(method_node.name),
                    input_type=self._message(runtime_method.param_type),
                    output_type=self._message(runtime_method.result_type),
                )
            )
        return Service(name=get_display_name(schema), methods=tuple(methods))

    def convert(self) -> Schema:
        services: list[Service] = []
        messages: list[Message] = []

        for nested_node in self._module.schema.node.nestedNodes:
            nested = self._module.schema.get_nested(nested_node.name)
            node_type = nested.node.which()

            if node_type == capnp_types.CapnpElementType.INTERFACE:
                services.append(self._service(nested.as_interface()))
            elif node_type == capnp_types.CapnpElementType.STRUCT:
                messages.append(self._message(nested.as_struct()))
            else:
                logger.debug("Skipping %s node '%s'", node_type, nested_node.name)

        return Schema(
            name=os.path.basename(self._source_path),
            source_path=self._source_path,
            qualified_name=qualified_name_for_file(self._display_name, self._java_package),
            services=tuple(services),
            messages=tuple(messages),
        )

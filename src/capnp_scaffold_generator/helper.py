"""Name derivation shared by all generators.

Every function in this module is pure: the same schema entity always maps to the same
identifier, so the Java and JavaScript outputs agree on every name they share.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator

from capnp_scaffold_generator import capnp_types
from capnp_scaffold_generator.schema_model import Message, Method, Schema, Service

SERVICE_CLASS_SUFFIX = "Service"
HANDLER_CLASS_PREFIX = "Abstract"
HANDLER_CLASS_SUFFIX = "Handler"
ENDPOINT_KEY_SUFFIX = "Path"


def lower_first(name: str) -> str:
    """Lower-case the first character of a name and keep the rest unchanged.

    E.g. `OrderList` becomes `orderList`. An empty name stays empty.

    Args:
        name (str): The original name.

    Returns:
        str: The name with a lower-case first character.
    """
    return name[:1].lower() + name[1:]


def upper_first(name: str) -> str:
    """Upper-case the first character of a name and keep the rest unchanged.

    Args:
        name (str): The original name.

    Returns:
        str: The name with an upper-case first character.
    """
    return name[:1].upper() + name[1:]


def camel_case(name: str) -> str:
    """Convert a file stem like `billing-api` or `billing_api` to `BillingApi`."""
    return "".join(upper_first(part) for part in re.split(r"[-_.\s]+", name) if part)


def service_class_name(service: Service) -> str:
    """The Java class name of a service scaffold, e.g. `BillingService`."""
    return service.name + SERVICE_CLASS_SUFFIX


def client_class_name(service: Service) -> str:
    """The JavaScript class name of a service stub; the service name itself."""
    return service.name


def endpoint_key(service: Service) -> str:
    """The key of the service endpoint in the constants module, e.g. `BillingPath`."""
    return client_class_name(service) + ENDPOINT_KEY_SUFFIX


def handler_class_name(method: Method) -> str:
    """The Java class name of a method handler, e.g. `AbstractChargeHandler`."""
    return HANDLER_CLASS_PREFIX + method.name + HANDLER_CLASS_SUFFIX


def register_method_name(method: Method) -> str:
    """The name of the handler registration method, e.g. `registerChargeHandler`."""
    return f"register{method.name}{HANDLER_CLASS_SUFFIX}"


def join_namespace(*parts: str) -> str:
    """Join namespace parts with dots, skipping empty parts."""
    return capnp_types.NAMESPACE_SEPARATOR.join(part for part in parts if part)


def truncate_namespace(qualified_name: str) -> str:
    """Drop the last segment of a dotted name.

    E.g. `org.example.Billing` becomes `org.example`, and `Billing` becomes an empty string.

    Args:
        qualified_name (str): The dotted name.

    Returns:
        str: Everything before the last separator.
    """
    head, separator, _ = qualified_name.rpartition(capnp_types.NAMESPACE_SEPARATOR)
    if not separator:
        return ""
    return head


def with_dialect(namespace: str, legacy_dialect: bool, use_deprecated_package: bool = False) -> str:
    """Append the legacy dialect package to a namespace, unless the schema opts out.

    Args:
        namespace (str): The dotted namespace.
        legacy_dialect (bool): Whether legacy dialect generation is requested.
        use_deprecated_package (bool): Whether the schema keeps its package in legacy mode.

    Returns:
        str: The namespace, possibly extended by `.nano`.
    """
    if legacy_dialect and not use_deprecated_package:
        return join_namespace(namespace, capnp_types.LEGACY_DIALECT_PACKAGE)
    return namespace


def service_namespace(schema: Schema, legacy_dialect: bool) -> str:
    """Derive the dotted namespace of the generated Java classes of a schema.

    Args:
        schema (Schema): The schema.
        legacy_dialect (bool): Whether legacy dialect generation is requested.

    Returns:
        str: The namespace, e.g. `org.example` or `org.example.nano`.
    """
    return with_dialect(truncate_namespace(schema.qualified_name), legacy_dialect, schema.use_deprecated_package)


def namespace_to_path(namespace: str) -> str:
    """Convert a dotted namespace to a directory path with a trailing separator.

    E.g. `org.example` becomes `org/example/`; an empty namespace stays empty.

    Args:
        namespace (str): The dotted namespace.

    Returns:
        str: The directory path.
    """
    path = namespace.replace(capnp_types.NAMESPACE_SEPARATOR, capnp_types.PATH_SEPARATOR)
    if path:
        path += capnp_types.PATH_SEPARATOR
    return path


def package_path(schema: Schema, legacy_dialect: bool) -> str:
    """The directory path of the generated Java classes of a schema, e.g. `org/example/`."""
    return namespace_to_path(service_namespace(schema, legacy_dialect))


def ensure_trailing_separator(path: str) -> str:
    """Make a non-empty directory path end with a separator."""
    if path and not path.endswith(capnp_types.PATH_SEPARATOR):
        return path + capnp_types.PATH_SEPARATOR
    return path


def java_class_name(message: Message, legacy_dialect: bool) -> str:
    """The fully qualified Java class of a message, e.g. `org.example.CreditCard`."""
    return join_namespace(with_dialect(message.package, legacy_dialect), message.name)


def message_module_name(message: Message) -> str:
    """The JavaScript module identifier of a message, e.g. `creditCard`."""
    return lower_first(message.name)


def replace_capnp_suffix(original: str) -> str:
    """If found, strip the .capnp suffix from a file name.

    For example, `billing.capnp` becomes `billing`.

    Args:
        original (str): The file name.

    Returns:
        str: The file name without the schema suffix.
    """
    if original.endswith(capnp_types.CAPNP_SUFFIX):
        return original[: -len(capnp_types.CAPNP_SUFFIX)]
    return original


class SortedImportSet:
    """A set of import names that is always iterated in sorted order.

    Insertion order is irrelevant; iteration order is ascending by key. Adding a name that
    is already present has no effect.
    """

    def __init__(self, names: Iterable[str] = (), key: Callable[[str], str] | None = None):
        self._key = key
        self._names: set[str] = set()
        for name in names:
            self.add(name)

    def add(self, name: str) -> None:
        """Add a name to the set."""
        self._names.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        if self._key is None:
            return iter(sorted(self._names))
        return iter(sorted(self._names, key=lambda name: (self._key(name), name)))

    def as_tuple(self) -> tuple[str, ...]:
        """The names in iteration order."""
        return tuple(self)

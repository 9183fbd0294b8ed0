"""Read-only schema tree consumed by the generators.

The tree is produced once per schema file by the schema loader and is never mutated
afterwards. Only names and identity matter for generation; fields are carried along so
that the tree describes the schema completely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Field:
    """A single field of a message."""

    name: str
    kind: str


@dataclass(frozen=True)
class Message:
    """A message type.

    Attributes:
        name: The short name of the message, e.g. `CreditCard`.
        package: The namespace of the schema that declares the message, e.g. `org.example`.
        fields: The fields of the message in declaration order.
        schema_name: The name of the message inside its schema file, e.g. `Billing.charge$Params`.
            Empty if it equals `name`.
        schema_file: The file name of the schema that declares the message, e.g. `money.capnp`.
            Empty means the schema being generated.
    """

    name: str
    package: str = ""
    fields: tuple[Field, ...] = ()
    schema_name: str = ""
    schema_file: str = ""

    @property
    def full_name(self) -> str:
        """The dotted name of the message, e.g. `org.example.CreditCard`."""
        if not self.package:
            return self.name
        return f"{self.package}.{self.name}"


@dataclass(frozen=True)
class Method:
    """A remote method. Input and output may be the same message."""

    name: str
    input_type: Message
    output_type: Message


@dataclass(frozen=True)
class Service:
    """A remote service with its methods in declaration order."""

    name: str
    methods: tuple[Method, ...] = ()


@dataclass(frozen=True)
class Schema:
    """The root of the schema tree.

    Attributes:
        name: The file name of the schema source, e.g. `billing.capnp`.
        source_path: Where the schema source can be read from.
        qualified_name: Dotted name of the schema's outer container, e.g. `org.example.Billing`.
        services: The services in declaration order.
        messages: The top-level messages in declaration order. Messages that are only
            referenced by methods are reached through `services`.
        use_deprecated_package: Opts out of the legacy dialect package suffix.
    """

    name: str
    source_path: str
    qualified_name: str
    services: tuple[Service, ...] = ()
    messages: tuple[Message, ...] = ()
    use_deprecated_package: bool = False

"""Immutable naming records shared by all generators.

The records are built once per run by `NamingContext.create` and handed to the
generators, which never derive a name on their own. This keeps the Java and JavaScript
outputs from disagreeing on a class, module or path name.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from capnp_scaffold_generator import capnp_types, helper
from capnp_scaffold_generator.options import GeneratorOptions
from capnp_scaffold_generator.schema_model import Message, Method, Schema, Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageNames:
    """Derived names of a message.

    Attributes:
        name: The message name, e.g. `CreditCard`.
        full_name: The dotted name, e.g. `org.example.CreditCard`. Identifies the message in log messages.
        java_class: The fully qualified Java class, e.g. `org.example.CreditCard`.
        js_module: The JavaScript module identifier, e.g. `creditCard`.
        loader_path: Output path of the JavaScript loader module.
        schema_name: The name the loader builds the type by, e.g. `Billing.charge$Params`.
        schema_resource: The schema copy the loader reads, e.g. `build/res/billing.capnp`.
    """

    name: str
    full_name: str
    java_class: str
    js_module: str
    loader_path: str
    schema_name: str
    schema_resource: str

    @classmethod
    def create(cls, message: Message, options: GeneratorOptions, scripts_dir: str, schema_file: str) -> MessageNames:
        return cls(
            name=message.name,
            full_name=message.full_name,
            java_class=helper.java_class_name(message, options.legacy_dialect),
            js_module=helper.message_module_name(message),
            loader_path=f"{scripts_dir}{message.name}{capnp_types.JS_SUFFIX}",
            schema_name=message.schema_name or message.name,
            schema_resource=capnp_types.CLIENT_RESOURCES_DIR + (message.schema_file or schema_file),
        )


@dataclass(frozen=True)
class MethodNames:
    """Derived names of a method.

    Attributes:
        name: The method name as used on the wire and in the handler registry.
        handler_class: The Java handler class, e.g. `AbstractChargeHandler`.
        handler_path: Output path of the handler class.
        register_method: The Java registration method, e.g. `registerChargeHandler`.
        js_function: The JavaScript stub function, e.g. `charge`.
        input: Names of the input message.
        output: Names of the output message.
    """

    name: str
    handler_class: str
    handler_path: str
    register_method: str
    js_function: str
    input: MessageNames
    output: MessageNames

    @property
    def java_imports(self) -> tuple[str, ...]:
        """The message classes a handler imports; the output only if it differs from the input."""
        if self.input.java_class == self.output.java_class:
            return (self.input.java_class,)
        return (self.input.java_class, self.output.java_class)


@dataclass(frozen=True)
class ServiceNames:
    """Derived names of a service.

    Attributes:
        name: The service name.
        java_class: The Java scaffold class, e.g. `BillingService`.
        java_path: Output path of the Java scaffold.
        js_class: The JavaScript stub class, e.g. `Billing`.
        js_path: Output path of the JavaScript stub.
        endpoint_key: Key of the service endpoint in the constants module, e.g. `BillingPath`.
        methods: The methods in declaration order.
        js_imports: Message modules the stub depends on, sorted and without duplicates.
    """

    name: str
    java_class: str
    java_path: str
    js_class: str
    js_path: str
    endpoint_key: str
    methods: tuple[MethodNames, ...]
    js_imports: tuple[str, ...]

    @property
    def method_names(self) -> tuple[str, ...]:
        return tuple(method.name for method in self.methods)


@dataclass(frozen=True)
class NamingContext:
    """All names and paths of one generation run.

    Attributes:
        namespace: The dotted namespace of the generated Java classes.
        handlers_namespace: The dotted namespace of the generated handler classes.
        runtime_package: The Java package that provides the RPC base classes.
        package_path: Directory of the generated Java classes, e.g. `org/example/`.
        handlers_path: Directory of the generated handler classes.
        scripts_dir: Directory of the generated JavaScript modules.
        resources_dir: Directory of the schema copy.
        constants_path: Output path of the constants module.
        schema_copy_path: Output path of the schema copy.
        schema_source: Where the schema source is read from.
        services: The services in declaration order.
        messages: Every message with a loader module: the top-level messages in declaration order,
            then the messages only referenced by methods, in method declaration order.
        endpoint_keys: The keys of the constants module. Keys passed in from earlier schemas come first.
        legacy_dialect: Whether legacy dialect generation is requested.
    """

    namespace: str
    handlers_namespace: str
    runtime_package: str
    package_path: str
    handlers_path: str
    scripts_dir: str
    resources_dir: str
    constants_path: str
    schema_copy_path: str
    schema_source: str
    services: tuple[ServiceNames, ...]
    messages: tuple[MessageNames, ...]
    endpoint_keys: tuple[str, ...]
    legacy_dialect: bool

    @classmethod
    def create(
        cls, schema: Schema, options: GeneratorOptions, known_endpoint_keys: Sequence[str] = ()
    ) -> NamingContext:
        """Derive every name of a run from the schema and the options.

        Args:
            schema (Schema): The schema to generate for.
            options (GeneratorOptions): The run options.
            known_endpoint_keys (Sequence[str]): Endpoint keys of schemas generated earlier into
                the same client tree. They are kept in the constants module.

        Returns:
            NamingContext: The naming context of the run.
        """
        if options.java_package:
            namespace = helper.with_dialect(options.java_package, options.legacy_dialect, schema.use_deprecated_package)
        else:
            namespace = helper.service_namespace(schema, options.legacy_dialect)
        handlers_namespace = helper.join_namespace(namespace, capnp_types.HANDLERS_PACKAGE)
        package_path = helper.namespace_to_path(namespace)
        handlers_path = helper.namespace_to_path(handlers_namespace)

        scripts_dir = options.client_root + capnp_types.CLIENT_SCRIPTS_DIR
        resources_dir = options.client_root + capnp_types.CLIENT_RESOURCES_DIR

        message_names: dict[Message, MessageNames] = {}

        def names_of(message: Message) -> MessageNames:
            if message not in message_names:
                message_names[message] = MessageNames.create(message, options, scripts_dir, schema.name)
            return message_names[message]

        for message in schema.messages:
            names_of(message)
        services = tuple(
            _create_service_names(service, names_of, package_path, handlers_path, scripts_dir)
            for service in schema.services
        )
        messages = _unique_loaders(schema, message_names.values())

        endpoint_keys = list(known_endpoint_keys)
        for service in services:
            if service.endpoint_key not in endpoint_keys:
                endpoint_keys.append(service.endpoint_key)

        _warn_about_weak_names(schema, message_names.values())

        return cls(
            namespace=namespace,
            handlers_namespace=handlers_namespace,
            runtime_package=options.runtime_package,
            package_path=package_path,
            handlers_path=handlers_path,
            scripts_dir=scripts_dir,
            resources_dir=resources_dir,
            constants_path=f"{scripts_dir}{capnp_types.CONSTANTS_MODULE}{capnp_types.JS_SUFFIX}",
            schema_copy_path=resources_dir + schema.name,
            schema_source=schema.source_path,
            services=services,
            messages=messages,
            endpoint_keys=tuple(endpoint_keys),
            legacy_dialect=options.legacy_dialect,
        )

    @property
    def artifact_count(self) -> int:
        """The number of artifacts a run over this context produces."""
        method_count = sum(len(service.methods) for service in self.services)
        return 2 * len(self.services) + method_count + len(self.messages) + 2


def _create_service_names(service: Service, names_of, package_path: str, handlers_path: str, scripts_dir: str):
    methods = tuple(_create_method_names(method, names_of, handlers_path) for method in service.methods)

    imports = helper.SortedImportSet(key=str.lower)
    for method in methods:
        imports.add(method.input.js_module)
        imports.add(method.output.js_module)

    java_class = helper.service_class_name(service)
    js_class = helper.client_class_name(service)
    return ServiceNames(
        name=service.name,
        java_class=java_class,
        java_path=f"{package_path}{java_class}{capnp_types.JAVA_SUFFIX}",
        js_class=js_class,
        js_path=f"{scripts_dir}{js_class}{capnp_types.JS_SUFFIX}",
        endpoint_key=helper.endpoint_key(service),
        methods=methods,
        js_imports=imports.as_tuple(),
    )


def _create_method_names(method: Method, names_of, handlers_path: str) -> MethodNames:
    handler_class = helper.handler_class_name(method)
    return MethodNames(
        name=method.name,
        handler_class=handler_class,
        handler_path=f"{handlers_path}{handler_class}{capnp_types.JAVA_SUFFIX}",
        register_method=helper.register_method_name(method),
        js_function=helper.lower_first(method.name),
        input=names_of(method.input_type),
        output=names_of(method.output_type),
    )


def _warn_about_weak_names(schema: Schema, messages) -> None:
    """Log names that produce empty or colliding identifiers. They are generated as they are."""
    for service in schema.services:
        if not service.name:
            logger.warning("%s: service with an empty name", schema.name)
        for method in service.methods:
            if not method.name:
                logger.warning("%s: method with an empty name in service '%s'", schema.name, service.name)

    seen: dict[str, str] = {}
    for message in messages:
        if not message.name:
            logger.warning("%s: message with an empty name", schema.name)
            continue
        other = seen.setdefault(message.js_module, message.full_name)
        if other != message.full_name:
            logger.warning(
                "%s: messages '%s' and '%s' share the module identifier '%s'",
                schema.name,
                other,
                message.full_name,
                message.js_module,
            )


def _unique_loaders(schema: Schema, messages) -> tuple[MessageNames, ...]:
    """Keep the first message of every loader path, so that no artifact is written twice."""
    unique: dict[str, MessageNames] = {}
    for message in messages:
        other = unique.setdefault(message.loader_path, message)
        if other is not message:
            logger.warning(
                "%s: messages '%s' and '%s' share the loader module '%s'; only the first is generated",
                schema.name,
                other.full_name,
                message.full_name,
                message.loader_path,
            )
    return tuple(unique.values())

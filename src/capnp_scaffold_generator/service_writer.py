"""Generate the Java scaffold class of a service."""

from __future__ import annotations

from capnp_scaffold_generator import capnp_types
from capnp_scaffold_generator.printer import Printer
from capnp_scaffold_generator.writer_dto import NamingContext, ServiceNames

IMPORTS_TEMPLATE = """\
import $runtime$.AbstractRpcService;
import $runtime$.RpcCallHandler;

import java.util.HashMap;
import java.util.Map;
import javax.annotation.Generated;

import $handlers$.*;

"""

CLASS_HEADER_TEMPLATE = """\
@Generated("$generated_by$")
public class $class_name$ extends AbstractRpcService {

"""

LEGACY_DIALECT_IMPORT = "import java.io.IOException;\n\n"

HANDLERS_MAP = "private final Map<String, RpcCallHandler> handlers = new HashMap<>();\n\n"

CONSTRUCTOR_TEMPLATE = """\
public $class_name$() {
  super(requiredMethodHandlers);
}

"""

GET_HANDLER = """\
@Override
protected RpcCallHandler getRpcCallHandler(String method) {
  final RpcCallHandler rpcCallHandler = handlers.get(method);
  if (rpcCallHandler == null) {
    throw new IllegalStateException("No handler registered for method: " + method);
  }
  return rpcCallHandler;
}

"""

REGISTER_TEMPLATE = "public void $register_method$($handler_class$ handler) {\n"

PUT_HANDLER_TEMPLATE = 'handlers.put("$method$", handler);\n'


def _write_required_handlers(printer: Printer, service: ServiceNames) -> None:
    printer.write("private static final String[] requiredMethodHandlers = {\n")
    printer.indent()
    names = service.method_names
    for index, name in enumerate(names):
        printer.print('"$method$"', method=name)
        if index < len(names) - 1:
            printer.write(",")
        printer.write("\n")
    printer.outdent()
    printer.write("};\n\n")


def _write_registerers(printer: Printer, service: ServiceNames) -> None:
    for method in service.methods:
        printer.print(REGISTER_TEMPLATE, register_method=method.register_method, handler_class=method.handler_class)
        printer.indent()
        printer.print(PUT_HANDLER_TEMPLATE, method=method.name)
        printer.outdent()
        printer.write("}\n\n")


def write_service(printer: Printer, context: NamingContext, service: ServiceNames) -> None:
    """Write the scaffold class of a service.

    The scaffold extends `AbstractRpcService`, lists the names of all methods that need a
    handler, keeps a map from method name to handler and offers one registration method
    per schema method. The method list and the registration methods are written from the
    same sequence, so they always match in content and order.

    Args:
        printer (Printer): The printer of the service artifact.
        context (NamingContext): The naming context of the run.
        service (ServiceNames): The service to write the scaffold for.
    """
    if context.namespace:
        printer.print("package $package$;\n\n", package=context.namespace)
    printer.print(IMPORTS_TEMPLATE, runtime=context.runtime_package, handlers=context.handlers_namespace)
    if context.legacy_dialect:
        printer.write(LEGACY_DIALECT_IMPORT)

    printer.print(CLASS_HEADER_TEMPLATE, generated_by=capnp_types.GENERATED_BY, class_name=service.java_class)
    printer.indent()

    _write_required_handlers(printer, service)
    printer.write(HANDLERS_MAP)
    printer.print(CONSTRUCTOR_TEMPLATE, class_name=service.java_class)
    printer.write(GET_HANDLER)
    _write_registerers(printer, service)

    printer.outdent()
    printer.write("}\n")

"""Generate the abstract Java handler class of a method."""

from __future__ import annotations

from capnp_scaffold_generator import capnp_types
from capnp_scaffold_generator.printer import Printer
from capnp_scaffold_generator.writer_dto import MethodNames, NamingContext

PACKAGE_TEMPLATE = "package $package$;\n\n"

RUNTIME_IMPORT_TEMPLATE = "import $runtime$.RpcCallHandler;\n\n"

IMPORT_TEMPLATE = "import $type$;\n"

GENERATED_IMPORT = "import javax.annotation.Generated;\n\n"

CLASS_TEMPLATE = """\
@Generated("$generated_by$")
public abstract class $class_name$ implements RpcCallHandler<$argument$, $result$> {

}
"""


def write_handler(printer: Printer, context: NamingContext, method: MethodNames) -> None:
    """Write the abstract handler class of a method.

    The handler implements `RpcCallHandler<Input, Output>` and lives in the handlers
    package next to the service scaffold. The output type is imported only if it differs
    from the input type.

    Args:
        printer (Printer): The printer of the handler artifact.
        context (NamingContext): The naming context of the run.
        method (MethodNames): The method to write the handler for.
    """
    printer.print(PACKAGE_TEMPLATE, package=context.handlers_namespace)
    printer.print(RUNTIME_IMPORT_TEMPLATE, runtime=context.runtime_package)

    for java_class in method.java_imports:
        printer.print(IMPORT_TEMPLATE, type=java_class)
    printer.write("\n")
    printer.write(GENERATED_IMPORT)

    printer.print(
        CLASS_TEMPLATE,
        generated_by=capnp_types.GENERATED_BY,
        class_name=method.handler_class,
        argument=method.input.name,
        result=method.output.name,
    )

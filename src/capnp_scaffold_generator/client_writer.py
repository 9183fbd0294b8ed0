"""Generate the JavaScript client modules.

All modules are AMD modules. The service stub depends on the `capnp` runtime, the
`constants` module that holds the service endpoints and one loader module per message
type it sends or receives.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from capnp_scaffold_generator import capnp_types
from capnp_scaffold_generator.printer import Printer
from capnp_scaffold_generator.writer_dto import MessageNames, NamingContext, ServiceNames

logger = logging.getLogger(__name__)

RUNTIME_MODULE = "capnp"
CONSTANTS_MODULE = "constants"

STUB_HEADER_TEMPLATE = "var $class_name$ = function() {};\n\n"

STUB_METHOD_TEMPLATE = """\
$class_name$.prototype.$function$ = function(requestArgument) {

  return new Promise(function (resolve, reject) {
    if (!(requestArgument instanceof $argument$)) {
      reject(new Error("Invalid argument."));
    } else {
      var value = requestArgument.toBase64();

      $$.ajax({
        type: 'POST',
        url: constants.$endpoint_key$,
        data: 'rpc_method_type=$method$&rpc_method_argument=' + value
      }).done(function (data) {
        var convertedResult = $result$.decode(data);
        resolve(convertedResult);
      }).fail(function (error) {
        reject(error);
      });
    }
  });
};

"""

LOADER_TEMPLATE = """\
define(['$runtime$'], function($runtime$) {
  var builder = $runtime$.loadSchemaFile('$resource$');
  return builder.build('$name$');
});
"""


def _write_define(printer: Printer, modules: list[str]) -> None:
    quoted = ", ".join(f"'{module}'" for module in modules)
    printer.print("define([$modules$], function($parameters$) {\n", modules=quoted, parameters=", ".join(modules))


def write_service_stub(printer: Printer, service: ServiceNames) -> None:
    """Write the client stub of a service.

    The stub offers one asynchronous function per method. Each call checks the argument
    type, sends exactly one request to the service endpoint and resolves with the decoded
    response or rejects with the transport error. There is no retry and no timeout.

    Args:
        printer (Printer): The printer of the stub artifact.
        service (ServiceNames): The service to write the stub for.
    """
    _write_define(printer, [RUNTIME_MODULE, CONSTANTS_MODULE, *service.js_imports])
    printer.indent()

    printer.print(STUB_HEADER_TEMPLATE, class_name=service.js_class)
    for method in service.methods:
        printer.print(
            STUB_METHOD_TEMPLATE,
            class_name=service.js_class,
            function=method.js_function,
            argument=method.input.js_module,
            endpoint_key=service.endpoint_key,
            method=method.name,
            result=method.output.js_module,
        )
    printer.print("return $class_name$;\n", class_name=service.js_class)

    printer.outdent()
    printer.write("});\n")


def write_message_loader(printer: Printer, message: MessageNames) -> None:
    """Write the module that loads a schema copy and exposes the type of a message.

    The type is built by its name inside the schema file, so implicit parameter and result
    structs like `Billing.charge$Params` resolve as well.
    """
    printer.print(
        LOADER_TEMPLATE,
        runtime=RUNTIME_MODULE,
        resource=message.schema_resource,
        name=message.schema_name,
    )


def write_constants(printer: Printer, context: NamingContext) -> None:
    """Write the constants sample with one empty endpoint entry per known service.

    The entries are meant to be filled in by hand. Besides the services of this schema, the
    sample keeps the endpoints of schemas generated earlier into the same client tree.
    """
    printer.write("define(function() {\n")
    printer.indent()
    printer.write("return {\n")
    printer.indent()
    keys = context.endpoint_keys
    for index, key in enumerate(keys):
        printer.print("$key$: ''", key=key)
        if index < len(keys) - 1:
            printer.write(",")
        printer.write("\n")
    printer.outdent()
    printer.write("};\n")
    printer.outdent()
    printer.write("});\n")


def copy_schema(printer: Printer, source: BinaryIO, chunk_size: int = capnp_types.COPY_CHUNK_SIZE) -> int:
    """Copy the schema source byte for byte.

    Args:
        printer (Printer): The printer of the schema copy artifact.
        source (BinaryIO): The opened schema source.
        chunk_size (int): The number of bytes read at once.

    Returns:
        int: The number of bytes copied.
    """
    copied = 0
    while chunk := source.read(chunk_size):
        printer.print_raw(chunk)
        copied += len(chunk)
    logger.debug("Copied %d bytes of schema source", copied)
    return copied

"""Top-level module for scaffold generation."""

from __future__ import annotations

import argparse
import glob
import logging
import os.path
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from capnp_scaffold_generator import capnp_types, client_writer, handler_writer, service_writer
from capnp_scaffold_generator.options import GeneratorOptions
from capnp_scaffold_generator.printer import Printer, PrinterError
from capnp_scaffold_generator.schema_loader import SchemaLoadError, SchemaLoader
from capnp_scaffold_generator.schema_model import Schema
from capnp_scaffold_generator.sink import DirectoryOutputSink, OutputSink
from capnp_scaffold_generator.writer_dto import NamingContext

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when a run has to be aborted, e.g. because an artifact cannot be opened."""

    pass


@dataclass
class GenerationResult:
    """The outcome of a generation run.

    Attributes:
        success: Whether every artifact was written.
        error: The diagnostic message of a failed run.
        written: The artifact paths written, in order. A failed run keeps what it wrote.
        endpoint_keys: The keys written to the constants module.
    """

    success: bool
    error: str | None = None
    written: list[str] = field(default_factory=list)
    endpoint_keys: tuple[str, ...] = ()


def _emit(sink: OutputSink, path: str, write: Callable[[Printer], object], written: list[str]) -> None:
    """Open one artifact, let a writer fill it and close it again.

    Args:
        sink (OutputSink): The sink to open the artifact with.
        path (str): The artifact path.
        write (Callable[[Printer], object]): Writes the artifact content.
        written (list[str]): Collects the paths of all opened artifacts.

    Raises:
        GenerationError: If the sink cannot open, write or close the artifact.
        PrinterError: If the writer leaves the indentation unbalanced.
    """
    try:
        stream = sink.open(path)
    except OSError as e:
        raise GenerationError(f"Could not open output file '{path}': {e}") from e

    written.append(path)
    try:
        with stream:
            printer = Printer(stream)
            write(printer)
            if printer.depth != 0:
                raise PrinterError(f"Unbalanced indentation after writing '{path}'.")
    except OSError as e:
        raise GenerationError(f"Could not write output file '{path}': {e}") from e
    logger.debug("Generated %s", path)


def _generate(context: NamingContext, sink: OutputSink, written: list[str]) -> None:

    for service in context.services:
        for method in service.methods:
            _emit(sink, method.handler_path, lambda p, m=method: handler_writer.write_handler(p, context, m), written)

    for service in context.services:
        _emit(sink, service.java_path, lambda p, s=service: service_writer.write_service(p, context, s), written)

    for service in context.services:
        _emit(sink, service.js_path, lambda p, s=service: client_writer.write_service_stub(p, s), written)

    for message in context.messages:
        _emit(
            sink,
            message.loader_path,
            lambda p, m=message: client_writer.write_message_loader(p, m),
            written,
        )

    _emit(sink, context.constants_path, lambda p: client_writer.write_constants(p, context), written)

    try:
        source = open(context.schema_source, "rb")
    except OSError as e:
        raise GenerationError(f"Could not read schema source '{context.schema_source}': {e}") from e
    with source:
        _emit(sink, context.schema_copy_path, lambda p: client_writer.copy_schema(p, source), written)


def generate(
    schema: Schema, options: GeneratorOptions, sink: OutputSink, known_endpoint_keys: Sequence[str] = ()
) -> GenerationResult:
    """Generate every artifact of a schema.

    Artifacts are written in a fixed order: handlers, service scaffolds, client stubs,
    message loaders, the constants sample and the schema copy. The first artifact that
    cannot be written aborts the run; artifacts written before stay in place.

    Args:
        schema (Schema): The schema to generate for.
        options (GeneratorOptions): The run options.
        sink (OutputSink): Opens the artifacts.
        known_endpoint_keys (Sequence[str]): Endpoint keys of schemas generated earlier into
            the same client tree; the constants sample keeps them.

    Returns:
        GenerationResult: The outcome of the run.
    """
    context = NamingContext.create(schema, options, known_endpoint_keys)
    written: list[str] = []
    try:
        _generate(context, sink, written)
    except GenerationError as e:
        logger.error("%s: %s (%d of %d files written)", schema.name, e, len(written), context.artifact_count)
        return GenerationResult(success=False, error=str(e), written=written, endpoint_keys=context.endpoint_keys)

    logger.info("%s: generated %d files", schema.name, len(written))
    return GenerationResult(success=True, written=written, endpoint_keys=context.endpoint_keys)


def find_schema_files(
    paths: Sequence[str],
    excludes: Sequence[str],
    recursive: bool,
    root_directory: str,
) -> list[str]:
    """Resolve paths, directories and glob expressions to a sorted list of schema files.

    Args:
        paths (Sequence[str]): Paths, directories or glob expressions to search.
        excludes (Sequence[str]): Paths or glob expressions to exclude.
        recursive (bool): Whether directories and `**` globs are searched recursively.
        root_directory (str): The directory relative paths are resolved against.

    Returns:
        list[str]: The schema files found.
    """
    excluded_paths: set[str] = set()
    for exclude in excludes:
        exclude_path = os.path.join(root_directory, exclude)
        if os.path.isfile(exclude_path):
            excluded_paths.add(exclude_path)
        else:
            excluded_paths = excluded_paths.union(glob.glob(exclude_path, recursive=recursive))

    search_paths: set[str] = set()
    for path in paths:
        search_path = os.path.join(root_directory, path)

        if recursive and os.path.isdir(search_path):
            for root, _, files in os.walk(search_path):
                for file in files:
                    if file.endswith(capnp_types.CAPNP_SUFFIX):
                        search_paths.add(os.path.join(root, file))
        elif os.path.isdir(search_path):
            for file in os.listdir(search_path):
                file_path = os.path.join(search_path, file)
                if os.path.isfile(file_path) and file.endswith(capnp_types.CAPNP_SUFFIX):
                    search_paths.add(file_path)
        else:
            search_paths = search_paths.union(glob.glob(search_path, recursive=recursive))

    return sorted(search_paths - excluded_paths)


def run(args: argparse.Namespace, root_directory: str) -> int:
    """Run the generator for all schema files selected by the arguments.

    Args:
        args (argparse.Namespace): The arguments that were provided when calling the generator.
        root_directory (str): The directory, from which the generator is executed.

    Returns:
        int: The number of schema files that failed.
    """
    options = GeneratorOptions.from_args(args)
    schema_files = find_schema_files(args.paths, args.excludes, args.recursive, root_directory)
    if not schema_files:
        logger.warning("No schema files found.")

    output_dir = os.path.join(root_directory, args.output_dir)
    import_paths = [os.path.join(root_directory, p) for p in args.import_paths]
    loader = SchemaLoader(import_paths=import_paths, java_package=options.java_package)

    failures = 0
    endpoint_keys: tuple[str, ...] = ()
    for path in schema_files:
        logger.info("Processing %s", path)
        try:
            schema = loader.load(path, root_directory)
        except SchemaLoadError as e:
            logger.error("%s", e)
            failures += 1
            continue

        # The constants sample of the shared client tree lists the endpoints of every schema so far.
        result = generate(schema, options, DirectoryOutputSink(output_dir), endpoint_keys)
        endpoint_keys = result.endpoint_keys
        if not result.success:
            failures += 1

    return failures

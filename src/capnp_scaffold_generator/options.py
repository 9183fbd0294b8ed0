"""Configuration of a generation run."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, replace

from capnp_scaffold_generator import capnp_types, helper

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes", "on")


def parse_generator_parameter(parameter: str) -> list[tuple[str, str]]:
    """Split a parameter string like `nano=true,js_path=web/` into key/value pairs.

    A part without `=` yields an empty value. Empty parts are skipped.

    Args:
        parameter (str): The comma-separated parameter string.

    Returns:
        list[tuple[str, str]]: The pairs in the order they appear.
    """
    options: list[tuple[str, str]] = []
    for part in parameter.split(","):
        if not part:
            continue
        key, _, value = part.partition("=")
        options.append((key.strip(), value.strip()))
    return options


@dataclass(frozen=True)
class GeneratorOptions:
    """Options that control a generation run.

    Attributes:
        legacy_dialect: Generate into the `nano` sub-package, unless a schema opts out.
        client_root: Root directory of the generated JavaScript tree, ending with `/`.
        java_package: Overrides the namespace of the generated Java classes.
        runtime_package: The Java package that provides the RPC service base classes.
    """

    legacy_dialect: bool = False
    client_root: str = capnp_types.DEFAULT_CLIENT_ROOT
    java_package: str | None = None
    runtime_package: str = capnp_types.DEFAULT_RUNTIME_PACKAGE

    def __post_init__(self):
        # Frozen, so normalise through object.__setattr__.
        object.__setattr__(self, "client_root", helper.ensure_trailing_separator(self.client_root))

    @classmethod
    def from_parameter(cls, parameter: str, base: GeneratorOptions | None = None) -> GeneratorOptions:
        """Create options from a comma-separated `key=value` parameter string.

        Recognised keys are `nano`, `js_path`, `java_package` and `runtime_package`.
        Unrecognised keys are ignored.

        Args:
            parameter (str): The parameter string.
            base (GeneratorOptions | None): Options to start from. Defaults to the default options.

        Returns:
            GeneratorOptions: The resulting options.
        """
        options = base or cls()
        for key, value in parse_generator_parameter(parameter):
            if key == "nano":
                options = replace(options, legacy_dialect=value.lower() in TRUE_VALUES)
            elif key == "js_path":
                options = replace(options, client_root=value)
            elif key == "java_package":
                options = replace(options, java_package=value or None)
            elif key == "runtime_package":
                options = replace(options, runtime_package=value or capnp_types.DEFAULT_RUNTIME_PACKAGE)
            else:
                logger.debug("Ignoring unknown generator option: %s", key)
        return options

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> GeneratorOptions:
        """Create options from parsed command line arguments.

        The `--parameter` string is applied first; explicit flags take precedence over it.

        Args:
            args (argparse.Namespace): The parsed arguments.

        Returns:
            GeneratorOptions: The resulting options.
        """
        options = cls.from_parameter(getattr(args, "parameter", "") or "")

        if args.legacy_dialect:
            options = replace(options, legacy_dialect=True)
        if args.js_path is not None:
            options = replace(options, client_root=args.js_path)
        if args.java_package:
            options = replace(options, java_package=args.java_package)
        if args.runtime_package:
            options = replace(options, runtime_package=args.runtime_package)

        return options

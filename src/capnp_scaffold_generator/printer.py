"""Indentation-aware text emitter used by every generator."""

from __future__ import annotations

from typing import BinaryIO

INDENT_UNIT = "  "
DELIMITER = "$"


class PrinterError(Exception):
    """Raised for template authoring errors and unbalanced indentation."""

    pass


def substitute(template: str, values: dict[str, str]) -> str:
    """Replace `$name$` placeholders in a template.

    `$$` stands for a literal `$`. A placeholder without a value, or a `$` without its
    closing partner, is an error in the template.

    Args:
        template (str): The template text.
        values (dict[str, str]): The placeholder values.

    Returns:
        str: The template with every placeholder replaced.

    Raises:
        PrinterError: If a placeholder is unknown or not terminated.
    """
    parts: list[str] = []
    position = 0
    while True:
        start = template.find(DELIMITER, position)
        if start == -1:
            parts.append(template[position:])
            break
        end = template.find(DELIMITER, start + 1)
        if end == -1:
            raise PrinterError(f"Unterminated placeholder in template: {template!r}")

        parts.append(template[position:start])
        name = template[start + 1 : end]
        if not name:
            parts.append(DELIMITER)
        elif name in values:
            parts.append(values[name])
        else:
            raise PrinterError(f"No value for placeholder '{name}' in template: {template!r}")
        position = end + 1
    return "".join(parts)


class Printer:
    """Writes text to a binary stream, indenting every line that is started.

    A line gets the current indentation prefix right before its first character, so
    empty lines stay empty. Text is encoded as UTF-8.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._indent = ""
        self._at_start_of_line = True

    @property
    def depth(self) -> int:
        """The current number of indentation levels."""
        return len(self._indent) // len(INDENT_UNIT)

    def indent(self) -> None:
        """Increase the indentation by one level."""
        self._indent += INDENT_UNIT

    def outdent(self) -> None:
        """Decrease the indentation by one level.

        Raises:
            PrinterError: If there is no indentation left to remove.
        """
        if not self._indent:
            raise PrinterError("Outdent() without matching Indent().")
        self._indent = self._indent[: -len(INDENT_UNIT)]

    def print(self, template: str, **values: str) -> None:
        """Substitute the placeholders of a template and write the result.

        Args:
            template (str): The template text.
            **values (str): The placeholder values.
        """
        self.write(substitute(template, values))

    def write(self, text: str) -> None:
        """Write text without placeholder substitution, honouring the indentation."""
        lines = text.split("\n")
        for index, line in enumerate(lines):
            if line:
                if self._at_start_of_line:
                    self._stream.write(self._indent.encode("utf-8"))
                self._stream.write(line.encode("utf-8"))
                self._at_start_of_line = False
            if index < len(lines) - 1:
                self._stream.write(b"\n")
                self._at_start_of_line = True

    def print_raw(self, data: bytes) -> None:
        """Write bytes verbatim, without substitution and without indentation."""
        if not data:
            return
        self._stream.write(data)
        self._at_start_of_line = data.endswith(b"\n")

"""Append-only writer for generated source text."""

INDENT = "    "

# First line of every generated Java and C++ file
GENERATED_NOTICE = "/* Generated by enclave-partitioner. Do not edit. */"


class CodeWriter:
    """Accumulates lines of generated code at the current indentation.

    Usage:
        writer = CodeWriter()
        writer.line("class A {")
        with writer.block():
            writer.line("int x;")
        writer.line("}")
        text = writer.render()
    """

    def __init__(self, indent: str = INDENT):
        self._indent = indent
        self._level = 0
        self._lines: list[str] = []

    def indent(self) -> "CodeWriter":
        self._level += 1
        return self

    def outdent(self) -> "CodeWriter":
        if self._level == 0:
            raise ValueError("Cannot outdent below column zero")
        self._level -= 1
        return self

    def line(self, text: str = "") -> "CodeWriter":
        """Append one line; blank lines carry no indentation."""
        self._lines.append(f"{self._indent * self._level}{text}" if text else "")
        return self

    def lines(self, texts: list[str]) -> "CodeWriter":
        for text in texts:
            self.line(text)
        return self

    def block(self) -> "_Block":
        """Context manager that indents the lines written inside it."""
        return _Block(self)

    def render(self) -> str:
        return "\n".join(self._lines) + "\n"


class _Block:
    def __init__(self, writer: CodeWriter):
        self._writer = writer

    def __enter__(self) -> CodeWriter:
        return self._writer.indent()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._writer.outdent()

"""Separate top-level statements from function definitions in guest source.

Whatever is left after removing every function definition is the program's
main routine. JavaScript bodies are found by counting braces. Python has no
block delimiters, so the tracker appends PYTHON_FUNC_END after each function
definition and the definitions are cut out by pattern substitution.

Known risk: a Python string literal containing PYTHON_FUNC_END ends the
enclosing definition early and corrupts the extracted main source.
"""

import logging
import re
from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple

from enclave_partitioner.errors import GenerationError, SourceError
from enclave_partitioner.models import GuestLanguage

logger = logging.getLogger(__name__)

# Marker the tracker inserts right after every Python function definition
PYTHON_FUNC_END = "#__polytaint_func_end__"

JS_FUNCTION_PATTERN = re.compile(r"\bfunction\b")

PYTHON_FUNCTION_PATTERN = re.compile(
    r"\bdef\b.*?" + re.escape(PYTHON_FUNC_END),
    re.DOTALL,
)

BLOCK_OPEN = "{"
BLOCK_CLOSE = "}"


def find_function_offsets(source: str) -> list[int]:
    """Return the offset of every `function` keyword, in order."""
    return [match.start() for match in JS_FUNCTION_PATTERN.finditer(source)]


def find_body_end(source: str, start: int) -> int:
    """Find the offset just past the block that follows `start`.

    Scans to the first "{" and tracks nesting depth until it returns to
    zero. When no block opens, or the block never closes, the end of the
    input is the boundary.
    """
    open_at = source.find(BLOCK_OPEN, start)
    if open_at == -1:
        logger.warning(f"No block after function at offset {start}")
        return len(source)

    depth = 0
    for pos in range(open_at, len(source)):
        char = source[pos]
        if char == BLOCK_OPEN:
            depth += 1
        elif char == BLOCK_CLOSE:
            depth -= 1
            if depth == 0:
                return pos + 1

    logger.warning(f"Unbalanced braces in function at offset {start}")
    return len(source)


def _extract_braced(source: str) -> str:
    offsets = find_function_offsets(source)
    if not offsets:
        return source

    pieces = []
    cursor = 0
    for offset in offsets:
        # Nested definitions belong to the body already removed
        if offset < cursor:
            continue
        pieces.append(source[cursor:offset])
        cursor = find_body_end(source, offset)
    pieces.append(source[cursor:])

    logger.debug(f"Removed {len(offsets)} function definitions")
    return "".join(pieces)


def _extract_sentinel(source: str) -> str:
    return PYTHON_FUNCTION_PATTERN.sub("", source)


def _minify_js(source: str) -> str:
    return source.replace("\r", "").replace("\n", "")


def _minify_python(source: str) -> str:
    # Indentation is significant, so only groups of four spaces are folded
    return source.replace("\r\n", "\n").replace("    ", "\t")


class SourceStrategy(NamedTuple):
    """Per-language source handling."""

    extract_remainder: Callable[[str], str]
    minify: Callable[[str], str]


STRATEGIES: dict[GuestLanguage, SourceStrategy] = {
    GuestLanguage.JS: SourceStrategy(_extract_braced, _minify_js),
    GuestLanguage.PYTHON: SourceStrategy(_extract_sentinel, _minify_python),
}


def get_strategy(language: GuestLanguage) -> SourceStrategy:
    try:
        return STRATEGIES[GuestLanguage(language)]
    except (KeyError, ValueError) as e:
        raise GenerationError(f"Unsupported guest language: {language}") from e


def extract_remainder(source: str, language: GuestLanguage) -> str:
    """Return the source text outside every function definition.

    Args:
        source: Guest program source
        language: Guest language of the source

    Returns:
        The concatenated top-level text, in source order
    """
    return get_strategy(language).extract_remainder(source)


def minify(source: str, language: GuestLanguage) -> str:
    """Compact source for embedding as a single string."""
    return get_strategy(language).minify(source)


def read_source(path: Path) -> str:
    """Read a guest program.

    Raises:
        SourceError: If the file is missing or unreadable
    """
    try:
        return Path(path).read_text()
    except OSError as e:
        logger.error(f"Cannot read source {path}: {e}")
        raise SourceError(f"Cannot read source {path}: {e}") from e


def isolate_main_source(path: Path, language: GuestLanguage) -> str:
    """Read a guest program and return its main-routine source."""
    source = read_source(path)
    logger.info(f"Isolating main source of {path} ({len(source)} chars)")
    return extract_remainder(source, language)

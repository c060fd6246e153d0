import logging
from pathlib import Path
from typing import Union

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Parser, Tree

# Load TypeScript and TSX grammars. TSX is a superset of plain JavaScript
# (including JSX), so it is used for every non-TypeScript source.
TYPESCRIPT_LANGUAGE = Language(tstypescript.language_typescript())
TSX_LANGUAGE = Language(tstypescript.language_tsx())

logger = logging.getLogger(__name__)

_TYPESCRIPT_SUFFIXES: set[str] = {".ts", ".mts", ".cts"}


def language_for(filename: str) -> Language:
    """
    Pick the grammar for a file name.

    `.d.ts` files end with `.ts` and are parsed as TypeScript as well.
    """
    suffix = Path(filename).suffix.lower()
    if suffix in _TYPESCRIPT_SUFFIXES:
        return TYPESCRIPT_LANGUAGE
    return TSX_LANGUAGE


def parse_source(source: Union[str, bytes], filename: str = "input.js") -> tuple[Tree, bytes]:
    """
    Parse source text into a tree-sitter tree.

    Returns the tree together with the exact bytes that were parsed, since
    every range handed out by the engine is a byte offset into them.
    """
    content = source.encode("utf-8") if isinstance(source, str) else source
    parser = Parser(language_for(filename))
    tree = parser.parse(content)

    if tree.root_node.has_error:
        # Analysis still runs; tree-sitter recovers and wraps the broken
        # region in ERROR nodes.
        logger.warning(f"Syntax errors while parsing {filename}; results may be incomplete")

    return tree, content

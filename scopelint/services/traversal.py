"""
Single-pass traversal dispatcher.

A handler table maps a selector to callbacks. A selector is either a node kind
(``"statement_block"``), which fires when the walk enters a node of that kind,
or the kind with an ``":exit"`` suffix, which fires once the walk leaves that
node's subtree. Several policies share one walk by merging their tables.

The walk itself keeps no state between calls: everything a pass mutates lives
in the callbacks that were registered for it.
"""
from typing import Callable, Dict, List, Mapping, Sequence, Tuple

from tree_sitter import Node

from scopelint.services.errors import ConfigurationError

Handler = Callable[[Node], None]
HandlerTable = Mapping[str, Handler]
MergedTable = Dict[str, List[Handler]]

EXIT_SUFFIX = ":exit"


def parse_selector(selector: str) -> Tuple[str, bool]:
    """Split a selector into ``(kind, is_exit)``."""
    kind = selector
    is_exit = False
    if selector.endswith(EXIT_SUFFIX):
        kind = selector[: -len(EXIT_SUFFIX)]
        is_exit = True

    if not kind or ":" in kind or kind.strip() != kind:
        raise ConfigurationError(f"Invalid selector: {selector!r}")
    return kind, is_exit


def merge_handlers(*tables: HandlerTable) -> MergedTable:
    """
    Combine the tables of several policies into one.

    Callbacks registered for the same selector run in the order their tables
    were passed in.
    """
    merged: MergedTable = {}
    for table in tables:
        for selector, handler in table.items():
            parse_selector(selector)
            if not callable(handler):
                raise ConfigurationError(f"Handler for {selector!r} is not callable")
            merged.setdefault(selector, []).append(handler)
    return merged


def _split(merged: Mapping[str, Sequence[Handler]]) -> Tuple[Dict[str, Sequence[Handler]], Dict[str, Sequence[Handler]]]:
    enter: Dict[str, Sequence[Handler]] = {}
    leave: Dict[str, Sequence[Handler]] = {}
    for selector, handlers in merged.items():
        kind, is_exit = parse_selector(selector)
        (leave if is_exit else enter)[kind] = handlers
    return enter, leave


def traverse(root: Node, handlers: Mapping[str, Sequence[Handler]]) -> None:
    """
    Walk ``root`` in document order, calling enter callbacks in pre-order and
    exit callbacks in post-order.

    Only named nodes are dispatched; anonymous tokens (punctuation, keywords)
    are walked over but never reported. Enter/exit calls nest LIFO, and a
    node without children still gets its exit right after its enter.

    An exception from a callback aborts the walk and propagates unchanged.
    """
    enter, leave = _split(handlers)

    def on_enter(node: Node) -> None:
        if node.is_named:
            for handler in enter.get(node.type, ()):
                handler(node)

    def on_exit(node: Node) -> None:
        if node.is_named:
            for handler in leave.get(node.type, ()):
                handler(node)

    # Tree cursors keep memory flat for deeply nested input; the explicit
    # enter/exit bookkeeping below replaces a recursive walk.
    cursor = root.walk()
    on_enter(root)
    if not cursor.goto_first_child():
        on_exit(root)
        return
    on_enter(cursor.node)

    while True:
        if cursor.goto_first_child():
            on_enter(cursor.node)
            continue

        # Leaf: close it, then climb until a sibling is available.
        on_exit(cursor.node)
        while not cursor.goto_next_sibling():
            cursor.goto_parent()
            on_exit(cursor.node)
            if cursor.node == root:
                return
        on_enter(cursor.node)

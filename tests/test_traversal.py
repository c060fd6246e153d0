import pytest

from scopelint.services.errors import ConfigurationError
from scopelint.services.parsing import parse_source
from scopelint.services.traversal import merge_handlers, parse_selector, traverse


def _recording_table(log, kinds):
    table = {}
    for kind in kinds:
        table[kind] = lambda node, kind=kind: log.append(("enter", kind, node.start_byte))
        table[f"{kind}:exit"] = lambda node, kind=kind: log.append(("exit", kind, node.start_byte))
    return table


def test_parse_selector_splits_exit_suffix() -> None:
    assert parse_selector("statement_block") == ("statement_block", False)
    assert parse_selector("statement_block:exit") == ("statement_block", True)


@pytest.mark.parametrize("selector", ["", ":exit", "a:b", " program", "program:enter"])
def test_parse_selector_rejects_malformed(selector: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_selector(selector)


def test_merge_handlers_rejects_non_callable() -> None:
    with pytest.raises(ConfigurationError):
        merge_handlers({"program": "not a function"})


def test_merge_handlers_keeps_table_order() -> None:
    calls = []
    merged = merge_handlers(
        {"program": lambda n: calls.append("first")},
        {"program": lambda n: calls.append("second")},
    )
    tree, _ = parse_source("let a = 1;")
    traverse(tree.root_node, merged)

    assert calls == ["first", "second"]


def test_enter_and_exit_nest_lifo() -> None:
    tree, _ = parse_source("{ { } }")
    log = []
    traverse(tree.root_node, merge_handlers(_recording_table(log, ["program", "statement_block"])))

    assert [(event, kind) for event, kind, _ in log] == [
        ("enter", "program"),
        ("enter", "statement_block"),
        ("enter", "statement_block"),
        ("exit", "statement_block"),
        ("exit", "statement_block"),
        ("exit", "program"),
    ]
    # Inner block starts after the outer one.
    assert log[1][2] < log[2][2]


def test_every_named_node_entered_once_and_exited_once() -> None:
    tree, _ = parse_source("function f(a) { if (a) { return a + 1; } }")
    entered = []
    exited = []

    def collect(node):
        entered.append(node.id)

    def collect_exit(node):
        exited.append(node.id)

    kinds = set()
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.is_named:
            kinds.add(node.type)
        stack.extend(node.children)

    table = {}
    for kind in kinds:
        table[kind] = collect
        table[f"{kind}:exit"] = collect_exit
    traverse(tree.root_node, merge_handlers(table))

    assert len(entered) == len(set(entered))
    assert sorted(entered) == sorted(exited)


def test_anonymous_tokens_are_not_dispatched() -> None:
    tree, _ = parse_source("a + b;")
    seen = []
    traverse(tree.root_node, merge_handlers({"+": lambda n: seen.append(n)}))

    assert seen == []


def test_empty_program_gets_enter_and_exit() -> None:
    tree, _ = parse_source("")
    log = []
    traverse(tree.root_node, merge_handlers(_recording_table(log, ["program"])))

    assert [(event, kind) for event, kind, _ in log] == [("enter", "program"), ("exit", "program")]


def test_handler_exception_aborts_walk() -> None:
    tree, _ = parse_source("a; b; c;")
    seen = []

    def visit(node):
        seen.append(node.text)
        if node.text == b"b":
            raise RuntimeError("stop")

    with pytest.raises(RuntimeError, match="stop"):
        traverse(tree.root_node, merge_handlers({"identifier": visit}))

    assert seen == [b"a", b"b"]


def test_deeply_nested_input_does_not_recurse() -> None:
    depth = 500
    source = "{" * depth + "}" * depth
    tree, _ = parse_source(source)
    counter = {"blocks": 0}

    def count(node):
        counter["blocks"] += 1

    traverse(tree.root_node, merge_handlers({"statement_block": count}))

    assert counter["blocks"] == depth

from scopelint.config import LintConfig
from scopelint.services.linter import lint_source


def _lint(code: str, filename: str = "input.js"):
    return lint_source(code, filename, LintConfig(rules={"require-await": []}))


def _messages(code: str, filename: str = "input.js"):
    return [d.message for d in _lint(code, filename)]


def test_async_function_without_await_reported() -> None:
    diagnostics = _lint("async function f() { return 1; }")

    assert [d.message for d in diagnostics] == ["Function 'f' has no 'await' expression."]
    # Points at the function head, up to the parameter list.
    assert diagnostics[0].range == (0, 16)


def test_empty_async_function_not_reported() -> None:
    assert _lint("async function f() {}") == []
    assert _lint("async function f() { /* later */ }") == []


def test_async_function_with_await_is_fine() -> None:
    assert _lint("async function f() { await g(); }") == []


def test_for_await_counts_as_await() -> None:
    assert _lint("async function f(xs) { for await (const x of xs) { use(x); } }") == []


def test_await_in_nested_function_does_not_count() -> None:
    code = "async function outer() { return [1].map(async (x) => await x); }"

    assert _messages(code) == ["Function 'outer' has no 'await' expression."]


def test_nested_async_without_await_reported_separately() -> None:
    code = "async function outer() { await inner(); const cb = async () => 1; }"
    diagnostics = _lint(code)

    assert [d.message for d in diagnostics] == ["Arrow function has no 'await' expression."]
    assert code[diagnostics[0].range[0]:diagnostics[0].range[1]] == "=>"


def test_async_generator_not_reported() -> None:
    assert _lint("async function* gen() { yield 1; }") == []
    assert _lint("class A { async *items() { yield 1; } }") == []


def test_sync_function_not_reported() -> None:
    assert _lint("function f() { return 1; }") == []


def test_method_names() -> None:
    code = (
        "class Store {\n"
        "  async load() { return 1; }\n"
        "  static async create() { return new Store(); }\n"
        "}\n"
        "const api = { async fetch() { return 2; } };\n"
    )

    assert _messages(code) == [
        "Method 'load' has no 'await' expression.",
        "Static method 'create' has no 'await' expression.",
        "Method 'fetch' has no 'await' expression.",
    ]


def test_top_level_await_is_ignored() -> None:
    assert _lint("await ready();", filename="input.mjs") == []

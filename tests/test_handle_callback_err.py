import pytest

from scopelint.config import LintConfig
from scopelint.services.errors import ConfigurationError
from scopelint.services.linter import Linter, lint_source


def _lint(code: str, *options):
    return lint_source(code, "input.js", LintConfig(rules={"handle-callback-err": list(options)}))


def test_unused_err_parameter_reported() -> None:
    diagnostics = _lint("function f(err) { doSomething(); }")

    assert [d.message for d in diagnostics] == ["Expected error to be handled."]
    # Anchored on the whole function.
    assert diagnostics[0].range == (0, 34)


def test_other_names_ignored_by_default() -> None:
    assert _lint("function f(error) {}") == []


def test_used_err_parameter_is_fine() -> None:
    assert _lint("function f(err) { if (err) throw err; }") == []


def test_only_first_parameter_is_considered() -> None:
    assert _lint("function f(data, err) { return data; }") == []


def test_arrow_and_function_expression_callbacks() -> None:
    code = (
        "load(function (err, data) { use(data); });\n"
        "load((err) => done());\n"
        "load(err => { handle(err); });\n"
    )
    diagnostics = _lint(code)

    assert [d.line for d in diagnostics] == [1, 2]


def test_default_value_counts_as_use() -> None:
    assert _lint("function f(err = null) {}") == []


def test_regex_option() -> None:
    code = "function a(error) {}\nfunction b(err) {}\nfunction c(myErr) {}\n"
    diagnostics = _lint(code, "^(err|error)$")

    assert [d.line for d in diagnostics] == [1, 2]


def test_exact_name_option() -> None:
    code = "function a(error) {}\nfunction b(err) {}\n"

    assert [d.line for d in _lint(code, "error")] == [1]


def test_invalid_regex_rejected_before_linting() -> None:
    with pytest.raises(ConfigurationError):
        Linter(LintConfig(rules={"handle-callback-err": ["^(unclosed"]}))


def test_non_string_option_rejected() -> None:
    with pytest.raises(ConfigurationError):
        Linter(LintConfig(rules={"handle-callback-err": [42]}))


def test_parameter_shadowing_function_expression_name() -> None:
    diagnostics = _lint("load(function err(err) { done(); });")

    assert [d.message for d in diagnostics] == ["Expected error to be handled."]


def test_parameter_named_arguments() -> None:
    diagnostics = _lint("function f(arguments) { done(); }", "arguments")

    assert len(diagnostics) == 1


def test_implicit_arguments_is_not_a_parameter() -> None:
    assert _lint("function f() { return arguments; }", "arguments") == []

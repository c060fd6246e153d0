from pathlib import Path

import pytest

from scopelint.config import LintConfig
from scopelint.services.diagnostics import Reporter
from scopelint.services.errors import ConfigurationError
from scopelint.services.linter import Linter, lint_source, to_lint_message


SAMPLE = """\
{ var hidden = 1; }
use(hidden);
function cb(err) { return 1; }
async function slow() { return missing; }
const g = (x) =>
  x * 2;
"""


def _summary(diagnostics):
    return [(d.rule_id, d.message, d.range) for d in diagnostics]


def test_all_default_rules_run_in_one_pass() -> None:
    diagnostics = lint_source(SAMPLE)

    assert [(d.rule_id, d.line) for d in diagnostics] == [
        ("no-undef", 2),
        ("block-scoped-var", 2),
        ("handle-callback-err", 3),
        ("require-await", 4),
        ("no-undef", 4),
        ("implicit-arrow-linebreak", 6),
    ]


def test_diagnostics_sorted_by_position() -> None:
    diagnostics = lint_source(SAMPLE)
    starts = [d.range[0] for d in diagnostics]

    assert starts == sorted(starts)


def test_linting_twice_gives_same_result() -> None:
    linter = Linter()

    assert _summary(linter.lint_source(SAMPLE)) == _summary(linter.lint_source(SAMPLE))


def test_rules_are_independent() -> None:
    combined = _summary(lint_source(SAMPLE))
    separate = []
    for rule_id in LintConfig().rules:
        separate.extend(_summary(lint_source(SAMPLE, config=LintConfig(rules={rule_id: []}))))

    assert sorted(combined, key=lambda s: s[2]) == sorted(separate, key=lambda s: s[2])


def test_unknown_rule_rejected() -> None:
    with pytest.raises(ConfigurationError, match="no-such-rule"):
        Linter(LintConfig(rules={"no-such-rule": []}))


def test_options_for_rule_without_options_rejected() -> None:
    with pytest.raises(ConfigurationError):
        Linter(LintConfig(rules={"block-scoped-var": ["extra"]}))


def test_no_rules_no_diagnostics() -> None:
    assert lint_source(SAMPLE, config=LintConfig(rules={})) == []


def test_reporter_keeps_partial_results_when_a_rule_fails(monkeypatch) -> None:
    from scopelint.services.rules.require_await import RequireAwait

    def explode(self, node):
        raise RuntimeError("boom")

    monkeypatch.setattr(RequireAwait, "_finish", explode)
    reporter = Reporter()
    linter = Linter(LintConfig(rules={"require-await": []}))

    with pytest.raises(RuntimeError, match="boom"):
        linter.lint_source("async function f() { return 1; }", reporter=reporter)

    assert [d.rule_id for d in reporter.diagnostics] == ["require-await"]


def test_typescript_sources(tmp_path: Path) -> None:
    source = tmp_path / "service.ts"
    source.write_text(
        "interface Options { retries: number }\n"
        "export async function run(opts: Options): Promise<void> {\n"
        "  await step(opts.retries);\n"
        "}\n",
        encoding="utf-8",
    )
    diagnostics = Linter().lint_file(source)

    assert [(d.rule_id, d.data.get("name")) for d in diagnostics] == [("no-undef", "step")]


def test_to_lint_message_uses_public_field_names() -> None:
    diagnostic = lint_source("const f = () =>\n  1;", config=LintConfig(rules={"implicit-arrow-linebreak": []}))[0]
    message = to_lint_message(diagnostic).model_dump()

    assert message["ruleId"] == "implicit-arrow-linebreak"
    assert message["line"] == 2
    assert message["column"] == 2
    assert message["fix"] == {"range": [15, 18], "text": " "}

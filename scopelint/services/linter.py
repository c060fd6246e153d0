import logging
import time
from pathlib import Path
from typing import Any, List, Optional, Tuple, Type, Union

from scopelint.config import LintConfig
from scopelint.models import FixModel, LintMessage
from scopelint.services.diagnostics import Diagnostic, Reporter, RuleContext
from scopelint.services.parsing import parse_source
from scopelint.services.rules.base import Rule
from scopelint.services.rules.registry import get_rule
from scopelint.services.scope_analysis import analyze_scopes
from scopelint.services.traversal import merge_handlers, traverse

logger = logging.getLogger(__name__)


class Linter:
    """
    Runs every enabled rule over a tree in a single shared traversal.

    Rule ids and options are checked when the linter is built, so a bad
    configuration fails before any source is parsed.
    """

    def __init__(self, config: Optional[LintConfig] = None):
        self.config = config or LintConfig()
        self._rules: List[Tuple[Type[Rule], Any]] = []
        for rule_id, raw_options in self.config.rules.items():
            rule_cls = get_rule(rule_id)
            self._rules.append((rule_cls, rule_cls.validate_options(raw_options)))

    def lint_source(
        self,
        source: Union[str, bytes],
        filename: str = "input.js",
        reporter: Optional[Reporter] = None,
    ) -> List[Diagnostic]:
        """
        Lint one source text and return its diagnostics sorted by position.

        Pass a ``reporter`` to keep hold of whatever was reported before a
        handler raised; the exception itself is not caught here.
        """
        started = time.perf_counter()
        tree, content = parse_source(source, filename)
        scope_manager = analyze_scopes(
            tree.root_node,
            globals_=self.config.globals,
            builtin_globals=self.config.builtin_globals,
        )

        reporter = reporter if reporter is not None else Reporter()
        tables = []
        for rule_cls, options in self._rules:
            context = RuleContext(
                rule_id=rule_cls.id,
                messages=rule_cls.messages,
                options=[] if options is None else [options],
                tree=tree,
                source=content,
                scope_manager=scope_manager,
                reporter=reporter,
                filename=filename,
            )
            tables.append(rule_cls(context, options).handlers())

        traverse(tree.root_node, merge_handlers(*tables))

        diagnostics = reporter.sorted()
        logger.debug(
            f"Linted {filename} with {len(tables)} rule(s): {len(diagnostics)} diagnostic(s) "
            f"in {(time.perf_counter() - started) * 1000:.1f}ms"
        )
        return diagnostics

    def lint_file(self, file_path: Union[str, Path]) -> List[Diagnostic]:
        path = Path(file_path)
        return self.lint_source(path.read_bytes(), str(path))


def lint_source(source: Union[str, bytes], filename: str = "input.js", config: Optional[LintConfig] = None) -> List[Diagnostic]:
    return Linter(config).lint_source(source, filename)


def to_lint_message(diagnostic: Diagnostic) -> LintMessage:
    fix = None
    if diagnostic.fix is not None:
        fix = FixModel(range=list(diagnostic.fix.range), text=diagnostic.fix.text)
    return LintMessage(
        ruleId=diagnostic.rule_id,
        messageId=diagnostic.message_id,
        message=diagnostic.message,
        line=diagnostic.line,
        column=diagnostic.column,
        endLine=diagnostic.end_line,
        endColumn=diagnostic.end_column,
        startOffset=diagnostic.range[0],
        endOffset=diagnostic.range[1],
        fix=fix,
    )

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from tree_sitter import Node, Tree

from scopelint.services.ast_utils import node_range
from scopelint.services.scope_analysis import ScopeManager

Range = Tuple[int, int]


@dataclass(frozen=True)
class Fix:
    """
    A suggested edit: replace ``range`` of the source with ``text``.

    An insertion is a replacement of an empty range.
    """
    range: Range
    text: str

    @property
    def is_insertion(self) -> bool:
        return self.range[0] == self.range[1]

    @classmethod
    def replace_range(cls, range_: Range, text: str) -> "Fix":
        return cls(range=(range_[0], range_[1]), text=text)

    @classmethod
    def insert_before(cls, node: Node, text: str) -> "Fix":
        return cls(range=(node.start_byte, node.start_byte), text=text)


@dataclass(frozen=True)
class Diagnostic:
    rule_id: str
    message_id: str
    message: str
    node: Node
    range: Range
    # 1-based line, 0-based column
    line: int
    column: int
    end_line: int
    end_column: int
    data: Mapping[str, Any] = field(default_factory=dict)
    fix: Optional[Fix] = None

    @property
    def sort_key(self) -> Tuple[int, int]:
        return self.range


def _point_for(content: bytes, offset: int) -> Tuple[int, int]:
    """1-based line and 0-based byte column for an offset into ``content``."""
    line = content.count(b"\n", 0, offset) + 1
    line_start = content.rfind(b"\n", 0, offset) + 1
    return line, offset - line_start


class Reporter:
    """Collects diagnostics in the order they are reported."""

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def sorted(self) -> List[Diagnostic]:
        # sorted() is stable, so diagnostics at the same position keep report order.
        return sorted(self._diagnostics, key=lambda d: d.sort_key)

    def __len__(self) -> int:
        return len(self._diagnostics)


class RuleContext:
    """Everything a rule may look at while the shared traversal runs."""

    def __init__(
        self,
        *,
        rule_id: str,
        messages: Mapping[str, str],
        options: Sequence[Any],
        tree: Tree,
        source: bytes,
        scope_manager: ScopeManager,
        reporter: Reporter,
        filename: str = "input.js",
    ):
        self.rule_id = rule_id
        self.messages = messages
        self.options = list(options)
        self.tree = tree
        self.source = source
        self.scope_manager = scope_manager
        self.filename = filename
        self._reporter = reporter

    def report(
        self,
        node: Node,
        message_id: str,
        data: Optional[Dict[str, Any]] = None,
        *,
        fix: Optional[Fix] = None,
        range: Optional[Range] = None,
    ) -> Diagnostic:
        """
        Record a finding anchored at ``node``. ``range`` narrows the reported
        location (e.g. to a function head) without changing the anchor.
        """
        template = self.messages.get(message_id)
        if template is None:
            raise KeyError(f"{self.rule_id}: unknown message id {message_id!r}")

        data = dict(data or {})
        start, end = range if range is not None else node_range(node)
        line, column = _point_for(self.source, start)
        end_line, end_column = _point_for(self.source, end)

        diagnostic = Diagnostic(
            rule_id=self.rule_id,
            message_id=message_id,
            message=template.format(**data),
            node=node,
            range=(start, end),
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
            data=data,
            fix=fix,
        )
        self._reporter.add(diagnostic)
        return diagnostic

from typing import Dict, Literal

from pydantic import RootModel
from tree_sitter import Node

from scopelint.services.ast_utils import first_token, get_arrow_token
from scopelint.services.diagnostics import Fix
from scopelint.services.rules.base import Rule
from scopelint.services.traversal import Handler


class ArrowBodyPlacement(RootModel[Literal["beside", "below"]]):
    root: Literal["beside", "below"] = "beside"


class ImplicitArrowLinebreak(Rule):
    """Enforce where the expression body of an arrow function starts, relative to `=>`."""

    id = "implicit-arrow-linebreak"
    description = "Enforce the location of arrow function bodies"
    messages = {
        "expected": "Expected a linebreak before this expression.",
        "unexpected": "Expected no linebreak before this expression.",
    }
    fixable = True
    options_model = ArrowBodyPlacement

    @classmethod
    def validate_options(cls, raw):
        if not raw:
            return ArrowBodyPlacement()
        return super().validate_options(raw)

    @property
    def placement(self) -> str:
        return self.options.root if self.options is not None else "beside"

    def _has_comment_between(self, start: int, end: int) -> bool:
        # Only whitespace and comments can sit between `=>` and the body.
        return bool(self.context.source[start:end].strip())

    def _validate_expression(self, node: Node) -> None:
        body = node.child_by_field_name("body")
        if body is None or body.type == "statement_block":
            return

        arrow = get_arrow_token(node)
        if arrow is None:
            return
        first = first_token(body)
        same_line = arrow.end_point.row == first.start_point.row

        if same_line and self.placement == "below":
            self.context.report(first, "expected", fix=Fix.insert_before(first, "\n"))
        elif not same_line and self.placement == "beside":
            fix = None
            if not self._has_comment_between(arrow.end_byte, first.start_byte):
                fix = Fix.replace_range((arrow.end_byte, first.start_byte), " ")
            self.context.report(first, "unexpected", fix=fix)

    def handlers(self) -> Dict[str, Handler]:
        return {"arrow_function": self._validate_expression}

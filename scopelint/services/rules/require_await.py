from typing import Dict

from tree_sitter import Node

from scopelint.services.ast_utils import (
    FUNCTION_KINDS,
    capitalize_first_letter,
    get_function_head_range,
    get_function_name_with_kind,
    has_token,
    is_async,
    is_empty_function,
    is_generator,
)
from scopelint.services.frame_stack import FrameStack, FunctionFrame
from scopelint.services.rules.base import Rule
from scopelint.services.traversal import Handler


class RequireAwait(Rule):
    """
    Report async functions that never suspend.

    Each function gets its own frame; an `await` (or a `for await` loop) only
    marks the innermost function, so awaiting inside a nested callback does
    not count for the function around it. Generators and functions with an
    empty body are never reported.
    """

    id = "require-await"
    description = "Disallow async functions which have no `await` expression"
    messages = {
        "missingAwait": "{name} has no 'await' expression.",
    }

    def __init__(self, context, options=None):
        super().__init__(context, options)
        self.functions: FrameStack[FunctionFrame] = FrameStack(self.id)

    def _enter_function(self, node: Node) -> None:
        self.functions.push(FunctionFrame(kind=node.type))

    def _exit_function(self, node: Node) -> None:
        frame = self.functions.current
        if (
            is_async(node)
            and not is_generator(node)
            and not frame.has_await
            and not is_empty_function(node)
        ):
            name = get_function_name_with_kind(node, include_async=False)
            self.context.report(
                node,
                "missingAwait",
                {"name": capitalize_first_letter(name)},
                range=get_function_head_range(node),
            )
        self.functions.pop()

    def _mark_await(self, node: Node) -> None:
        # Top-level await has no enclosing function to credit.
        frame = self.functions.current_or_none
        if frame is not None:
            frame.has_await = True

    def _check_for_await(self, node: Node) -> None:
        if has_token(node, "await"):
            self._mark_await(node)

    def _finish(self, node: Node) -> None:
        self.functions.assert_depth(0)

    def handlers(self) -> Dict[str, Handler]:
        table: Dict[str, Handler] = {}
        for kind in FUNCTION_KINDS:
            table[kind] = self._enter_function
            table[f"{kind}:exit"] = self._exit_function
        table["await_expression"] = self._mark_await
        table["for_in_statement"] = self._check_for_await
        table["program:exit"] = self._finish
        return table

from typing import Dict

from tree_sitter import Node

from scopelint.services.ast_utils import BLOCK_FRAME_KINDS, declaration_kind, node_range
from scopelint.services.classify import references_outside
from scopelint.services.frame_stack import FrameStack, ScopeFrame
from scopelint.services.rules.base import Rule
from scopelint.services.traversal import Handler


class BlockScopedVar(Rule):
    """
    Treat `var` as if it were block scoped: every reference to a `var` binding
    must sit inside the block, loop, switch, catch clause or static block that
    was innermost where the declaration appeared.
    """

    id = "block-scoped-var"
    description = "Enforce the use of variables within the scope they are defined"
    messages = {
        "outOfScope": "'{name}' used outside of binding context.",
    }

    def __init__(self, context, options=None):
        super().__init__(context, options)
        self.frames: FrameStack[ScopeFrame] = FrameStack(self.id)

    def _start(self, node: Node) -> None:
        self.frames.reset(ScopeFrame(range=node_range(node), kind=node.type))

    def _finish(self, node: Node) -> None:
        self.frames.assert_depth(1)

    def _enter_frame(self, node: Node) -> None:
        self.frames.push(ScopeFrame(range=node_range(node), kind=node.type))

    def _exit_frame(self, node: Node) -> None:
        self.frames.pop()

    def _check_declaration(self, node: Node) -> None:
        if declaration_kind(node) != "var":
            return

        frame_range = self.frames.current.range
        for binding in self.context.scope_manager.get_declared_bindings(node):
            for ref in references_outside(binding.references, frame_range):
                self.context.report(ref.identifier, "outOfScope", {"name": ref.name})

    def _enter_for_in(self, node: Node) -> None:
        # `for (var k in obj)` declares inside the loop's own frame.
        self._enter_frame(node)
        self._check_declaration(node)

    def handlers(self) -> Dict[str, Handler]:
        table: Dict[str, Handler] = {
            "program": self._start,
            "program:exit": self._finish,
            "variable_declaration": self._check_declaration,
        }
        for kind in BLOCK_FRAME_KINDS:
            table[kind] = self._enter_frame
            table[f"{kind}:exit"] = self._exit_frame
        table["for_in_statement"] = self._enter_for_in
        return table

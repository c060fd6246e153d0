from typing import Any, Dict, Sequence

from tree_sitter import Node

from scopelint.services.ast_utils import FUNCTION_KINDS
from scopelint.services.classify import NamePattern, first_parameter, is_unused
from scopelint.services.errors import ConfigurationError
from scopelint.services.rules.base import Rule
from scopelint.services.traversal import Handler

DEFAULT_ERROR_NAME = "err"


class HandleCallbackErr(Rule):
    """
    Flag callbacks that take an error-shaped first parameter and never use it.

    Only the first parameter is ever inspected. The option is the parameter
    name to look for; a value starting with ``^`` is a regular expression.
    """

    id = "handle-callback-err"
    description = "Require error handling in callbacks"
    messages = {
        "expected": "Expected error to be handled.",
    }

    @classmethod
    def validate_options(cls, raw: Sequence[Any]) -> NamePattern:
        if len(raw) > 1:
            raise ConfigurationError(f"{cls.id}: expected at most one option, got {len(raw)}")
        value = raw[0] if raw else DEFAULT_ERROR_NAME
        if not isinstance(value, str):
            raise ConfigurationError(f"{cls.id}: option must be a string, got {value!r}")
        return NamePattern(value or DEFAULT_ERROR_NAME)

    def _check_function(self, node: Node) -> None:
        scope = self.context.scope_manager.acquire(node)
        if scope is None:
            return

        param = first_parameter(list(scope.bindings.values()))
        if param is not None and self.options.matches(param.name) and is_unused(param):
            self.context.report(node, "expected")

    def handlers(self) -> Dict[str, Handler]:
        return {kind: self._check_function for kind in FUNCTION_KINDS}

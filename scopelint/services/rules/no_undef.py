from typing import Dict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool
from tree_sitter import Node

from scopelint.services.classify import should_skip_free_reference
from scopelint.services.rules.base import Rule
from scopelint.services.traversal import Handler


class NoUndefOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    consider_type_query: StrictBool = Field(
        default=False,
        validation_alias=AliasChoices("typeof", "considerTypeQuery", "considerTypeOf", "consider_type_query"),
    )


class NoUndef(Rule):
    """Report references that resolve to no declaration, configured global or `/* global */` name."""

    id = "no-undef"
    description = "Disallow the use of undeclared variables unless mentioned in `/*global */` comments"
    messages = {
        "undef": "'{name}' is not defined.",
    }
    options_model = NoUndefOptions

    def _check_program(self, node: Node) -> None:
        consider_type_query = self.options.consider_type_query if self.options else False
        for ref in self.context.scope_manager.global_scope.through:
            if should_skip_free_reference(ref, consider_type_query):
                continue
            self.context.report(ref.identifier, "undef", {"name": ref.name})

    def handlers(self) -> Dict[str, Handler]:
        return {"program:exit": self._check_program}

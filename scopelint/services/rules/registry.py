from typing import Dict, List, Type

from scopelint.services.errors import ConfigurationError
from scopelint.services.rules.base import Rule
from scopelint.services.rules.block_scoped_var import BlockScopedVar
from scopelint.services.rules.handle_callback_err import HandleCallbackErr
from scopelint.services.rules.implicit_arrow_linebreak import ImplicitArrowLinebreak
from scopelint.services.rules.no_undef import NoUndef
from scopelint.services.rules.require_await import RequireAwait

RULES: Dict[str, Type[Rule]] = {
    rule.id: rule
    for rule in (
        BlockScopedVar,
        NoUndef,
        HandleCallbackErr,
        RequireAwait,
        ImplicitArrowLinebreak,
    )
}


def get_rule(rule_id: str) -> Type[Rule]:
    try:
        return RULES[rule_id]
    except KeyError:
        raise ConfigurationError(f"Unknown rule: {rule_id!r}") from None


def list_rules() -> List[Type[Rule]]:
    return [RULES[rule_id] for rule_id in sorted(RULES)]

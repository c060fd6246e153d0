from typing import Any, ClassVar, Dict, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError

from scopelint.services.diagnostics import RuleContext
from scopelint.services.errors import ConfigurationError
from scopelint.services.traversal import Handler


class Rule:
    """
    A policy run during the shared traversal.

    Subclasses describe themselves through class attributes and return their
    selector table from ``handlers()``. One instance is created per linted
    tree, so whatever state a rule keeps on ``self`` belongs to that pass only.
    """

    id: ClassVar[str]
    description: ClassVar[str]
    messages: ClassVar[Dict[str, str]]
    fixable: ClassVar[bool] = False
    # Positional options accepted by the rule: at most one value, validated
    # against this model (or kept as-is when the rule overrides validation).
    options_model: ClassVar[Optional[Type[BaseModel]]] = None

    def __init__(self, context: RuleContext, options: Any = None):
        self.context = context
        self.options = options

    @classmethod
    def validate_options(cls, raw: Sequence[Any]) -> Any:
        """Check raw options before any tree is parsed. Raises ConfigurationError."""
        if cls.options_model is None:
            if raw:
                raise ConfigurationError(f"{cls.id}: takes no options, got {list(raw)!r}")
            return None

        if len(raw) > 1:
            raise ConfigurationError(f"{cls.id}: expected at most one option, got {len(raw)}")
        try:
            return cls.options_model.model_validate(raw[0] if raw else {})
        except ValidationError as exc:
            raise ConfigurationError(f"{cls.id}: invalid options: {exc}") from exc

    def handlers(self) -> Dict[str, Handler]:
        raise NotImplementedError

"""
Reference classification helpers shared by the policies.

These functions only look at ranges, names and the reference records handed
out by the binding index; none of them walks the tree on its own.
"""
import re
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from scopelint.services.errors import ConfigurationError
from scopelint.services.scope_analysis import Binding, Reference

Range = Tuple[int, int]


def range_contains(outer: Range, inner: Range) -> bool:
    """True if ``inner`` lies fully within ``outer`` (both half-open)."""
    return outer[0] <= inner[0] and inner[1] <= outer[1]


def references_outside(references: Iterable[Reference], frame_range: Range) -> List[Reference]:
    """References whose identifier is not fully contained in ``frame_range``, in order."""
    return [ref for ref in references if not range_contains(frame_range, ref.range)]


def should_skip_free_reference(reference: Reference, consider_type_query: bool) -> bool:
    """Free references used only as `typeof` operands are a safe idiom unless asked otherwise."""
    return not consider_type_query and reference.in_type_query


def first_parameter(bindings: Sequence[Binding]) -> Optional[Binding]:
    """The first binding whose first definition is a parameter, in declaration order."""
    for binding in bindings:
        if binding.defs and binding.defs[0] == "param":
            return binding
    return None


def is_unused(binding: Binding) -> bool:
    return len(binding.references) == 0


class NamePattern:
    """
    Matches candidate names against a configured string.

    A string starting with ``^`` is a regular expression (searched, so the
    leading anchor does the anchoring); anything else must match exactly.
    The expression is compiled up front so a bad pattern fails during setup.
    """

    def __init__(self, configured: str):
        self.configured = configured
        self._regex: Optional[Pattern[str]] = None
        if configured.startswith("^"):
            try:
                self._regex = re.compile(configured)
            except re.error as exc:
                raise ConfigurationError(f"Invalid name pattern {configured!r}: {exc}") from exc

    def matches(self, name: str) -> bool:
        if self._regex is not None:
            return self._regex.search(name) is not None
        return name == self.configured

    def __repr__(self) -> str:
        return f"NamePattern({self.configured!r})"

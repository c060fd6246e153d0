class LintError(Exception):
    """Base class for failures of the lint engine itself (never for findings)."""


class ConfigurationError(LintError, ValueError):
    """
    Raised while rules are being set up, before any traversal starts.

    Covers unknown rule ids, option values that fail validation and name
    patterns that are not valid regular expressions.
    """


class TraversalError(LintError, RuntimeError):
    """
    An internal invariant broke during a pass, e.g. a frame stack underflow on
    an unmatched exit. This points at an engine bug, not at the linted code.
    """

from typing import Any, Dict, List, Set, Tuple

from pydantic import BaseModel, Field

IGNORE_DIRS: Set[str] = {
    '.git',
    'node_modules',
    'venv',
    '.venv',
    '__pycache__',
    'dist',
    'build',
    '.next',
    'coverage',
    '.idea',
    '.vscode',
    'target',
    'out',
}

IGNORE_FILES: Set[str] = {
    'package-lock.json', 'yarn.lock', 'pnpm-lock.yaml',
}

# Minified bundles are generated code; linting them only produces noise.
IGNORE_SUFFIXES: Tuple[str, ...] = ('.min.js', '.min.mjs', '.bundle.js')

SOURCE_EXTENSIONS: Set[str] = {
    '.js', '.jsx', '.mjs', '.cjs',
    '.ts', '.tsx', '.mts', '.cts',
}

# Names treated as declared in every program unless `builtin_globals` is off.
BUILTIN_GLOBALS: Set[str] = {
    # JS/TS builtins
    "console",
    "Math",
    "JSON",
    "Promise",
    "Array",
    "String",
    "Number",
    "Boolean",
    "Date",
    "RegExp",
    "Set",
    "Map",
    "WeakMap",
    "WeakSet",
    "Error",
    "EvalError",
    "TypeError",
    "RangeError",
    "ReferenceError",
    "SyntaxError",
    "URIError",
    "Symbol",
    "BigInt",
    "Intl",
    "Proxy",
    "Reflect",
    "Atomics",
    "DataView",
    "ArrayBuffer",
    "SharedArrayBuffer",
    "AggregateError",
    "FinalizationRegistry",
    "WeakRef",
    "Object",
    "Function",
    "eval",
    "escape",
    "unescape",
    "WebAssembly",
    "Iterator",
    "undefined",
    "isNaN",
    "isFinite",
    "parseInt",
    "parseFloat",
    "encodeURI",
    "encodeURIComponent",
    "decodeURI",
    "decodeURIComponent",
    "NaN",
    "Infinity",
    # Typed Arrays
    "Int8Array",
    "Uint8Array",
    "Uint8ClampedArray",
    "Int16Array",
    "Uint16Array",
    "Int32Array",
    "Uint32Array",
    "Float32Array",
    "Float64Array",
    "BigInt64Array",
    "BigUint64Array",
    # Fetch / Streams
    "fetch",
    "Request",
    "Response",
    "Headers",
    "URL",
    "URLSearchParams",
    "ReadableStream",
    "WritableStream",
    "TransformStream",
    "TextEncoder",
    "TextDecoder",
    # Environment / Global
    "window",
    "document",
    "globalThis",
    "process",
    "Buffer",
    "navigator",
    "location",
    "history",
    "performance",
    "structuredClone",
    "queueMicrotask",
    "setTimeout",
    "clearTimeout",
    "setInterval",
    "clearInterval",
    "requestAnimationFrame",
    "cancelAnimationFrame",
    "localStorage",
    "sessionStorage",
    "alert",
    "confirm",
    "prompt",
    "Event",
    "CustomEvent",
    "HTMLElement",
    "Element",
    "Node",
    "AbortController",
    "AbortSignal",
    "crypto",
    # Node.js legacy/common
    "require",
    "module",
    "exports",
    "__dirname",
    "__filename",
}

# Rule ids enabled (with default options) when a config does not list any.
DEFAULT_RULES: Tuple[str, ...] = (
    "block-scoped-var",
    "no-undef",
    "handle-callback-err",
    "require-await",
    "implicit-arrow-linebreak",
)


def _default_rules() -> Dict[str, List[Any]]:
    return {rule_id: [] for rule_id in DEFAULT_RULES}


class LintConfig(BaseModel):
    """
    What to run and with which options.

    ``rules`` maps a rule id to its option list (ESLint-style positional
    options, e.g. ``{"handle-callback-err": ["^(err|error)$"]}``); a rule that
    is not listed does not run.
    """
    rules: Dict[str, List[Any]] = Field(default_factory=_default_rules)
    # Extra names declared in the global scope.
    globals: List[str] = Field(default_factory=list)
    builtin_globals: bool = True

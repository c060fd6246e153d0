"""
Declared-binding index for JavaScript/TypeScript trees.

Built once per tree, before any rule runs, with two dispatcher passes:

1. definitions: open scopes and record every binding (hoisting ``var`` to the
   nearest function-like scope), remembering which identifier nodes sit in a
   binding position;
2. references: every other identifier becomes a reference, which is then
   resolved by walking the scope chain outwards.

References that resolve nowhere end up in ``global_scope.through``.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node

from scopelint.config import BUILTIN_GLOBALS
from scopelint.services.ast_utils import (
    FUNCTION_KINDS,
    declaration_kind,
    is_type_query_operand,
    node_range,
    node_text,
)
from scopelint.services.traversal import merge_handlers, traverse

logger = logging.getLogger(__name__)

Range = Tuple[int, int]

_FUNCTION_LIKE_SCOPES: frozenset[str] = frozenset({"global", "function", "class-static-block"})

_SCOPE_NODE_KINDS: frozenset[str] = FUNCTION_KINDS | {
    "class_static_block",
    "statement_block",
    "for_statement",
    "for_in_statement",
    "switch_statement",
    "catch_clause",
    "class",
}

# Subtrees that only describe types; identifiers in them are not value references.
_TYPE_CONTEXT_KINDS: frozenset[str] = frozenset({
    "type_annotation",
    "opting_type_annotation",
    "omitting_type_annotation",
    "adding_type_annotation",
    "asserts_annotation",
    "type_predicate_annotation",
    "type_alias_declaration",
    "interface_declaration",
    "type_arguments",
    "type_parameters",
    "implements_clause",
    "function_signature",
    "method_signature",
    "abstract_method_signature",
    "index_signature",
    "property_signature",
    "ambient_declaration",
})

_JSX_TAG_PARENTS: frozenset[str] = frozenset({
    "jsx_opening_element",
    "jsx_closing_element",
    "jsx_self_closing_element",
})

_IMPORT_PARENTS: frozenset[str] = frozenset({
    "import_specifier",
    "namespace_import",
    "import_clause",
    "named_imports",
})

_DESTRUCTURING_PARENTS: frozenset[str] = frozenset({
    "array_pattern",
    "object_pattern",
    "pair_pattern",
    "rest_pattern",
})

_GLOBAL_COMMENT = re.compile(r"^/\*\s*globals?\s(?P<body>.*?)\*/$", re.DOTALL)


@dataclass(eq=False)
class Reference:
    identifier: Node
    name: str
    from_scope: "Scope"
    resolved: Optional["Binding"] = None
    is_read: bool = True
    is_write: bool = False
    # Write performed by the declaration itself (`var x = 1`, `(a = 1) => a`).
    init: bool = False
    # Sole operand of a `typeof` operator.
    in_type_query: bool = False

    @property
    def range(self) -> Range:
        return node_range(self.identifier)


@dataclass(eq=False)
class Binding:
    name: str
    # "var" | "let" | "const" | "param" | "function" | "class" | "import"
    # | "catch" | "enum" | "namespace" | "implicit" | "global"
    kind: str
    scope: "Scope"
    identifiers: List[Node] = field(default_factory=list)
    defs: List[str] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)


@dataclass(eq=False)
class Scope:
    # "global" | "function" | "function-expression-name" | "class-static-block"
    # | "block" | "for" | "switch" | "catch" | "class"
    type: str
    node: Node
    upper: Optional["Scope"]
    bindings: Dict[str, Binding] = field(default_factory=dict)
    references: List[Reference] = field(default_factory=list)
    # References made in this scope (or below) that did not resolve here.
    through: List[Reference] = field(default_factory=list)
    children: List["Scope"] = field(default_factory=list)

    @property
    def range(self) -> Range:
        return node_range(self.node)

    @property
    def is_function_like(self) -> bool:
        return self.type in _FUNCTION_LIKE_SCOPES

    def variable_scope(self) -> "Scope":
        """Nearest scope that receives hoisted `var` declarations."""
        scope: Scope = self
        while not scope.is_function_like and scope.upper is not None:
            scope = scope.upper
        return scope

    def resolve(self, name: str) -> Optional[Binding]:
        scope: Optional[Scope] = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.upper
        return None


class ScopeManager:
    """Lookups over a finished analysis. Read-only for rules."""

    def __init__(self, global_scope: Scope, scopes: List[Scope], scope_by_node: Dict[int, Scope], declared: Dict[int, List[Binding]]):
        self.global_scope = global_scope
        self.scopes = scopes
        self._scope_by_node = scope_by_node
        self._declared = declared

    def acquire(self, node: Node) -> Optional[Scope]:
        """The scope introduced by ``node``, if it introduces one."""
        return self._scope_by_node.get(node.id)

    def get_declared_bindings(self, node: Node) -> List[Binding]:
        """Bindings introduced by a declaration node, in declaration order."""
        return list(self._declared.get(node.id, ()))


def collect_pattern_identifiers(pattern: Node) -> List[Node]:
    """
    Identifiers bound by a binding pattern, in source order.

    Default values (`{ a = b }`, `[x = y]`) and computed keys are expressions,
    not bindings, and are left to the reference pass.
    """
    idents: List[Node] = []
    stack: List[Node] = [pattern]
    while stack:
        x = stack.pop()
        if x.type in {"identifier", "shorthand_property_identifier_pattern", "shorthand_property_identifier"}:
            idents.append(x)
            continue

        children: List[Node] = []
        if x.type == "pair_pattern":
            value = x.child_by_field_name("value")
            if value is not None:
                children = [value]
        elif x.type in {"assignment_pattern", "object_assignment_pattern"}:
            left = x.child_by_field_name("left")
            if left is not None:
                children = [left]
        elif x.type in {"object_pattern", "array_pattern", "rest_pattern"}:
            children = list(x.named_children)
        elif x.type in {"required_parameter", "optional_parameter"}:
            inner = x.child_by_field_name("pattern")
            if inner is not None:
                children = [inner]
        # Anything else (member expressions, `this`, comments) binds nothing.

        stack.extend(reversed(children))
    return idents


def _global_comment_names(comment: Node) -> Iterable[Tuple[str, bool]]:
    """Yield ``(name, enabled)`` pairs from a `/* global a, b:off */` comment."""
    match = _GLOBAL_COMMENT.match(node_text(comment))
    if not match:
        return
    for item in re.split(r"[\s,]+", match.group("body")):
        if not item:
            continue
        name, _, value = item.partition(":")
        if name:
            yield name, value.strip().lower() != "off"


class _ScopeBuilder:
    """Runs the definition and reference passes over one tree."""

    def __init__(self, root: Node, globals_: Iterable[str], builtin_globals: bool):
        self.root = root
        self.scopes: List[Scope] = []
        self.scope_by_node: Dict[int, Scope] = {}
        self.declared: Dict[int, List[Binding]] = {}
        self.declaration_ids: Set[int] = set()
        self.references: List[Reference] = []
        self.stack: List[Scope] = []
        self._type_depth = 0

        self.global_scope = self._new_scope("global", root, None)
        self.scope_by_node[root.id] = self.global_scope

        # name -> enabled; `/* global */` comments are merged in during pass 1.
        self.global_names: Dict[str, bool] = {}
        if builtin_globals:
            self.global_names.update((name, True) for name in BUILTIN_GLOBALS)
        self.global_names.update((name, True) for name in globals_)

    # --- scope bookkeeping ---

    @property
    def current(self) -> Scope:
        return self.stack[-1]

    def _new_scope(self, scope_type: str, node: Node, upper: Optional[Scope]) -> Scope:
        scope = Scope(type=scope_type, node=node, upper=upper)
        if upper is not None:
            upper.children.append(scope)
        self.scopes.append(scope)
        return scope

    def _scope_type(self, node: Node) -> Optional[str]:
        if node.type in FUNCTION_KINDS:
            return "function"
        if node.type == "class_static_block":
            return "class-static-block"
        if node.type == "statement_block":
            parent = node.parent
            # Function and static-block bodies share the scope of their owner.
            if parent is not None and (parent.type in FUNCTION_KINDS or parent.type == "class_static_block"):
                return None
            return "block"
        if node.type in {"for_statement", "for_in_statement"}:
            return "for"
        if node.type == "switch_statement":
            return "switch"
        if node.type == "catch_clause":
            return "catch"
        if node.type == "class" and node.child_by_field_name("name") is not None:
            return "class"
        return None

    def _define(self, scope: Scope, name_node: Node, kind: str, declaration: Node) -> Binding:
        name = node_text(name_node)
        binding = scope.bindings.get(name)
        if binding is None:
            binding = Binding(name=name, kind=kind, scope=scope)
            scope.bindings[name] = binding
        elif not binding.defs:
            # An implicit binding (`arguments`, a global) redeclared in source.
            binding.kind = kind
        binding.identifiers.append(name_node)
        binding.defs.append(kind)
        self.declaration_ids.add(name_node.id)

        declared = self.declared.setdefault(declaration.id, [])
        if binding not in declared:
            declared.append(binding)
        return binding

    def _define_implicit(self, scope: Scope, name: str, kind: str) -> None:
        if name not in scope.bindings:
            scope.bindings[name] = Binding(name=name, kind=kind, scope=scope)

    def _add_init_reference(self, binding: Binding, name_node: Node) -> None:
        ref = Reference(
            identifier=name_node,
            name=binding.name,
            from_scope=self.current,
            resolved=binding,
            is_read=False,
            is_write=True,
            init=True,
        )
        binding.references.append(ref)
        self.current.references.append(ref)

    def _define_pattern(self, scope: Scope, pattern: Node, kind: str, declaration: Node, initialized: bool) -> None:
        for ident in collect_pattern_identifiers(pattern):
            binding = self._define(scope, ident, kind, declaration)
            if initialized:
                self._add_init_reference(binding, ident)

    # --- pass 1: definitions ---

    def _enter_scope(self, node: Node) -> None:
        scope_type = self._scope_type(node)
        if scope_type is None:
            return

        if node.type in {"function_declaration", "generator_function_declaration"}:
            # The declared name belongs to the enclosing scope.
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                self._define(self.current, name_node, "function", node)

        upper = self.current
        if node.type in {"function_expression", "generator_function"}:
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                # The name of a function expression gets its own scope between
                # the enclosing scope and the function scope.
                upper = self._new_scope("function-expression-name", node, upper)
                self._define(upper, name_node, "function", node)

        scope = self._new_scope(scope_type, node, upper)
        self.scope_by_node[node.id] = scope
        self.stack.append(scope)

        if scope_type == "function":
            self._declare_function(node, scope)
        elif scope_type == "catch":
            param = node.child_by_field_name("parameter")
            if param is not None:
                self._define_pattern(scope, param, "catch", node, initialized=False)
        elif scope_type == "class":
            self._define(scope, node.child_by_field_name("name"), "class", node)
        elif node.type == "for_in_statement":
            kind = declaration_kind(node)
            left = node.child_by_field_name("left")
            if kind is not None and left is not None:
                target = scope.variable_scope() if kind == "var" else scope
                self._define_pattern(target, left, kind, node, initialized=True)

    def _declare_function(self, node: Node, scope: Scope) -> None:
        if node.type != "arrow_function":
            self._define_implicit(scope, "arguments", "implicit")

        single = node.child_by_field_name("parameter")
        if single is not None:
            self._define(scope, single, "param", node)
            return

        params = node.child_by_field_name("parameters")
        if params is None:
            return
        for param in params.named_children:
            if param.type in {"required_parameter", "optional_parameter"}:
                pattern = param.child_by_field_name("pattern")
                has_default = param.child_by_field_name("value") is not None
                if pattern is not None:
                    self._define_pattern(scope, pattern, "param", node, initialized=has_default)
            elif param.type == "assignment_pattern":
                left = param.child_by_field_name("left")
                if left is not None:
                    self._define_pattern(scope, left, "param", node, initialized=True)
            elif param.type != "comment":
                self._define_pattern(scope, param, "param", node, initialized=False)

    def _exit_scope(self, node: Node) -> None:
        if node.id in self.scope_by_node and node != self.root:
            self.stack.pop()

    def _declare_variables(self, node: Node) -> None:
        kind = declaration_kind(node) or "var"
        target = self.current.variable_scope() if kind == "var" else self.current
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None:
                continue
            initialized = declarator.child_by_field_name("value") is not None
            self._define_pattern(target, name_node, kind, node, initialized=initialized)

    def _declare_class(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            self._define(self.current, name_node, "class", node)

    def _declare_enum(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            self._define(self.current, name_node, "enum", node)

    def _define_first_identifier(self, node: Node, kind: str, declaration: Node) -> None:
        for child in node.named_children:
            if child.type == "identifier":
                self._define(self.current, child, kind, declaration)
                return

    def _declare_namespace(self, node: Node) -> None:
        # `namespace A.B.C {}` binds `A`; `declare module "x" {}` binds nothing.
        name_node = node.child_by_field_name("name")
        while name_node is not None and name_node.type in {"nested_identifier", "member_expression"}:
            name_node = name_node.named_children[0] if name_node.named_children else None
        if name_node is not None and name_node.type == "identifier":
            self._define(self.current, name_node, "namespace", node)

    def _declare_function_signature(self, node: Node) -> None:
        # `declare function f(): void;` and overload signatures.
        name_node = node.child_by_field_name("name")
        if name_node is not None and name_node.type == "identifier":
            self._define(self.current, name_node, "function", node)

    def _declare_import_alias(self, node: Node) -> None:
        # import Alias = Namespace.Member;
        self._define_first_identifier(node, "import", node)

    def _read_global_comment(self, node: Node) -> None:
        self.global_names.update(_global_comment_names(node))

    def _declare_globals(self) -> None:
        for name, enabled in self.global_names.items():
            if enabled:
                self._define_implicit(self.global_scope, name, "global")

    def _declare_import(self, node: Node) -> None:
        # Skip `import type ...` statements.
        if any(c.type == "type" and c.text == b"type" for c in node.children):
            return

        clause = None
        for child in node.children:
            if child.type == "import_clause":
                clause = child
                break
            # TypeScript CommonJS import: import fs = require("fs")
            if child.type == "import_require_clause":
                self._define_first_identifier(child, "import", node)
                return
        if clause is None:
            return

        for child in clause.children:
            # Default import: import Foo from "x"
            if child.type == "identifier":
                self._define(self.global_scope, child, "import", node)
            # Namespace import: import * as ns from "x"
            elif child.type == "namespace_import":
                for c in child.children:
                    if c.type == "identifier":
                        self._define(self.global_scope, c, "import", node)
            # Named imports: import { A, B as C, type T } from "x"
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    if any(c.type == "type" and c.text == b"type" for c in spec.children):
                        continue
                    local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    if local is not None and local.type == "identifier":
                        self._define(self.global_scope, local, "import", node)

    # --- pass 2: references ---

    def _reenter_scope(self, node: Node) -> None:
        scope = self.scope_by_node.get(node.id)
        if scope is not None and node != self.root:
            self.stack.append(scope)

    def _enter_type_context(self, node: Node) -> None:
        self._type_depth += 1

    def _exit_type_context(self, node: Node) -> None:
        self._type_depth -= 1

    def _is_reference(self, node: Node) -> bool:
        if self._type_depth > 0 or node.id in self.declaration_ids:
            return False
        parent = node.parent
        if parent is None:
            return False
        if parent.type in _JSX_TAG_PARENTS:
            name = parent.child_by_field_name("name")
            return not (name is not None and name == node)
        if parent.type in _IMPORT_PARENTS:
            return False
        if parent.type == "export_specifier":
            alias = parent.child_by_field_name("alias")
            if alias is not None and alias == node:
                return False
            statement = parent.parent.parent if parent.parent is not None else None
            # `export { a } from "mod"` names the other module's binding.
            return not (statement is not None and statement.child_by_field_name("source") is not None)
        if parent.type in {"nested_identifier", "internal_module", "module"}:
            return False
        return True

    def _reference(self, node: Node) -> None:
        if not self._is_reference(node):
            return

        is_read, is_write = _access(node)
        ref = Reference(
            identifier=node,
            name=node_text(node),
            from_scope=self.current,
            is_read=is_read,
            is_write=is_write,
            in_type_query=is_type_query_operand(node),
        )
        self.current.references.append(ref)
        self.references.append(ref)

    # --- driver ---

    def build(self) -> ScopeManager:
        scope_selectors = {kind: self._enter_scope for kind in _SCOPE_NODE_KINDS}
        scope_exits = {f"{kind}:exit": self._exit_scope for kind in _SCOPE_NODE_KINDS}
        definitions = {
            "variable_declaration": self._declare_variables,
            "lexical_declaration": self._declare_variables,
            "class_declaration": self._declare_class,
            "abstract_class_declaration": self._declare_class,
            "enum_declaration": self._declare_enum,
            "import_statement": self._declare_import,
            "import_alias": self._declare_import_alias,
            "internal_module": self._declare_namespace,
            "module": self._declare_namespace,
            "function_signature": self._declare_function_signature,
            "comment": self._read_global_comment,
        }
        self.stack = [self.global_scope]
        traverse(self.root, merge_handlers(scope_selectors, scope_exits, definitions))
        self._declare_globals()

        reenter = {kind: self._reenter_scope for kind in _SCOPE_NODE_KINDS}
        type_enter = {kind: self._enter_type_context for kind in _TYPE_CONTEXT_KINDS}
        type_exit = {f"{kind}:exit": self._exit_type_context for kind in _TYPE_CONTEXT_KINDS}
        usages = {
            "identifier": self._reference,
            "shorthand_property_identifier": self._reference,
            "shorthand_property_identifier_pattern": self._reference,
        }
        self.stack = [self.global_scope]
        traverse(self.root, merge_handlers(reenter, scope_exits, type_enter, type_exit, usages))

        self._resolve_all()
        logger.debug(
            f"Scope analysis: {len(self.scopes)} scopes, {len(self.references)} references, "
            f"{len(self.global_scope.through)} unresolved"
        )
        return ScopeManager(self.global_scope, self.scopes, self.scope_by_node, self.declared)

    def _resolve_all(self) -> None:
        for ref in self.references:
            scope: Optional[Scope] = ref.from_scope
            while scope is not None:
                binding = scope.bindings.get(ref.name)
                if binding is not None:
                    ref.resolved = binding
                    binding.references.append(ref)
                    break
                scope.through.append(ref)
                scope = scope.upper

        # Initializing references were recorded during the definition pass.
        for scope in self.scopes:
            for binding in scope.bindings.values():
                binding.references.sort(key=lambda r: r.identifier.start_byte)


def _access(node: Node) -> Tuple[bool, bool]:
    """``(is_read, is_write)`` for an identifier in reference position."""
    parent = node.parent
    if parent is None:
        return True, False

    left = parent.child_by_field_name("left")
    is_left = left is not None and left == node
    if parent.type == "assignment_expression" and is_left:
        return False, True
    if parent.type == "augmented_assignment_expression" and is_left:
        return True, True
    if parent.type == "update_expression":
        return True, True
    if parent.type == "for_in_statement" and is_left:
        return False, True
    if parent.type in _DESTRUCTURING_PARENTS:
        return False, True
    if parent.type in {"assignment_pattern", "object_assignment_pattern"} and is_left:
        return False, True
    return True, False


def analyze_scopes(root: Node, globals_: Iterable[str] = (), builtin_globals: bool = True) -> ScopeManager:
    """Build the declared-binding index for the tree rooted at ``root``."""
    return _ScopeBuilder(root, globals_, builtin_globals).build()

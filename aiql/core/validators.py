"""
aiql/core/validators.py
=======================
Input validation utilities for the AIQL reasoning core.

Validates:
    - Statement structure (relation names, variable conventions)
    - Node structure (intent kinds, operator arity, rule ids, payload ranges)
    - Node lists (duplicate rule ids)

These validators run at API boundaries, not in hot inference paths.
The reasoning operations treat malformed nodes as inert; call these
first when you would rather reject them.

validate_* functions return a list of error strings (empty = valid).
assert_valid_* functions raise ValidationError with that list.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from aiql.core.exceptions import ValidationError
from aiql.core.types import (
    Concept,
    Identifier,
    Intent,
    LogicalExpression,
    LogicalOperator,
    QuantifiedExpression,
    RelationshipNode,
    RuleDefinition,
    Statement,
)


# ─── REGEX PATTERNS ───────────────────────────────────────────────

RELATION_RE = re.compile(r'^\??[A-Za-z_][A-Za-z0-9_]*$')
VARIABLE_RE = re.compile(r'^\?[A-Za-z_][A-Za-z0-9_]*$')
INTENT_RE   = re.compile(r'^!?[A-Za-z_][A-Za-z0-9_]*$')


def _check_unit_interval(value: Optional[float], label: str, errors: List[str]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors.append(f"{label} must be a number, got {type(value).__name__}")
    elif not 0.0 <= value <= 1.0:
        errors.append(f"{label} {value} outside [0, 1]")


# ─── STATEMENT VALIDATION ─────────────────────────────────────────

def validate_statement(stmt: Statement) -> List[str]:
    """Validate a single statement. Returns list of error strings.

    Checks:
        1. Relation name is non-empty and matches ``?[A-Za-z_][A-Za-z0-9_]*``
        2. Concept and identifier tokens have non-empty names
        3. Tokens starting with ``?`` are well-formed variables
        4. Attribute keys are non-empty
    """
    errors: List[str] = []

    if not stmt.relation.name:
        errors.append("Relation name is empty")
    elif not RELATION_RE.match(stmt.relation.name):
        errors.append(f"Relation name '{stmt.relation.name}' invalid: must be [A-Za-z_][A-Za-z0-9_]*")

    tokens = [("subject", stmt.subject), ("object", stmt.object)]
    tokens += [(f"attribute '{k}'", v) for k, v in stmt.attributes]
    for label, token in tokens:
        if isinstance(token, (Concept, Identifier)):
            if not token.name or token.name == "?":
                errors.append(f"Statement {label} has an empty name")
            elif token.name.startswith("?") and not VARIABLE_RE.match(token.name):
                errors.append(
                    f"Statement {label} '{token.name}' looks like a variable but has "
                    "invalid format. Expected ?[A-Za-z_][A-Za-z0-9_]*"
                )

    for key, _ in stmt.attributes:
        if not key:
            errors.append("Statement has an empty attribute key")
    return errors


# ─── NODE VALIDATION ──────────────────────────────────────────────

def validate_node(node, path: str = "node") -> List[str]:
    """Validate one node recursively. Returns list of errors.

    Checks:
        1. Intent kind is non-empty, statements are individually valid
        2. confidence / coherence ∈ [0, 1] where present
        3. ``not`` has exactly one operand; every other operator has two
        4. Quantified expressions bind a non-empty variable
        5. Rules have an id; relationships have source, target and name
    """
    errors: List[str] = []

    if isinstance(node, Intent):
        if not node.kind:
            errors.append(f"{path}: intent kind is empty")
        elif not INTENT_RE.match(node.kind):
            errors.append(f"{path}: intent kind '{node.kind}' invalid")
        if not node.statements:
            errors.append(f"{path}: intent has no statements")
        for i, stmt in enumerate(node.statements):
            errors.extend(f"{path}.statements[{i}]: {e}" for e in validate_statement(stmt))
        _check_unit_interval(node.confidence, f"{path}: confidence", errors)
        _check_unit_interval(node.coherence, f"{path}: coherence", errors)

    elif isinstance(node, LogicalExpression):
        if node.operator is LogicalOperator.NOT:
            if node.left is None:
                errors.append(f"{path}: 'not' requires an operand")
            if node.right is not None:
                errors.append(f"{path}: 'not' takes a single operand (in left)")
        elif node.left is None or node.right is None:
            errors.append(f"{path}: '{node.operator.value}' requires two operands")
        if node.left is not None:
            errors.extend(validate_node(node.left, f"{path}.left"))
        if node.right is not None:
            errors.extend(validate_node(node.right, f"{path}.right"))

    elif isinstance(node, QuantifiedExpression):
        if not node.variable:
            errors.append(f"{path}: quantified expression has no variable")
        errors.extend(validate_node(node.body, f"{path}.body"))

    elif isinstance(node, RuleDefinition):
        if not node.rule_id:
            errors.append(f"{path}: rule id is empty")
        _check_unit_interval(node.confidence, f"{path}: confidence", errors)
        errors.extend(validate_node(node.premises, f"{path}.premises"))
        errors.extend(validate_node(node.conclusion, f"{path}.conclusion"))

    elif isinstance(node, RelationshipNode):
        for name in ("source", "target", "relation_name"):
            if not getattr(node, name):
                errors.append(f"{path}: relationship {name} is empty")
        _check_unit_interval(node.confidence, f"{path}: confidence", errors)

    else:
        errors.append(f"{path}: unknown node type {type(node).__name__}")

    return errors


def validate_nodes(nodes: Iterable) -> List[str]:
    """Validate a node list: every node, plus unique rule ids."""
    errors: List[str] = []
    first_seen = {}   # rule id → (index, rule)
    for i, node in enumerate(nodes):
        errors.extend(validate_node(node, f"nodes[{i}]"))
        if isinstance(node, RuleDefinition) and node.rule_id:
            if node.rule_id in first_seen:
                j, earlier = first_seen[node.rule_id]
                if earlier != node:
                    errors.append(f"nodes[{i}]: duplicate rule id '{node.rule_id}' (first at nodes[{j}])")
            else:
                first_seen[node.rule_id] = (i, node)
    return errors


# ─── ASSERTION HELPERS ────────────────────────────────────────────

def assert_valid_node(node) -> None:
    """Validate node and raise ValidationError on any violation."""
    errors = validate_node(node)
    if errors:
        raise ValidationError(f"Invalid node: {node}", errors=errors)


def assert_valid_nodes(nodes: Iterable) -> None:
    """Validate node list and raise ValidationError on any violation."""
    errors = validate_nodes(list(nodes))
    if errors:
        raise ValidationError(f"{len(errors)} validation error(s) in knowledge base", errors=errors)

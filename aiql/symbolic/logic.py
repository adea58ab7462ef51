"""
aiql/symbolic/logic.py
======================
Structural unification and the standard inference patterns.

Key operations:
  1. unify(a, b)              → Substitution (variable → text) or None
  2. match(a, b, bindings)    → same, but keeps bound Expressions for rewriting
  3. apply_substitution(n, θ) → node with variables replaced
  4. modus_ponens(nodes) ...  → candidate conclusions for forward chaining

Variable convention: an Identifier or Concept whose name starts with '?'
(``?Year``, ``<?Inventor>``). The variable key is the bare name.

Unification is all-or-nothing: the working bindings are private to one
call and only returned when every component matched, so a conflicting
second binding can never leak a partially filled map.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

from aiql.core.types import (
    Concept,
    Expression,
    Identifier,
    Intent,
    Literal,
    LogicalExpression,
    LogicalNode,
    LogicalOperator,
    QuantifiedExpression,
    RelationshipNode,
    RuleDefinition,
    Statement,
    Substitution,
    implies,
    negate,
)

logger = logging.getLogger(__name__)


# variable key → bound Expression (internal form of a substitution)
Bindings = Dict[str, Expression]


# ─────────────────────────────────────────────
#  TOKENS
# ─────────────────────────────────────────────

def is_variable(token) -> bool:
    return isinstance(token, (Identifier, Concept)) and token.name.startswith("?")


def token_from_text(text: str) -> Expression:
    """Inverse of ``str(expr)`` for the simple token forms.

    ``<Bell>`` → Concept, ``?X`` → Identifier, ``1876`` / ``2.5`` /
    ``true`` → Literal, anything else → Identifier.
    """
    text = text.strip()
    if len(text) > 1 and text.startswith("<") and text.endswith(">"):
        return Concept(text[1:-1])
    if text in ("true", "false"):
        return Literal(text == "true")
    for cast in (int, float):
        try:
            return Literal(cast(text))
        except ValueError:
            pass
    return Identifier(text)


def _resolve(token: Expression, bindings: Mapping[str, Expression]) -> Expression:
    """Follow variable → variable chains to the final binding."""
    seen = set()
    while is_variable(token) and token.name in bindings and token.name not in seen:
        seen.add(token.name)
        token = bindings[token.name]
    return token


def _unify_tokens(a: Expression, b: Expression, bindings: Bindings) -> bool:
    a = _resolve(a, bindings)
    b = _resolve(b, bindings)
    if is_variable(a) and is_variable(b) and a.name == b.name:
        return True
    # Resolved variables are unbound, so binding never overwrites
    if is_variable(a):
        bindings[a.name] = b
        return True
    if is_variable(b):
        bindings[b.name] = a
        return True
    return a == b


# ─────────────────────────────────────────────
#  UNIFICATION
# ─────────────────────────────────────────────

def _unify_statements(a: Statement, b: Statement, bindings: Bindings) -> bool:
    if not _unify_tokens(a.subject, b.subject, bindings):
        return False
    if not _unify_tokens(Identifier(a.relation.name), Identifier(b.relation.name), bindings):
        return False
    if not _unify_tokens(a.object, b.object, bindings):
        return False

    a_attrs, b_attrs = a.attribute_map, b.attribute_map
    for key in sorted(set(a_attrs) | set(b_attrs)):
        a_val, b_val = a_attrs.get(key), b_attrs.get(key)
        if a_val is not None and b_val is not None:
            if not _unify_tokens(a_val, b_val, bindings):
                return False
        elif not is_variable(a_val if a_val is not None else b_val):
            # Concrete attribute on one side only
            return False
    return True


def _unify_optional(a: Optional[LogicalNode], b: Optional[LogicalNode], bindings: Bindings) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    return _unify_nodes(a, b, bindings)


def _unify_nodes(a: LogicalNode, b: LogicalNode, bindings: Bindings) -> bool:
    if isinstance(a, Intent) and isinstance(b, Intent):
        if a.kind != b.kind or len(a.statements) != len(b.statements):
            return False
        return all(
            _unify_statements(sa, sb, bindings)
            for sa, sb in zip(a.statements, b.statements)
        )

    if isinstance(a, LogicalExpression) and isinstance(b, LogicalExpression):
        if a.operator is not b.operator:
            return False
        return _unify_optional(a.left, b.left, bindings) and _unify_optional(a.right, b.right, bindings)

    if isinstance(a, QuantifiedExpression) and isinstance(b, QuantifiedExpression):
        if (a.quantifier, a.variable, a.domain) != (b.quantifier, b.variable, b.domain):
            return False
        return _unify_nodes(a.body, b.body, bindings)

    if isinstance(a, RuleDefinition) and isinstance(b, RuleDefinition):
        if a.rule_id != b.rule_id or a.bidirectional != b.bidirectional:
            return False
        return (
            _unify_nodes(a.premises, b.premises, bindings)
            and _unify_nodes(a.conclusion, b.conclusion, bindings)
        )

    if isinstance(a, RelationshipNode) and isinstance(b, RelationshipNode):
        if a.kind is not b.kind:
            return False
        return (
            _unify_tokens(Identifier(a.source), Identifier(b.source), bindings)
            and _unify_tokens(Identifier(a.target), Identifier(b.target), bindings)
            and _unify_tokens(Identifier(a.relation_name), Identifier(b.relation_name), bindings)
        )

    # Different variants, or something that is not a node at all
    return False


def match(
    a: LogicalNode,
    b: LogicalNode,
    bindings: Optional[Mapping[str, Expression]] = None,
) -> Optional[Bindings]:
    """Unify two nodes, extending ``bindings``. Returns None on failure.

    The input mapping is never mutated.
    """
    working: Bindings = dict(bindings or {})
    if _unify_nodes(a, b, working):
        return working
    return None


def unify(a: LogicalNode, b: LogicalNode) -> Optional[Substitution]:
    """Structural unification of two nodes of the same variant.

    Returns the substitution (variable key → bound value text), ``{}`` for
    a match that binds nothing, or None if the nodes do not unify.

    Examples:
        fact:  !Assert { <Bell> [invented] <Telephone> {year: 1876} }
        query: !Query  { <?Inventor> [invented] <Telephone> {year: <?Year>} }
        → None (intent kinds differ)

        query: !Assert { <?Inventor> [invented] <Telephone> {year: <?Year>} }
        → {"?Inventor": "<Bell>", "?Year": "1876"}
    """
    bindings = match(a, b)
    if bindings is None:
        return None
    return public_substitution(bindings)


# ─────────────────────────────────────────────
#  SUBSTITUTION
# ─────────────────────────────────────────────

def _substitute_token(token: Expression, bindings: Mapping[str, Expression]) -> Expression:
    return _resolve(token, bindings) if is_variable(token) else token


def _substitute_name(name: str, bindings: Mapping[str, Expression]) -> str:
    if name.startswith("?") and name in bindings:
        return str(_resolve(Identifier(name), bindings))
    return name


def _substitute_statement(stmt: Statement, bindings: Mapping[str, Expression]) -> Statement:
    relation = stmt.relation
    if relation.name.startswith("?") and relation.name in bindings:
        relation = replace(relation, name=_substitute_name(relation.name, bindings))
    return Statement(
        subject=_substitute_token(stmt.subject, bindings),
        relation=relation,
        object=_substitute_token(stmt.object, bindings),
        attributes=tuple((k, _substitute_token(v, bindings)) for k, v in stmt.attributes),
    )


def apply_substitution(
    node: LogicalNode,
    substitution: Mapping[str, Union[Expression, str]],
) -> LogicalNode:
    """Replace bound variables throughout a node.

    Accepts either internal bindings (Expressions) or a public
    Substitution (text values, parsed back with ``token_from_text``).
    Nodes of unknown type are returned unchanged.
    """
    bindings = {
        var: value if not isinstance(value, str) else token_from_text(value)
        for var, value in substitution.items()
    }
    return _substitute(node, bindings)


def _substitute(node: LogicalNode, bindings: Mapping[str, Expression]) -> LogicalNode:
    if not bindings:
        return node
    if isinstance(node, Intent):
        return replace(node, statements=tuple(_substitute_statement(s, bindings) for s in node.statements))
    if isinstance(node, LogicalExpression):
        return replace(
            node,
            left=_substitute(node.left, bindings) if node.left is not None else None,
            right=_substitute(node.right, bindings) if node.right is not None else None,
        )
    if isinstance(node, QuantifiedExpression):
        return replace(node, body=_substitute(node.body, bindings))
    if isinstance(node, RuleDefinition):
        return replace(
            node,
            premises=_substitute(node.premises, bindings),
            conclusion=_substitute(node.conclusion, bindings),
        )
    if isinstance(node, RelationshipNode):
        return replace(
            node,
            source=_substitute_name(node.source, bindings),
            target=_substitute_name(node.target, bindings),
            relation_name=_substitute_name(node.relation_name, bindings),
        )
    return node


def public_substitution(bindings: Mapping[str, Expression]) -> Substitution:
    return {var: str(_resolve(value, bindings)) for var, value in bindings.items()}


# ─────────────────────────────────────────────
#  INFERENCE PATTERNS
# ─────────────────────────────────────────────
# Each pattern reads a snapshot of the knowledge base and yields candidate
# nodes. Candidates may already be known; the caller de-duplicates.

def _expressions(nodes: Iterable, operator: LogicalOperator) -> List[LogicalExpression]:
    return [
        n for n in nodes
        if isinstance(n, LogicalExpression) and n.operator is operator
    ]


def _negated_operands(nodes: Sequence) -> set:
    return {n.left for n in _expressions(nodes, LogicalOperator.NOT) if n.left is not None}


def modus_ponens(nodes: Sequence[LogicalNode]) -> Iterator[LogicalNode]:
    """A, A → B ⊢ B"""
    known = set(nodes)
    for impl in _expressions(nodes, LogicalOperator.IMPLIES):
        if impl.left is not None and impl.right is not None and impl.left in known:
            yield impl.right


def modus_tollens(nodes: Sequence[LogicalNode]) -> Iterator[LogicalNode]:
    """¬B, A → B ⊢ ¬A"""
    negated = _negated_operands(nodes)
    for impl in _expressions(nodes, LogicalOperator.IMPLIES):
        if impl.left is not None and impl.right is not None and impl.right in negated:
            yield negate(impl.left)


def hypothetical_syllogism(nodes: Sequence[LogicalNode]) -> Iterator[LogicalNode]:
    """A → B, B → C ⊢ A → C"""
    implications = [
        i for i in _expressions(nodes, LogicalOperator.IMPLIES)
        if i.left is not None and i.right is not None
    ]
    by_antecedent: Dict[LogicalNode, List[LogicalExpression]] = defaultdict(list)
    for impl in implications:
        by_antecedent[impl.left].append(impl)
    for first in implications:
        for second in by_antecedent.get(first.right, ()):
            yield implies(first.left, second.right)


def disjunctive_syllogism(nodes: Sequence[LogicalNode]) -> Iterator[LogicalNode]:
    """A ∨ B, ¬A ⊢ B   and   A ∨ B, ¬B ⊢ A"""
    negated = _negated_operands(nodes)
    for disj in _expressions(nodes, LogicalOperator.OR):
        if disj.left is None or disj.right is None:
            continue
        if disj.left in negated:
            yield disj.right
        if disj.right in negated:
            yield disj.left


def conjunction_elimination(nodes: Sequence[LogicalNode]) -> Iterator[LogicalNode]:
    """A ∧ B ⊢ A,  A ∧ B ⊢ B"""
    for conj in _expressions(nodes, LogicalOperator.AND):
        if conj.left is not None:
            yield conj.left
        if conj.right is not None:
            yield conj.right


def conjuncts(node: LogicalNode) -> List[LogicalNode]:
    """Flatten nested ``and`` into its leaves, left to right."""
    if isinstance(node, LogicalExpression) and node.operator is LogicalOperator.AND \
            and node.left is not None and node.right is not None:
        return conjuncts(node.left) + conjuncts(node.right)
    return [node]


def match_premises(
    premises: LogicalNode,
    nodes: Sequence[LogicalNode],
    bindings: Optional[Mapping[str, Expression]] = None,
) -> List[Bindings]:
    """Find substitutions under which ``premises`` hold in ``nodes``.

    A single premise yields one substitution per matching node.
    A conjunction is matched conjunct by conjunct, each taking the first
    node that unifies under the bindings gathered so far (no backtracking).
    """
    parts = conjuncts(premises)
    if len(parts) == 1:
        results = []
        for node in nodes:
            theta = match(premises, node, bindings)
            if theta is not None:
                results.append(theta)
        return results

    theta: Bindings = dict(bindings or {})
    for part in parts:
        for node in nodes:
            extended = match(part, node, theta)
            if extended is not None:
                theta = extended
                break
        else:
            return []
    return [theta]


def rule_application(nodes: Sequence[LogicalNode]) -> Iterator[LogicalNode]:
    """RuleDefinition(premises ⇒ conclusion), premisesθ ⊢ conclusionθ

    Bidirectional rules also run conclusion ⇒ premises.
    """
    for rule in nodes:
        if not isinstance(rule, RuleDefinition):
            continue
        directions = [(rule.premises, rule.conclusion)]
        if rule.bidirectional:
            directions.append((rule.conclusion, rule.premises))
        for antecedent, consequent in directions:
            for theta in match_premises(antecedent, nodes):
                yield _substitute(consequent, theta)


# Applied in this order on every forward-chaining pass
INFERENCE_PATTERNS = (
    ("rule-application", rule_application),
    ("modus-ponens", modus_ponens),
    ("modus-tollens", modus_tollens),
    ("hypothetical-syllogism", hypothetical_syllogism),
    ("disjunctive-syllogism", disjunctive_syllogism),
    ("conjunction-elimination", conjunction_elimination),
)

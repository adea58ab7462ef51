"""
aiql/symbolic/loader.py
=======================
Convert between LogicalNodes and plain data (dicts, lists, JSON files).

The parser front-end is out of scope for the reasoning core; outer
surfaces (CLI, HTTP server, fixtures) exchange nodes in this format:

    {"type": "Intent", "kind": "!Assert", "statements": [
        {"subject": "<Bell>", "relation": "invented", "object": "<Telephone>",
         "attributes": {"year": 1876}}
    ]}
    {"type": "LogicalExpression", "operator": "implies", "left": {...}, "right": {...}}
    {"type": "QuantifiedExpression", "quantifier": "forall", "variable": "x", "body": {...}}
    {"type": "RuleDefinition", "id": "r1", "premises": {...}, "conclusion": {...}}
    {"type": "Relationship", "kind": "causal", "source": "a", "target": "b", "relation": "causes"}

Token values:
    "<Bell>"   → Concept        "?X" / "<?X>" → variable
    1876, true → Literal        "bell"        → Identifier (Literal inside attributes)
    {"type": "Binary", "operator": "+", "left": ..., "right": ...} and the
    other composite forms are spelled out as dicts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from aiql.core.exceptions import MalformedNodeError
from aiql.core.types import (
    BinaryExpression,
    Concept,
    Expression,
    FunctionApplication,
    Identifier,
    Intent,
    LambdaExpression,
    Literal,
    LogicalExpression,
    LogicalNode,
    QuantifiedExpression,
    Relation,
    RelationshipNode,
    RuleDefinition,
    Statement,
    UnaryExpression,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
#  EXPRESSIONS
# ─────────────────────────────────────────────

def _require(data: Dict[str, Any], key: str, what: str) -> Any:
    if not isinstance(data, dict):
        raise MalformedNodeError(f"{what} must be an object", payload=data)
    if key not in data:
        raise MalformedNodeError(f"{what} is missing '{key}'", payload=data)
    return data[key]


def expression_from_value(value: Any, attribute: bool = False) -> Expression:
    """Build an Expression from a JSON value.

    ``attribute=True`` reads bare strings as Literals, matching what
    ``Statement`` does with plain Python scalars.
    """
    if isinstance(value, bool) or isinstance(value, (int, float)):
        return Literal(value)
    if isinstance(value, str):
        if len(value) > 1 and value.startswith("<") and value.endswith(">"):
            return Concept(value[1:-1])
        if value.startswith("?") or not attribute:
            return Identifier(value)
        return Literal(value)
    if isinstance(value, dict):
        kind = _require(value, "type", "Expression")
        try:
            if kind == "Concept":
                return Concept(value["name"])
            if kind == "Identifier":
                return Identifier(value["name"])
            if kind == "Literal":
                return Literal(value["value"])
            if kind == "Unary":
                return UnaryExpression(value["operator"], expression_from_value(value["argument"]))
            if kind == "Binary":
                return BinaryExpression(
                    value["operator"],
                    expression_from_value(value["left"]),
                    expression_from_value(value["right"]),
                )
            if kind == "Function":
                return FunctionApplication(
                    value["name"],
                    tuple(expression_from_value(a) for a in value.get("arguments", [])),
                )
            if kind == "Lambda":
                return LambdaExpression(tuple(value["parameters"]), expression_from_value(value["body"]))
        except KeyError as e:
            raise MalformedNodeError(f"{kind} expression is missing {e}", payload=value) from e
        raise MalformedNodeError(f"Unknown expression type: {kind!r}", payload=value)
    raise MalformedNodeError(f"Cannot build an expression from {type(value).__name__}", payload=value)


def expression_to_value(expr: Expression, attribute: bool = False) -> Any:
    """Inverse of ``expression_from_value``."""
    if isinstance(expr, Concept):
        return str(expr)
    if isinstance(expr, Identifier):
        if attribute and not expr.name.startswith("?"):
            return {"type": "Identifier", "name": expr.name}
        return expr.name
    if isinstance(expr, Literal):
        if not isinstance(expr.value, str):
            return expr.value
        ambiguous = expr.value.startswith(("<", "?"))
        if attribute and not ambiguous:
            return expr.value
        return {"type": "Literal", "value": expr.value}
    if isinstance(expr, UnaryExpression):
        return {"type": "Unary", "operator": expr.operator, "argument": expression_to_value(expr.argument)}
    if isinstance(expr, BinaryExpression):
        return {
            "type": "Binary",
            "operator": expr.operator,
            "left": expression_to_value(expr.left),
            "right": expression_to_value(expr.right),
        }
    if isinstance(expr, FunctionApplication):
        return {
            "type": "Function",
            "name": expr.function_name,
            "arguments": [expression_to_value(a) for a in expr.arguments],
        }
    if isinstance(expr, LambdaExpression):
        return {"type": "Lambda", "parameters": list(expr.parameters), "body": expression_to_value(expr.body)}
    raise MalformedNodeError(f"Not an expression: {type(expr).__name__}", payload=expr)


# ─────────────────────────────────────────────
#  STATEMENTS
# ─────────────────────────────────────────────

def statement_from_dict(data: Dict[str, Any]) -> Statement:
    relation = _require(data, "relation", "Statement")
    if isinstance(relation, dict):
        relation = Relation(_require(relation, "name", "Relation"), relation.get("tense"))
    else:
        relation = Relation(str(relation))

    attributes = data.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise MalformedNodeError("Statement attributes must be an object", payload=data)

    return Statement(
        subject=expression_from_value(_require(data, "subject", "Statement")),
        relation=relation,
        object=expression_from_value(_require(data, "object", "Statement")),
        attributes={k: expression_from_value(v, attribute=True) for k, v in attributes.items()},
    )


def statement_to_dict(stmt: Statement) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "subject": expression_to_value(stmt.subject),
        "relation": stmt.relation.name,
        "object": expression_to_value(stmt.object),
    }
    if stmt.relation.tense:
        out["relation"] = {"name": stmt.relation.name, "tense": stmt.relation.tense}
    if stmt.attributes:
        out["attributes"] = {k: expression_to_value(v, attribute=True) for k, v in stmt.attributes}
    return out


# ─────────────────────────────────────────────
#  NODES
# ─────────────────────────────────────────────

def _optional_node(data: Dict[str, Any], key: str):
    value = data.get(key)
    return node_from_dict(value) if value is not None else None


def _intent(data: Dict[str, Any]) -> Intent:
    statements = _require(data, "statements", "Intent")
    if not isinstance(statements, list):
        raise MalformedNodeError("Intent statements must be a list", payload=data)
    return Intent(
        kind=_require(data, "kind", "Intent"),
        statements=tuple(statement_from_dict(s) for s in statements),
        confidence=data.get("confidence"),
        coherence=data.get("coherence"),
        metadata=dict(data.get("metadata") or {}),
    )


def _logical(data: Dict[str, Any]) -> LogicalExpression:
    return LogicalExpression(
        operator=_require(data, "operator", "LogicalExpression"),
        left=_optional_node(data, "left"),
        right=_optional_node(data, "right"),
    )


def _quantified(data: Dict[str, Any]) -> QuantifiedExpression:
    return QuantifiedExpression(
        quantifier=_require(data, "quantifier", "QuantifiedExpression"),
        variable=_require(data, "variable", "QuantifiedExpression"),
        body=node_from_dict(_require(data, "body", "QuantifiedExpression")),
        domain=data.get("domain"),
    )


def _rule(data: Dict[str, Any]) -> RuleDefinition:
    return RuleDefinition(
        rule_id=_require(data, "id", "RuleDefinition"),
        premises=node_from_dict(_require(data, "premises", "RuleDefinition")),
        conclusion=node_from_dict(_require(data, "conclusion", "RuleDefinition")),
        domain=data.get("domain"),
        bidirectional=bool(data.get("bidirectional", False)),
        confidence=data.get("confidence"),
    )


def _relationship(data: Dict[str, Any]) -> RelationshipNode:
    return RelationshipNode(
        kind=_require(data, "kind", "Relationship"),
        source=_require(data, "source", "Relationship"),
        target=_require(data, "target", "Relationship"),
        relation_name=_require(data, "relation", "Relationship"),
        confidence=data.get("confidence"),
        bidirectional=bool(data.get("bidirectional", False)),
        metadata=dict(data.get("metadata") or {}),
    )


_BUILDERS: Dict[str, Callable[[Dict[str, Any]], LogicalNode]] = {
    "Intent": _intent,
    "LogicalExpression": _logical,
    "QuantifiedExpression": _quantified,
    "RuleDefinition": _rule,
    "Relationship": _relationship,
}


def node_from_dict(data: Dict[str, Any]) -> LogicalNode:
    """Build a LogicalNode from its dict form. Raises MalformedNodeError."""
    kind = _require(data, "type", "Node")
    builder = _BUILDERS.get(kind)
    if builder is None:
        raise MalformedNodeError(
            f"Unknown node type: {kind!r}",
            payload=data,
            context={"known_types": sorted(_BUILDERS)},
        )
    try:
        return builder(data)
    except ValueError as e:
        # Enum lookups (operator, quantifier, kind) and attribute coercion
        raise MalformedNodeError(f"Invalid {kind}: {e}", payload=data) from e
    except TypeError as e:
        raise MalformedNodeError(f"Invalid {kind}: {e}", payload=data) from e


def node_to_dict(node: LogicalNode) -> Dict[str, Any]:
    """Plain-data form of a node; ``node_from_dict(node_to_dict(n)) == n``."""
    if isinstance(node, Intent):
        out: Dict[str, Any] = {
            "type": "Intent",
            "kind": node.kind,
            "statements": [statement_to_dict(s) for s in node.statements],
        }
        if node.confidence is not None:
            out["confidence"] = node.confidence
        if node.coherence is not None:
            out["coherence"] = node.coherence
        if node.metadata:
            out["metadata"] = dict(node.metadata)
        return out
    if isinstance(node, LogicalExpression):
        out = {"type": "LogicalExpression", "operator": node.operator.value}
        if node.left is not None:
            out["left"] = node_to_dict(node.left)
        if node.right is not None:
            out["right"] = node_to_dict(node.right)
        return out
    if isinstance(node, QuantifiedExpression):
        out = {
            "type": "QuantifiedExpression",
            "quantifier": node.quantifier.value,
            "variable": node.variable,
            "body": node_to_dict(node.body),
        }
        if node.domain is not None:
            out["domain"] = node.domain
        return out
    if isinstance(node, RuleDefinition):
        out = {
            "type": "RuleDefinition",
            "id": node.rule_id,
            "premises": node_to_dict(node.premises),
            "conclusion": node_to_dict(node.conclusion),
            "bidirectional": node.bidirectional,
        }
        if node.domain is not None:
            out["domain"] = node.domain
        if node.confidence is not None:
            out["confidence"] = node.confidence
        return out
    if isinstance(node, RelationshipNode):
        out = {
            "type": "Relationship",
            "kind": node.kind.value,
            "source": node.source,
            "target": node.target,
            "relation": node.relation_name,
            "bidirectional": node.bidirectional,
        }
        if node.confidence is not None:
            out["confidence"] = node.confidence
        if node.metadata:
            out["metadata"] = dict(node.metadata)
        return out
    raise MalformedNodeError(f"Not a logical node: {type(node).__name__}", payload=node)


class NodeLoader:
    """Entry point for loading knowledge bases from plain data.

    A knowledge-base document is either a list of node dicts or an
    object with a ``"nodes"`` list.
    """

    node_from_dict = staticmethod(node_from_dict)
    statement_from_dict = staticmethod(statement_from_dict)
    expression_from_value = staticmethod(expression_from_value)
    node_to_dict = staticmethod(node_to_dict)
    statement_to_dict = staticmethod(statement_to_dict)

    @classmethod
    def from_list(cls, data: Union[List[Dict[str, Any]], Dict[str, Any]]) -> List[LogicalNode]:
        if isinstance(data, dict):
            data = _require(data, "nodes", "Knowledge base")
        if not isinstance(data, list):
            raise MalformedNodeError("Knowledge base must be a list of nodes", payload=data)
        return [node_from_dict(item) for item in data]

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> List[LogicalNode]:
        """Load a knowledge base from a JSON file."""
        try:
            data = json.loads(Path(path).read_text())
        except json.JSONDecodeError as e:
            raise MalformedNodeError(f"Invalid JSON in {path}: {e}", context={"path": str(path)}) from e
        except OSError as e:
            raise MalformedNodeError(f"Cannot read {path}: {e}", context={"path": str(path)}) from e
        nodes = cls.from_list(data)
        logger.info(f"Loaded {len(nodes)} nodes from {path}")
        return nodes

    @classmethod
    def to_list(cls, nodes: List[LogicalNode]) -> List[Dict[str, Any]]:
        return [node_to_dict(n) for n in nodes]

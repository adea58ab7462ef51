"""
aiql/core/types.py
==================
Foundation type system for the AIQL reasoning core.
Every module imports from here. No circular dependencies.

Three layers:
  - Expressions: the tokens inside a triple (Concept, Identifier, Literal, composites)
  - Statements:  subject [relation] object {attributes}
  - LogicalNode: the closed sum of top-level nodes a knowledge base holds

All of them are frozen dataclasses, so structural equality is plain ``==``
and every node can live in a set (the knowledge-base de-duplication index).
Opaque payloads (confidence, coherence, metadata) never take part in equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


# ─────────────────────────────────────────────
#  ENUMERATIONS
# ─────────────────────────────────────────────

class LogicalOperator(Enum):
    AND     = "and"
    OR      = "or"
    NOT     = "not"
    IMPLIES = "implies"
    IFF     = "iff"
    THEN    = "then"     # surface synonym of IMPLIES, normalised away


class Quantifier(Enum):
    FORALL = "forall"
    EXISTS = "exists"


class RelationshipKind(Enum):
    TEMPORAL = "temporal"
    CAUSAL   = "causal"
    LOGICAL  = "logical"


class ConflictType(Enum):
    """Categories of semantic (ontological) conflict."""
    TAXONOMY        = "taxonomy"
    PROPERTY        = "property"
    CARDINALITY     = "cardinality"
    TYPE            = "type"
    DISJOINT_VALUES = "disjoint_values"


class ConflictSeverity(Enum):
    CRITICAL      = "critical"
    MAJOR         = "major"
    MINOR         = "minor"
    INFORMATIONAL = "informational"


class Cardinality(Enum):
    ONE  = "one"
    MANY = "many"


# ─────────────────────────────────────────────
#  EXPRESSIONS
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Concept:
    """A named entity, rendered ``<Name>``.

    A concept whose name starts with ``?`` (``<?Inventor>``) is a
    unification variable, exactly like the bare identifier ``?Inventor``.
    """
    name: str

    def __str__(self) -> str:
        return f"<{self.name}>"


@dataclass(frozen=True)
class Identifier:
    """A bare name. Names starting with ``?`` are unification variables."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class Literal:
    """A scalar value.

    Equality is typed: ``true`` never equals ``1`` and ``"1"`` never
    equals ``1``. Ints and floats share one numeric kind, so ``1 == 1.0``.
    """
    value: Union[int, float, str, bool]

    def _key(self) -> Tuple[str, Any]:
        if isinstance(self.value, bool):
            return "bool", self.value
        if isinstance(self.value, (int, float)):
            return "number", self.value
        return type(self.value).__name__, self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        if isinstance(self.value, float) and self.value.is_integer():
            return str(int(self.value))
        return str(self.value)


@dataclass(frozen=True)
class UnaryExpression:
    operator: str             # "-" or "!"
    argument: "Expression"

    def __str__(self) -> str:
        return f"{self.operator}({self.argument})"


@dataclass(frozen=True)
class BinaryExpression:
    """Arithmetic, comparison and set forms: ``(left op right)``."""
    operator: str             # "+", ">=", "union", ...
    left: "Expression"
    right: "Expression"

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class FunctionApplication:
    function_name: str
    arguments: Tuple["Expression", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "arguments", tuple(self.arguments))

    def __str__(self) -> str:
        return f"{self.function_name}({', '.join(str(a) for a in self.arguments)})"


@dataclass(frozen=True)
class LambdaExpression:
    parameters: Tuple[str, ...]
    body: "Expression"

    def __post_init__(self):
        object.__setattr__(self, "parameters", tuple(self.parameters))

    def __str__(self) -> str:
        return f"lambda {', '.join(self.parameters)}: {self.body}"


Expression = Union[
    Concept,
    Identifier,
    Literal,
    UnaryExpression,
    BinaryExpression,
    FunctionApplication,
    LambdaExpression,
]

EXPRESSION_TYPES = (
    Concept,
    Identifier,
    Literal,
    UnaryExpression,
    BinaryExpression,
    FunctionApplication,
    LambdaExpression,
)

AttributeValue = Union[int, float, str, bool, Expression]


def as_expression(value: AttributeValue) -> Expression:
    """Coerce an attribute scalar to a Literal; expressions pass through."""
    if isinstance(value, EXPRESSION_TYPES):
        return value
    if isinstance(value, (bool, int, float, str)):
        return Literal(value)
    raise TypeError(f"Unsupported attribute value: {value!r}")


# ─────────────────────────────────────────────
#  STATEMENTS
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Relation:
    """``[name]`` with an optional tense tag.

    Tense is decorative: two relations with the same name are equal
    whatever their tense.
    """
    name: str
    tense: Optional[str] = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"[{self.name}]"


@dataclass(frozen=True)
class Statement:
    """Atomic semantic triple: subject [relation] object {attributes}.

    ``attributes`` may be given as a mapping; it is stored as a key-sorted
    tuple of ``(key, Expression)`` pairs so that statements are hashable and
    attribute order never affects equality.
    """
    subject: Expression
    relation: Relation
    object: Expression
    attributes: Tuple[Tuple[str, Expression], ...] = ()

    def __post_init__(self):
        raw = self.attributes
        items = raw.items() if isinstance(raw, Mapping) else raw
        normalised = tuple(sorted(
            ((str(k), as_expression(v)) for k, v in items),
            key=lambda kv: kv[0],
        ))
        object.__setattr__(self, "attributes", normalised)

    @property
    def attribute_map(self) -> Dict[str, Expression]:
        return dict(self.attributes)

    def __str__(self) -> str:
        text = f"{self.subject} {self.relation} {self.object}"
        if self.attributes:
            attrs = ", ".join(f"{k}: {v}" for k, v in self.attributes)
            text += f" {{{attrs}}}"
        return text


# ─────────────────────────────────────────────
#  LOGICAL NODES
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Intent:
    """A named assertion/query/task holding one or more statements.

    ``kind`` carries the intent marker verbatim (``!Assert``, ``!Query``...).
    """
    kind: str
    statements: Tuple[Statement, ...] = ()
    confidence: Optional[float] = field(default=None, compare=False)
    coherence: Optional[float] = field(default=None, compare=False)
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "statements", tuple(self.statements))

    def __str__(self) -> str:
        body = " ".join(str(s) for s in self.statements)
        return f"{self.kind} {{ {body} }}"


@dataclass(frozen=True)
class LogicalExpression:
    """Propositional compound. ``not`` keeps its operand in ``left``."""
    operator: LogicalOperator
    left: Optional["LogicalNode"] = None
    right: Optional["LogicalNode"] = None

    def __post_init__(self):
        op = LogicalOperator(self.operator)
        if op is LogicalOperator.THEN:
            op = LogicalOperator.IMPLIES
        object.__setattr__(self, "operator", op)

    @property
    def is_negation(self) -> bool:
        return self.operator is LogicalOperator.NOT

    @property
    def is_implication(self) -> bool:
        return self.operator is LogicalOperator.IMPLIES

    @property
    def operand(self) -> Optional["LogicalNode"]:
        return self.left

    def __str__(self) -> str:
        if self.is_negation:
            return f"not {self.left}"
        return f"({self.left} {self.operator.value} {self.right})"


@dataclass(frozen=True)
class QuantifiedExpression:
    quantifier: Quantifier
    variable: str
    body: "LogicalNode"
    domain: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "quantifier", Quantifier(self.quantifier))

    def __str__(self) -> str:
        scope = f" in {self.domain}" if self.domain else ""
        return f"{self.quantifier.value} {self.variable}{scope}: {self.body}"


@dataclass(frozen=True)
class RuleDefinition:
    """Named inference rule, equivalent to ``premises implies conclusion``.

    A bidirectional rule also licenses ``conclusion implies premises``.
    """
    rule_id: str
    premises: "LogicalNode"
    conclusion: "LogicalNode"
    domain: Optional[str] = None
    bidirectional: bool = False
    confidence: Optional[float] = field(default=None, compare=False)

    def __str__(self) -> str:
        arrow = "<=>" if self.bidirectional else "=>"
        return f"!Rule({self.rule_id}) {{ {self.premises} {arrow} {self.conclusion} }}"


@dataclass(frozen=True)
class RelationshipNode:
    """Typed edge between two referenced entities ($id references)."""
    kind: RelationshipKind
    source: str
    target: str
    relation_name: str
    confidence: Optional[float] = field(default=None, compare=False)
    bidirectional: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "kind", RelationshipKind(self.kind))

    def __str__(self) -> str:
        arrow = "<->" if self.bidirectional else "->"
        return f"${self.source} -[{self.relation_name}]{arrow} ${self.target}"


LogicalNode = Union[
    Intent,
    LogicalExpression,
    QuantifiedExpression,
    RuleDefinition,
    RelationshipNode,
]

LOGICAL_NODE_TYPES = (
    Intent,
    LogicalExpression,
    QuantifiedExpression,
    RuleDefinition,
    RelationshipNode,
)


def is_logical_node(obj: Any) -> bool:
    return isinstance(obj, LOGICAL_NODE_TYPES)


def negate(node: LogicalNode) -> LogicalExpression:
    return LogicalExpression(LogicalOperator.NOT, node)


def implies(antecedent: LogicalNode, consequent: LogicalNode) -> LogicalExpression:
    return LogicalExpression(LogicalOperator.IMPLIES, antecedent, consequent)


def conjoin(left: LogicalNode, right: LogicalNode) -> LogicalExpression:
    return LogicalExpression(LogicalOperator.AND, left, right)


def disjoin(left: LogicalNode, right: LogicalNode) -> LogicalExpression:
    return LogicalExpression(LogicalOperator.OR, left, right)


# ─────────────────────────────────────────────
#  REASONING RESULTS
# ─────────────────────────────────────────────

# variable key ("?Year") → bound value text ("1876", "<Bell>")
Substitution = Dict[str, str]


@dataclass
class ChainResult:
    """Outcome of one forward-chaining call.

    reached_fixpoint = True  → a full pass added nothing
    reached_fixpoint = False → the iteration bound stopped the loop
    """
    derived:          List[LogicalNode]
    iterations:       int
    reached_fixpoint: bool

    @property
    def bound_exhausted(self) -> bool:
        return not self.reached_fixpoint

    def __len__(self) -> int:
        return len(self.derived)


@dataclass
class Contradiction:
    statement1: LogicalNode
    statement2: LogicalNode
    reason:     str


@dataclass
class ConsistencyResult:
    consistent:     bool
    contradictions: List[Contradiction] = field(default_factory=list)


@dataclass
class PropertyConstraint:
    """Ontological constraint attached to a relation name.

    domain / range:  expected class of subject / object
    cardinality:     ONE = at most one distinct object per subject
    disjoint_with:   relations that may not hold together with this one
    """
    relation:      str
    domain:        Optional[str] = None
    range:         Optional[str] = None
    cardinality:   Optional[Cardinality] = None
    disjoint_with: Tuple[str, ...] = ()
    symmetric:     bool = False
    transitive:    bool = False

    def __post_init__(self):
        if self.cardinality is not None:
            self.cardinality = Cardinality(self.cardinality)
        self.disjoint_with = tuple(self.disjoint_with)


@dataclass
class ConflictResult:
    """Result of a pairwise semantic conflict check."""
    has_conflict:  bool
    conflict_type: Optional[ConflictType] = None
    reason:        Optional[str] = None
    severity:      Optional[ConflictSeverity] = None
    details:       Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.has_conflict


@dataclass
class ClosureResult:
    """Outcome of a transitive-closure computation."""
    iterations: int
    converged:  bool

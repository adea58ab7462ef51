"""
aiql/symbolic/engine.py
=======================
Main InferenceEngine: owns the knowledge base and orchestrates
unification, forward chaining, backward chaining and consistency checks.

All other modules interact with the unification & chaining side of the
core through this class. It never calls the ontology reasoner; callers
run both side by side over the same statements.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple, Union

from aiql.core.config import DEFAULT_CONFIG, AIQLConfig
from aiql.core.types import (
    ChainResult,
    Concept,
    ConsistencyResult,
    Contradiction,
    Expression,
    LogicalExpression,
    LogicalNode,
    Relation,
    RuleDefinition,
    Statement,
    Substitution,
    is_logical_node,
)
from aiql.symbolic.knowledge_base import KnowledgeBase
from aiql.symbolic.logic import INFERENCE_PATTERNS, is_variable, token_from_text, unify
from aiql.symbolic.prover import FORWARD_CHAINING, BackwardChainer, ProofNode, ProofResult

logger = logging.getLogger(__name__)

SELF = Concept("Self")

# Relations whose presence means the knowledge base models affective state
AFFECTIVE_RELATIONS = frozenset({"feels", "desires", "experiences", "seeks"})

# A concept that is the subject of fewer statements than this is a gap
GAP_THRESHOLD = 2


class InferenceEngine:
    """Unification & chaining engine for AIQL logical nodes.

    Responsibilities:
        1. Maintain an ordered, de-duplicated knowledge base
        2. Derive new nodes by forward chaining to a fixed point
        3. Prove goals by non-backtracking backward chaining
        4. Report direct logical contradictions
        5. Answer pattern and self-knowledge queries

    Usage:
        engine = InferenceEngine(nodes)
        result = engine.forward_chain()
        proof = engine.prove(goal)
    """

    def __init__(
        self,
        nodes: Optional[Iterable[LogicalNode]] = None,
        config: Optional[AIQLConfig] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self._kb = KnowledgeBase(nodes or ())
        if self._kb.unknown_nodes:
            logger.warning(
                f"{len(self._kb.unknown_nodes)} node(s) of unknown type stored; "
                "they take no part in reasoning"
            )

    # ─── KNOWLEDGE BASE ────────────────────────────────────────────

    def add_fact(self, node: LogicalNode) -> bool:
        """Append a node unless a structurally equal one is known."""
        added = self._kb.add(node)
        if added:
            logger.debug(f"Fact added: {node}")
        return added

    def add_facts(self, nodes: Iterable[LogicalNode]) -> List[LogicalNode]:
        return [n for n in nodes if self.add_fact(n)]

    @property
    def knowledge_base(self) -> List[LogicalNode]:
        return self._kb.snapshot()

    @property
    def rules(self) -> List[RuleDefinition]:
        return self._kb.of_type(RuleDefinition)

    def statements(self) -> List[Statement]:
        """Statements of every intent, in knowledge-base order."""
        return self._kb.statements()

    def _logical_nodes(self) -> List[LogicalNode]:
        return [n for n in self._kb if is_logical_node(n)]

    def __len__(self) -> int:
        return len(self._kb)

    # ─── UNIFICATION ───────────────────────────────────────────────

    def unify(self, a: LogicalNode, b: LogicalNode) -> Optional[Substitution]:
        """Structural match of two nodes. See ``aiql.symbolic.logic.unify``."""
        return unify(a, b)

    def query(self, pattern: LogicalNode) -> List[Tuple[LogicalNode, Substitution]]:
        """Every known node that unifies with ``pattern``, with its bindings."""
        results = []
        for node in self._logical_nodes():
            theta = unify(pattern, node)
            if theta is not None:
                results.append((node, theta))
        return results

    # ─── FORWARD CHAINING ──────────────────────────────────────────

    def forward_chain(self, max_iterations: Optional[int] = None) -> ChainResult:
        """Apply every inference pattern until a pass adds nothing.

        Each pass reads a snapshot of the knowledge base taken at its start;
        nodes derived during a pass become premises on the next one.

        Returns a ChainResult with the newly derived nodes in derivation
        order. ``reached_fixpoint`` is False when ``max_iterations`` passes
        ran and the last one still added something.
        """
        bound = self.config.inference.max_forward_iterations if max_iterations is None else max_iterations
        derived: List[LogicalNode] = []
        iterations = 0

        while iterations < bound:
            iterations += 1
            snapshot = self._logical_nodes()
            added = 0
            for name, pattern in INFERENCE_PATTERNS:
                for candidate in pattern(snapshot):
                    if self._kb.add(candidate):
                        derived.append(candidate)
                        added += 1
                        logger.debug(f"[{name}] derived: {candidate}")
            if added == 0:
                logger.debug(f"Forward chaining reached a fixed point after {iterations} pass(es)")
                return ChainResult(derived=derived, iterations=iterations, reached_fixpoint=True)

        logger.warning(
            f"Forward chaining stopped at the iteration bound ({bound}) "
            f"with {len(derived)} node(s) derived; the result may be incomplete"
        )
        return ChainResult(derived=derived, iterations=iterations, reached_fixpoint=False)

    # ─── BACKWARD CHAINING ─────────────────────────────────────────

    def backward_chain(self, goal: LogicalNode) -> Optional[ProofNode]:
        """Goal-directed proof search over the current knowledge base."""
        prover = BackwardChainer(self._logical_nodes(), max_depth=self.config.inference.max_proof_depth)
        return prover.prove(goal)

    def prove(self, goal: LogicalNode) -> ProofResult:
        """Prove ``goal``, falling back to forward chaining.

        If backward chaining fails and ``prove_with_saturation`` is set,
        a bounded forward chain runs (its derivations stay in the knowledge
        base) and the search is retried. A proof found on the retry is
        wrapped in a ``forward-chaining`` step.
        """
        proof = self.backward_chain(goal)
        if proof is not None:
            return ProofResult(goal=goal, provable=True, proof=proof)

        settings = self.config.inference
        if settings.prove_with_saturation:
            chained = self.forward_chain(settings.saturation_iterations)
            if chained.derived:
                proof = self.backward_chain(goal)
                if proof is not None:
                    step = ProofNode(
                        goal=goal,
                        rule=FORWARD_CHAINING,
                        premises=[proof],
                        substitution=dict(proof.substitution),
                    )
                    return ProofResult(goal=goal, provable=True, proof=step)

        return ProofResult(goal=goal, provable=False, reason="Goal not derivable from knowledge base")

    # ─── CONSISTENCY ───────────────────────────────────────────────

    def check_consistency(self) -> ConsistencyResult:
        """Scan every pair of nodes for a direct contradiction.

        Reports ``X`` / ``not X`` pairs and implications with the same
        antecedent and contradictory consequents. Semantic conflicts
        (disjoint classes, cardinality) belong to the ontology reasoner.
        """
        nodes = self._logical_nodes()
        contradictions: List[Contradiction] = []
        for i, first in enumerate(nodes):
            for second in nodes[i + 1:]:
                reason = _contradiction_reason(first, second)
                if reason is not None:
                    contradictions.append(Contradiction(first, second, reason))

        if contradictions:
            logger.info(f"Knowledge base inconsistent: {len(contradictions)} contradiction(s)")
        return ConsistencyResult(consistent=not contradictions, contradictions=contradictions)

    # ─── SELF-KNOWLEDGE ────────────────────────────────────────────

    def statements_mentioning(self, concept: Union[str, Expression]) -> List[Statement]:
        """All statements with ``concept`` as subject or object.

        A string is read as a text form: ``"<Bell>"`` and ``"Bell"`` both
        name the concept Bell.
        """
        target = _as_concept(concept)
        return [s for s in self._kb.statements() if target in (s.subject, s.object)]

    def knowledge_gaps(self) -> List[Tuple[Expression, float]]:
        """Concepts mentioned but described by fewer than two statements.

        The score grows as the concept is less described:
        ``1 - min(count / 5, 1)`` where count is the number of statements
        having the concept as subject.
        """
        mentioned: Dict[Expression, None] = {}
        as_subject: Counter = Counter()
        for stmt in self._kb.statements():
            mentioned.setdefault(stmt.subject)
            mentioned.setdefault(stmt.object)
            as_subject[stmt.subject] += 1

        return [
            (concept, 1.0 - min(as_subject[concept] / 5, 1.0))
            for concept in mentioned
            if as_subject[concept] < GAP_THRESHOLD
        ]

    def query_meta(self, meta_query: Statement) -> List[Statement]:
        """Answer ``<Self> [relation] object`` queries about the knowledge base.

        has_knowledge_about    → statements mentioning the object (all
                                 statements when the object is a variable)
        lacks_knowledge_about  → one statement per knowledge gap
        has_capability         → capabilities implied by the contents
        Anything else          → []
        """
        if meta_query.subject != SELF:
            return []

        relation, target = meta_query.relation.name, meta_query.object

        if relation == "has_knowledge_about":
            if is_variable(target):
                return self._kb.statements()
            return self.statements_mentioning(target)

        if relation == "lacks_knowledge_about":
            return [
                _self_statement(relation, concept, score)
                for concept, score in self.knowledge_gaps()
                if is_variable(target) or concept == target
            ]

        if relation == "has_capability":
            capabilities = []
            has_rules = any(
                isinstance(n, RuleDefinition) or (isinstance(n, LogicalExpression) and n.is_implication)
                for n in self._kb
            )
            if has_rules:
                capabilities.append(_self_statement(relation, Concept("LogicalReasoning"), 0.95))
            if any(s.relation.name in AFFECTIVE_RELATIONS for s in self._kb.statements()):
                capabilities.append(_self_statement(relation, Concept("AffectiveReasoning"), 0.90))
            return capabilities

        logger.debug(f"Unsupported meta relation: {relation}")
        return []

    def __repr__(self) -> str:
        return f"InferenceEngine(nodes={len(self._kb)}, rules={len(self.rules)})"


# ─── HELPERS ───────────────────────────────────────────────────────

def _contradiction_reason(a: LogicalNode, b: LogicalNode) -> Optional[str]:
    if isinstance(b, LogicalExpression) and b.is_negation and b.left == a:
        return "Direct contradiction: node and its negation"
    if isinstance(a, LogicalExpression) and a.is_negation and a.left == b:
        return "Direct contradiction: node and its negation"

    if (
        isinstance(a, LogicalExpression) and a.is_implication
        and isinstance(b, LogicalExpression) and b.is_implication
        and a.left == b.left
    ):
        for x, y in ((a.right, b.right), (b.right, a.right)):
            if isinstance(y, LogicalExpression) and y.is_negation and y.left == x:
                return "Contradictory implications: same antecedent implies a node and its negation"
    return None


def _as_concept(value: Union[str, Expression]) -> Expression:
    if not isinstance(value, str):
        return value
    token = token_from_text(value)
    if isinstance(token, Concept) or value.strip().startswith("?"):
        return token
    return Concept(value.strip())


def _self_statement(relation: str, target: Expression, confidence: float) -> Statement:
    return Statement(
        subject=SELF,
        relation=Relation(relation),
        object=target,
        attributes={"confidence": confidence},
    )

"""
aiql/symbolic/prover.py
========================
Backward chaining prover: goal-directed proof search.

Unlike forward chaining (which derives everything possible),
backward chaining starts from a GOAL and works backward to find
a proof.

    Proof of goal G:
        If G unifies with a known node                 → SUCCESS (leaf)
        If ∃ implication / rule P ⇒ C with unify(C, G) = θ:
            recursively prove Pθ                       → SUCCESS (modus ponens step)
        If G = A ∧ B: prove A and prove B              → SUCCESS (conjunction introduction)
        If G = A → B: assume A, prove B                → SUCCESS (implication introduction)
        Otherwise                                      → FAILURE (None)

The search is non-backtracking: the first applicable justification whose
premise proves is taken, and bindings are never revisited. Recursion is
bounded by ``max_depth`` and a goal already on the current path fails, so
cyclic rules cannot loop.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from aiql.core.types import (
    LogicalExpression,
    LogicalNode,
    LogicalOperator,
    RuleDefinition,
    Substitution,
)
from aiql.symbolic.logic import apply_substitution, match, public_substitution, unify

logger = logging.getLogger(__name__)


FACT = "fact"
MODUS_PONENS = "modus-ponens"
CONJUNCTION_INTRODUCTION = "conjunction-introduction"
IMPLICATION_INTRODUCTION = "implication-introduction"
FORWARD_CHAINING = "forward-chaining"


@dataclass
class ProofNode:
    """A node in the proof tree.

    goal:         The node proved at this step.
    rule:         Justification: "fact", "modus-ponens", a rule id, ...
    premises:     Sub-proofs this step depends on.
    substitution: Variable bindings used at this step.
    """

    goal: LogicalNode
    rule: str = FACT
    premises: List["ProofNode"] = field(default_factory=list)
    substitution: Substitution = field(default_factory=dict)
    valid: bool = True

    @property
    def is_fact(self) -> bool:
        return self.rule == FACT and not self.premises

    def depth(self) -> int:
        return 1 + max((p.depth() for p in self.premises), default=0)

    def rules_used(self) -> List[str]:
        """Justifications in the tree, outermost first."""
        used = [self.rule]
        for premise in self.premises:
            used.extend(premise.rules_used())
        return used

    def explain(self, indent: int = 0) -> str:
        """Generate human-readable proof explanation."""
        prefix = "  " * indent
        if self.is_fact:
            return f"{prefix}✓ {self.goal} [known fact]"
        lines = [f"{prefix}⊢ {self.goal} [via {self.rule}]"]
        for premise in self.premises:
            lines.append(premise.explain(indent + 1))
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        from aiql.symbolic.loader import node_to_dict

        return {
            "goal": node_to_dict(self.goal),
            "rule": self.rule,
            "valid": self.valid,
            "substitution": dict(self.substitution),
            "premises": [p.to_dict() for p in self.premises],
        }


@dataclass
class ProofResult:
    """Result of ``prove()``. ``proof`` is None whenever ``provable`` is False."""

    goal: LogicalNode
    provable: bool
    proof: Optional[ProofNode] = None
    reason: Optional[str] = None

    def explain(self) -> str:
        if not self.provable or self.proof is None:
            return f"FAILED: Cannot prove {self.goal}"
        return self.proof.explain()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"provable": self.provable}
        if self.proof is not None:
            out["proof"] = self.proof.to_dict()
        if self.reason:
            out["reason"] = self.reason
        return out


class BackwardChainer:
    """Non-backtracking goal-directed prover over a sequence of nodes.

    Usage:
        prover = BackwardChainer(engine.knowledge_base, max_depth=20)
        proof = prover.prove(goal)
        if proof is not None:
            print(proof.explain())
    """

    def __init__(self, nodes: Iterable[LogicalNode], max_depth: int = 20):
        self.nodes = list(nodes)
        self.max_depth = max_depth

    def prove(self, goal: LogicalNode) -> Optional[ProofNode]:
        """Attempt to prove ``goal``. Returns the proof tree or None."""
        proof = self._prove(goal, depth=0, path=frozenset(), assumptions=())
        if proof is None:
            logger.debug(f"No proof for goal: {goal}")
        return proof

    def _justifications(self) -> Iterator[Tuple[str, LogicalNode, LogicalNode]]:
        """(name, premise, conclusion) for every implication and rule."""
        for node in self.nodes:
            if isinstance(node, LogicalExpression) and node.is_implication:
                if node.left is not None and node.right is not None:
                    yield MODUS_PONENS, node.left, node.right
            elif isinstance(node, RuleDefinition):
                yield node.rule_id, node.premises, node.conclusion
                if node.bidirectional:
                    yield node.rule_id, node.conclusion, node.premises

    def _prove(
        self,
        goal: LogicalNode,
        depth: int,
        path: FrozenSet[LogicalNode],
        assumptions: Tuple[LogicalNode, ...],
    ) -> Optional[ProofNode]:
        if depth > self.max_depth:
            logger.debug(f"Proof depth {self.max_depth} exceeded for goal: {goal}")
            return None
        if goal in path:
            return None
        path = path | {goal}

        # Base case: goal is a known node (or a hypothesis in scope)
        for known in itertools.chain(assumptions, self.nodes):
            theta = unify(goal, known)
            if theta is not None:
                return ProofNode(goal=goal, rule=FACT, substitution=theta)

        # Recursive case: an implication or rule concluding the goal
        for name, premise, conclusion in self._justifications():
            bindings = match(conclusion, goal)
            if bindings is None:
                continue
            sub_goal = apply_substitution(premise, bindings)
            child = self._prove(sub_goal, depth + 1, path, assumptions)
            if child is not None:
                return ProofNode(
                    goal=goal,
                    rule=name,
                    premises=[child],
                    substitution=public_substitution(bindings),
                )

        # Decomposition of compound goals
        if isinstance(goal, LogicalExpression) and goal.left is not None and goal.right is not None:
            if goal.operator is LogicalOperator.AND:
                left = self._prove(goal.left, depth + 1, path, assumptions)
                right = self._prove(goal.right, depth + 1, path, assumptions) if left else None
                if left is not None and right is not None:
                    return ProofNode(goal=goal, rule=CONJUNCTION_INTRODUCTION, premises=[left, right])
            elif goal.operator is LogicalOperator.IMPLIES:
                child = self._prove(goal.right, depth + 1, path, assumptions + (goal.left,))
                if child is not None:
                    return ProofNode(goal=goal, rule=IMPLICATION_INTRODUCTION, premises=[child])

        return None

"""aiql/symbolic: Unification, chaining and ontology reasoning."""

from aiql.symbolic.engine import InferenceEngine
from aiql.symbolic.knowledge_base import KnowledgeBase
from aiql.symbolic.loader import NodeLoader, node_from_dict, node_to_dict
from aiql.symbolic.logic import (
    apply_substitution,
    conjunction_elimination,
    disjunctive_syllogism,
    hypothetical_syllogism,
    is_variable,
    match,
    modus_ponens,
    modus_tollens,
    rule_application,
    unify,
)
from aiql.symbolic.ontology.reasoner import OntologyReasoner
from aiql.symbolic.prover import BackwardChainer, ProofNode, ProofResult

__all__ = [
    "InferenceEngine",
    "KnowledgeBase",
    "OntologyReasoner",
    "BackwardChainer",
    "ProofNode",
    "ProofResult",
    "NodeLoader",
    "node_from_dict",
    "node_to_dict",
    "unify",
    "match",
    "apply_substitution",
    "is_variable",
    "modus_ponens",
    "modus_tollens",
    "hypothetical_syllogism",
    "disjunctive_syllogism",
    "conjunction_elimination",
    "rule_application",
]

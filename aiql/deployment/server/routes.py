"""
aiql/deployment/server/routes.py
================================
REST API routes for the AIQL reasoning server.

Every request carries its own knowledge base: the server keeps no state
between calls, so concurrent requests never share a mutable engine.
Loader and validation errors propagate as AIQLError and are turned into
422 responses by the handler in middleware.py.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional
from fastapi import APIRouter
from pydantic import BaseModel

from aiql.core.types import ConflictResult, Contradiction, Statement
from aiql.core.validators import assert_valid_nodes
from aiql.symbolic.engine import InferenceEngine
from aiql.symbolic.loader import NodeLoader, node_from_dict, node_to_dict, statement_from_dict, statement_to_dict
from aiql.symbolic.ontology.loader import OntologyLoader
from aiql.symbolic.ontology.reasoner import OntologyReasoner

router = APIRouter()

# ─── Request/Response Models ────────────────────────────────────

class ReasonRequest(BaseModel):
    nodes: List[Dict[str, Any]]               # [{"type": "Intent", "kind": "!Assert", ...}]
    max_iterations: Optional[int] = None
    validate_nodes: bool = False

class ProveRequest(BaseModel):
    nodes: List[Dict[str, Any]]
    goal: Dict[str, Any]
    validate_nodes: bool = False

class UnifyRequest(BaseModel):
    a: Dict[str, Any]
    b: Dict[str, Any]

class ConflictRequest(BaseModel):
    statements: List[Dict[str, Any]]          # [{"subject": "<Rex>", "relation": "is_a", "object": "<Mammal>"}]
    ontology: Optional[Dict[str, Any]] = None
    include_type_violations: bool = False

class ReasonResponse(BaseModel):
    derived:          List[Dict[str, Any]]
    iterations:       int
    reached_fixpoint: bool
    consistent:       bool
    contradictions:   List[Dict[str, Any]]
    knowledge_base_size: int

class UnifyResponse(BaseModel):
    unifies:      bool
    substitution: Optional[Dict[str, str]] = None

# ─── Serialisation helpers ──────────────────────────────────────

def _engine(nodes: List[Dict[str, Any]], validate: bool) -> InferenceEngine:
    loaded = NodeLoader.from_list(nodes)
    if validate:
        assert_valid_nodes(loaded)
    return InferenceEngine(loaded)

def _contradiction_to_dict(c: Contradiction) -> Dict[str, Any]:
    return {
        "statement1": node_to_dict(c.statement1),
        "statement2": node_to_dict(c.statement2),
        "reason": c.reason,
    }

def _conflict_to_dict(c: ConflictResult) -> Dict[str, Any]:
    details = {
        k: statement_to_dict(v) if isinstance(v, Statement) else v
        for k, v in c.details.items()
    }
    return {
        "conflict_type": c.conflict_type.value if c.conflict_type else None,
        "severity": c.severity.value if c.severity else None,
        "reason": c.reason,
        "details": details,
    }

# ─── Routes ─────────────────────────────────────────────────────

@router.post("/reason", response_model=ReasonResponse)
def reason(request: ReasonRequest):
    engine = _engine(request.nodes, request.validate_nodes)
    chained = engine.forward_chain(request.max_iterations)
    consistency = engine.check_consistency()
    return ReasonResponse(
        derived=[node_to_dict(n) for n in chained.derived],
        iterations=chained.iterations,
        reached_fixpoint=chained.reached_fixpoint,
        consistent=consistency.consistent,
        contradictions=[_contradiction_to_dict(c) for c in consistency.contradictions],
        knowledge_base_size=len(engine),
    )

@router.post("/prove")
def prove(request: ProveRequest):
    engine = _engine(request.nodes, request.validate_nodes)
    goal = node_from_dict(request.goal)
    return engine.prove(goal).to_dict()

@router.post("/unify", response_model=UnifyResponse)
def unify(request: UnifyRequest):
    a, b = node_from_dict(request.a), node_from_dict(request.b)
    substitution = InferenceEngine().unify(a, b)
    return UnifyResponse(unifies=substitution is not None, substitution=substitution)

@router.post("/conflicts")
def conflicts(request: ConflictRequest):
    statements = [statement_from_dict(s) for s in request.statements]
    reasoner = OntologyReasoner()
    axioms: List[Statement] = []
    if request.ontology:
        ontology = OntologyLoader.from_dict(request.ontology)
        ontology.apply(reasoner)
        axioms = ontology.statements
    closure = reasoner.learn_hierarchy(axioms + statements)

    found = reasoner.detect_all_conflicts(statements)
    if request.include_type_violations:
        found += reasoner.detect_type_violations(statements)
    return {
        "conflicts": [_conflict_to_dict(c) for c in found],
        "closure": {"iterations": closure.iterations, "converged": closure.converged},
        "statistics": reasoner.get_statistics(),
    }

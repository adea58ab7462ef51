"""
aiql/__init__.py: public API exports
"""

from aiql.core.config import DEFAULT_CONFIG, AIQLConfig, InferenceConfig, OntologyConfig
from aiql.core.exceptions import (
    AIQLError,
    ConfigurationError,
    MalformedNodeError,
    OntologyLoadError,
    ValidationError,
)
from aiql.core.types import (
    Cardinality,
    ChainResult,
    ClosureResult,
    Concept,
    ConflictResult,
    ConflictSeverity,
    ConflictType,
    ConsistencyResult,
    Contradiction,
    Identifier,
    Intent,
    Literal,
    LogicalExpression,
    LogicalOperator,
    PropertyConstraint,
    QuantifiedExpression,
    Relation,
    RelationshipNode,
    RuleDefinition,
    Statement,
)
from aiql.symbolic.engine import InferenceEngine
from aiql.symbolic.ontology.reasoner import OntologyReasoner
from aiql.symbolic.prover import ProofNode, ProofResult
from aiql.version import __version__

__all__ = [
    "InferenceEngine",
    "OntologyReasoner",
    "AIQLConfig",
    "InferenceConfig",
    "OntologyConfig",
    "DEFAULT_CONFIG",
    "Concept",
    "Identifier",
    "Literal",
    "Relation",
    "Statement",
    "Intent",
    "LogicalExpression",
    "LogicalOperator",
    "QuantifiedExpression",
    "RuleDefinition",
    "RelationshipNode",
    "ChainResult",
    "ClosureResult",
    "ConsistencyResult",
    "Contradiction",
    "ConflictResult",
    "ConflictSeverity",
    "ConflictType",
    "Cardinality",
    "PropertyConstraint",
    "ProofNode",
    "ProofResult",
    "AIQLError",
    "MalformedNodeError",
    "ValidationError",
    "OntologyLoadError",
    "ConfigurationError",
    "__version__",
]

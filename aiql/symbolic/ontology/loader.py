"""
aiql/symbolic/ontology/loader.py
================================
Load external ontologies (custom JSON, RDF/OWL) for the OntologyReasoner.

An ontology contributes three things:
    - property constraints (cardinality, domain/range, exclusive properties)
    - disjoint class pairs
    - hierarchy axioms (is_a / subclass_of / instance_of statements)

Constraints and pairs are registered on a reasoner with
``OntologyDocument.apply``. The hierarchy axioms are plain statements:
pass them to ``learn_hierarchy`` together with the knowledge-base
statements, since learning rebuilds the hierarchy from scratch.

Supported:
    - AIQL JSON (native format)
    - Turtle / RDF-XML / OWL (via rdflib)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from aiql.core.exceptions import OntologyLoadError
from aiql.core.types import Concept, PropertyConstraint, Relation, Statement

logger = logging.getLogger(__name__)

RDF_EXTENSIONS = (".ttl", ".owl", ".rdf", ".xml", ".nt", ".n3", ".jsonld")


@dataclass
class OntologyDocument:
    constraints:    List[PropertyConstraint] = field(default_factory=list)
    disjoint_pairs: List[Tuple[str, str]] = field(default_factory=list)
    statements:     List[Statement] = field(default_factory=list)

    def apply(self, reasoner) -> None:
        """Register constraints and disjoint pairs on an OntologyReasoner."""
        for constraint in self.constraints:
            reasoner.add_constraint(constraint)
        for a, b in self.disjoint_pairs:
            reasoner.add_disjoint_pair(a, b)


class OntologyLoader:
    """Unified entry point for ontology loading.

    Auto-detects format from file extension.
    """

    @classmethod
    def load(cls, path: Union[str, Path]) -> OntologyDocument:
        """Load ontology from file. Auto-detects format."""
        ext = Path(path).suffix.lower()
        if ext == ".json":
            return cls.from_json(path)
        if ext in RDF_EXTENSIONS:
            from aiql.symbolic.ontology.adapters.rdf import RDFAdapter
            return RDFAdapter.load(path)
        raise OntologyLoadError(f"Unsupported ontology format: {ext}", context={"path": str(path)})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> OntologyDocument:
        """Load the native JSON format:

            {
              "constraints": [{"relation": "color", "cardinality": "one"}],
              "disjoint":    [["Cat", "Dog"]],
              "subclasses":  [{"child": "Dog", "parent": "Mammal"}],
              "instances":   [{"instance": "Rex", "class": "Dog"}]
            }
        """
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise OntologyLoadError(f"Cannot read ontology {path}: {e}", context={"path": str(path)}) from e
        doc = cls.from_dict(data)
        logger.info(
            f"Loaded JSON ontology {path}: {len(doc.constraints)} constraints, "
            f"{len(doc.disjoint_pairs)} disjoint pairs, {len(doc.statements)} axioms"
        )
        return doc

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OntologyDocument:
        if not isinstance(data, dict):
            raise OntologyLoadError("Ontology document must be a JSON object")
        doc = OntologyDocument()

        for item in data.get("constraints", []):
            try:
                doc.constraints.append(PropertyConstraint(**item))
            except (TypeError, ValueError) as e:
                raise OntologyLoadError(f"Invalid constraint {item!r}: {e}") from e

        for item in data.get("disjoint", []):
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise OntologyLoadError(f"Disjoint entry must be a pair of class names: {item!r}")
            doc.disjoint_pairs.append((str(item[0]), str(item[1])))

        try:
            for item in data.get("subclasses", []):
                doc.statements.append(_axiom(item["child"], "subclass_of", item["parent"]))
            for item in data.get("instances", []):
                doc.statements.append(_axiom(item["instance"], "instance_of", item["class"]))
        except (KeyError, TypeError) as e:
            raise OntologyLoadError(f"Malformed hierarchy axiom: missing {e}") from e

        return doc


def _axiom(subject: str, relation: str, obj: str) -> Statement:
    return Statement(Concept(subject), Relation(relation), Concept(obj))

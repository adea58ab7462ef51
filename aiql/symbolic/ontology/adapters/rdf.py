"""
aiql/symbolic/ontology/adapters/rdf.py
======================================
RDF/RDFS/OWL ontology adapter (Turtle, RDF/XML, N-Triples, ...).
Requires: pip install rdflib

Mapping:
    A rdfs:subClassOf B          → <A> [subclass_of] <B>
    x rdf:type A                 → <x> [instance_of] <A>   (A not an OWL/RDFS meta-class)
    A owl:disjointWith B         → disjoint pair (A, B)
    p rdfs:domain D / rdfs:range R, owl:FunctionalProperty,
    owl:SymmetricProperty, owl:TransitiveProperty,
    p owl:propertyDisjointWith q → PropertyConstraint for p
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Tuple, Union

from rdflib import Graph, URIRef
from rdflib.namespace import OWL, RDF, RDFS
from rdflib.util import guess_format

from aiql.core.exceptions import OntologyLoadError
from aiql.core.types import Cardinality, Concept, PropertyConstraint, Relation, Statement

logger = logging.getLogger(__name__)

PROPERTY_TYPES = {
    RDF.Property, OWL.ObjectProperty, OWL.DatatypeProperty,
    OWL.FunctionalProperty, OWL.SymmetricProperty, OWL.TransitiveProperty,
}

# rdf:type objects that describe the schema, not class membership
META_CLASSES = PROPERTY_TYPES | {
    OWL.Class, RDFS.Class, OWL.Ontology, OWL.NamedIndividual,
    OWL.AnnotationProperty, RDFS.Datatype,
}


def local_name(uri) -> str:
    return str(uri).split("/")[-1].split("#")[-1]


class RDFAdapter:
    @classmethod
    def load(cls, path: Union[str, Path]):
        """Parse an RDF file into constraints, disjoint pairs and hierarchy statements."""
        g = Graph()
        try:
            g.parse(str(path), format=guess_format(str(path)) or "turtle")
        except Exception as e:
            raise OntologyLoadError(f"Cannot parse RDF ontology {path}: {e}", context={"path": str(path)}) from e
        return cls.from_graph(g, source=str(path))

    @classmethod
    def from_graph(cls, g: Graph, source: str = "<graph>"):
        from aiql.symbolic.ontology.loader import OntologyDocument

        statements: List[Statement] = []
        disjoint: List[Tuple[str, str]] = []

        def uri(node) -> bool:
            return isinstance(node, URIRef)

        for s, o in g.subject_objects(RDFS.subClassOf):
            if uri(s) and uri(o):
                statements.append(_statement(s, "subclass_of", o))

        for s, o in g.subject_objects(RDF.type):
            if uri(s) and uri(o) and o not in META_CLASSES:
                statements.append(_statement(s, "instance_of", o))

        for a, b in g.subject_objects(OWL.disjointWith):
            if uri(a) and uri(b):
                disjoint.append((local_name(a), local_name(b)))

        properties: Dict[str, dict] = {}

        def prop(p) -> dict:
            return properties.setdefault(local_name(p), {"relation": local_name(p)})

        for p, kind in g.subject_objects(RDF.type):
            if uri(p) and kind in PROPERTY_TYPES:
                entry = prop(p)
                if kind == OWL.FunctionalProperty:
                    entry["cardinality"] = Cardinality.ONE
                elif kind == OWL.SymmetricProperty:
                    entry["symmetric"] = True
                elif kind == OWL.TransitiveProperty:
                    entry["transitive"] = True
        for p, d in g.subject_objects(RDFS.domain):
            if uri(p) and uri(d):
                prop(p)["domain"] = local_name(d)
        for p, r in g.subject_objects(RDFS.range):
            if uri(p) and uri(r):
                prop(p)["range"] = local_name(r)
        for p, q in g.subject_objects(OWL.propertyDisjointWith):
            if uri(p) and uri(q):
                entry = prop(p)
                entry["disjoint_with"] = tuple(entry.get("disjoint_with", ())) + (local_name(q),)

        constraints = [PropertyConstraint(**entry) for entry in properties.values()]
        logger.info(
            f"Loaded RDF ontology {source}: {len(statements)} axioms, "
            f"{len(constraints)} constraints, {len(disjoint)} disjoint pairs"
        )
        return OntologyDocument(constraints=constraints, disjoint_pairs=disjoint, statements=statements)


def _statement(subject, relation: str, obj) -> Statement:
    return Statement(Concept(local_name(subject)), Relation(relation), Concept(local_name(obj)))

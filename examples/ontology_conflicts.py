"""
examples/ontology_conflicts.py
==============================
Semantic conflict detection with the OntologyReasoner.
"""
from pathlib import Path

from aiql import Concept, OntologyReasoner, Relation, Statement
from aiql.core.types import Literal
from aiql.symbolic.ontology.loader import OntologyLoader

DATA = Path(__file__).parent / "data"


def s(subject, relation, obj) -> Statement:
    return Statement(Concept(subject), Relation(relation), obj if not isinstance(obj, str) else Concept(obj))


def main():
    reasoner = OntologyReasoner()
    ontology = OntologyLoader.load(DATA / "animals.ttl")
    ontology.apply(reasoner)

    statements = [
        s("Rex", "is_a", "Dog"),
        s("Rex", "is_a", "Lizard"),
        s("Cup", "has_temperature", "Hot"),
        s("Cup", "has_temperature", "Cold"),
        s("Cat", "is_alive", Literal(True)),
        s("Cat", "is_dead", Literal(True)),
    ]
    closure = reasoner.learn_hierarchy(ontology.statements + statements)
    print(f"Closure: {closure.iterations} pass(es), converged={closure.converged}")

    conflicts = reasoner.detect_all_conflicts(statements)
    for conflict in conflicts:
        print(f"[{conflict.severity.value}] {conflict.conflict_type.value}: {conflict.reason}")
    for edge in reasoner.contradiction_graph(conflicts):
        print(edge)

    assert len(conflicts) == 3
    print("✓ Ontology example passed.")


if __name__ == "__main__":
    main()

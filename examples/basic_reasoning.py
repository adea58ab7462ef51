"""
examples/basic_reasoning.py
===========================
Minimal AIQL example: forward chaining, backward chaining, unification.
"""
from aiql import (
    Concept,
    InferenceEngine,
    Intent,
    Relation,
    Statement,
)
from aiql.core.types import Identifier, implies


def assert_(subject: str, relation: str, obj: str, **attributes) -> Intent:
    return Intent("!Assert", (Statement(Concept(subject), Relation(relation), Concept(obj), attributes),))


def main():
    socrates_is_man = assert_("Socrates", "is", "Man")
    socrates_is_mortal = assert_("Socrates", "is", "Mortal")

    engine = InferenceEngine([
        socrates_is_man,
        implies(socrates_is_man, socrates_is_mortal),
        assert_("Bell", "invented", "Telephone", year=1876),
    ])

    result = engine.forward_chain()
    for node in result.derived:
        print(f"derived: {node}")
    assert socrates_is_mortal in engine.knowledge_base, "Should derive: Socrates is mortal"

    proof = engine.prove(socrates_is_mortal)
    print(proof.explain())

    query = Intent("!Assert", (Statement(
        Concept("?Inventor"), Relation("invented"), Concept("Telephone"), {"year": Identifier("?Year")},
    ),))
    for node, substitution in engine.query(query):
        print(f"{node}  ⇒  {substitution}")

    print("✓ Basic reasoning example passed.")


if __name__ == "__main__":
    main()

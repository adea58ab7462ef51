"""
tests/integration/test_pipeline.py
=====================================
End-to-end: load a knowledge base and an ontology from disk, chain,
prove, check consistency and detect semantic conflicts.
"""

from pathlib import Path

import pytest

from aiql.core.types import Concept, ConflictType, Intent, Relation, Statement
from aiql.symbolic.engine import InferenceEngine
from aiql.symbolic.loader import NodeLoader
from aiql.symbolic.ontology.loader import OntologyLoader
from aiql.symbolic.ontology.reasoner import OntologyReasoner

DATA = Path(__file__).parents[2] / "examples" / "data"


def fact(subject, relation, obj):
    return Intent("!Assert", (Statement(Concept(subject), Relation(relation), Concept(obj)),))


@pytest.fixture
def socrates_engine():
    return InferenceEngine(NodeLoader.from_json(DATA / "socrates.json"))


@pytest.fixture
def animals():
    return OntologyLoader.load(DATA / "animals.ttl")


def test_forward_chain_from_file(socrates_engine):
    result = socrates_engine.forward_chain()
    assert result.derived == [fact("Socrates", "is", "Mortal"), fact("Socrates", "will", "Die")]
    assert result.iterations == 3
    assert result.reached_fixpoint


def test_prove_through_rule_and_implication(socrates_engine):
    result = socrates_engine.prove(fact("Socrates", "will", "Die"))
    assert result.provable
    assert result.proof.rules_used() == ["mortals_die", "modus-ponens", "fact"]


def test_kb_is_consistent(socrates_engine):
    socrates_engine.forward_chain()
    assert socrates_engine.check_consistency().consistent


def test_ontology_file_feeds_reasoner(animals):
    reasoner = OntologyReasoner()
    animals.apply(reasoner)
    reasoner.learn_hierarchy(animals.statements)

    assert reasoner.is_subclass_of("Dog", "Animal")
    assert reasoner.is_instance_of("Fido", "Animal")
    assert reasoner.are_disjoint("Animal", "Plant")
    owner = reasoner.get_constraint("has_owner")
    assert (owner.domain, owner.range) == ("Animal", "Person")


def test_kb_statements_against_ontology(socrates_engine, animals):
    reasoner = OntologyReasoner()
    animals.apply(reasoner)
    statements = socrates_engine.statements() + [
        Statement(Concept("Socrates"), Relation("is_a"), Concept("Plant")),
    ]
    reasoner.learn_hierarchy(animals.statements + statements)

    [conflict] = reasoner.detect_all_conflicts(statements)
    assert conflict.conflict_type is ConflictType.TAXONOMY
    assert conflict.details["disjoint_pair"] == ("Animal", "Plant")


def test_functional_property_from_ontology(animals):
    reasoner = OntologyReasoner()
    animals.apply(reasoner)
    statements = [
        Statement(Concept("Fido"), Relation("has_owner"), Concept("Ann")),
        Statement(Concept("Fido"), Relation("has_owner"), Concept("Bob")),
    ]
    [conflict] = reasoner.detect_all_conflicts(statements)
    assert conflict.conflict_type is ConflictType.CARDINALITY

"""
tests/conftest.py
=================
Shared pytest fixtures for all AIQL reasoning tests.
"""

import pytest

from aiql.core.types import Concept, Intent, Relation, RuleDefinition, Statement, implies
from aiql.symbolic.engine import InferenceEngine
from aiql.symbolic.ontology.reasoner import OntologyReasoner


def _token(value):
    return Concept(value) if isinstance(value, str) else value


# ─── NODE FACTORIES ───────────────────────────────────────────────


@pytest.fixture
def make_statement():
    """make_statement("Bell", "invented", "Telephone", year=1876)"""

    def build(subject, relation, obj, **attributes):
        return Statement(_token(subject), Relation(relation), _token(obj), attributes)

    return build


@pytest.fixture
def make_fact(make_statement):
    """make_fact("Socrates", "is", "Man", kind="!Assert") → single-statement Intent"""

    def build(subject, relation, obj, kind="!Assert", **attributes):
        return Intent(kind, (make_statement(subject, relation, obj, **attributes),))

    return build


# ─── FACTS ────────────────────────────────────────────────────────


@pytest.fixture
def socrates_is_man(make_fact):
    return make_fact("Socrates", "is", "Man")


@pytest.fixture
def socrates_is_mortal(make_fact):
    return make_fact("Socrates", "is", "Mortal")


@pytest.fixture
def bell_fact(make_fact):
    return make_fact("Bell", "invented", "Telephone", year=1876)


@pytest.fixture
def mortality_rule(make_fact):
    return RuleDefinition(
        rule_id="mortality",
        premises=make_fact("?X", "is", "Man"),
        conclusion=make_fact("?X", "is", "Mortal"),
    )


# ─── ENGINES ──────────────────────────────────────────────────────


@pytest.fixture
def socrates_kb(socrates_is_man, socrates_is_mortal):
    return [socrates_is_man, implies(socrates_is_man, socrates_is_mortal)]


@pytest.fixture
def engine(socrates_kb, bell_fact):
    return InferenceEngine(socrates_kb + [bell_fact])


@pytest.fixture
def reasoner():
    return OntologyReasoner()

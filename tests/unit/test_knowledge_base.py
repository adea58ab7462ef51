"""
tests/unit/test_knowledge_base.py
=================================
Append-only arena + structural de-duplication.
"""

from aiql.core.types import Intent, Literal, RuleDefinition, negate
from aiql.symbolic.knowledge_base import KnowledgeBase


def test_insertion_order_preserved(socrates_is_man, socrates_is_mortal):
    kb = KnowledgeBase([socrates_is_mortal, socrates_is_man])
    assert kb.snapshot() == [socrates_is_mortal, socrates_is_man]


def test_structural_duplicates_rejected(make_fact):
    kb = KnowledgeBase()
    assert kb.add(make_fact("A", "r", "B")) is True
    assert kb.add(make_fact("A", "r", "B")) is False
    assert len(kb) == 1


def test_duplicates_ignore_confidence(make_statement):
    stmt = make_statement("A", "r", "B")
    kb = KnowledgeBase([Intent("!Assert", (stmt,), confidence=0.9)])
    assert Intent("!Assert", (stmt,), confidence=0.2) in kb
    assert not kb.add(Intent("!Assert", (stmt,), confidence=0.2))


def test_extend_returns_only_new(socrates_is_man, socrates_is_mortal):
    kb = KnowledgeBase([socrates_is_man])
    added = kb.extend([socrates_is_man, socrates_is_mortal, negate(socrates_is_man)])
    assert added == [socrates_is_mortal, negate(socrates_is_man)]


def test_snapshot_is_a_copy(socrates_is_man, socrates_is_mortal):
    kb = KnowledgeBase([socrates_is_man])
    snap = kb.snapshot()
    kb.add(socrates_is_mortal)
    assert snap == [socrates_is_man]


def test_of_type_and_statements(socrates_kb, mortality_rule, bell_fact):
    kb = KnowledgeBase(socrates_kb + [mortality_rule, bell_fact])
    assert kb.of_type(RuleDefinition) == [mortality_rule]
    assert kb.statements() == [socrates_kb[0].statements[0], bell_fact.statements[0]]


def test_unhashable_unknown_nodes_are_stored(socrates_is_man):
    mystery = {"type": "Mystery"}
    kb = KnowledgeBase([mystery, socrates_is_man])
    assert len(kb) == 2
    assert mystery in kb
    assert kb.unknown_nodes == [mystery]
    assert not kb.add(mystery)


def test_boolean_and_numeric_facts_are_distinct(make_fact):
    kb = KnowledgeBase([
        make_fact("Switch", "state", Literal(True)),
        make_fact("Switch", "state", Literal(1)),
    ])
    assert len(kb) == 2

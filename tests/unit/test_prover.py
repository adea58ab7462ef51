"""
tests/unit/test_prover.py
=========================
Backward chaining: proof trees, decomposition, bounds.
"""

from aiql.core.types import Identifier, conjoin, implies, negate
from aiql.symbolic.prover import BackwardChainer, ProofNode, ProofResult


def test_fact_is_leaf_proof(socrates_kb, socrates_is_man):
    proof = BackwardChainer(socrates_kb).prove(socrates_is_man)
    assert proof.is_fact
    assert proof.premises == []
    assert proof.depth() == 1


def test_modus_ponens_step(socrates_kb, socrates_is_man, socrates_is_mortal):
    proof = BackwardChainer(socrates_kb).prove(socrates_is_mortal)
    assert proof.rule == "modus-ponens"
    assert proof.goal == socrates_is_mortal
    assert proof.premises[0].goal == socrates_is_man
    assert proof.premises[0].is_fact


def test_rule_with_variables(mortality_rule, make_fact):
    prover = BackwardChainer([mortality_rule, make_fact("Socrates", "is", "Man")])
    proof = prover.prove(make_fact("Socrates", "is", "Mortal"))
    assert proof.rule == "mortality"
    assert proof.substitution == {"?X": "<Socrates>"}
    assert proof.premises[0].goal == make_fact("Socrates", "is", "Man")


def test_goal_with_variable_binds_from_fact(bell_fact, make_fact):
    proof = BackwardChainer([bell_fact]).prove(
        make_fact("?Who", "invented", "Telephone", year=Identifier("?Year"))
    )
    assert proof.substitution == {"?Who": "<Bell>", "?Year": "1876"}


def test_unreachable_goal_returns_none(socrates_kb, make_fact):
    assert BackwardChainer(socrates_kb).prove(make_fact("Plato", "is", "Mortal")) is None


def test_cycle_terminates(make_fact):
    a, b = make_fact("A", "r", "x"), make_fact("B", "r", "x")
    assert BackwardChainer([implies(a, b), implies(b, a)]).prove(a) is None


def test_conjunction_introduction(make_fact):
    a, b = make_fact("A", "r", "x"), make_fact("B", "r", "x")
    proof = BackwardChainer([a, b]).prove(conjoin(a, b))
    assert proof.rule == "conjunction-introduction"
    assert [p.goal for p in proof.premises] == [a, b]


def test_conjunction_needs_both_sides(make_fact):
    a, b = make_fact("A", "r", "x"), make_fact("B", "r", "x")
    assert BackwardChainer([a]).prove(conjoin(a, b)) is None


def test_implication_introduction_does_not_mutate(make_fact):
    a, b, c = make_fact("A", "r", "x"), make_fact("B", "r", "x"), make_fact("C", "r", "x")
    nodes = [implies(a, b), implies(b, c)]
    prover = BackwardChainer(nodes)
    proof = prover.prove(implies(a, c))
    assert proof.rule == "implication-introduction"
    assert prover.nodes == nodes
    # A was only assumed: on its own it stays unprovable
    assert prover.prove(a) is None


def test_depth_bound(make_fact):
    a, b, c, d = (make_fact(x, "r", "x") for x in "ABCD")
    nodes = [a, implies(a, b), implies(b, c), implies(c, d)]

    deep = BackwardChainer(nodes, max_depth=20).prove(d)
    assert deep.depth() == 4
    assert deep.rules_used() == ["modus-ponens", "modus-ponens", "modus-ponens", "fact"]

    assert BackwardChainer(nodes, max_depth=1).prove(d) is None


def test_negated_goal_proved_from_fact(socrates_is_man):
    proof = BackwardChainer([negate(socrates_is_man)]).prove(negate(socrates_is_man))
    assert proof.is_fact


def test_explain(socrates_kb, socrates_is_mortal):
    text = BackwardChainer(socrates_kb).prove(socrates_is_mortal).explain()
    assert "[via modus-ponens]" in text
    assert "[known fact]" in text


def test_to_dict(socrates_kb, socrates_is_mortal):
    proof = BackwardChainer(socrates_kb).prove(socrates_is_mortal)
    data = ProofResult(goal=socrates_is_mortal, provable=True, proof=proof).to_dict()
    assert data["provable"] is True
    assert data["proof"]["rule"] == "modus-ponens"
    assert data["proof"]["goal"]["kind"] == "!Assert"
    assert data["proof"]["premises"][0]["rule"] == "fact"


def test_failed_result_explain(socrates_is_man):
    result = ProofResult(goal=socrates_is_man, provable=False)
    assert result.explain().startswith("FAILED")
    assert ProofNode(goal=socrates_is_man).is_fact

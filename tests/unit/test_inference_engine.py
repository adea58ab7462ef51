"""
tests/unit/test_inference_engine.py
===================================
InferenceEngine: forward chaining, prove, consistency, queries.
"""

import pytest

from aiql.core.config import AIQLConfig, InferenceConfig
from aiql.core.types import (
    Concept,
    Identifier,
    Intent,
    Literal,
    Relation,
    RuleDefinition,
    Statement,
    conjoin,
    disjoin,
    implies,
    negate,
)
from aiql.symbolic.engine import InferenceEngine


# ─── FORWARD CHAINING ─────────────────────────────────────────────


class TestForwardChain:
    def test_modus_ponens_derivation(self, socrates_kb, socrates_is_mortal):
        engine = InferenceEngine(socrates_kb)
        result = engine.forward_chain()
        assert result.derived == [socrates_is_mortal]
        assert result.reached_fixpoint
        assert result.iterations == 2
        assert socrates_is_mortal in engine.knowledge_base

    def test_self_implication_terminates(self, make_fact):
        a = make_fact("A", "r", "B")
        engine = InferenceEngine([a, implies(a, a)])
        result = engine.forward_chain(100)
        assert len(result) < 100
        assert result.derived == []
        assert result.reached_fixpoint

    def test_modus_tollens(self, socrates_is_man, socrates_is_mortal):
        engine = InferenceEngine([negate(socrates_is_mortal), implies(socrates_is_man, socrates_is_mortal)])
        assert engine.forward_chain().derived == [negate(socrates_is_man)]

    def test_hypothetical_syllogism(self, make_fact):
        a, b, c = make_fact("A", "r", "x"), make_fact("B", "r", "x"), make_fact("C", "r", "x")
        engine = InferenceEngine([implies(a, b), implies(b, c)])
        assert engine.forward_chain().derived == [implies(a, c)]

    def test_disjunctive_syllogism(self, make_fact):
        a, b = make_fact("A", "r", "x"), make_fact("B", "r", "x")
        assert InferenceEngine([disjoin(a, b), negate(a)]).forward_chain().derived == [b]
        assert InferenceEngine([disjoin(a, b), negate(b)]).forward_chain().derived == [a]

    def test_conjunction_elimination_adds_both(self, make_fact):
        a, b = make_fact("A", "r", "x"), make_fact("B", "r", "x")
        assert InferenceEngine([conjoin(a, b)]).forward_chain().derived == [a, b]

    def test_rule_application(self, mortality_rule, make_fact):
        engine = InferenceEngine([
            mortality_rule,
            make_fact("Socrates", "is", "Man"),
            make_fact("Plato", "is", "Man"),
        ])
        derived = engine.forward_chain().derived
        assert derived == [make_fact("Socrates", "is", "Mortal"), make_fact("Plato", "is", "Mortal")]

    def test_rule_with_conjunctive_premises(self, make_fact):
        rule = RuleDefinition(
            rule_id="athenian",
            premises=conjoin(make_fact("?X", "is", "Man"), make_fact("?X", "lives_in", "Athens")),
            conclusion=make_fact("?X", "is", "Athenian"),
        )
        engine = InferenceEngine([
            rule,
            make_fact("Socrates", "is", "Man"),
            make_fact("Socrates", "lives_in", "Athens"),
        ])
        assert make_fact("Socrates", "is", "Athenian") in engine.forward_chain().derived

    def test_bidirectional_rule_runs_backwards(self, make_fact):
        rule = RuleDefinition(
            rule_id="spouse",
            premises=make_fact("?X", "married_to", "?Y"),
            conclusion=make_fact("?X", "spouse_of", "?Y"),
            bidirectional=True,
        )
        engine = InferenceEngine([rule, make_fact("Ann", "spouse_of", "Bob")])
        assert engine.forward_chain().derived == [make_fact("Ann", "married_to", "Bob")]

    def test_chained_derivations_across_passes(self, socrates_kb, make_fact):
        dies = RuleDefinition(
            rule_id="mortals_die",
            premises=make_fact("?X", "is", "Mortal"),
            conclusion=make_fact("?X", "will", "Die"),
        )
        engine = InferenceEngine(socrates_kb + [dies])
        result = engine.forward_chain()
        assert make_fact("Socrates", "will", "Die") in result.derived
        assert result.iterations == 3

    def test_bound_exhaustion_is_reported(self, make_fact):
        a, b, c = make_fact("A", "r", "x"), make_fact("B", "r", "x"), make_fact("C", "r", "x")
        engine = InferenceEngine([a, implies(a, b), implies(b, c)])

        first = engine.forward_chain(max_iterations=1)
        assert first.iterations == 1
        assert first.bound_exhausted
        assert first.derived == [b, implies(a, c)]

        second = engine.forward_chain()
        assert second.reached_fixpoint
        assert second.derived == [c]

    def test_zero_bound_runs_nothing(self, socrates_kb):
        result = InferenceEngine(socrates_kb).forward_chain(0)
        assert result.iterations == 0
        assert result.derived == []
        assert result.bound_exhausted

    def test_config_bound_used_by_default(self, make_fact):
        a, b, c = make_fact("A", "r", "x"), make_fact("B", "r", "x"), make_fact("C", "r", "x")
        config = AIQLConfig(inference=InferenceConfig(max_forward_iterations=1))
        engine = InferenceEngine([a, implies(a, b), implies(b, c)], config=config)
        assert engine.forward_chain().bound_exhausted

    def test_knowledge_base_only_grows(self, socrates_kb):
        engine = InferenceEngine(socrates_kb)
        before = engine.knowledge_base
        engine.forward_chain()
        assert engine.knowledge_base[: len(before)] == before

    def test_unknown_nodes_are_skipped(self, socrates_kb, socrates_is_mortal):
        engine = InferenceEngine([{"type": "Mystery"}] + socrates_kb)
        assert engine.forward_chain().derived == [socrates_is_mortal]
        assert len(engine) == 4


# ─── PROVE ────────────────────────────────────────────────────────


class TestProve:
    def test_known_fact_is_provable(self, engine, bell_fact):
        result = engine.prove(bell_fact)
        assert result.provable
        assert result.proof.is_fact

    def test_derived_by_implication(self, engine, socrates_is_mortal):
        result = engine.prove(socrates_is_mortal)
        assert result.provable
        assert result.proof.rule == "modus-ponens"

    def test_unreachable_goal(self, engine, make_fact):
        result = engine.prove(make_fact("Plato", "is", "Mortal"))
        assert not result.provable
        assert result.proof is None
        assert "proof" not in result.to_dict()
        assert result.to_dict()["provable"] is False

    def test_saturation_fallback(self, socrates_is_man, socrates_is_mortal):
        engine = InferenceEngine([negate(socrates_is_mortal), implies(socrates_is_man, socrates_is_mortal)])
        result = engine.prove(negate(socrates_is_man))
        assert result.provable
        assert result.proof.rule == "forward-chaining"
        assert result.proof.premises[0].is_fact

    def test_saturation_can_be_disabled(self, socrates_is_man, socrates_is_mortal):
        config = AIQLConfig(inference=InferenceConfig(prove_with_saturation=False))
        engine = InferenceEngine(
            [negate(socrates_is_mortal), implies(socrates_is_man, socrates_is_mortal)],
            config=config,
        )
        assert not engine.prove(negate(socrates_is_man)).provable
        assert len(engine) == 2


# ─── CONSISTENCY ──────────────────────────────────────────────────


class TestConsistency:
    def test_direct_contradiction(self, socrates_is_man):
        engine = InferenceEngine([socrates_is_man, negate(socrates_is_man)])
        result = engine.check_consistency()
        assert result.consistent is False
        assert len(result.contradictions) == 1
        c = result.contradictions[0]
        assert (c.statement1, c.statement2) == (socrates_is_man, negate(socrates_is_man))

    def test_negation_first_is_also_found(self, socrates_is_man):
        engine = InferenceEngine([negate(socrates_is_man), socrates_is_man])
        assert len(engine.check_consistency().contradictions) == 1

    def test_consistent_knowledge_base(self, engine):
        result = engine.check_consistency()
        assert result.consistent is True
        assert result.contradictions == []

    def test_contradictory_implications(self, socrates_is_man, socrates_is_mortal):
        engine = InferenceEngine([
            implies(socrates_is_man, socrates_is_mortal),
            implies(socrates_is_man, negate(socrates_is_mortal)),
        ])
        result = engine.check_consistency()
        assert not result.consistent
        assert "Contradictory implications" in result.contradictions[0].reason

    def test_forward_chaining_can_surface_contradiction(self, socrates_is_man, socrates_is_mortal):
        engine = InferenceEngine([
            socrates_is_man,
            implies(socrates_is_man, socrates_is_mortal),
            negate(socrates_is_mortal),
        ])
        engine.forward_chain()
        assert not engine.check_consistency().consistent

    def test_boolean_negation_does_not_contradict_number(self, make_fact):
        engine = InferenceEngine([
            make_fact("Switch", "state", Literal(1)),
            negate(make_fact("Switch", "state", Literal(True))),
        ])
        assert len(engine) == 2
        assert engine.check_consistency().consistent is True


# ─── QUERIES ──────────────────────────────────────────────────────


class TestQueries:
    def test_query_returns_matches_with_bindings(self, engine, bell_fact, make_fact):
        pattern = make_fact("?Inventor", "invented", "?What", year=Identifier("?Year"))
        assert engine.query(pattern) == [
            (bell_fact, {"?Inventor": "<Bell>", "?What": "<Telephone>", "?Year": "1876"})
        ]

    def test_add_fact_deduplicates(self, engine, bell_fact, make_fact):
        assert engine.add_fact(bell_fact) is False
        assert engine.add_facts([bell_fact, make_fact("Edison", "invented", "Phonograph")]) == [
            make_fact("Edison", "invented", "Phonograph")
        ]

    def test_statements_mentioning(self, engine, bell_fact):
        expected = [bell_fact.statements[0]]
        assert engine.statements_mentioning("Bell") == expected
        assert engine.statements_mentioning("<Telephone>") == expected
        assert engine.statements_mentioning(Concept("Bell")) == expected
        assert engine.statements_mentioning("Edison") == []

    def test_knowledge_gaps(self, engine):
        gaps = dict(engine.knowledge_gaps())
        assert gaps[Concept("Man")] == 1.0
        assert gaps[Concept("Socrates")] == pytest.approx(0.8)
        assert set(gaps) == {Concept("Socrates"), Concept("Man"), Concept("Bell"), Concept("Telephone")}

    def test_well_described_concept_is_not_a_gap(self, make_fact):
        engine = InferenceEngine([make_fact("Bell", "invented", "Telephone"), make_fact("Bell", "born_in", "Edinburgh")])
        assert Concept("Bell") not in dict(engine.knowledge_gaps())


class TestMetaQueries:
    @staticmethod
    def meta(relation, obj):
        return Statement(Concept("Self"), Relation(relation), obj)

    def test_has_knowledge_about(self, engine, bell_fact):
        assert engine.query_meta(self.meta("has_knowledge_about", Concept("Bell"))) == [bell_fact.statements[0]]

    def test_has_knowledge_about_variable_returns_everything(self, engine):
        assert len(engine.query_meta(self.meta("has_knowledge_about", Concept("?Topic")))) == 2

    def test_lacks_knowledge_about(self, engine):
        gaps = engine.query_meta(self.meta("lacks_knowledge_about", Concept("?Domain")))
        assert {s.object for s in gaps} == {Concept("Socrates"), Concept("Man"), Concept("Bell"), Concept("Telephone")}
        assert all(s.subject == Concept("Self") for s in gaps)
        assert all("confidence" in s.attribute_map for s in gaps)

    def test_has_capability(self, engine, make_fact):
        caps = engine.query_meta(self.meta("has_capability", Concept("?Skill")))
        assert [s.object for s in caps] == [Concept("LogicalReasoning")]

        engine.add_fact(make_fact("Ann", "feels", "Joy"))
        caps = engine.query_meta(self.meta("has_capability", Concept("?Skill")))
        assert Concept("AffectiveReasoning") in [s.object for s in caps]

    def test_non_self_subject_returns_nothing(self, engine):
        query = Statement(Concept("Other"), Relation("has_knowledge_about"), Concept("Bell"))
        assert engine.query_meta(query) == []

    def test_unknown_meta_relation(self, engine):
        assert engine.query_meta(self.meta("has_consciousness_level", Concept("?C"))) == []


def test_repr(engine):
    assert repr(engine) == "InferenceEngine(nodes=3, rules=0)"


def test_intent_with_multiple_statements_counts_each(make_statement):
    engine = InferenceEngine([Intent("!Assert", (make_statement("A", "r", "B"), make_statement("A", "s", "C")))])
    assert len(engine.statements()) == 2

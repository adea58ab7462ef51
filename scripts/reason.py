#!/usr/bin/env python3
"""
scripts/reason.py
=================
Run the AIQL reasoning core from the command line.

Usage:
    python scripts/reason.py examples/data/socrates.json
    python scripts/reason.py kb.json --goal goal.json --max-iterations 20
    python scripts/reason.py kb.json --ontology animals.ttl --type-check
"""
import argparse
import json
import logging
import sys


def load_goal(value: str):
    """--goal accepts a JSON file path or an inline JSON object."""
    from pathlib import Path
    from aiql.symbolic.loader import node_from_dict

    text = Path(value).read_text() if Path(value).is_file() else value
    return node_from_dict(json.loads(text))


def main():
    parser = argparse.ArgumentParser(description="AIQL Reasoning CLI")
    parser.add_argument("knowledge_base",
                        help="Path to knowledge-base JSON (list of nodes)")
    parser.add_argument("--goal",     default=None,
                        help="Goal node to prove: JSON file or inline JSON")
    parser.add_argument("--ontology", default=None,
                        help="Ontology file (.json, .ttl, .owl, ...)")
    parser.add_argument("--config",   default=None,
                        help="Path to config JSON ({\"inference\": {...}, \"ontology\": {...}})")
    parser.add_argument("--max-iterations", type=int, default=None,
                        help="Forward-chaining pass bound")
    parser.add_argument("--type-check", action="store_true",
                        help="Also report domain/range violations")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from aiql.core.config import AIQLConfig
    from aiql.core.exceptions import AIQLError
    from aiql.symbolic.engine import InferenceEngine
    from aiql.symbolic.loader import NodeLoader
    from aiql.symbolic.ontology.loader import OntologyLoader
    from aiql.symbolic.ontology.reasoner import OntologyReasoner

    try:
        config = None
        if args.config:
            with open(args.config) as f:
                config = AIQLConfig.from_dict(json.load(f))
        nodes = NodeLoader.from_json(args.knowledge_base)
        ontology = OntologyLoader.load(args.ontology) if args.ontology else None
        goal = load_goal(args.goal) if args.goal else None
    except (AIQLError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)

    engine = InferenceEngine(nodes, config=config)
    print(f"Knowledge base: {len(engine)} nodes")

    chained = engine.forward_chain(args.max_iterations)
    status = "fixed point" if chained.reached_fixpoint else "iteration bound hit"
    print(f"Forward chaining: {len(chained)} derived in {chained.iterations} pass(es) ({status})")
    for node in chained.derived:
        print(f"  + {node}")

    consistency = engine.check_consistency()
    if consistency.consistent:
        print("Consistency: OK")
    else:
        print(f"Consistency: {len(consistency.contradictions)} contradiction(s)")
        for c in consistency.contradictions:
            print(f"  ✗ {c.statement1}  ⟂  {c.statement2}  ({c.reason})")

    if goal is not None:
        result = engine.prove(goal)
        print(f"Goal: {goal}")
        print(result.explain())

    reasoner = OntologyReasoner(config=config)
    axioms = []
    if ontology is not None:
        ontology.apply(reasoner)
        axioms = ontology.statements
    statements = engine.statements()
    reasoner.learn_hierarchy(axioms + statements)
    conflicts = reasoner.detect_all_conflicts(statements)
    if args.type_check:
        conflicts += reasoner.detect_type_violations(statements)
    print(f"Semantic conflicts: {len(conflicts)}")
    for c in conflicts:
        print(f"  [{c.severity.value}] {c.conflict_type.value}: {c.reason}")

    sys.exit(0 if consistency.consistent and not conflicts else 1)


if __name__ == "__main__":
    main()

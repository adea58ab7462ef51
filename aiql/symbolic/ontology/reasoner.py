"""
aiql/symbolic/ontology/reasoner.py
==================================
Ontology reasoning: class hierarchies, instances and semantic conflicts.

The inference engine only sees direct contradictions (X and not X).
This module catches what needs world knowledge:

    <Rex> [is_a] <Mammal>           and  <Rex> [is_a] <Reptile>          → taxonomy (critical)
    <Cup> [has_temperature] <Hot>   and  <Cup> [has_temperature] <Cold>  → cardinality (major)
    <Cat> [is_alive] true           and  <Cat> [is_dead] true            → disjoint values (critical)

All maps are keyed by plain names: ``<Mammal>`` and ``Mammal`` both key
as ``Mammal``. The reasoner never looks at the engine's knowledge base.
"""

from __future__ import annotations

import logging
from itertools import product
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

from aiql.core.config import DEFAULT_CONFIG, AIQLConfig
from aiql.core.types import (
    Cardinality,
    ClosureResult,
    Concept,
    ConflictResult,
    ConflictSeverity,
    ConflictType,
    Expression,
    Identifier,
    PropertyConstraint,
    RelationshipKind,
    RelationshipNode,
    Statement,
)

logger = logging.getLogger(__name__)

HIERARCHY_RELATIONS = frozenset({"is_a", "subclass_of"})
INSTANCE_RELATIONS = frozenset({"instance_of"})
TAXONOMY_RELATIONS = frozenset({"is_a", "instance_of"})


# ─────────────────────────────────────────────
#  COMMON-SENSE SEED
# ─────────────────────────────────────────────

DEFAULT_CONSTRAINTS = (
    PropertyConstraint("has_temperature", domain="PhysicalObject", range="Temperature", cardinality=Cardinality.ONE),
    PropertyConstraint("shape", domain="PhysicalObject", range="Shape", cardinality=Cardinality.ONE),
    PropertyConstraint("age", domain="Entity", range="Number", cardinality=Cardinality.ONE),
    PropertyConstraint("is_alive", domain="Organism", range="Boolean", disjoint_with=("is_dead",)),
    PropertyConstraint("located_at", domain="PhysicalObject", range="Location", cardinality=Cardinality.ONE),
    PropertyConstraint("same_as", symmetric=True),
    PropertyConstraint("equivalent_to", symmetric=True),
    PropertyConstraint("is_a", transitive=True),
    PropertyConstraint("subclass_of", transitive=True),
)

DEFAULT_DISJOINT_PAIRS = (
    ("Mammal", "Reptile"), ("Mammal", "Bird"), ("Mammal", "Fish"),
    ("Reptile", "Bird"), ("Reptile", "Fish"), ("Bird", "Fish"),
    ("Animal", "Plant"),
    ("Organic", "Inorganic"),
    ("Living", "NonLiving"),
    ("Solid", "Liquid"), ("Solid", "Gas"), ("Liquid", "Gas"),
    ("Sphere", "Flat"), ("Sphere", "Cube"), ("Flat", "Cube"),
)


def concept_key(value: Union[str, Expression]) -> str:
    """Plain name of a token: ``Concept("Mammal")`` → ``"Mammal"``.

    Strings are taken as already-plain names and never stripped.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (Concept, Identifier)):
        return value.name
    return str(value)


class OntologyReasoner:
    """Class/instance ontology with semantic conflict detection.

    Usage:
        reasoner = OntologyReasoner()
        reasoner.learn_hierarchy(statements)
        for conflict in reasoner.detect_all_conflicts(statements):
            print(conflict.severity, conflict.reason)
    """

    def __init__(self, config: Optional[AIQLConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._hierarchy: Dict[str, Set[str]] = {}     # concept → superclasses
        self._instances: Dict[str, Set[str]] = {}     # instance → classes
        self._constraints: Dict[str, PropertyConstraint] = {}
        self._disjoint: Set[frozenset] = set()

        if self.config.ontology.seed_defaults:
            for constraint in DEFAULT_CONSTRAINTS:
                self.add_constraint(constraint)
            for a, b in DEFAULT_DISJOINT_PAIRS:
                self.add_disjoint_pair(a, b)

    # ─── CONSTRAINTS ───────────────────────────────────────────────

    def add_constraint(self, constraint: PropertyConstraint) -> None:
        """Register (or replace) the constraint for ``constraint.relation``."""
        self._constraints[constraint.relation] = constraint
        logger.debug(f"Constraint registered: {constraint.relation}")

    def get_constraint(self, relation: str) -> Optional[PropertyConstraint]:
        return self._constraints.get(relation)

    def add_disjoint_pair(self, class1: str, class2: str) -> None:
        """Mark two classes as mutually exclusive. Order does not matter."""
        if class1 == class2:
            logger.warning(f"Ignoring disjoint pair of a class with itself: {class1}")
            return
        self._disjoint.add(frozenset((class1, class2)))

    def are_disjoint(self, class1: str, class2: str) -> bool:
        return class1 != class2 and frozenset((class1, class2)) in self._disjoint

    @property
    def constraints(self) -> List[PropertyConstraint]:
        return list(self._constraints.values())

    # ─── HIERARCHY ─────────────────────────────────────────────────

    def learn_hierarchy(self, statements: Iterable[Statement]) -> ClosureResult:
        """Rebuild the hierarchy and instance maps from ``statements``.

        ``X [is_a|subclass_of] Y`` records Y as a superclass of X,
        ``X [instance_of] Y`` records Y as a class of X. The hierarchy is
        then transitively closed (see ``compute_transitive_closure``).
        """
        self._hierarchy = {}
        self._instances = {}
        for stmt in statements:
            if not isinstance(stmt, Statement):
                continue
            relation = stmt.relation.name
            subject, obj = concept_key(stmt.subject), concept_key(stmt.object)
            if relation in HIERARCHY_RELATIONS:
                self._hierarchy.setdefault(subject, set()).add(obj)
            elif relation in INSTANCE_RELATIONS:
                self._instances.setdefault(subject, set()).add(obj)

        result = self.compute_transitive_closure()
        logger.debug(
            f"Hierarchy learned: {len(self._hierarchy)} concepts, "
            f"{len(self._instances)} instances, closure in {result.iterations} pass(es)"
        )
        return result

    def compute_transitive_closure(self) -> ClosureResult:
        """If A is_a B and B is_a C then A is_a C.

        Each pass unions into every concept the superclasses of its
        superclasses. Stops when a pass adds nothing (``converged=True``)
        or after ``max_closure_iterations`` passes. Cyclic hierarchies
        terminate either way.
        """
        bound = self.config.ontology.max_closure_iterations
        iterations = 0
        changed = True
        while changed and iterations < bound:
            changed = False
            iterations += 1
            for concept, supers in list(self._hierarchy.items()):
                closed = set(supers)
                for parent in supers:
                    closed |= self._hierarchy.get(parent, set())
                if len(closed) > len(supers):
                    self._hierarchy[concept] = closed
                    changed = True

        if changed:
            logger.warning(
                f"Transitive closure stopped at the iteration bound ({bound}); "
                "the hierarchy may be incomplete"
            )
        return ClosureResult(iterations=iterations, converged=not changed)

    def is_subclass_of(self, concept1: Union[str, Expression], concept2: Union[str, Expression]) -> bool:
        """Reflexive, transitive subclass test."""
        a, b = concept_key(concept1), concept_key(concept2)
        return a == b or b in self._hierarchy.get(a, ())

    def get_superclasses(self, concept: Union[str, Expression]) -> Set[str]:
        return set(self._hierarchy.get(concept_key(concept), ()))

    def get_classes(self, instance: Union[str, Expression]) -> Set[str]:
        """Direct classes of an instance plus all their superclasses."""
        classes = set()
        for cls in self._instances.get(concept_key(instance), ()):
            classes.add(cls)
            classes |= self._hierarchy.get(cls, set())
        return classes

    def is_instance_of(self, instance: Union[str, Expression], class_name: Union[str, Expression]) -> bool:
        target = concept_key(class_name)
        direct = self._instances.get(concept_key(instance))
        if not direct:
            return False
        if target in direct:
            return True
        return any(self.is_subclass_of(cls, target) for cls in direct)

    # ─── CONFLICT DETECTION ────────────────────────────────────────

    def _disjoint_witness(self, class1: str, class2: str) -> Optional[Tuple[str, str]]:
        """A registered disjoint pair covering the two classes, if any.

        Checks the classes themselves first, then their superclasses, so
        ``Dog`` and ``Lizard`` clash when Dog is_a Mammal and Lizard is_a Reptile.
        """
        if self.are_disjoint(class1, class2):
            return class1, class2
        left = {class1} | self._hierarchy.get(class1, set())
        right = {class2} | self._hierarchy.get(class2, set())
        for a, b in product(sorted(left), sorted(right)):
            if self.are_disjoint(a, b):
                return a, b
        return None

    def detect_semantic_conflict(self, stmt1: Statement, stmt2: Statement) -> ConflictResult:
        """First semantic conflict between two statements about one subject.

        Priority: taxonomy, cardinality, disjoint values.
        Statements about different subjects never conflict.
        """
        subject = concept_key(stmt1.subject)
        if subject != concept_key(stmt2.subject):
            return ConflictResult(has_conflict=False)

        rel1, rel2 = stmt1.relation.name, stmt2.relation.name
        obj1, obj2 = concept_key(stmt1.object), concept_key(stmt2.object)

        # 1. Taxonomy: member of two disjoint classes
        if rel1 in TAXONOMY_RELATIONS and rel2 in TAXONOMY_RELATIONS:
            witness = self._disjoint_witness(obj1, obj2)
            if witness is not None:
                details: Dict[str, Any] = {"subject": subject, "class1": obj1, "class2": obj2}
                if witness != (obj1, obj2):
                    details["disjoint_pair"] = witness
                return ConflictResult(
                    has_conflict=True,
                    conflict_type=ConflictType.TAXONOMY,
                    reason=f"Cannot be both {obj1} and {obj2} (disjoint classes)",
                    severity=ConflictSeverity.CRITICAL,
                    details=details,
                )

        # 2. Cardinality: single-valued property with two values
        constraint1 = self._constraints.get(rel1)
        if (
            rel1 == rel2
            and constraint1 is not None
            and constraint1.cardinality is Cardinality.ONE
            and obj1 != obj2
        ):
            return ConflictResult(
                has_conflict=True,
                conflict_type=ConflictType.CARDINALITY,
                reason=f"Property {rel1} has cardinality 'one' but multiple different values assigned",
                severity=ConflictSeverity.MAJOR,
                details={"subject": subject, "property": rel1, "value1": obj1, "value2": obj2},
            )

        # 3. Disjoint values: mutually exclusive properties
        constraint2 = self._constraints.get(rel2)
        if (constraint1 is not None and rel2 in constraint1.disjoint_with) or (
            constraint2 is not None and rel1 in constraint2.disjoint_with
        ):
            return ConflictResult(
                has_conflict=True,
                conflict_type=ConflictType.DISJOINT_VALUES,
                reason=f"Properties {rel1} and {rel2} are mutually exclusive",
                severity=ConflictSeverity.CRITICAL,
                details={
                    "subject": subject,
                    "property1": rel1,
                    "property2": rel2,
                    "value1": obj1,
                    "value2": obj2,
                },
            )

        return ConflictResult(has_conflict=False)

    def detect_all_conflicts(self, statements: Iterable[Statement]) -> List[ConflictResult]:
        """Check every pair of statements sharing a subject.

        Each hit carries both statements under ``details["statement1"]``
        and ``details["statement2"]``.
        """
        by_subject: Dict[str, List[Statement]] = {}
        for stmt in statements:
            if isinstance(stmt, Statement):
                by_subject.setdefault(concept_key(stmt.subject), []).append(stmt)

        conflicts: List[ConflictResult] = []
        for group in by_subject.values():
            for i, first in enumerate(group):
                for second in group[i + 1:]:
                    result = self.detect_semantic_conflict(first, second)
                    if result.has_conflict:
                        result.details.update(statement1=first, statement2=second)
                        conflicts.append(result)

        if conflicts:
            logger.info(f"Detected {len(conflicts)} semantic conflict(s)")
        return conflicts

    def detect_type_violations(self, statements: Iterable[Statement]) -> List[ConflictResult]:
        """Domain/range mismatches against the registered constraints.

        Only entities whose classes are known (via ``instance_of``) are
        checked; an entity the ontology knows nothing about is never a
        violation. Severity is always minor.
        """
        violations: List[ConflictResult] = []
        for stmt in statements:
            if not isinstance(stmt, Statement):
                continue
            constraint = self._constraints.get(stmt.relation.name)
            if constraint is None:
                continue
            for role, token, expected in (
                ("domain", stmt.subject, constraint.domain),
                ("range", stmt.object, constraint.range),
            ):
                if expected is None:
                    continue
                entity = concept_key(token)
                classes = self.get_classes(entity)
                if not classes or any(self.is_subclass_of(c, expected) for c in classes):
                    continue
                violations.append(ConflictResult(
                    has_conflict=True,
                    conflict_type=ConflictType.TYPE,
                    reason=f"{entity} is not a {expected} ({role} of {constraint.relation})",
                    severity=ConflictSeverity.MINOR,
                    details={
                        "entity": entity,
                        "property": constraint.relation,
                        "role": role,
                        "expected": expected,
                        "classes": sorted(classes),
                        "statement": stmt,
                    },
                ))
        return violations

    # ─── REPORTING ─────────────────────────────────────────────────

    def contradiction_graph(self, conflicts: Iterable[ConflictResult]) -> List[RelationshipNode]:
        """Render conflicts as ``contradicts`` edges for visualisation."""
        edges = []
        for i, conflict in enumerate(conflicts, start=1):
            if not conflict.has_conflict:
                continue
            edges.append(RelationshipNode(
                kind=RelationshipKind.LOGICAL,
                source=f"statement_{i}_a",
                target=f"statement_{i}_b",
                relation_name="contradicts",
                confidence=0.92,
                metadata={
                    "contradiction_type": conflict.conflict_type.value if conflict.conflict_type else None,
                    "reason": conflict.reason,
                    "severity": conflict.severity.value if conflict.severity else None,
                    "domain_knowledge": conflict.details.get("domain", "general"),
                },
            ))
        return edges

    def get_statistics(self) -> Dict[str, int]:
        return {
            "hierarchy_count": len(self._hierarchy),
            "instance_count": len(self._instances),
            "constraint_count": len(self._constraints),
            "disjoint_pair_count": len(self._disjoint),
        }

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (
            f"OntologyReasoner(concepts={stats['hierarchy_count']}, "
            f"instances={stats['instance_count']}, constraints={stats['constraint_count']})"
        )

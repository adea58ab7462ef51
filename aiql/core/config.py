"""
aiql/core/config.py
===================
Global configuration for the AIQL reasoning core.
All iteration bounds in one place, validated at construction.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict

from aiql.core.exceptions import ConfigurationError


@dataclass
class InferenceConfig:
    max_forward_iterations: int  = 100   # passes per forward_chain() call
    max_proof_depth:        int  = 20    # backward-chaining recursion bound
    prove_with_saturation:  bool = True  # prove() falls back to forward chaining
    saturation_iterations:  int  = 50

    def __post_init__(self):
        for name in ("max_forward_iterations", "max_proof_depth", "saturation_iterations"):
            if getattr(self, name) < 0:
                raise ConfigurationError(
                    f"InferenceConfig.{name} must be >= 0",
                    context={name: getattr(self, name)},
                )


@dataclass
class OntologyConfig:
    max_closure_iterations: int  = 100
    seed_defaults:          bool = True   # common-sense constraints + disjoint pairs

    def __post_init__(self):
        if self.max_closure_iterations < 0:
            raise ConfigurationError(
                "OntologyConfig.max_closure_iterations must be >= 0",
                context={"max_closure_iterations": self.max_closure_iterations},
            )


@dataclass
class AIQLConfig:
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    ontology:  OntologyConfig  = field(default_factory=OntologyConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIQLConfig":
        """Build a config from nested dicts, e.g. loaded from JSON.

        Unknown keys raise ConfigurationError rather than being ignored.
        """
        sections = {"inference": InferenceConfig, "ontology": OntologyConfig}
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigurationError(
                f"Unknown config sections: {sorted(unknown)}",
                context={"allowed": sorted(sections)},
            )
        kwargs = {}
        for name, section_cls in sections.items():
            values = data.get(name, {})
            allowed = {f.name for f in fields(section_cls)}
            bad = set(values) - allowed
            if bad:
                raise ConfigurationError(
                    f"Unknown keys in '{name}' config: {sorted(bad)}",
                    context={"allowed": sorted(allowed)},
                )
            kwargs[name] = section_cls(**values)
        return cls(**kwargs)


# Singleton default config
DEFAULT_CONFIG = AIQLConfig()

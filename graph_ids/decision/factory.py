"""
Selection of the decision policy from configuration.
"""

import os
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from graph_ids.audit.base import AuditModule
from graph_ids.decision.base import DecisionPolicy
from graph_ids.decision.density import DensityConfig, DensityPolicy
from graph_ids.decision.modularity import ModularityPolicy, ModularityPolicyConfig
from graph_ids.domain import IDSMode
from graph_ids.knowledge import KnowledgeModule


class PolicyKind(str, Enum):
    """Available decision policies."""

    DENSITY = "density"
    MODULARITY = "modularity"


@dataclass
class DecisionConfig:
    """Configuration for building a decision policy."""

    policy: PolicyKind = field(
        default_factory=lambda: PolicyKind(os.getenv("GRAPH_IDS_POLICY", "modularity"))
    )
    mode: IDSMode = field(
        default_factory=lambda: IDSMode(
            os.getenv("GRAPH_IDS_MODE", "intrusion_detecting_without_learning")
        )
    )
    density: DensityConfig = field(default_factory=DensityConfig)
    modularity: ModularityPolicyConfig = field(default_factory=ModularityPolicyConfig)

    def __post_init__(self):
        # Accept plain strings from callers and config files
        self.policy = PolicyKind(self.policy)
        self.mode = IDSMode(self.mode)


def create_policy(
    config: DecisionConfig,
    knowledge_module: KnowledgeModule,
    audit_module: AuditModule,
) -> DecisionPolicy:
    """
    Build the decision policy named by ``config``.

    Raises:
        ValueError: Unknown policy kind
    """
    if config.policy == PolicyKind.DENSITY:
        policy: DecisionPolicy = DensityPolicy(
            knowledge_module, audit_module, config.mode, config.density
        )
    elif config.policy == PolicyKind.MODULARITY:
        policy = ModularityPolicy(
            knowledge_module, audit_module, config.mode, config.modularity
        )
    else:
        raise ValueError(f"Unknown decision policy: {config.policy}")

    logger.info(f"Using {config.policy.value} decision policy in {config.mode.value} mode")
    return policy

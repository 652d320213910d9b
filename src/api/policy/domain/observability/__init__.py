"""Domain-Oriented Observability for the Policy domain layer.

Probes for policy builder operations following Domain-Oriented Observability patterns.
"""

from policy.domain.observability.policy_builder_probe import (
    DefaultPolicyBuilderProbe,
    PolicyBuilderProbe,
)

__all__ = [
    "DefaultPolicyBuilderProbe",
    "PolicyBuilderProbe",
]

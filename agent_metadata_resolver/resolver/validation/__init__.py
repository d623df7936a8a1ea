"""Agent document validation."""

from agent_metadata_resolver.resolver.validation.context import OnchainContext
from agent_metadata_resolver.resolver.validation.pipeline import LEVELS, validate

__all__ = [
    "LEVELS",
    "OnchainContext",
    "validate",
]

"""Dot-path hide rules over domains, features, models and model operations.

Paths look like ``domain``, ``domain.feature``, ``domain.cruds``,
``domain.cruds.Model`` or ``domain.cruds.Model.operation``. A path is hidden
when it or one of its prefixes is listed, when its domain is hidden, or when
it points below ``cruds`` and all models are hidden.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .settings import MCP_NAMESPACE, McpServerSettings

MODELS_CONTAINER = "cruds"
SYSTEM_DOMAINS = frozenset({"layered-core", "layered-data", MCP_NAMESPACE})


@dataclass(frozen=True)
class VisibilityRuleSet:
    paths: frozenset[str]
    domains: frozenset[str]
    all_models: bool = False

    @classmethod
    def create(
        cls,
        *,
        paths: Iterable[str] = (),
        domains: Iterable[str] = (),
        all_models: bool = False,
    ) -> "VisibilityRuleSet":
        """Build a rule set; system domains are always hidden."""
        return cls(
            paths=frozenset(SYSTEM_DOMAINS) | frozenset(paths),
            domains=frozenset(domains),
            all_models=all_models,
        )

    @classmethod
    def from_settings(cls, settings: McpServerSettings) -> "VisibilityRuleSet":
        hide = settings.hide_components
        return cls.create(
            paths=hide.paths | settings.hidden_paths,
            domains=hide.domains,
            all_models=hide.all_models,
        )


class VisibilityResolver:
    """Answers whether a path may be listed or executed."""

    def __init__(self, rules: VisibilityRuleSet) -> None:
        self.rules = rules

    def is_hidden(self, path: Sequence[str]) -> bool:
        segments = [str(segment) for segment in path]
        if not segments:
            return False
        if segments[0] in self.rules.domains:
            return True
        if self.rules.all_models and len(segments) > 1 and segments[1] == MODELS_CONTAINER:
            return True
        prefix = ""
        for segment in segments:
            prefix = f"{prefix}.{segment}" if prefix else segment
            if prefix in self.rules.paths:
                return True
        return False

    def is_domain_hidden(self, domain: str) -> bool:
        return self.is_hidden([domain])

    def is_feature_hidden(self, domain: str, feature: str) -> bool:
        return self.is_hidden([domain, feature])

    def are_all_models_hidden(self, domain: str) -> bool:
        return self.is_hidden([domain, MODELS_CONTAINER])

    def is_model_hidden(self, domain: str, model: str) -> bool:
        return self.is_hidden([domain, MODELS_CONTAINER, model])

    def is_operation_hidden(self, domain: str, model: str, operation: str) -> bool:
        return self.is_hidden([domain, MODELS_CONTAINER, model, operation])


__all__ = [
    "MODELS_CONTAINER",
    "SYSTEM_DOMAINS",
    "VisibilityResolver",
    "VisibilityRuleSet",
]

from __future__ import annotations

import pytest

from layered_mcp.settings import HideComponentsSettings, McpServerSettings
from layered_mcp.visibility import SYSTEM_DOMAINS, VisibilityResolver, VisibilityRuleSet


def _resolver(**kwargs) -> VisibilityResolver:
    return VisibilityResolver(VisibilityRuleSet.create(**kwargs))


@pytest.mark.parametrize("domain", sorted(SYSTEM_DOMAINS))
def test_system_domains_are_always_hidden(domain):
    resolver = _resolver()

    assert resolver.is_domain_hidden(domain)
    assert resolver.is_feature_hidden(domain, "anything")


def test_nothing_else_is_hidden_by_default():
    resolver = _resolver()

    assert not resolver.is_domain_hidden("billing")
    assert not resolver.is_model_hidden("billing", "Invoices")
    assert not resolver.is_hidden([])


def test_prefix_hides_everything_below():
    resolver = _resolver(paths=["billing.cruds"])

    assert not resolver.is_domain_hidden("billing")
    assert not resolver.is_feature_hidden("billing", "createInvoice")
    assert resolver.are_all_models_hidden("billing")
    assert resolver.is_model_hidden("billing", "Invoices")
    assert resolver.is_operation_hidden("billing", "Invoices", "save")


def test_exact_operation_path():
    resolver = _resolver(paths=["billing.cruds.Invoices.delete"])

    assert resolver.is_operation_hidden("billing", "Invoices", "delete")
    assert not resolver.is_operation_hidden("billing", "Invoices", "save")
    assert not resolver.is_model_hidden("billing", "Invoices")


def test_partial_segment_is_not_a_prefix():
    resolver = _resolver(paths=["bill"])

    assert not resolver.is_domain_hidden("billing")


def test_hidden_domain_hides_all_of_its_paths():
    resolver = _resolver(domains=["billing"])

    assert resolver.is_domain_hidden("billing")
    assert resolver.is_feature_hidden("billing", "createInvoice")
    assert resolver.is_operation_hidden("billing", "Invoices", "search")


def test_all_models_hides_only_model_paths():
    resolver = _resolver(all_models=True)

    assert resolver.are_all_models_hidden("billing")
    assert resolver.is_model_hidden("shop", "Orders")
    assert not resolver.is_feature_hidden("billing", "cruds-report")
    assert not resolver.is_domain_hidden("billing")


def test_more_rules_never_reveal_paths():
    paths = [
        ["billing"],
        ["billing", "createInvoice"],
        ["billing", "cruds", "Invoices", "save"],
        ["tasks", "cruds", "Todos"],
    ]
    smaller = _resolver(paths=["billing.createInvoice"])
    larger = _resolver(paths=["billing.createInvoice", "tasks"], all_models=True)

    for path in paths:
        if smaller.is_hidden(path):
            assert larger.is_hidden(path)


def test_rules_from_settings_combine_hidden_paths():
    settings = McpServerSettings(
        hide_components=HideComponentsSettings(paths=frozenset({"billing.greet"})),
        hidden_paths=frozenset({"tasks"}),
    )

    rules = VisibilityRuleSet.from_settings(settings)

    assert {"billing.greet", "tasks"} <= rules.paths
    assert SYSTEM_DOMAINS <= rules.paths

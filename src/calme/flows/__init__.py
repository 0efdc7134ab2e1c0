"""
Built-in Conversation Flows

Onboarding, main supportive flow and alert fast-path, validated
against the parser registry when the catalog is first built.
"""

from functools import lru_cache
from typing import Optional

from calme.config.settings import Settings, get_settings
from calme.flows.alert import build_alert_graph
from calme.flows.loader import graph_to_dict, load_graph
from calme.flows.main_flow import build_main_graph
from calme.flows.onboarding import build_onboarding_graph
from calme.services.classification.registry import PARSERS
from calme.services.dialogue.catalog import GraphCatalog


def build_graph_catalog(settings: Optional[Settings] = None) -> GraphCatalog:
    """
    Build and validate every built-in graph.

    Args:
        settings: Settings to use (defaults to the cached settings)

    Returns:
        Catalog holding the onboarding, main and alert graphs

    Raises:
        GraphValidationError: If a built-in graph is malformed
    """
    settings = settings or get_settings()
    check_reachability = settings.dialogue.validate_reachability
    known_parsers = PARSERS.keys()

    return GraphCatalog([
        build_onboarding_graph(known_parsers, check_reachability),
        build_main_graph(known_parsers, check_reachability),
        build_alert_graph(known_parsers, check_reachability),
    ])


@lru_cache()
def get_graph_catalog() -> GraphCatalog:
    """
    Get the cached catalog of built-in graphs.

    Graphs are immutable, so one catalog is shared by every session.
    """
    return build_graph_catalog()


__all__ = [
    "build_alert_graph",
    "build_graph_catalog",
    "build_main_graph",
    "build_onboarding_graph",
    "get_graph_catalog",
    "graph_to_dict",
    "load_graph",
]

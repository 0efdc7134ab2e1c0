"""
Graph Catalog

Read-only lookup of the validated graphs an engine may switch
between. Catalogs hold immutable graphs only and may be shared by
any number of sessions.
"""

from types import MappingProxyType
from typing import Iterable, Iterator, Union

from calme.domain.enums.categories import GraphId
from calme.domain.models.conversation import DialogueGraph
from calme.services.dialogue.errors import UnknownGraphError


class GraphCatalog:
    """Immutable collection of dialogue graphs keyed by graph id."""

    def __init__(self, graphs: Iterable[DialogueGraph]) -> None:
        by_id: dict[GraphId, DialogueGraph] = {}
        for graph in graphs:
            if graph.graph_id in by_id:
                raise ValueError(f"Graph '{graph.graph_id.value}' registered twice")
            by_id[graph.graph_id] = graph
        self._graphs = MappingProxyType(by_id)

    def get(self, graph_id: Union[GraphId, str]) -> DialogueGraph:
        """
        Look up a graph.

        Raises:
            UnknownGraphError: If no graph has this id
        """
        try:
            key = GraphId(graph_id)
        except ValueError as e:
            raise UnknownGraphError(str(graph_id)) from e
        graph = self._graphs.get(key)
        if graph is None:
            raise UnknownGraphError(key.value)
        return graph

    def __contains__(self, graph_id: object) -> bool:
        return graph_id in self._graphs

    def __iter__(self) -> Iterator[DialogueGraph]:
        return iter(self._graphs.values())

    def __len__(self) -> int:
        return len(self._graphs)

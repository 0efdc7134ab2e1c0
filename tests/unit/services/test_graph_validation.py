"""
Unit Tests for Graph Validation, Catalog and Loader

Tests that malformed graphs are rejected at build time with every
issue listed, and that declarative documents load and export.
"""

import pytest

from calme.domain.enums.categories import GraphId, NodeKind
from calme.domain.models.conversation import (
    ConditionRule,
    Conditional,
    ConversationNode,
    Direct,
)
from calme.domain.models.parser_output import ExtractionResult
from calme.domain.models.predicates import AnyOf, CategoryIs, ValueContains
from calme.flows import build_alert_graph, build_main_graph, build_onboarding_graph
from calme.flows.loader import graph_to_dict, load_graph
from calme.services.classification.registry import PARSERS
from calme.services.dialogue.catalog import GraphCatalog
from calme.services.dialogue.errors import GraphValidationError, UnknownGraphError
from calme.services.dialogue.validator import GraphValidator, build_graph


def _end(node_id: str) -> ConversationNode:
    return ConversationNode(id=node_id, kind=NodeKind.END, content="bye")


class TestGraphValidator:
    """Test suite for static graph checks."""

    def _issues(self, start: str, *nodes: ConversationNode) -> list[str]:
        with pytest.raises(GraphValidationError) as exc_info:
            build_graph(GraphId.MAIN, start, list(nodes), known_parsers=PARSERS.keys())
        return exc_info.value.issues

    def test_valid_graph(self) -> None:
        graph = build_graph(
            GraphId.MAIN,
            "q",
            [
                ConversationNode(id="q", kind=NodeKind.QUESTION, next=Direct("done")),
                _end("done"),
            ],
        )
        assert len(graph) == 2
        assert "q" in graph

    def test_missing_target(self) -> None:
        issues = self._issues(
            "q",
            ConversationNode(id="q", kind=NodeKind.QUESTION, next=Direct("nowhere")),
        )
        assert any("'nowhere' does not exist" in issue for issue in issues)

    def test_unknown_start_node(self) -> None:
        issues = self._issues("start", _end("done"))
        assert "start node 'start' does not exist" in issues

    def test_conditional_without_default(self) -> None:
        issues = self._issues(
            "q",
            ConversationNode(
                id="q",
                kind=NodeKind.QUESTION,
                parser_type="classifySafety",
                next=Conditional(rules=(ConditionRule(goto="done", predicate=CategoryIs("SAFE")),)),
            ),
            _end("done"),
        )
        assert any("no default rule" in issue for issue in issues)

    def test_empty_conditional(self) -> None:
        issues = self._issues(
            "q",
            ConversationNode(id="q", kind=NodeKind.QUESTION, next=Conditional(rules=())),
        )
        assert any("has no rules" in issue for issue in issues)

    def test_activity_node_rules(self) -> None:
        issues = self._issues(
            "a",
            ConversationNode(
                id="a",
                kind=NodeKind.ACTIVITY,
                next=Conditional(rules=(ConditionRule(goto="done", is_default=True),)),
            ),
            ConversationNode(id="q", kind=NodeKind.QUESTION, next=Direct("done"), activity_name="paint"),
            _end("done"),
        )
        assert any("needs an activity_name" in issue for issue in issues)
        assert any("must use a direct transition" in issue for issue in issues)
        assert any("only activity nodes may name an activity" in issue for issue in issues)

    def test_end_and_question_transitions(self) -> None:
        issues = self._issues(
            "q",
            ConversationNode(id="q", kind=NodeKind.QUESTION),
            ConversationNode(id="done", kind=NodeKind.END, next=Direct("q")),
        )
        assert any("question node needs a transition" in issue for issue in issues)
        assert any("end node must not have a transition" in issue for issue in issues)

    def test_unknown_parser(self) -> None:
        issues = self._issues(
            "q",
            ConversationNode(id="q", kind=NodeKind.QUESTION, parser_type="readMind", next=Direct("done")),
            _end("done"),
        )
        assert any("unknown parser type 'readMind'" in issue for issue in issues)

    def test_duplicate_ids(self) -> None:
        issues = self._issues("done", _end("done"), _end("done"))
        assert "duplicate node id 'done'" in issues

    def test_every_issue_is_reported(self) -> None:
        """One error lists all problems, not just the first."""
        issues = self._issues(
            "missing",
            ConversationNode(id="q", kind=NodeKind.QUESTION, next=Direct("x")),
            ConversationNode(id="r", kind=NodeKind.QUESTION, next=Direct("y")),
        )
        assert len(issues) == 3

    def test_find_unreachable(self) -> None:
        graph = build_graph(
            GraphId.MAIN,
            "q",
            [
                ConversationNode(id="q", kind=NodeKind.QUESTION, next=Direct("done")),
                _end("done"),
                _end("orphan"),
            ],
            check_reachability=False,
        )
        assert GraphValidator().find_unreachable(graph) == ["orphan"]


class TestBuiltInGraphs:
    """The shipped flows are valid and fully connected."""

    @pytest.mark.parametrize(
        "builder,start",
        [
            (build_main_graph, "check_safety"),
            (build_onboarding_graph, "onboard_start"),
            (build_alert_graph, "alert_start"),
        ],
    )
    def test_graph_is_valid_and_connected(self, builder, start) -> None:
        graph = builder(PARSERS.keys())
        assert graph.start_node == start
        assert GraphValidator(PARSERS.keys()).find_issues(graph) == []
        assert GraphValidator().find_unreachable(graph) == []

    def test_main_flow_offers_nine_activities(self) -> None:
        graph = build_main_graph()
        activities = {node.activity_name for node in graph.nodes.values() if node.is_activity}
        assert activities == {
            "breathing", "grounding", "stretching", "matching-cards", "sudoku",
            "puzzle", "paint", "music", "story",
        }


class TestGraphCatalog:
    """Test suite for GraphCatalog."""

    def test_lookup(self, catalog) -> None:
        assert len(catalog) == 3
        assert catalog.get("main").graph_id == GraphId.MAIN
        assert GraphId.ALERT in catalog

    def test_unknown_graph(self, catalog) -> None:
        with pytest.raises(UnknownGraphError):
            catalog.get("weather")

    def test_duplicate_graph_rejected(self) -> None:
        with pytest.raises(ValueError):
            GraphCatalog([build_alert_graph(), build_alert_graph()])


class TestLoader:
    """Test suite for declarative graph documents."""

    @pytest.fixture
    def document(self) -> dict:
        return {
            "graph_id": "alert",
            "start_node": "focus",
            "nodes": [
                {
                    "id": "focus",
                    "kind": "question",
                    "parser": "extractLocation",
                    "capture": "currentLocation",
                    "content": "Where are you?",
                    "next": [
                        {
                            "when": {
                                "type": "any_of",
                                "predicates": [
                                    {"type": "value_contains", "fragment": "home"},
                                    {"type": "value_contains", "fragment": "house"},
                                ],
                            },
                            "goto": "home",
                        },
                        {"when": {"type": "confidence", "op": "<", "threshold": 0.5}, "goto": "breathe"},
                        {"default": True, "goto": "breathe"},
                    ],
                },
                {"id": "home", "kind": "question", "content": "Go to your safe room.", "next": "breathe"},
                {"id": "breathe", "kind": "activity", "activity": "breathing", "next": "done"},
                {"id": "done", "kind": "end", "content": "All clear."},
            ],
        }

    def test_load_document(self, document) -> None:
        graph = load_graph(document, known_parsers=PARSERS.keys())

        assert graph.graph_id == GraphId.ALERT
        focus = graph.nodes["focus"]
        assert focus.parser_type == "extractLocation"
        assert focus.capture == "currentLocation"
        assert isinstance(focus.next.rules[0].predicate, AnyOf)
        assert focus.next.rules[0].predicate.evaluate(
            ExtractionResult(extracted_value="my house", confidence=0.8)
        )
        assert graph.nodes["breathe"].activity_name == "breathing"

    def test_export_round_trip(self, document) -> None:
        graph = load_graph(document)
        restored = load_graph(graph_to_dict(graph))
        assert restored.start_node == graph.start_node
        assert dict(restored.nodes) == dict(graph.nodes)

    def test_builtin_graph_exports(self) -> None:
        graph = build_main_graph()
        assert dict(load_graph(graph_to_dict(graph)).nodes) == dict(graph.nodes)

    def test_schema_errors_become_validation_errors(self, document) -> None:
        document["nodes"][0]["next"][0]["when"] = {"type": "regex", "pattern": ".*"}
        with pytest.raises(GraphValidationError) as exc_info:
            load_graph(document)
        assert exc_info.value.graph_id == "alert"
        assert exc_info.value.issues

    def test_rule_needs_condition_or_default(self, document) -> None:
        document["nodes"][0]["next"].append({"goto": "done"})
        with pytest.raises(GraphValidationError):
            load_graph(document)

    def test_graph_errors_are_reported(self, document) -> None:
        document["nodes"][1]["next"] = "nowhere"
        with pytest.raises(GraphValidationError) as exc_info:
            load_graph(document)
        assert any("nowhere" in issue for issue in exc_info.value.issues)

    def test_value_contains_predicate(self) -> None:
        assert ValueContains("home").describe() == 'extracted_value contains "home"'

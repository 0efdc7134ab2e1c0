"""
Alert Fast-Path Flow

Short flow entered right after a red alert: find out where the user
is, direct them to protection, breathe together and wait for the
all-clear.

SAFETY_CRITICAL: Every path ends in the breathing activity and the
all-clear node. No branch may wait on an open-ended answer.
"""

from typing import Collection, Optional

from calme.domain.enums.categories import GraphId
from calme.domain.models.conversation import ConversationNode, DialogueGraph
from calme.flows.builders import activity, branch, contains, end, otherwise, question
from calme.services.dialogue.validator import build_graph


START_NODE = "alert_start"


def alert_flow_nodes() -> list[ConversationNode]:
    """Node table of the alert fast-path."""
    return [
        question("alert_start", "You're not alone. I'm here with you.", "alert_focus"),
        question(
            "alert_focus",
            "Let's focus on this moment, right now. Where are you?",
            branch(
                contains("vehicle", "car", "bus", "train", "taxi", goto="alert_transit"),
                contains("home", "house", "apartment", goto="alert_home"),
                contains("shelter", "miklat", "mamad", "safe room", "bunker", goto="alert_protected"),
                otherwise("alert_location_clarify"),
            ),
            parser="extractLocation",
            capture="currentLocation",
        ),
        question(
            "alert_location_clarify",
            "Where exactly are you right now? At home, in a shelter, or somewhere else?",
            branch(
                contains("home", "house", "apartment", goto="alert_home"),
                contains("shelter", "miklat", "mamad", "safe room", goto="alert_protected"),
                otherwise("alert_get_safe"),
            ),
            parser="extractLocation",
            capture="currentLocation",
        ),
        question(
            "alert_transit",
            "Pull over safely if you can. If not, keep breathing steadily.",
            "alert_breathing",
        ),
        question(
            "alert_home",
            "Good, you're at home. Get to your safe room immediately.",
            "alert_breathing",
        ),
        question(
            "alert_protected",
            "Excellent, you're in a protected space. You're doing everything right.",
            "alert_breathing",
        ),
        question(
            "alert_get_safe",
            "Get to the nearest protected space immediately. Move quickly but safely.",
            "alert_breathing",
        ),
        activity("alert_breathing", "Now let's breathe together to stay calm.", "breathing", "alert_wait"),
        question("alert_wait", "I'm here with you. We'll get through this together.", "alert_all_clear"),
        end(
            "alert_all_clear",
            "Look at that, we made it! It's safe to leave the protected space whenever you feel ready.",
        ),
    ]


def build_alert_graph(
    known_parsers: Optional[Collection[str]] = None,
    check_reachability: bool = True,
) -> DialogueGraph:
    """Build and validate the alert fast-path."""
    return build_graph(
        GraphId.ALERT,
        START_NODE,
        alert_flow_nodes(),
        known_parsers=known_parsers,
        check_reachability=check_reachability,
    )

"""
Main Supportive Flow

Safety check, stress assessment, social context and the calming
activity menu. Entered whenever the user opens the app outside of
an alert.

SAFETY_CRITICAL: check_safety is the start node. A DANGER answer
must lead straight to emergency_end.
"""

from typing import Collection, Optional

from calme.domain.enums.categories import (
    ActivityPreference,
    GraphId,
    SafetyCategory,
    StressCategory,
    YesNoCategory,
)
from calme.domain.models.conversation import ConversationNode, DialogueGraph
from calme.flows.builders import activity, branch, confidence_above, end, otherwise, question, when
from calme.services.dialogue.validator import build_graph


START_NODE = "check_safety"

YES = YesNoCategory.YES
NO = YesNoCategory.NO


def _activity_menu() -> list[ConversationNode]:
    return [
        question(
            "activity_choice",
            "What activity would you like to try? Some ideas: {suggestions}.",
            branch(
                when(ActivityPreference.BREATHING, goto="activity_breathing"),
                when(ActivityPreference.STRETCHING, goto="activity_stretching"),
                when(ActivityPreference.MATCHING_CARDS, goto="activity_matching"),
                when(ActivityPreference.SUDOKU, goto="activity_sudoku"),
                when(ActivityPreference.PUZZLE, goto="activity_puzzle"),
                when(ActivityPreference.PAINT, goto="activity_paint"),
                when(ActivityPreference.GROUNDING, goto="activity_grounding"),
                when(ActivityPreference.MUSIC, goto="activity_music"),
                when(ActivityPreference.STORY, goto="activity_story"),
                when(ActivityPreference.NO_ACTIVITY, goto="end_node"),
                otherwise("activity_breathing"),
            ),
            parser="parseActivityPreference",
        ),
        activity("activity_breathing", "Starting breathing exercise...", "breathing", "continue_loop"),
        activity("activity_grounding", "Starting 5-4-3-2-1 grounding technique...", "grounding", "continue_loop"),
        activity("activity_stretching", "Starting stretching routine...", "stretching", "continue_loop"),
        activity("activity_matching", "Starting card matching game...", "matching-cards", "continue_loop"),
        activity("activity_sudoku", "Starting sudoku puzzle...", "sudoku", "continue_loop"),
        activity("activity_puzzle", "Starting jigsaw puzzle...", "puzzle", "continue_loop"),
        activity("activity_paint", "Opening digital canvas...", "paint", "continue_loop"),
        activity("activity_music", "Playing relaxing music...", "music", "continue_loop"),
        activity("activity_story", "Starting a calming story...", "story", "continue_loop"),
    ]


def main_flow_nodes() -> list[ConversationNode]:
    """Node table of the main flow."""
    return [
        # === SAFETY CHECK ===
        question(
            "check_safety",
            "Are you in a safe, protected space right now?",
            branch(
                when(SafetyCategory.DANGER, goto="emergency_end"),
                when(SafetyCategory.SAFE, goto="stress_assessment"),
                when(SafetyCategory.UNSURE, goto="unsafe_can_move"),
                otherwise("unsafe_can_move"),
            ),
            parser="classifySafety",
        ),
        end(
            "emergency_end",
            "Please call emergency services right now: MADA 101, Police 100, Fire 102. "
            "Stay as protected as you can until help arrives.",
        ),

        # === STRESS ASSESSMENT ===
        question(
            "stress_assessment",
            "I'm here with you. How do you feel right now?",
            branch(
                when(StressCategory.HIGH, goto="breathing_activity"),
                when(StressCategory.MODERATE, goto="check_if_alone"),
                when(StressCategory.NONE, goto="no_stress_flow"),
                when(StressCategory.IN_TRANSIT, goto="transit_context"),
                when(StressCategory.OUTDOOR_WORKER, goto="outdoor_context"),
                when(StressCategory.CAREGIVER, goto="caregiver_context"),
                otherwise("check_if_alone"),
            ),
            parser="classifyStress",
        ),
        activity(
            "breathing_activity",
            "Let's breathe together. In for 4... hold for 7... out for 8.",
            "breathing",
            "breathing_return",
        ),
        question(
            "breathing_return",
            "Continue breathing for a few more moments. How are you feeling now?",
            branch(
                when(StressCategory.NONE, StressCategory.MODERATE, goto="check_if_alone"),
                when(StressCategory.HIGH, goto="continue_support"),
                otherwise("check_if_alone"),
            ),
            parser="classifyStress",
        ),

        # === NO STRESS ===
        question(
            "no_stress_flow",
            "Thanks for checking in. You can return anytime. Would you like to do a small activity together?",
            branch(
                when(YES, goto="activity_choice"),
                otherwise("end_positive"),
            ),
            parser="parseYesNo",
        ),
        end("end_positive", "Great. Have a beautiful day!"),

        # === SPECIAL CONTEXTS ===
        question(
            "transit_context",
            "I understand you're in transit. Let me help you stay calm while traveling.",
            "check_if_alone",
        ),
        question(
            "outdoor_context",
            "Being outdoors can feel vulnerable. Let's focus on what you can control right now.",
            "check_if_alone",
        ),
        question(
            "caregiver_context",
            "Supporting others is important. Let's make sure you're okay first.",
            "check_if_alone",
        ),

        # === SOCIAL CONTEXT ===
        question(
            "check_if_alone",
            "Are you with someone else?",
            branch(
                when(YES, goto="check_feel_safe_with_them"),
                when(NO, goto="alone_support"),
                otherwise("alone_support"),
            ),
            parser="parseYesNo",
        ),
        question(
            "check_feel_safe_with_them",
            "Do you feel safe with them?",
            branch(
                when(YES, goto="safe_with_someone"),
                when(NO, goto="emergency_resources"),
                otherwise("safe_with_someone"),
            ),
            parser="parseYesNo",
        ),
        question(
            "safe_with_someone",
            "Good to be with someone you trust. Let's work through what happened.",
            "structure_experience",
        ),
        question(
            "structure_experience",
            "Let's structure what happened. It helps with clarity.",
            "acknowledge_difficulty",
        ),
        question(
            "acknowledge_difficulty",
            "Something hard happened. You're getting through it.",
            "describe_experience",
        ),
        question(
            "describe_experience",
            "Can you describe what happened step by step?",
            branch(
                when(StressCategory.HIGH, goto="continue_support"),
                confidence_above(0.5, goto="validate_feelings"),
                otherwise("validate_feelings"),
            ),
            parser="classifyStress",
        ),
        question(
            "validate_feelings",
            "Thanks for sharing. Feelings come and go, like waves.",
            "continue_loop",
        ),
        question(
            "alone_support",
            "I'm here with you as long as you need.",
            "check_battery",
        ),
        question(
            "check_battery",
            "Is your phone battery charged?",
            branch(
                when(YES, goto="activity_choice"),
                when(NO, goto="low_battery_warning"),
                otherwise("activity_choice"),
            ),
            parser="parseYesNo",
        ),
        question(
            "low_battery_warning",
            "Let's try something brief to conserve battery.",
            "activity_choice",
        ),

        # === UNSAFE SPACE ===
        question(
            "unsafe_can_move",
            "Can you get to a protected space?",
            branch(
                when(YES, goto="unsafe_moving"),
                when(NO, goto="unsafe_check_guidelines"),
                otherwise("unsafe_check_guidelines"),
            ),
            parser="parseYesNo",
        ),
        question(
            "unsafe_moving",
            "No time to waste. I'm with you every step.",
            "end_stay_safe",
        ),
        question(
            "unsafe_check_guidelines",
            "Do you know the safety guidelines?",
            branch(
                when(YES, goto="unsafe_wait_together"),
                when(NO, goto="provide_guidelines"),
                otherwise("provide_guidelines"),
            ),
            parser="parseYesNo",
        ),
        question(
            "unsafe_wait_together",
            "I'll wait with you while we get through this.",
            "continue_loop",
        ),
        question(
            "provide_guidelines",
            "Choose the safest nearby space: a sealed room, a stairwell, or an inner hallway away from windows.",
            "activity_choice",
        ),

        # === ACTIVITIES ===
        *_activity_menu(),

        # === CONTINUE LOOP ===
        question(
            "continue_loop",
            "How are you feeling now?",
            branch(
                when(StressCategory.NONE, goto="end_node"),
                when(StressCategory.HIGH, goto="continue_support"),
                otherwise("continue_loop_options"),
            ),
            parser="classifyStress",
        ),
        question(
            "continue_loop_options",
            "Would you like to try another activity?",
            branch(
                when(YES, goto="activity_choice"),
                otherwise("end_node"),
            ),
            parser="parseYesNo",
        ),

        # === SUPPORT ===
        question(
            "continue_support",
            "I understand you're still struggling. Would you like to connect with professional support?",
            branch(
                when(YES, goto="emergency_resources"),
                when(NO, goto="activity_choice"),
                otherwise("emergency_resources"),
            ),
            parser="parseYesNo",
        ),
        question(
            "emergency_resources",
            "Here are immediate support options:\n"
            "- Emergency: MADA 101, Police 100, Fire 102\n"
            "- Mental health: ERAN 1201\n"
            "- Chat support: ERAN online chat",
            "continue_loop",
        ),

        # === END STATES ===
        end("end_node", "Thanks for being here. You are welcome any time."),
        end("end_stay_safe", "Stay safe. Remember, you can return here anytime you need support."),
    ]


def build_main_graph(
    known_parsers: Optional[Collection[str]] = None,
    check_reachability: bool = True,
) -> DialogueGraph:
    """Build and validate the main flow."""
    return build_graph(
        GraphId.MAIN,
        START_NODE,
        main_flow_nodes(),
        known_parsers=known_parsers,
        check_reachability=check_reachability,
    )

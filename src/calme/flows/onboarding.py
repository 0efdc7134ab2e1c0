"""
Onboarding Flow

First-run conversation that builds the user's emergency profile.
Answers are captured into session variables named after the
profile fields they feed (see ``UserProfile.from_variables``).

PRIVACY: This flow collects names, locations and phone numbers.
"""

from typing import Collection, Optional

from calme.domain.enums.categories import GraphId, YesNoCategory
from calme.domain.models.conversation import ConversationNode, DialogueGraph
from calme.flows.builders import activity, branch, contains, end, otherwise, question, when
from calme.services.dialogue.validator import build_graph


START_NODE = "onboard_start"

YES = YesNoCategory.YES
NO = YesNoCategory.NO


def onboarding_flow_nodes() -> list[ConversationNode]:
    """Node table of the onboarding flow."""
    return [
        # === WELCOME ===
        question(
            "onboard_start",
            "Welcome to CALMe. I'm here to support you during stressful moments. "
            "First, let me get to know you a bit. What should I call you?",
            "onboard_name_confirm",
            parser="extractName",
            capture="name",
        ),
        question(
            "onboard_name_confirm",
            "Nice to meet you, {name}. Is that the name you'd like me to use during emergencies?",
            branch(
                when(YES, goto="onboard_safe_space"),
                when(NO, goto="onboard_name_retry"),
                otherwise("onboard_safe_space"),
            ),
            parser="parseYesNo",
        ),
        question(
            "onboard_name_retry",
            "What name would you prefer I use?",
            "onboard_safe_space",
            parser="extractName",
            capture="name",
        ),

        # === SAFE SPACE ===
        question(
            "onboard_safe_space",
            "During emergencies, where is your designated safe space? For example: a public shelter, "
            "your home's safe room, a stairway, or another protected area.",
            branch(
                contains("miklat", "shelter", goto="onboard_miklat_details"),
                contains("mamad", "safe room", goto="onboard_mamad_details"),
                contains("stair", goto="onboard_stairway_details"),
                contains("home", goto="onboard_home_clarify"),
                otherwise("onboard_other_location"),
            ),
            parser="extractLocation",
            capture="safeSpace",
        ),
        question(
            "onboard_home_clarify",
            "Is your safe space at home a reinforced room (Mamad) or another area?",
            branch(
                contains("mamad", "reinforced", goto="onboard_mamad_details"),
                otherwise("onboard_other_location"),
            ),
            parser="extractLocation",
            capture="safeSpace",
        ),
        question(
            "onboard_miklat_details",
            "Good choice. Can you tell me the address or building name of this shelter?",
            "onboard_time_to_safety",
            parser="extractLocation",
            capture="safeSpaceDetails",
        ),
        question(
            "onboard_mamad_details",
            "Great. Where in your home is the Mamad located?",
            "onboard_time_to_safety",
            parser="extractLocation",
            capture="safeSpaceDetails",
        ),
        question(
            "onboard_stairway_details",
            "Stairways can be good protection. Which building and floor is this in?",
            "onboard_time_to_safety",
            parser="extractLocation",
            capture="safeSpaceDetails",
        ),
        question(
            "onboard_other_location",
            "I understand. Can you describe exactly where this safe space is?",
            "onboard_time_to_safety",
            parser="extractLocation",
            capture="safeSpaceDetails",
        ),
        question(
            "onboard_time_to_safety",
            "How long does it usually take you to reach this location? For example: 30 seconds, 1 minute, 2 minutes?",
            "onboard_backup_location",
            parser="extractDuration",
            capture="timeToSafety",
        ),
        question(
            "onboard_backup_location",
            "What's your backup plan if this location is unavailable?",
            "onboard_accessibility",
            parser="extractLocation",
            capture="backupLocation",
        ),

        # === ACCESSIBILITY ===
        question(
            "onboard_accessibility",
            "During emergencies, do you need any special assistance? For example: extra time to move, "
            "visual alerts, simple instructions, or help with dependents?",
            branch(
                contains("none", goto="onboard_calming_preferences"),
                otherwise("onboard_accessibility_details"),
            ),
            parser="extractAccessibilityNeeds",
            capture="accessibilityNeeds",
        ),
        question(
            "onboard_accessibility_details",
            "I'll make sure to accommodate that. Anything else I should know about?",
            "onboard_calming_preferences",
            parser="extractAccessibilityNeeds",
            capture="accessibilityDetails",
        ),

        # === PREFERENCES ===
        question(
            "onboard_calming_preferences",
            "What helps you stay calm when you're scared or stressed? Breathing exercises, "
            "calming sounds, a game, or something else?",
            "onboard_communication_preference",
            parser="parseActivityPreference",
            capture="calmingPreference",
        ),
        question(
            "onboard_communication_preference",
            "How should I communicate with you during an emergency? Voice instructions, visual text, or both?",
            "onboard_emergency_contacts",
            parser="extractCommunicationPreference",
            capture="communicationPreference",
        ),

        # === EMERGENCY CONTACTS ===
        question(
            "onboard_emergency_contacts",
            "Should I notify anyone once you're safe? You can skip this if you prefer.",
            branch(
                when(NO, goto="onboard_review"),
                otherwise("onboard_contact_details"),
            ),
            parser="parseYesNo",
        ),
        question(
            "onboard_contact_details",
            "What's their name and phone number?",
            "onboard_review",
            parser="extractContact",
            capture="emergencyContact",
        ),

        # === REVIEW ===
        question(
            "onboard_review",
            "{name}, here's your emergency profile:\n"
            "Safe space: {safeSpace} ({timeToSafety} to reach)\n"
            "Accessibility: {accessibilityNeeds}\n"
            "Calming method: {calmingPreference}\n"
            "Communication: {communicationPreference}\n\n"
            "Does this look right?",
            branch(
                when(YES, goto="onboard_test_offer"),
                when(NO, goto="onboard_what_to_change"),
                otherwise("onboard_test_offer"),
            ),
            parser="parseYesNo",
        ),
        question(
            "onboard_what_to_change",
            "What would you like to change?",
            branch(
                contains("name", goto="onboard_name_retry"),
                contains("location", goto="onboard_safe_space"),
                contains("time", goto="onboard_time_to_safety"),
                contains("accessibility", goto="onboard_accessibility"),
                contains("calming", goto="onboard_calming_preferences"),
                otherwise("onboard_safe_space"),
            ),
            parser="extractChangeRequest",
        ),

        # === TEST PROTOCOL ===
        question(
            "onboard_test_offer",
            "Would you like to do a quick test of your emergency setup? This is optional but recommended.",
            branch(
                when(YES, goto="onboard_test_sound"),
                otherwise("onboard_complete"),
            ),
            parser="parseYesNo",
        ),
        question(
            "onboard_test_sound",
            "I'll play a quiet alert sound now. Ready?",
            "onboard_test_breathing",
            parser="parseYesNo",
        ),
        activity(
            "onboard_test_breathing",
            "Great! Now let's try a quick breathing exercise to make sure everything works.",
            "breathing",
            "onboard_test_complete",
        ),
        question("onboard_test_complete", "Perfect! Everything is working well.", "onboard_complete"),

        # === COMPLETION ===
        end(
            "onboard_complete",
            "Your emergency profile is ready, {name}. When you need me, I'll be here.",
        ),
    ]


def build_onboarding_graph(
    known_parsers: Optional[Collection[str]] = None,
    check_reachability: bool = True,
) -> DialogueGraph:
    """Build and validate the onboarding flow."""
    return build_graph(
        GraphId.ONBOARDING,
        START_NODE,
        onboarding_flow_nodes(),
        known_parsers=known_parsers,
        check_reachability=check_reachability,
    )

# FILE: backend/governance/resources.py
"""
Support resources attached to responses by crisis severity

high   -> crisis bundle (hotline, text line, emergency services) + coping strategies
medium -> general support resources + coping suggestions
low    -> nothing
"""
from typing import List, Optional

from backend.models.safety import CrisisAssessment, SupportBlock, SupportResource

LIFELINE = SupportResource(
    name="988 Suicide & Crisis Lifeline",
    phone="988",
    text="Call or text 988",
    available="24/7"
)
CRISIS_TEXT_LINE = SupportResource(
    name="Crisis Text Line",
    text="Text HOME to 741741",
    available="24/7"
)
EMERGENCY_SERVICES = SupportResource(
    name="Emergency Services",
    phone="911",
    note="For immediate danger"
)
IASP_DIRECTORY = SupportResource(
    name="International Association for Suicide Prevention",
    website="https://www.iasp.info/resources/Crisis_Centres/",
    available="Global resources"
)
MENTAL_HEALTH_AMERICA = SupportResource(
    name="Mental Health America",
    website="https://mhanational.org/finding-help",
    note="Find local resources"
)

CRISIS_RESOURCES: List[SupportResource] = [
    LIFELINE, CRISIS_TEXT_LINE, EMERGENCY_SERVICES, IASP_DIRECTORY
]
SUPPORT_RESOURCES: List[SupportResource] = [CRISIS_TEXT_LINE, MENTAL_HEALTH_AMERICA]

CRISIS_COPING_STRATEGIES = [
    "Take slow, deep breaths - in for 4, hold for 4, out for 6",
    "Try grounding: name 5 things you can see, 4 you can touch, 3 you can hear",
    "Reach out to a trusted friend or family member",
    "Consider going to a safe place with other people",
]
SUPPORT_COPING_STRATEGIES = [
    "Try deep breathing exercises",
    "Consider journaling your thoughts",
    "Take a short walk if possible",
    "Listen to calming music",
]
JOURNAL_SUPPORT_SUGGESTIONS = [
    "Consider sharing your feelings with a trusted friend",
    "Try some gentle self-care activities",
    "Remember that difficult emotions are temporary",
]
JOURNAL_ENCOURAGEMENT_SUGGESTIONS = [
    "Try to journal regularly, even if just for a few minutes",
    "Don't worry about perfect writing - focus on expressing yourself",
    "Consider reading past entries to see your growth",
]


def crisis_bundle(message: str) -> SupportBlock:
    return SupportBlock(
        type="crisis",
        crisis=True,
        severity="high",
        message=message,
        resources=list(CRISIS_RESOURCES),
        coping_strategies=list(CRISIS_COPING_STRATEGIES),
    )


def support_bundle(message: str) -> SupportBlock:
    return SupportBlock(
        type="support",
        crisis=False,
        severity="medium",
        message=message,
        resources=list(SUPPORT_RESOURCES),
        coping_strategies=list(SUPPORT_COPING_STRATEGIES),
    )


def post_support(crisis: CrisisAssessment) -> Optional[SupportBlock]:
    if crisis.severity == "high":
        return crisis_bundle(
            "We noticed you might be going through a difficult time. "
            "Please consider reaching out for support."
        )
    if crisis.severity == "medium":
        return support_bundle("Remember that support is available if you need it.")
    return None


def chat_support(crisis: CrisisAssessment) -> Optional[SupportBlock]:
    if crisis.severity == "high":
        return crisis_bundle(
            "I'm concerned about what you've shared. "
            "Please know that immediate help is available."
        )
    if crisis.severity == "medium":
        return support_bundle(
            "I notice you might be going through a difficult time. "
            "Here are some resources that might help."
        )
    return None


def journal_support(crisis: CrisisAssessment) -> SupportBlock:
    if crisis.severity == "high":
        return crisis_bundle(
            "Thank you for expressing your feelings. Writing can be healing, but please "
            "remember that professional support is available if you need it."
        )
    if crisis.severity == "medium":
        block = support_bundle(
            "I notice you might be working through some difficult emotions. That takes "
            "courage. Remember that it's okay to seek support when you need it."
        )
        block.suggestions = list(JOURNAL_SUPPORT_SUGGESTIONS)
        return block
    # Low severity gets encouragement only, no resources
    return SupportBlock(
        type="encouragement",
        message=(
            "Thank you for taking time to reflect and write. Journaling is a powerful "
            "tool for processing emotions and gaining clarity."
        ),
        suggestions=list(JOURNAL_ENCOURAGEMENT_SUGGESTIONS),
    )

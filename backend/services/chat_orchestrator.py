# FILE: backend/services/chat_orchestrator.py
"""
Conversational response orchestrator

Session state is derived from the store: no stored history means the session
is new, whether it never existed or its messages expired. Generation failures
are absorbed by canned replies, so every accepted message gets an answer.
"""
import asyncio
import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from backend.errors import ContentBlocked, ValidationError
from backend.governance.resources import chat_support
from backend.models.chat import (
    ChatHistory, ChatMessage, ChatReply, ChatSessionStart, Exercise,
    ExerciseSuggestion, MessageView
)
from backend.services.correlation import get_correlation_id
from backend.services.prompts import ASSISTANT_NAME, CONTEXT_WINDOW
from backend.services.repositories import ChatRepository, check_session_id
from backend.services.safety_gate import SafetyGate
from backend.services.telemetry import record_event

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000
DEFAULT_HISTORY_LIMIT = 50

CRISIS_REPLIES = [
    "I hear that you're going through something really difficult right now. Your feelings are "
    "valid, and you don't have to face this alone. Have you considered reaching out to a crisis "
    "helpline? They have trained counselors available 24/7.",
    "It sounds like you're in a lot of pain right now. Please know that there are people who want "
    "to help. Crisis support is available - would it be helpful if I shared some resources with you?",
    "I'm concerned about how you're feeling. Your life has value, and there are people trained to "
    "help during these difficult moments. Would you like me to share some immediate support resources?",
]

SUPPORTIVE_REPLIES = [
    "Thank you for sharing how you're feeling. It takes courage to express your emotions. Remember "
    "that it's okay to feel what you're feeling, and these emotions will pass.",
    "I hear you, and your feelings are completely valid. Sometimes it helps to take a few deep "
    "breaths - try breathing in for 4 counts, holding for 4, and exhaling for 6.",
    "It sounds like you're going through something challenging. Would it help to write down what "
    "you're feeling right now? Sometimes putting thoughts on paper can provide clarity.",
    "Your emotions are important and deserve to be acknowledged. Consider taking a moment to do "
    "something kind for yourself today, even something small.",
    "Thank you for trusting me with your feelings. Remember that seeking support is a sign of "
    "strength, not weakness. How are you taking care of yourself today?",
]

WELCOME_MESSAGE = (
    f"Hi! I'm {ASSISTANT_NAME}, your AI mental health support companion. You can share your "
    "feelings with me in complete confidence. How are you doing today?"
)

BREATHING_EXERCISES = [
    Exercise(
        name="4-7-8 Breathing",
        description="A calming technique to reduce anxiety",
        steps=[
            "Exhale completely through your mouth",
            "Close your mouth and inhale through your nose for 4 counts",
            "Hold your breath for 7 counts",
            "Exhale through your mouth for 8 counts",
            "Repeat 3-4 times",
        ],
        duration="2-3 minutes",
    ),
    Exercise(
        name="Box Breathing",
        description="A steady rhythm used for stress management",
        steps=[
            "Inhale for 4 counts",
            "Hold for 4 counts",
            "Exhale for 4 counts",
            "Hold for 4 counts",
            "Repeat 4-6 times",
        ],
        duration="2-4 minutes",
    ),
    Exercise(
        name="Belly Breathing",
        description="Deep breathing to activate relaxation response",
        steps=[
            "Place one hand on chest, one on belly",
            "Breathe slowly through your nose",
            "Feel your belly rise while chest stays still",
            "Exhale slowly through pursed lips",
            "Continue for 5-10 breaths",
        ],
        duration="3-5 minutes",
    ),
]

GROUNDING_TECHNIQUES = [
    Exercise(
        name="5-4-3-2-1 Technique",
        description="Use your senses to ground yourself in the present",
        steps=[
            "Name 5 things you can see",
            "Name 4 things you can touch",
            "Name 3 things you can hear",
            "Name 2 things you can smell",
            "Name 1 thing you can taste",
        ],
        type="sensory",
    ),
    Exercise(
        name="Physical Grounding",
        description="Use physical sensations to anchor yourself",
        steps=[
            "Feel your feet on the ground",
            "Press your palms together firmly",
            "Hold a cold object or ice cube",
            "Stretch your arms above your head",
            "Clench and release your fists",
        ],
        type="physical",
    ),
    Exercise(
        name="Mental Grounding",
        description="Use your mind to stay present",
        steps=[
            "Count backwards from 100 by 7s",
            "Name all the animals you can think of",
            "Recite the alphabet backwards",
            "Describe your surroundings in detail",
            "Plan your next meal in detail",
        ],
        type="mental",
    ),
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _view(message: Dict[str, Any], with_role: bool = False) -> MessageView:
    return MessageView(
        id=message["id"],
        role=message.get("role") if with_role else None,
        content=message["content"],
        timestamp=message["timestamp"],
    )


class ChatOrchestrator:
    """Turns one user message into a stored exchange and a reply"""

    def __init__(
        self,
        chats: ChatRepository,
        gate: SafetyGate,
        generator: Optional[Any] = None,
        rng: Optional[random.Random] = None,
        now: Callable[[], datetime] = _utcnow,
        timeout: float = 15.0
    ):
        self.chats = chats
        self.gate = gate
        self.generator = generator
        self.rng = rng or random.Random()
        self.now = now
        self.timeout = timeout

    def canned_reply(self, urgent: bool) -> str:
        pool = CRISIS_REPLIES if urgent else SUPPORTIVE_REPLIES
        return self.rng.choice(pool)

    async def _generate(
        self, message: str, history: List[Dict[str, str]], urgent: bool
    ) -> Optional[str]:
        """Generated text, or None when generation is unavailable"""
        if self.generator is None:
            return None
        try:
            result = await asyncio.wait_for(
                self.generator.generate_reply(message, history, urgent),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"[{get_correlation_id()}] Reply generation timed out")
            return None
        except Exception as e:
            # UpstreamUnavailable and provider errors alike end in a canned reply
            logger.warning(f"[{get_correlation_id()}] Reply generation failed: {e!r}")
            return None
        text = (result or {}).get("text", "").strip()
        return text or None

    async def handle_message(self, message: Optional[str], session_id: Optional[str]) -> ChatReply:
        """Screen, contextualize, generate (or fall back), persist, reply"""
        if not message or not message.strip():
            raise ValidationError("Message is required")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Message must be {MAX_MESSAGE_LENGTH} characters or less")

        session_id = check_session_id(session_id or str(uuid.uuid4()))
        correlation_id = get_correlation_id()

        screen = await self.gate.screen(message, "chat")
        if screen.blocked:
            raise ContentBlocked(
                "Your message contains content that may be harmful. Please revise and try again."
            )
        crisis = screen.crisis
        urgent = crisis.severity == "high"

        stored = await self.chats.recent(session_id, CONTEXT_WINDOW)
        session_state = "active" if stored else "new"
        history = [{"role": m["role"], "content": m["content"]} for m in stored]

        text = await self._generate(message, history, urgent)
        fallback = text is None
        if fallback:
            text = self.canned_reply(urgent)
            record_event("chat_fallback", severity=crisis.severity)

        user_message = ChatMessage(
            id=str(uuid.uuid4()),
            role="user",
            content=message.strip(),
            timestamp=self.now().isoformat(),
            crisis_detected=crisis.needs_support,
            severity=crisis.severity,
        ).to_record()
        assistant_message = ChatMessage(
            id=str(uuid.uuid4()),
            role="assistant",
            content=text,
            timestamp=self.now().isoformat(),
            fallback=fallback,
        ).to_record()

        await self.chats.append(session_id, user_message)
        await self.chats.append(session_id, assistant_message)

        logger.info(
            f"[{correlation_id}] Chat exchange stored: state={session_state} "
            f"severity={crisis.severity} fallback={fallback}"
        )
        record_event("chat_message", state=session_state, severity=crisis.severity)

        support = chat_support(crisis)
        return ChatReply(
            session_id=session_id,
            session_state=session_state,
            user_message=_view(user_message),
            ai_response=_view(assistant_message),
            crisis_alert=support if urgent else None,
            support_resources=support if not urgent else None,
        )

    async def history(self, session_id: str, limit: Optional[int] = None) -> ChatHistory:
        """Most recent messages; an expired session reads as empty"""
        limit = limit if limit and limit > 0 else DEFAULT_HISTORY_LIMIT
        messages = await self.chats.recent(session_id, limit)
        views = [_view(m, with_role=True) for m in messages]
        return ChatHistory(session_id=session_id, messages=views, total=len(views))

    def new_session(self) -> ChatSessionStart:
        return ChatSessionStart(
            session_id=str(uuid.uuid4()),
            message="New chat session created. I'm here to listen and support you.",
            welcome_message=WELCOME_MESSAGE,
        )

    def breathing_exercise(self) -> ExerciseSuggestion:
        return ExerciseSuggestion(
            exercise=self.rng.choice(BREATHING_EXERCISES),
            message="Here's a breathing exercise that might help you feel more centered.",
            tip="Find a quiet, comfortable place to practice this exercise.",
        )

    def grounding_technique(self) -> ExerciseSuggestion:
        return ExerciseSuggestion(
            technique=self.rng.choice(GROUNDING_TECHNIQUES),
            message="Try this grounding technique to help you feel more present and calm.",
            tip="Practice these techniques regularly, not just during difficult moments.",
        )

from __future__ import annotations
import logging
from .config import settings
from .errors import EmptyMessageError
from .knowledge import ClinicKnowledge, load_clinic_knowledge
from .llm import LLM, get_llm
from .prompts import build_messages, build_system_prompt
from .safety import EMERGENCY_MESSAGE, detect_emergency
from .schemas import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

EMPTY_MESSAGE_ANSWER = "メッセージが空です。"
NO_ANSWER_FALLBACK = "すみません、うまく回答を生成できませんでした。"

class ChatService:
    def __init__(self, knowledge: ClinicKnowledge | None = None, llm: LLM | None = None):
        self.knowledge = knowledge or load_clinic_knowledge(settings.knowledge_path)
        self.llm = llm or get_llm()
        # Built once; the knowledge never changes while the process runs
        self.system_prompt = build_system_prompt(self.knowledge.text)

    async def answer(self, request: ChatRequest) -> ChatResponse:
        message = request.message.strip()
        if not message:
            raise EmptyMessageError(EMPTY_MESSAGE_ANSWER)

        # Danger signs are answered here and never sent to the model
        if detect_emergency(message):
            logger.info("Emergency keywords detected - returning fixed referral message")
            return ChatResponse(answer=EMERGENCY_MESSAGE, emergency=True)

        history = [turn.model_dump() for turn in request.history]
        messages = build_messages(self.system_prompt, message, history)
        logger.info(f"Calling {self.llm.name} with {len(messages)} messages ({len(history)} history turns received)")

        text = (await self.llm.complete(messages) or "").strip()
        if not text:
            logger.warning("Empty LLM response - using fallback answer")
            text = NO_ANSWER_FALLBACK

        return ChatResponse(answer=text, emergency=False)

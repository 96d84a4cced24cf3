# services/advisor.py
"""
AI 選課顧問：對話紀錄 + 呼叫外部文字生成服務（Gemini）。

對話只存在記憶體，不寫入資料庫；同一份對話同時間只允許一個請求。
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from google import genai
from google.genai import types

from models.catalog import Category, Course, Level
from services.errors import AdvisorBusyError, CollaboratorUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

GREETING = (
    "Hello! I'm Digitora AI. Tell me your investment goals (e.g., 'I want to learn DeFi' "
    "or 'How to trade Forex?'), and I'll find the perfect course for you."
)
MISSING_KEY_MESSAGE = (
    "I apologize, but I am currently disconnected from the neural network (API Key missing). "
    "Please explore the course catalog manually."
)
ERROR_MESSAGE = "I'm having trouble analyzing the market data right now. Please try again later."
EMPTY_REPLY_MESSAGE = "I couldn't generate a recommendation at this time."

PROMPT_RULES = """Rules:
1. Only recommend courses from the list above.
2. Be concise, professional, and encouraging.
3. If the user asks about general market trends, briefly answer but pivot back to how our courses help them master that trend.
4. Format your response with clear bullet points if recommending multiple courses.
5. Mention the price and difficulty level when recommending."""


def _plain_price(price: float) -> str:
    return f"{price:.2f}".rstrip("0").rstrip(".")


def build_system_prompt(courses: Iterable[Course]) -> str:
    lines = [
        f"- {c['title']} ({Category(c['category']).value}, ${_plain_price(c['price'])}): "
        f"{c['description']} [Level: {Level(c['level']).value}]"
        for c in courses
    ]
    catalog_text = "\n".join(lines)
    return (
        "You are 'Digitora', an expert digital asset education consultant for Digitora Studios.\n"
        "Your goal is to recommend the best courses from our catalog based on the user's needs.\n\n"
        "Here is our available Course Catalog:\n"
        f"{catalog_text}\n\n"
        f"{PROMPT_RULES}"
    )


class TextGenerator(Protocol):
    def generate(self, system_prompt: str, user_text: str) -> str: ...


class GeminiTextGenerator:
    """google-genai 的薄包裝；所有失敗都轉成 CollaboratorUnavailableError。"""

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, temperature: float = 0.7):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.temperature = temperature
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if not self.api_key:
            raise CollaboratorUnavailableError("API key missing", missing_credential=True)
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(self, system_prompt: str, user_text: str) -> str:
        client = self._get_client()
        try:
            response = client.models.generate_content(
                model=self.model,
                contents=user_text,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            raise CollaboratorUnavailableError(f"Gemini API error: {e}") from e
        return (getattr(response, "text", None) or "").strip()


@dataclass
class ChatMessage:
    role: str  # "user" | "assistant"
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "text": self.text, "timestamp": self.timestamp.isoformat()}


class AdvisorChat:
    def __init__(self, generator: TextGenerator, courses: Callable[[], List[Course]]):
        self.generator = generator
        self.courses = courses
        self.messages: List[ChatMessage] = [ChatMessage("assistant", GREETING)]
        self._busy = False
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._busy

    def _ask(self, text: str) -> str:
        try:
            reply = self.generator.generate(build_system_prompt(self.courses()), text)
        except CollaboratorUnavailableError as e:
            if e.missing_credential:
                return MISSING_KEY_MESSAGE
            logger.error("[advisor] %s", e)
            return ERROR_MESSAGE
        return reply or EMPTY_REPLY_MESSAGE

    def send(self, text: str) -> Optional[ChatMessage]:
        """送出一則訊息並等回覆；空白訊息忽略，回覆一定會附加到對話最後。"""
        if not (text or "").strip():
            return None
        with self._lock:
            if self._busy:
                raise AdvisorBusyError("a request for this conversation is still pending")
            self._busy = True
        try:
            self.messages.append(ChatMessage("user", text))
            reply = ChatMessage("assistant", self._ask(text))
            self.messages.append(reply)
            return reply
        finally:
            self._busy = False

    def transcript(self) -> List[Dict[str, str]]:
        return [m.to_dict() for m in self.messages]


class AdvisorRegistry:
    """每個裝置一份對話，只放在程序記憶體內；超過 max_chats 時丟掉最久沒用的。"""

    def __init__(self, factory: Callable[[], AdvisorChat], max_chats: int = 1000):
        self._factory = factory
        self._max_chats = max(1, max_chats)
        self._chats: "OrderedDict[str, AdvisorChat]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._chats)

    def get(self, device_id: str) -> AdvisorChat:
        with self._lock:
            chat = self._chats.get(device_id)
            if chat is None:
                chat = self._chats[device_id] = self._factory()
                while len(self._chats) > self._max_chats:
                    evicted, _ = self._chats.popitem(last=False)
                    logger.info("[advisor] conversation evicted: %s", evicted)
            else:
                self._chats.move_to_end(device_id)
            return chat

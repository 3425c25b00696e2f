import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool

from ..errors import ConversationServiceError, MisconfiguredDependency

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are **Airport Assistant**, concise and helpful.
- If the user asks about alerts/incidents, rely ONLY on the data in the "ALERTS SNAPSHOT" for counts and recent items. If something isn't in the snapshot, say it's unavailable.
- Otherwise answer normally.
- Keep responses short, readable, and use Markdown: bold headline and 2-4 bullets when appropriate."""

EMPTY_REPLY = "…"


@dataclass(frozen=True)
class ChatReply:
    reply: str
    scenario: Optional[str]


def last_user_message(messages: List[Dict[str, Any]]) -> str:
    for message in reversed(messages):
        if message.get("role") == "user":
            return message.get("content") or ""
    return ""


def build_system_prompt(snapshot_text: str) -> str:
    return f"{SYSTEM_PROMPT}\n\n{snapshot_text}".strip()


class ConversationGateway:
    """
    Grounds a chat turn in the current alerts snapshot and delegates it to an
    OpenAI chat-completion model.
    """

    def __init__(
        self,
        client,
        assembler,
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        timeout: float = 30.0,
        history_limit: int = 10,
        debug_log_prompts: bool = False,
    ):
        self._client = client
        self._assembler = assembler
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.history_limit = history_limit
        self.debug_log_prompts = debug_log_prompts

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def build_messages(self, system_prompt: str, history: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        recent = history[-self.history_limit:] if self.history_limit > 0 else []
        return [{"role": "system", "content": system_prompt}, *recent]

    def _complete(self, messages: List[Dict[str, Any]]) -> str:
        resp = self._client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            messages=messages,
            timeout=self.timeout,
        )
        return resp.choices[0].message.content or EMPTY_REPLY

    async def chat(self, history: List[Dict[str, Any]]) -> ChatReply:
        if not self.is_available:
            raise MisconfiguredDependency("OPENAI_API_KEY missing on server.")

        ctx = await self._assembler.build_snapshot(last_user_message(history))
        messages = self.build_messages(build_system_prompt(ctx.text), history)

        if self.debug_log_prompts:
            logger.info("LLM chat messages:\n%s", json.dumps(messages, indent=2, ensure_ascii=False))

        try:
            reply = await run_in_threadpool(self._complete, messages)
        except Exception as e:
            logger.error(f"Chat completion failed: {e}")
            raise ConversationServiceError() from e

        return ChatReply(reply=reply, scenario=ctx.scenario)

    def close(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            self._client.close()

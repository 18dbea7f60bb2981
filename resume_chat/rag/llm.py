from __future__ import annotations

"""Chat-completion answerer and recruiter prompt construction."""

from dataclasses import dataclass
import logging

import httpx

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """Raised when LLM requests fail or responses are invalid."""
    pass


_SYSTEM_PROMPT_TEMPLATE = """You are an AI assistant helping recruiters learn about a job candidate through their resume.

Here is the candidate's summary:
{summary}

Here are relevant details from their resume based on the current question:
{context}

Guidelines:
- Answer questions based ONLY on the information provided in the resume context
- Be professional, concise, and helpful
- If information isn't available in the resume, politely say you don't have that information
- Don't make assumptions or add information not present in the resume
- Highlight relevant skills, experiences, and qualifications
- Use a friendly but professional tone
- Keep responses focused and to the point"""


def build_system_prompt(summary: str | None, context: str) -> str:
    """Build the recruiter assistant prompt around a formatted context block."""
    return _SYSTEM_PROMPT_TEMPLATE.format(
        summary=(summary or "").strip() or "Not available.",
        context=context,
    )


def conversation_messages(history: list[dict[str, str]]) -> list[dict[str, str]]:
    """Drop client-supplied system turns and empty messages."""
    messages: list[dict[str, str]] = []
    for item in history:
        role = item.get("role", "user").strip().lower()
        content = item.get("content", "").strip()
        if role == "system" or not content:
            continue
        if role not in {"user", "assistant"}:
            role = "user"
        messages.append({"role": role, "content": content})
    return messages


@dataclass(frozen=True)
class OpenAIChatAnswerer:
    """Answerer backed by OpenAI chat completions."""
    api_key: str
    base_url: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 500
    timeout: float = 60.0

    async def generate(self, system_prompt: str, history: list[dict[str, str]]) -> str:
        """Generate an answer for the latest user turn."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                *conversation_messages(history),
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise LLMError(str(exc)) from exc
        except ValueError as exc:
            raise LLMError("OpenAI response is not valid JSON") from exc

        choices = data.get("choices") or []
        if not choices:
            raise LLMError("Invalid OpenAI response")
        message = choices[0].get("message") or {}
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise LLMError("Invalid OpenAI response content")
        return content.strip()


def build_llm_answerer(
    *,
    api_key: str | None,
    base_url: str,
    model: str | None,
    temperature: float,
    max_tokens: int,
    timeout: float,
) -> OpenAIChatAnswerer:
    """Factory for the chat-completion answerer."""
    if not api_key:
        raise LLMError("OPENAI_API_KEY is required for the LLM answerer")
    if not model:
        raise LLMError("OPENAI_CHAT_MODEL is required for the LLM answerer")
    return OpenAIChatAnswerer(
        api_key=api_key,
        base_url=base_url.rstrip("/"),
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout,
    )

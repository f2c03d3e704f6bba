import json
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from agents.prompt_builder import build_system_prompt
from config import DEFAULT_MODEL_NAME, DEFAULT_TEMPERATURE, TOOL_LOOP_MAX_ROUNDS, get_google_api_key
from tools.executor import ToolExecutor, get_tool_executor
from tools.registry import tool_schemas
from tools.validation import validate_tool_call
from workflows.state import (
    ContentChunk,
    ConversationContext,
    Message,
    StreamChunk,
    ToolCall,
    ToolCallChunk,
    ToolCallPayload,
    ToolResultChunk,
)

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "Sorry, there was a problem with the streaming. Please try again!"
ROUND_LIMIT_MESSAGE = "Sorry, I couldn't complete that request. Could you tell me again what you need?"
EMPTY_REPLY_MESSAGE = "Sorry, I didn't get a reply just now. Could you say that again?"


@dataclass
class _ToolCallBuffer:
    """Accumulates one tool call's fragments while a model turn streams."""

    id: str = ""
    name: str = ""
    args_text: str = ""


class TripChatAgent:
    """
    Chat assistant for party trips that lets the model act through tools:
    - streams the model's text to the caller as soon as it arrives,
    - buffers streamed tool-call fragments until the turn ends,
    - validates each call and runs the valid ones one after another,
    - feeds results back and re-invokes the model until it answers in plain text.

    No state survives a request; the client re-sends context and history each time.
    """

    def __init__(
        self,
        model=None,
        model_name: str = DEFAULT_MODEL_NAME,
        temperature: float = DEFAULT_TEMPERATURE,
        executor: Optional[ToolExecutor] = None,
        max_rounds: int = TOOL_LOOP_MAX_ROUNDS,
    ):
        if model is None:
            if not get_google_api_key():
                logger.warning("Missing GOOGLE_API_KEY or GEMINI_API_KEY. TripChatAgent may not function properly.")
            model = ChatGoogleGenerativeAI(model=model_name, temperature=temperature)

        self.model = model.bind_tools(tool_schemas())
        self.executor = executor or get_tool_executor()
        self.max_rounds = max(1, max_rounds)

    # ---------------------------
    # Public API: main entrypoint
    # ---------------------------
    async def run_tool_call_loop(
        self,
        user_message: str,
        context: Optional[ConversationContext] = None,
        history: Optional[Sequence[Message]] = None,
    ) -> AsyncIterator[StreamChunk]:
        """
        Stream the assistant's reply to ``user_message``.

        Yields ``ContentChunk`` fragments in arrival order and, for every
        executed tool call, a ``ToolCallChunk`` immediately followed by its
        ``ToolResultChunk``. Always terminates normally: model failures end
        the stream with a single apology chunk, and a reply that never
        produced any text ends with a short request to try again.
        """
        context = context or ConversationContext()
        messages: List[BaseMessage] = [
            SystemMessage(content=build_system_prompt(context)),
            *to_langchain_messages(history or []),
            HumanMessage(content=user_message),
        ]

        replied = False
        for round_number in range(1, self.max_rounds + 1):
            content_parts: List[str] = []
            buffers: Dict[Any, _ToolCallBuffer] = {}

            try:
                async with aclosing(self.model.astream(messages)) as stream:
                    async for chunk in stream:
                        text = _chunk_text(chunk)
                        if text:
                            content_parts.append(text)
                            replied = replied or bool(text.strip())
                            yield ContentChunk(content=text)
                        _merge_tool_call_chunks(buffers, getattr(chunk, "tool_call_chunks", None))
            except Exception:
                logger.exception("Model streaming failed on round %d", round_number)
                yield ContentChunk(content=APOLOGY_MESSAGE)
                return

            assistant_content = "".join(content_parts)
            tool_calls = _finalize_tool_calls(buffers)
            logger.info("Round %d finished with %d tool call(s)", round_number, len(tool_calls))

            if not tool_calls:
                if assistant_content:
                    messages.append(AIMessage(content=assistant_content))
                if not replied:
                    logger.warning("Model ended round %d without any text for the user", round_number)
                    yield ContentChunk(content=EMPTY_REPLY_MESSAGE)
                return

            messages.append(
                AIMessage(
                    content=assistant_content,
                    tool_calls=[{"name": c.name, "args": c.arguments, "id": c.id} for c in tool_calls],
                )
            )

            executed = 0
            clarification: Optional[str] = None
            for call in tool_calls:
                validation = validate_tool_call(call.name, call.arguments)
                if not validation.valid:
                    logger.info("Rejected %s call: %s", call.name, validation.message)
                    clarification = clarification or validation.message
                    messages.append(_tool_message(call, {"error": validation.message}))
                    continue

                executed += 1
                yield ToolCallChunk(tool_call=ToolCallPayload(name=call.name, arguments=validation.arguments))
                result = await self.executor.execute(call.name, validation.arguments, context)
                yield ToolResultChunk(name=call.name, result=result)
                messages.append(_tool_message(call, result))

            # A turn made only of rejected calls must still say something to the user.
            if not executed and not assistant_content.strip() and clarification:
                yield ContentChunk(content=clarification)
                messages.append(AIMessage(content=clarification))
                return

        logger.warning("Tool-call loop stopped after %d rounds without a plain reply", self.max_rounds)
        yield ContentChunk(content=ROUND_LIMIT_MESSAGE)

    async def collect_reply(
        self,
        user_message: str,
        context: Optional[ConversationContext] = None,
        history: Optional[Sequence[Message]] = None,
    ) -> Dict[str, Any]:
        """Drain the loop into one response for clients that don't read streams."""
        content: List[str] = []
        tool_calls: List[Dict[str, Any]] = []
        tool_results: List[Dict[str, Any]] = []
        async for chunk in self.run_tool_call_loop(user_message, context, history):
            if isinstance(chunk, ContentChunk):
                content.append(chunk.content)
            elif isinstance(chunk, ToolCallChunk):
                tool_calls.append(chunk.tool_call.model_dump())
            else:
                tool_results.append({"name": chunk.name, "result": chunk.result})
        return {"content": "".join(content), "tool_calls": tool_calls, "tool_results": tool_results}


# ---------------------------
# Transcript helpers
# ---------------------------
def to_langchain_messages(history: Sequence[Message]) -> List[BaseMessage]:
    """Convert client history into langchain messages; tool replies without an id are skipped."""
    converted: List[BaseMessage] = []
    for message in history:
        content = message.content or ""
        if message.role == "system":
            converted.append(SystemMessage(content=content))
        elif message.role == "user":
            converted.append(HumanMessage(content=content))
        elif message.role == "assistant":
            converted.append(
                AIMessage(
                    content=content,
                    tool_calls=[{"name": c.name, "args": c.arguments, "id": c.id} for c in message.tool_calls],
                )
            )
        elif message.tool_call_id:
            converted.append(ToolMessage(content=content, tool_call_id=message.tool_call_id))
        else:
            logger.debug("Skipping tool message without tool_call_id")
    return converted


def _tool_message(call: ToolCall, payload: Dict[str, Any]) -> ToolMessage:
    return ToolMessage(content=json.dumps(payload, default=str), tool_call_id=call.id, name=call.name)


# ---------------------------
# Stream chunk handling
# ---------------------------
def _chunk_text(chunk: Any) -> str:
    """Text of a streamed chunk; Gemini sometimes sends a list of parts."""
    content = getattr(chunk, "content", None)
    if not content:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: List[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(str(part.get("text") or ""))
        return "".join(parts)
    return str(content)


def _field(fragment: Any, key: str) -> Any:
    if isinstance(fragment, dict):
        return fragment.get(key)
    return getattr(fragment, key, None)


def _merge_tool_call_chunks(buffers: Dict[Any, _ToolCallBuffer], fragments: Any) -> None:
    """Merge streamed tool-call fragments into ``buffers`` keyed by the provider's index."""
    for fragment in fragments or []:
        index = _field(fragment, "index")
        key = index if index is not None else ("unindexed", len(buffers))
        buffer = buffers.setdefault(key, _ToolCallBuffer())

        call_id = _field(fragment, "id")
        name = _field(fragment, "name")
        args = _field(fragment, "args")
        if call_id:
            buffer.id = call_id
        if name:
            buffer.name = name
        if args:
            buffer.args_text += args if isinstance(args, str) else json.dumps(args)


def _finalize_tool_calls(buffers: Dict[Any, _ToolCallBuffer]) -> List[ToolCall]:
    """Complete calls in arrival order; fragments missing a name, an id or valid JSON are dropped."""
    calls: List[ToolCall] = []
    for buffer in buffers.values():
        if not buffer.name or not buffer.id:
            logger.debug("Dropping incomplete tool call fragment: %r", buffer)
            continue
        try:
            arguments = json.loads(buffer.args_text) if buffer.args_text.strip() else {}
        except json.JSONDecodeError:
            logger.debug("Dropping %s call with malformed arguments: %r", buffer.name, buffer.args_text)
            continue
        if not isinstance(arguments, dict):
            logger.debug("Dropping %s call with non-object arguments", buffer.name)
            continue
        calls.append(ToolCall(id=buffer.id, name=buffer.name, arguments=arguments))
    buffers.clear()
    return calls

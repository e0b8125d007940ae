from __future__ import annotations

import logging
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from config.settings import get_settings
from extractor.cleaning import is_no_table_marker, strip_code_fences
from extractor.core.prompt import EXTRACTION_PROMPT
from extractor.errors import ExtractionError, MissingApiKeyError, NoTableFoundError
from extractor.image import ImagePayload


logger = logging.getLogger(__name__)


def build_model(api_key: Optional[str] = None) -> ChatGoogleGenerativeAI:
    settings = get_settings()
    key = (api_key or "").strip() or settings.google_api_key
    if not key:
        raise MissingApiKeyError(
            "No API key. Pass one with the request or set GOOGLE_API_KEY in environment or .env"
        )

    logger.info(
        "Config: model=%s request_key=%s timeout=%s",
        settings.gemini_model,
        bool((api_key or "").strip()),
        settings.timeout,
    )
    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=key,
        temperature=settings.temperature,
        top_p=settings.top_p,
        timeout=settings.timeout,
    )


def build_message(image: ImagePayload) -> HumanMessage:
    return HumanMessage(
        content=[
            {"type": "text", "text": EXTRACTION_PROMPT},
            {"type": "image_url", "image_url": image.data_url()},
        ]
    )


def _reply_text(content: Any) -> str:
    # Gemini may answer with a list of parts instead of a plain string
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        chunks = []
        for part in content:
            if isinstance(part, str):
                chunks.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                chunks.append(str(part.get("text") or ""))
        return "".join(chunks)
    return str(content or "")


def extract_csv(
    image: ImagePayload,
    api_key: Optional[str] = None,
    model: Optional[BaseChatModel] = None,
) -> str:
    """Send the image to the model and return the raw CSV it read off it."""
    llm = model or build_model(api_key)
    logger.info("Sending %s image (%.1f KB) for extraction", image.mime_type, image.size / 1024)

    try:
        reply = llm.invoke([build_message(image)])
    except Exception as exc:
        message = " ".join(str(exc).split())[:500] or exc.__class__.__name__
        raise ExtractionError(f"Model call failed: {message}") from exc

    text = strip_code_fences(_reply_text(getattr(reply, "content", reply)))
    if not text:
        raise ExtractionError("Model returned an empty reply")
    if is_no_table_marker(text):
        raise NoTableFoundError("No table found in the image")

    logger.info("Model responded with %s chars, %s lines", len(text), text.count("\n") + 1)
    return text

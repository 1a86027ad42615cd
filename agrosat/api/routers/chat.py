from fastapi import APIRouter, Depends, HTTPException, status
import json
import logging

from agrosat.api.config import settings
from agrosat.api.core.llm import LLMClient
from agrosat.api.core.security import get_current_user, CurrentUser
from agrosat.api.dependencies import get_llm_client
from agrosat.api.schemas.chat import ChatRequest, ChatResponse

router = APIRouter()
logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Извините, я сейчас не могу ответить."

# System prompt for the agronomist assistant
CHAT_SYSTEM_PROMPT = """Ты - AgroSat AI, экспертный агроном-консультант.
Контекст текущего поля: {context}
Отвечай как профессионал, давай конкретные советы. Будь краток."""


@router.post("", response_model=ChatResponse)
async def chat(
    chat_request: ChatRequest,
    user: CurrentUser = Depends(get_current_user),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """Ask the agronomist assistant about the field currently on screen"""
    if not llm_client.configured:
        return ChatResponse(reply=FALLBACK_REPLY)

    system_prompt = CHAT_SYSTEM_PROMPT.format(
        context=json.dumps(chat_request.context or {}, ensure_ascii=False, default=str)
    )
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": chat_request.message}
    ]

    try:
        reply = await llm_client.chat_completion(
            messages,
            temperature=settings.CHAT_TEMPERATURE,
            max_tokens=settings.CHAT_MAX_TOKENS
        )
    except Exception as e:
        logger.error(f"Error in chat completion for user {user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate response: {str(e)}"
        )

    return ChatResponse(reply=reply or FALLBACK_REPLY)

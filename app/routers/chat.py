"""AI chat proxy endpoint."""

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_completion_service
from app.rate_limit import limiter
from app.schemas.chat import ChatRequest, ChatResponse
from app.services.completion import GeminiCompletionService

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post("/chat", response_model=ChatResponse)
@limiter.limit("30/minute")
def chat(
    request: Request,
    body: ChatRequest,
    service: GeminiCompletionService = Depends(get_completion_service),
) -> ChatResponse:
    """Forward a message to Gemini and return its reply."""
    return ChatResponse(response=service.complete(body.message))

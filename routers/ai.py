from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.llm import AIQueryRequest
from services.nl_query_service import NLQueryService

router = APIRouter(prefix="/ai", tags=["ai"])


def get_nl_query_service(db: Session = Depends(get_db)) -> NLQueryService:
    return NLQueryService(db)


# ✅ [QUERY] natural-language question about attendance / alerts
@router.post("/query")
async def ai_query(payload: AIQueryRequest, service: NLQueryService = Depends(get_nl_query_service)):
    response = await service.answer(payload.query)
    return {
        "success": response.error is None,
        "query": payload.query,
        "answer": response.natural_language_answer,
        "data": response.structured_data,
        "suggested_actions": response.suggested_actions,
        "confidence": response.confidence,
        "error": response.error,
    }

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


class AIQueryRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Question about attendance or alerts")


class LLMResponse(BaseModel):
    natural_language_answer: str
    structured_data: Optional[Dict[str, Any]] = None
    suggested_actions: List[str] = Field(default_factory=list)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    error: Optional[str] = None

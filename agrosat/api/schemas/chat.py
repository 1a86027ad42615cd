from pydantic import BaseModel, Field
from typing import Optional, Dict, Any


class ChatRequest(BaseModel):
    """Schema for a chat message to the agronomist assistant"""
    message: str = Field(..., min_length=1, max_length=2000, description="User message")
    context: Optional[Dict[str, Any]] = Field(None, description="Current field context shown to the user")


class ChatResponse(BaseModel):
    reply: str

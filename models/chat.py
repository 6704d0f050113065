# models/chat.py
from pydantic import BaseModel
from typing import Literal, Optional


class ChatRequest(BaseModel):
    message: Optional[str] = None
    provider: Literal["openai", "gemini"] = "openai"

from typing import Any, Literal
from pydantic import BaseModel, Field, field_validator

class ChatTurn(BaseModel):
    role: Literal["user", "assistant"] = Field(..., examples=["user", "assistant"])
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, v: Any) -> str:
        return "" if v is None else str(v)

class ChatRequest(BaseModel):
    message: str = ""
    history: list[ChatTurn] = []

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, v: Any) -> str:
        return "" if v is None else v

    @field_validator("history", mode="before")
    @classmethod
    def _coerce_history(cls, v: Any) -> list:
        return v if isinstance(v, list) else []

class ChatResponse(BaseModel):
    answer: str
    emergency: bool = False

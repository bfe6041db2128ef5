"""Uniform tool result envelope."""

from typing import Any, Optional

from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel, ConfigDict, Field


class ToolResponse(BaseModel):
    """``{content: [{type: "text", text}], isError?: true}``"""

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent] = Field(..., min_length=1)
    is_error: Optional[bool] = Field(default=None, alias="isError")

    @classmethod
    def text(cls, text: str) -> "ToolResponse":
        return cls(content=[TextContent(type="text", text=text)])

    @classmethod
    def error(cls, message: str) -> "ToolResponse":
        return cls(content=[TextContent(type="text", text=message)], is_error=True)

    @property
    def first_text(self) -> str:
        return self.content[0].text

    def to_wire(self) -> dict[str, Any]:
        """Envelope as sent to the client; ``isError`` only when set."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_call_tool_result(self) -> CallToolResult:
        return CallToolResult(content=list(self.content), isError=bool(self.is_error))

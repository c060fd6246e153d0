from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from scopelint.config import LintConfig


class FixModel(BaseModel):
    # [start, end) byte offsets to replace; equal offsets mean an insertion.
    range: List[int]
    text: str


class LintMessage(BaseModel):
    ruleId: str
    messageId: str
    message: str
    # 1-based lines, 0-based columns (byte columns)
    line: int
    column: int
    endLine: int
    endColumn: int
    startOffset: int
    endOffset: int
    fix: Optional[FixModel] = None


class LintResponse(BaseModel):
    filename: str
    # Use default_factory to avoid sharing the same list across instances
    messages: List[LintMessage] = Field(default_factory=list)
    # Set when the file could not be read; messages is empty then.
    error: Optional[str] = None


class RuleInfo(BaseModel):
    id: str
    description: str
    fixable: bool = False
    messages: Dict[str, str] = Field(default_factory=dict)


class LintRequest(BaseModel):
    source: str
    filename: str = "input.js"
    config: LintConfig = Field(default_factory=LintConfig)

"""
Bug Report Model
================
Pydantic models for the bug / code-quality analysis.

Fields:
    bugs            — ordered findings, one per suspected defect
    codeQuality     — score (integer 0–100) plus free-text quality issues
    suggestions     — general improvement suggestions
    note            — set when the input was chunked and only a prefix analysed

Every list defaults to empty so consumers never need existence checks.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Bug(BaseModel):
    line: int = 0
    severity: str = "low"
    message: str = ""
    fix: str = ""


class CodeQuality(BaseModel):
    score: int = 100
    issues: List[str] = []


class BugReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bugs: List[Bug] = []
    code_quality: CodeQuality = Field(default_factory=CodeQuality, alias="codeQuality")
    suggestions: List[str] = []
    note: Optional[str] = None


class BugDetectionResult(BaseModel):
    """Bug-only view returned by the single bug-detection entry point."""
    model_config = ConfigDict(populate_by_name=True)

    bugs: List[Bug] = []
    code_quality: CodeQuality = Field(default_factory=CodeQuality, alias="codeQuality")
    note: Optional[str] = None
    timestamp: str

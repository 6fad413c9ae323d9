"""
Full Analysis Model
===================
Aggregate of the three analyses run against one input.

Each slot holds either its report or an AnalysisFailure ({"error": ...}),
so one failed analysis never hides the other two.
"""
from typing import Union
from pydantic import BaseModel, ConfigDict, Field

from .bug_report import BugReport
from .documentation import DocumentationReport
from .api_documentation import ApiDocReport


class AnalysisFailure(BaseModel):
    error: str


class FullAnalysisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    analysis: Union[BugReport, AnalysisFailure]
    documentation: Union[DocumentationReport, AnalysisFailure]
    api_documentation: Union[ApiDocReport, AnalysisFailure] = Field(alias="apiDocumentation")
    timestamp: str

    @property
    def failed_count(self) -> int:
        slots = (self.analysis, self.documentation, self.api_documentation)
        return sum(1 for slot in slots if isinstance(slot, AnalysisFailure))

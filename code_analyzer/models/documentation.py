"""
Documentation Model
Pydantic models for generated function documentation.
"""
from typing import List, Optional
from pydantic import BaseModel


class ParameterDoc(BaseModel):
    name: str = ""
    type: str = ""
    description: str = ""


class FunctionDoc(BaseModel):
    name: str = ""
    description: str = ""
    parameters: List[ParameterDoc] = []
    returns: str = ""
    example: str = ""


class DocumentationReport(BaseModel):
    functions: List[FunctionDoc] = []
    note: Optional[str] = None


class DocumentationResult(DocumentationReport):
    timestamp: str

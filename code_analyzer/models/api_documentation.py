"""
API Documentation Model
Pydantic models for generated HTTP endpoint documentation.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel


class EndpointParameter(BaseModel):
    name: str = ""
    type: str = ""
    required: bool = False


class Endpoint(BaseModel):
    method: str = ""
    path: str = ""
    description: str = ""
    parameters: List[EndpointParameter] = []
    responses: Dict[str, str] = {}


class ApiDocReport(BaseModel):
    endpoints: List[Endpoint] = []
    note: Optional[str] = None


class ApiDocResult(ApiDocReport):
    timestamp: str

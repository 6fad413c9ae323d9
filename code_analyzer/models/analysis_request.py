"""
Analysis Request Model
======================
Validated input for every analysis entry point.

Rules:
    code      — non-blank string, at most MAX_CODE_LENGTH characters
    language  — free-form tag used in the prompt's code fence;
                blank or missing falls back to DEFAULT_LANGUAGE
"""
from pydantic import BaseModel, ValidationInfo, field_validator

from code_analyzer.core.config import DEFAULT_LANGUAGE, MAX_CODE_LENGTH


class AnalysisRequest(BaseModel):
    code: str
    language: str = DEFAULT_LANGUAGE

    @field_validator("code", mode="before")
    @classmethod
    def validate_code(cls, v, info: ValidationInfo):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Code is required and must be a non-empty string")
        max_length = (info.context or {}).get("max_code_length", MAX_CODE_LENGTH)
        if len(v) > max_length:
            raise ValueError(
                f"Code is too long. Maximum {max_length} characters allowed."
            )
        return v

    @field_validator("language", mode="before")
    @classmethod
    def default_language(cls, v, info: ValidationInfo):
        if not isinstance(v, str) or not v.strip():
            return (info.context or {}).get("default_language", DEFAULT_LANGUAGE)
        return v.strip()

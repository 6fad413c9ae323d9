"""
LLM Prompts
===========
Centralised store for the three analysis prompts.

Prompt Design Rules:
    - "Return ONLY JSON" — every prompt ends with the expected JSON shape
    - The code is embedded in a fenced block tagged with the request language
    - The example shape doubles as the schema the normalizer enforces
"""
from code_analyzer.core.constants import (
    VARIANT_BUGS,
    VARIANT_DOCUMENTATION,
    VARIANT_API_DOCS,
)


# ---------------------------------------------------------------------------
# Prompt Templates
# ---------------------------------------------------------------------------
BUG_ANALYSIS_PROMPT = (
    "Analyse the code and find bugs, code quality problems and improvement "
    "suggestions. Return ONLY JSON.\n"
    "\n"
    "Format:\n"
    "{{\n"
    '  "bugs": [\n'
    '    {{"line": 5, "severity": "high", "message": "Description", "fix": "Suggested fix"}}\n'
    "  ],\n"
    '  "codeQuality": {{\n'
    '    "score": 75,\n'
    '    "issues": ["Issue 1", "Issue 2"]\n'
    "  }},\n"
    '  "suggestions": ["Suggestion 1", "Suggestion 2"]\n'
    "}}\n"
    "\n"
    "severity must be one of: low, medium, high, critical.\n"
    "\n"
    "Code:\n"
    "```{language}\n"
    "{code}\n"
    "```"
)

DOCUMENTATION_PROMPT = (
    "Analyse the functions in the code and produce documentation for each. "
    "Return ONLY JSON.\n"
    "\n"
    "Format:\n"
    "{{\n"
    '  "functions": [\n'
    "    {{\n"
    '      "name": "functionName",\n'
    '      "description": "What the function does",\n'
    '      "parameters": [{{"name": "param1", "type": "string", "description": "Meaning"}}],\n'
    '      "returns": "Description of the return value",\n'
    '      "example": "Usage example"\n'
    "    }}\n"
    "  ]\n"
    "}}\n"
    "\n"
    "Code:\n"
    "```{language}\n"
    "{code}\n"
    "```"
)

API_DOCUMENTATION_PROMPT = (
    "Analyse the API endpoints defined in the code and produce documentation "
    "for each. Return ONLY JSON.\n"
    "\n"
    "Format:\n"
    "{{\n"
    '  "endpoints": [\n'
    "    {{\n"
    '      "method": "GET",\n'
    '      "path": "/api/users",\n'
    '      "description": "What the endpoint does",\n'
    '      "parameters": [{{"name": "id", "type": "string", "required": true}}],\n'
    '      "responses": {{"200": "Successful response description"}}\n'
    "    }}\n"
    "  ]\n"
    "}}\n"
    "\n"
    "Code:\n"
    "```{language}\n"
    "{code}\n"
    "```"
)

PROMPTS: dict[str, str] = {
    VARIANT_BUGS: BUG_ANALYSIS_PROMPT,
    VARIANT_DOCUMENTATION: DOCUMENTATION_PROMPT,
    VARIANT_API_DOCS: API_DOCUMENTATION_PROMPT,
}


def build_prompt(variant: str, code: str, language: str) -> str:
    """
    Fill the prompt template of a report variant.

    Parameters
    ----------
    variant : str
        VARIANT_BUGS, VARIANT_DOCUMENTATION or VARIANT_API_DOCS.
    code : str
        Code to embed (already reduced to the first chunk).
    language : str
        Language tag for the code fence.

    Returns
    -------
    str
        Complete prompt text.
    """
    try:
        template = PROMPTS[variant]
    except KeyError:
        raise ValueError(f"Unknown report variant: {variant}") from None
    return template.format(language=language, code=code)

"""
Constants
Centralised storage for severities, finish reasons, report variants and
extraction failure reasons.
"""
SEVERITIES = ("low", "medium", "high", "critical")
DEFAULT_SEVERITY = "low"

# Quality score penalties per bug severity
SCORE_MAX = 100
SCORE_MIN = 0
PENALTY_SEVERE = 20   # high / critical
PENALTY_MEDIUM = 10
PENALTY_OTHER = 5     # low / unspecified

# Finish reasons, normalised from provider-specific tags
FINISH_NORMAL = "normal"
FINISH_LENGTH_TRUNCATED = "length-truncated"

# Report variants and the field a bare array is wrapped under
VARIANT_BUGS = "bugs"
VARIANT_DOCUMENTATION = "documentation"
VARIANT_API_DOCS = "api-docs"

PRIMARY_FIELDS = {
    VARIANT_BUGS: "bugs",
    VARIANT_DOCUMENTATION: "functions",
    VARIANT_API_DOCS: "endpoints",
}

# Extraction / repair failure reasons
NO_JSON_FOUND = "no-json-found"
UNTERMINATED = "unterminated"
UNREPAIRABLE = "unrepairable"
EMPTY_RESPONSE = "empty-response"
INVALID_ROOT = "invalid-root"

# Appended to the first chunk when the input was split
TRUNCATION_MARKER = "\n\n// ..."

# Error-message fragments that mark an upstream failure as transient
TRANSIENT_MARKERS = ("503", "overloaded", "service unavailable")

SNIPPET_LENGTH = 200

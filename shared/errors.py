"""
Error taxonomy for the website analysis pipeline.

Every stage returns its failure as one of these objects (never a partial
result). The HTTP entry point turns them into a response body:

    {"success": false, "error": <message>, "stage": <stage>}

Stages:
- input:       malformed request (no network activity happened)
- sites:       candidate publication sites could not be loaded
- fetch:       the primary page could not be fetched
- ai_analysis: Gemini call failed or returned unusable output
"""

from typing import Optional


class AnalysisError(Exception):
    """Base class for all pipeline failures."""

    stage = 'processing'
    http_status = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        # Upstream HTTP status when one is known (page fetch, Gemini API)
        self.status_code = status_code

    def to_dict(self) -> dict:
        data = {
            'stage': self.stage,
            'message': self.message,
        }
        if self.status_code is not None:
            data['status_code'] = self.status_code
        return data

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code!r})"


class InputValidationError(AnalysisError):
    """Request URL is missing or not a well-formed absolute URL."""
    stage = 'input'
    http_status = 400


class CandidateLoadError(AnalysisError):
    """Publication site store is empty or unreachable."""
    stage = 'sites'
    http_status = 500


class FetchError(AnalysisError):
    """Primary page fetch failed (transport error or non-2xx)."""
    stage = 'fetch'
    http_status = 502


class ProviderError(AnalysisError):
    """Gemini API call did not succeed."""
    stage = 'ai_analysis'
    http_status = 502


class EmptyResponseError(AnalysisError):
    """Gemini returned no generated text."""
    stage = 'ai_analysis'
    http_status = 502


class ParseError(AnalysisError):
    """No JSON object could be extracted from Gemini's text."""
    stage = 'ai_analysis'
    http_status = 502


class SchemaError(AnalysisError):
    """Parsed JSON is missing a required field."""
    stage = 'ai_analysis'
    http_status = 502


class ValidationError(AnalysisError):
    """A required field is present but violates a count or length rule."""
    stage = 'ai_analysis'
    http_status = 502

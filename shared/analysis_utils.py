"""
Gemini analysis utilities for the website analysis pipeline.

Parses and validates the structured JSON Gemini returns for a website:

    {"core_message": str, "keywords": [10 x str], "selected_sites": [3 x int]}

All three fields are required. Count and length rules are hard failures.
The only recovery is for selected_sites: if any ID is not a known candidate
the whole selection is replaced by the first three candidate IDs.
"""

import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import AnalysisError, ParseError, SchemaError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ['core_message', 'keywords', 'selected_sites']
MIN_CORE_MESSAGE_LENGTH = 200
REQUIRED_KEYWORD_COUNT = 10
REQUIRED_SITE_COUNT = 3


@dataclass(frozen=True)
class AnalysisResult:
    """Validated Gemini analysis of one website."""
    core_message: str
    keywords: List[str]
    selected_sites: List[int]
    used_fallback_sites: bool = False

    def to_dict(self) -> dict:
        return {
            'core_message': self.core_message,
            'keywords': list(self.keywords),
            'selected_sites': list(self.selected_sites),
        }


def extract_json_object(text: str) -> Tuple[Optional[dict], Optional[ParseError]]:
    """
    Pull the JSON object out of free-form model output.

    Gemini often wraps the payload in prose or ```json fences. Decoding
    starts at the first '{'; if that fails, the greedy slice from the first
    '{' to the last '}' is tried. A malformed payload is a ParseError, never
    a nested object picked out of it.

    Returns:
        (data, None) or (None, ParseError)
    """
    if not text or '{' not in text or '}' not in text:
        return None, ParseError(f"Could not extract JSON from Gemini response. Response was: {text!r}")

    start = text.find('{')
    end = text.rfind('}')

    try:
        data, _ = json.JSONDecoder().raw_decode(text, start)
    except ValueError as e:
        if end < start:
            return None, ParseError(f"Failed to parse JSON from Gemini response: {e}")
        try:
            data = json.loads(text[start:end + 1])
        except ValueError as e:
            return None, ParseError(f"Failed to parse JSON from Gemini response: {e}")

    if not isinstance(data, dict):
        return None, ParseError('Failed to parse JSON from Gemini response: not a JSON object')
    return data, None


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_site_id(value) -> Optional[int]:
    """Accept ints and digit strings ("4"). Anything else is not a site ID."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def validate_analysis(
    data: dict,
    candidate_ids: Sequence[int]
) -> Tuple[Optional[AnalysisResult], Optional[AnalysisError]]:
    """
    Validate parsed Gemini output against the analysis contract.

    Checks, in order:
    - core_message, keywords and selected_sites are all present (SchemaError)
    - core_message has at least 200 characters (ValidationError)
    - keywords is a list of exactly 10 entries (ValidationError)
    - selected_sites is a list of exactly 3 entries (ValidationError)
    - every selected site is a candidate; otherwise the first 3 candidate
      IDs are used instead (logged, not an error)

    Args:
        data: Parsed JSON object from Gemini
        candidate_ids: Candidate site IDs in catalog order

    Returns:
        (AnalysisResult, None) or (None, AnalysisError)
    """
    if not isinstance(data, dict):
        return None, SchemaError('Invalid response structure from Gemini. Expected a JSON object.')

    missing = [name for name in REQUIRED_FIELDS if _is_missing(data.get(name))]
    if missing:
        return None, SchemaError(
            f"Invalid response structure from Gemini. Missing {', '.join(missing)}."
        )

    core_message = data['core_message']
    if not isinstance(core_message, str):
        return None, ValidationError('Core message from Gemini must be a string.')
    core_message = core_message.strip()
    if len(core_message) < MIN_CORE_MESSAGE_LENGTH:
        return None, ValidationError(
            f"Core message from Gemini is too short. Expected at least "
            f"{MIN_CORE_MESSAGE_LENGTH} characters, got: {len(core_message)}"
        )

    keywords = data['keywords']
    keyword_count = len(keywords) if isinstance(keywords, list) else 0
    if not isinstance(keywords, list) or keyword_count != REQUIRED_KEYWORD_COUNT:
        return None, ValidationError(
            f"Invalid keywords from Gemini. Expected exactly {REQUIRED_KEYWORD_COUNT} "
            f"keywords, got: {keyword_count}"
        )

    selected = data['selected_sites']
    selected_count = len(selected) if isinstance(selected, list) else 0
    if not isinstance(selected, list) or selected_count != REQUIRED_SITE_COUNT:
        return None, ValidationError(
            f"Invalid selected_sites from Gemini. Expected exactly {REQUIRED_SITE_COUNT} "
            f"site IDs, got: {selected_count}"
        )

    known_ids = set(candidate_ids)
    site_ids = [_as_site_id(value) for value in selected]
    invalid = [raw for raw, site_id in zip(selected, site_ids) if site_id not in known_ids]

    used_fallback = False
    if invalid:
        logger.warning(
            "Gemini selected invalid site IDs: %s. Using fallback selection.",
            ', '.join(str(value) for value in invalid)
        )
        # Catalogs with fewer than 3 sites yield a shorter selection
        site_ids = list(candidate_ids)[:REQUIRED_SITE_COUNT]
        used_fallback = True

    return AnalysisResult(
        core_message=core_message,
        keywords=[str(keyword).strip() for keyword in keywords],
        selected_sites=site_ids,
        used_fallback_sites=used_fallback,
    ), None


def parse_gemini_analysis(
    text: str,
    candidate_ids: Sequence[int]
) -> Tuple[Optional[AnalysisResult], Optional[AnalysisError]]:
    """Extract the JSON payload from Gemini's text and validate it."""
    data, error = extract_json_object(text)
    if error:
        return None, error
    return validate_analysis(data, candidate_ids)

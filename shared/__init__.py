"""Shared utilities for the PRAI.TODAY website analysis functions."""

from .errors import (
    AnalysisError,
    InputValidationError,
    CandidateLoadError,
    FetchError,
    ProviderError,
    EmptyResponseError,
    ParseError,
    SchemaError,
    ValidationError,
)

from .scrape_utils import (
    MAX_BODY_TEXT_LENGTH,
    MAX_IMAGES,
    MAX_LINKS,
    ScrapedData,
    extract_title,
    extract_meta_description,
    extract_headings,
    extract_body_text,
    extract_images,
    extract_links,
    extract_structured_data,
    extract_social_meta,
    extract_scraped_data,
    is_important_page,
    select_important_pages,
)

from .analysis_utils import (
    MIN_CORE_MESSAGE_LENGTH,
    REQUIRED_KEYWORD_COUNT,
    REQUIRED_SITE_COUNT,
    AnalysisResult,
    extract_json_object,
    validate_analysis,
    parse_gemini_analysis,
)

from .site_store import (
    PublicationSite,
    get_supabase_client,
    load_candidate_sites,
)

from .prompt_utils import (
    format_site_catalog,
    build_analysis_prompt,
)

__all__ = [
    # Errors
    'AnalysisError',
    'InputValidationError',
    'CandidateLoadError',
    'FetchError',
    'ProviderError',
    'EmptyResponseError',
    'ParseError',
    'SchemaError',
    'ValidationError',
    # HTML extraction
    'MAX_BODY_TEXT_LENGTH',
    'MAX_IMAGES',
    'MAX_LINKS',
    'ScrapedData',
    'extract_title',
    'extract_meta_description',
    'extract_headings',
    'extract_body_text',
    'extract_images',
    'extract_links',
    'extract_structured_data',
    'extract_social_meta',
    'extract_scraped_data',
    'is_important_page',
    'select_important_pages',
    # Analysis validation
    'MIN_CORE_MESSAGE_LENGTH',
    'REQUIRED_KEYWORD_COUNT',
    'REQUIRED_SITE_COUNT',
    'AnalysisResult',
    'extract_json_object',
    'validate_analysis',
    'parse_gemini_analysis',
    # Candidate sites
    'PublicationSite',
    'get_supabase_client',
    'load_candidate_sites',
    # Prompt
    'format_site_catalog',
    'build_analysis_prompt',
]

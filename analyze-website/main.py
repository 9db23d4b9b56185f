"""
Analyze Website Cloud Function

Scrapes a website and asks Gemini for publication-ready marketing copy.

Responsibilities:
- Validate the submitted URL
- Load candidate publication sites from Supabase
- Fetch the page (plus up to 3 about / product / home pages)
- Extract title, meta, headings, body text, JSON-LD and social tags
- Build the analysis prompt and call Gemini
- Validate core_message, keywords and selected_sites

Does NOT:
- Persist the analysis (caller's job)
- Create publications (Publast workflow)
- Retry failed calls
"""

import functions_framework
import requests
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from urllib.parse import urlparse
import json
import logging
import os
import sys

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.errors import (
    AnalysisError,
    CandidateLoadError,
    EmptyResponseError,
    FetchError,
    InputValidationError,
    ProviderError,
)
from shared.scrape_utils import extract_body_text, extract_scraped_data, select_important_pages
from shared.prompt_utils import build_analysis_prompt
from shared.analysis_utils import parse_gemini_analysis
from shared.site_store import NO_SITES_MESSAGE, get_supabase_client, load_candidate_sites

# Configuration
GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY') or os.environ.get('GOOGLE_GEMINI_API_KEY')
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.0-flash')
SUPABASE_URL = os.environ.get('SUPABASE_URL')
SUPABASE_SERVICE_ROLE_KEY = os.environ.get('SUPABASE_SERVICE_ROLE_KEY')
FETCH_TIMEOUT = float(os.environ.get('FETCH_TIMEOUT', '15'))
GEMINI_TIMEOUT = float(os.environ.get('GEMINI_TIMEOUT', '60'))
USER_AGENT = 'Mozilla/5.0 (compatible; PRAI-Bot/1.0; +https://prai.ai)'

MAX_ADDITIONAL_PAGES = 3
ADDITIONAL_PAGE_TEXT_LENGTH = 1000

GENERATION_CONFIG = {
    'temperature': 0.7,
    'top_k': 40,
    'top_p': 0.95,
    'max_output_tokens': 3072,
}

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
}

logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'INFO'))
logger = logging.getLogger(__name__)


def is_valid_url(url) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc) and bool(parsed.hostname)


def fetch_webpage(url: str, timeout: float = None) -> tuple:
    """Fetch webpage content. Returns (html, error)."""
    try:
        headers = {
            'User-Agent': USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }

        response = requests.get(
            url,
            headers=headers,
            timeout=timeout or FETCH_TIMEOUT,
            allow_redirects=True
        )
        response.raise_for_status()

        return response.text, None

    except requests.exceptions.Timeout:
        return None, FetchError('Request timed out')
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code
        reason = (e.response.reason or '').strip()
        return None, FetchError(f'Failed to fetch website: {status} {reason}'.strip(), status_code=status)
    except requests.exceptions.RequestException as e:
        return None, FetchError(f'Request failed: {str(e)}')


def fetch_additional_pages(links) -> str:
    """
    Best-effort enrichment from about / product / home pages.

    Pages are fetched one at a time. Failures are logged and skipped.
    Returns the concatenated text blocks, '' if nothing could be fetched.
    """
    additional_content = ''

    for page_url in select_important_pages(links, limit=MAX_ADDITIONAL_PAGES):
        html, error = fetch_webpage(page_url)
        if error:
            logger.warning("Failed to scrape %s: %s", page_url, error.message)
            continue

        page_text = extract_body_text(html)[:ADDITIONAL_PAGE_TEXT_LENGTH]
        additional_content += f"\n\nPage: {page_url}\n{page_text}"

    return additional_content.strip()


def scrape_website(url: str) -> tuple:
    """Fetch and extract a website. Returns (scraped_data, error)."""
    logger.info("Scraping data from: %s", url)

    html, error = fetch_webpage(url)
    if error:
        return None, error

    scraped = extract_scraped_data(html, url)
    scraped = scraped.with_extra_text(fetch_additional_pages(scraped.links))

    return scraped, None


def _response_text(response):
    """First non-empty text part of a Gemini response, or None."""
    for candidate in getattr(response, 'candidates', None) or []:
        content = getattr(candidate, 'content', None)
        for part in getattr(content, 'parts', None) or []:
            text = getattr(part, 'text', None)
            if text and text.strip():
                return text
    return None


def call_gemini(prompt: str) -> tuple:
    """Send the analysis prompt to Gemini. Returns (text, error)."""
    if not GEMINI_API_KEY:
        return None, ProviderError('GEMINI_API_KEY not configured')

    try:
        genai.configure(api_key=GEMINI_API_KEY)
        model = genai.GenerativeModel(GEMINI_MODEL)
        response = model.generate_content(
            prompt,
            generation_config=GENERATION_CONFIG,
            request_options={'timeout': GEMINI_TIMEOUT}
        )
    except google_exceptions.GoogleAPICallError as e:
        status = int(e.code) if e.code is not None else None
        logger.error("Gemini API error: %s - %s", status, e.message)
        return None, ProviderError(f'Gemini API error: {status} - {e.message}', status_code=status)
    except Exception as e:
        logger.error("Gemini API error: %s", e)
        return None, ProviderError(f'Gemini API error: {str(e)}')

    text = _response_text(response)
    if not text:
        return None, EmptyResponseError('No response from Gemini API')

    logger.debug("Gemini response: %s", text)
    return text, None


def load_sites() -> tuple:
    """Default candidate loader: the Supabase project from the environment."""
    if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
        logger.error("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not configured")
        return None, CandidateLoadError(NO_SITES_MESSAGE)

    try:
        client = get_supabase_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        logger.error("Could not create Supabase client: %s", e)
        return None, CandidateLoadError(NO_SITES_MESSAGE)

    return load_candidate_sites(client)


def run_analysis(url, sites_loader=None) -> tuple:
    """
    Run the full analysis pipeline for one URL.

    validate input -> load sites -> fetch + extract -> prompt -> Gemini -> validate

    Args:
        url: Website URL submitted by the user
        sites_loader: Callable returning (sites, error); defaults to Supabase

    Returns:
        (AnalysisResult, None) or (None, AnalysisError). Stops at the first error.
    """
    if not is_valid_url(url):
        return None, InputValidationError('Invalid URL provided')
    url = url.strip()

    sites, error = (sites_loader or load_sites)()
    if error:
        return None, error
    if not sites:
        return None, CandidateLoadError(NO_SITES_MESSAGE)

    logger.info("Starting analysis for: %s (%d candidate sites)", url, len(sites))

    scraped, error = scrape_website(url)
    if error:
        return None, error

    prompt = build_analysis_prompt(scraped, url, sites)

    text, error = call_gemini(prompt)
    if error:
        return None, error

    analysis, error = parse_gemini_analysis(text, [site.id for site in sites])
    if error:
        return None, error

    return analysis, None


def _error_response(error: AnalysisError, headers: dict) -> tuple:
    body = {
        'success': False,
        'error': error.message,
        'stage': error.stage,
    }
    if error.status_code is not None:
        body['status_code'] = error.status_code
    return (json.dumps(body), error.http_status, headers)


@functions_framework.http
def analyze_website(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://example.com"
    }

    Response:
    {
        "success": true,
        "analysis": {"core_message": "...", "keywords": [...], "selected_sites": [1, 2, 3]}
    }
    or
    {
        "success": false,
        "error": "Failed to fetch website: 404 Not Found",
        "stage": "fetch",
        "status_code": 404
    }
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        headers = dict(CORS_HEADERS)
        headers['Access-Control-Max-Age'] = '3600'
        return ('', 204, headers)

    headers = dict(CORS_HEADERS)
    headers['Content-Type'] = 'application/json'

    try:
        request_json = request.get_json(silent=True) or {}
        url = request_json.get('url') if isinstance(request_json, dict) else None

        analysis, error = run_analysis(url)
        if error:
            logger.warning("Analysis failed at stage %s: %s", error.stage, error.message)
            return _error_response(error, headers)

        return (json.dumps({
            'success': True,
            'analysis': analysis.to_dict(),
        }), 200, headers)

    except Exception as e:
        logger.exception("Error analyzing website")
        return (json.dumps({
            'success': False,
            'error': str(e) or 'Failed to analyze website',
            'stage': 'processing',
        }), 500, headers)

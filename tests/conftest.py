"""
Shared pytest fixtures for the website analysis tests.
"""

import pytest
import sys
import importlib.util
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

from bs4 import BeautifulSoup

from shared.site_store import PublicationSite

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load the Cloud Function module with a unique name at module load time
_analyze_website_module = _load_module_from_path(
    'analyze_website_main',
    PROJECT_ROOT / 'analyze-website' / 'main.py'
)


SAMPLE_CORE_MESSAGE = (
    "Acme Widgets is a modular hardware platform that lets small manufacturers "
    "design, prototype and ship connected devices without an in-house electronics team. "
    "It targets hardware startups and product teams who lose months to supplier "
    "coordination and firmware rewrites. Acme combines certified modules, a visual "
    "configurator and managed firmware updates in one subscription. The company "
    "positions itself between hobbyist kits and full contract manufacturing, "
    "selling to teams that need production quality at prototype speed. "
    "Founders can start a free pilot today and move to production within weeks."
)

SAMPLE_KEYWORDS = [
    "hardware platform",
    "connected devices",
    "IoT prototyping",
    "modular electronics",
    "firmware updates",
    "contract manufacturing",
    "hardware startups",
    "product development",
    "device certification",
    "manufacturing SaaS",
]


# ============================================================================
# Cloud Function Fixtures
# ============================================================================

@pytest.fixture
def analyze_module():
    """Returns the loaded analyze-website module (for patching globals)."""
    return _analyze_website_module


@pytest.fixture
def is_valid_url():
    return _analyze_website_module.is_valid_url


@pytest.fixture
def fetch_webpage():
    """Returns fetch_webpage function from analyze-website."""
    return _analyze_website_module.fetch_webpage


@pytest.fixture
def fetch_additional_pages():
    """Returns fetch_additional_pages function from analyze-website."""
    return _analyze_website_module.fetch_additional_pages


@pytest.fixture
def scrape_website():
    return _analyze_website_module.scrape_website


@pytest.fixture
def call_gemini():
    """Returns call_gemini function from analyze-website."""
    return _analyze_website_module.call_gemini


@pytest.fixture
def run_analysis():
    """Returns run_analysis function from analyze-website."""
    return _analyze_website_module.run_analysis


@pytest.fixture
def analyze_website():
    """Returns main entry point from analyze-website."""
    return _analyze_website_module.analyze_website


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def sample_homepage_html():
    """Raw HTML of a small product homepage."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Acme Widgets</title>
        <meta name="description" content="Modular hardware for connected devices">
        <meta property="og:title" content="Acme Widgets - Build Devices Faster">
        <meta property="og:description" content="Prototype to production in weeks">
        <meta property="og:image" content="https://acme.example/og.png">
        <meta name="twitter:title" content="Acme Widgets on Twitter">
        <script type="application/ld+json">
        {"@context": "https://schema.org", "@type": "Organization", "name": "Acme Widgets"}
        </script>
        <script type="application/ld+json">{ not valid json </script>
        <style>.hero { color: red; }</style>
    </head>
    <body>
        <header><a href="/login">Sign in</a> HEADER-NOISE</header>
        <nav><a href="/about">About us</a> NAV-NOISE</nav>
        <main>
            <h1>  Build   connected devices  </h1>
            <p>Acme Widgets helps hardware teams ship faster.</p>
            <img src="/img/hero.png">
            <img src="https://cdn.example.com/logo.svg">
            <h2>Why Acme</h2>
            <p>Certified modules and managed firmware.</p>
            <a href="/products/kit">Starter kit</a>
            <a href="https://twitter.com/acme">Twitter</a>
            <a href="/products/kit">Starter kit again</a>
            <!-- COMMENT-NOISE -->
            <script>var tracking = "SCRIPT-NOISE";</script>
        </main>
        <footer>FOOTER-NOISE <a href="/privacy">Privacy</a></footer>
    </body>
    </html>
    """


@pytest.fixture
def make_soup():
    """Factory: raw HTML -> BeautifulSoup."""
    def _make(html):
        return BeautifulSoup(html, 'html.parser')
    return _make


@pytest.fixture
def candidate_sites():
    """Four candidate publication sites in catalog (id) order."""
    return [
        PublicationSite(id=1, name='Tech Daily', domain='techdaily.example', category='Technology',
                        description='News for builders'),
        PublicationSite(id=2, name='Startup Wire', domain='startupwire.example', category='Business'),
        PublicationSite(id=3, name='Maker Journal', domain='makerjournal.example', category='Hardware',
                        description='Hardware and maker culture'),
        PublicationSite(id=4, name='Finance Now', domain='financenow.example', category='Finance'),
    ]


@pytest.fixture
def sites_loader(candidate_sites):
    """Candidate loader returning the sample catalog."""
    return MagicMock(return_value=(candidate_sites, None))


@pytest.fixture
def valid_analysis_payload():
    """A Gemini payload that passes every validation rule."""
    return {
        'core_message': SAMPLE_CORE_MESSAGE,
        'keywords': list(SAMPLE_KEYWORDS),
        'selected_sites': [1, 3, 2],
    }


@pytest.fixture
def gemini_response():
    """Factory for Gemini SDK response objects carrying the given text."""
    def _make(text):
        if text is None:
            return SimpleNamespace(candidates=[])
        part = SimpleNamespace(text=text)
        candidate = SimpleNamespace(content=SimpleNamespace(parts=[part]))
        return SimpleNamespace(candidates=[candidate])
    return _make


@pytest.fixture
def mock_genai(analyze_module, monkeypatch):
    """Replaces the genai SDK in the function module and sets an API key."""
    fake = MagicMock()
    monkeypatch.setattr(analyze_module, 'genai', fake)
    monkeypatch.setattr(analyze_module, 'GEMINI_API_KEY', 'test-gemini-key')
    return fake


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST'):
            self._json = json_data
            self.method = method
            self.data = b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest

"""
Prompt building for Gemini website analysis.

Serialises ScrapedData plus the candidate publication sites into a single
instruction asking for core_message, keywords and selected_sites as JSON.
"""

import json
from typing import List

from .analysis_utils import REQUIRED_KEYWORD_COUNT, REQUIRED_SITE_COUNT
from .scrape_utils import ScrapedData
from .site_store import PublicationSite

MAX_PROMPT_HEADINGS = 10


def format_site_catalog(sites: List[PublicationSite]) -> str:
    """One block per candidate site, in catalog order."""
    blocks = []
    for site in sites:
        blocks.append(
            f"ID: {site.id}\n"
            f"Name: {site.name}\n"
            f"Domain: {site.domain}\n"
            f"Category: {site.category}\n"
            f"Description: {site.description or 'No description available'}"
        )
    return '\n\n'.join(blocks)


def _format_structured_data(scraped: ScrapedData) -> str:
    if not scraped.structured_data:
        return 'None'
    return json.dumps(scraped.structured_data[0], indent=2, ensure_ascii=False, default=str)


def build_analysis_prompt(scraped: ScrapedData, url: str, sites: List[PublicationSite]) -> str:
    """
    Build the Gemini prompt for one website.

    Args:
        scraped: Extracted page data (body text already enriched)
        url: The analysed website URL
        sites: Candidate publication sites, in catalog order

    Returns:
        Prompt text. Gemini is asked to reply with a bare JSON object.
    """
    social = scraped.social_media
    headings = '\n'.join(scraped.headings[:MAX_PROMPT_HEADINGS])

    return f"""You are an expert content analyst, marketing strategist, and publication specialist. Analyze the following comprehensive website data and provide a structured analysis for content marketing and PR purposes, including intelligent site selection.

Website URL: {url}

COMPREHENSIVE SCRAPED DATA:
Title: {scraped.title}
Meta Description: {scraped.meta_description}

Headings ({len(scraped.headings)} total):
{headings}

Main Content ({len(scraped.body_text)} characters):
{scraped.body_text}

Social Media Meta:
- OG Title: {social.get('ogTitle') or 'N/A'}
- OG Description: {social.get('ogDescription') or 'N/A'}
- Twitter Title: {social.get('twitterTitle') or 'N/A'}
- Twitter Description: {social.get('twitterDescription') or 'N/A'}

Structured Data Found: {len(scraped.structured_data)} items
{_format_structured_data(scraped)}

Images Found: {len(scraped.images)}
Internal Links Found: {len(scraped.links)}

AVAILABLE PUBLICATION SITES:
{format_site_catalog(sites)}

TASK:
Based on this scraped data and the available publication sites, provide a JSON response with exactly this structure:

{{
  "core_message": "A comprehensive, detailed core message (6-8 sentences minimum) that explains this product/service, its unique value proposition, target audience, key features, benefits, and market positioning. It must be publication-ready content that journalists and content creators can use directly in articles.",
  "keywords": ["exactly {REQUIRED_KEYWORD_COUNT} highly relevant keywords that best represent this product/service for SEO and content marketing"],
  "selected_sites": [array of exactly {REQUIRED_SITE_COUNT} site IDs that are the best fit for this product/service based on category, audience, and content relevance]
}}

CORE MESSAGE REQUIREMENTS:
The core_message must include:
1. What the product/service is and what it does (2 sentences)
2. Who the target audience is and what problems it solves (2 sentences)
3. Key unique features, benefits, or competitive advantages (2 sentences)
4. Market positioning, business model, or industry context (1-2 sentences)
5. Call to action or future vision (1 sentence)

The core message should be:
- DETAILED (minimum 6-8 sentences, aim for 200-400 words)
- Publication-ready for press releases and articles
- Newsworthy and engaging for journalists
- Specific about features, benefits, and value proposition
- Clear about target audience and use cases
- Explicit about what makes it unique in the market
- Written in a professional tone suitable for business publications

KEYWORDS REQUIREMENTS:
- EXACTLY {REQUIRED_KEYWORD_COUNT} relevant terms (no more, no less)
- Mix of product features, benefits, industry terms, and target audience descriptors
- Specific enough to be meaningful for SEO
- Include both broad and niche terms
- Include industry-specific terminology

SITE SELECTION REQUIREMENTS:
You must select EXACTLY {REQUIRED_SITE_COUNT} sites from the available options, using only the IDs listed above, based on:
1. **Category Relevance**: Sites whose categories best match the product/service type
2. **Audience Alignment**: Sites that reach the most relevant audience
3. **Content Fit**: Sites most appropriate for this type of content
4. **Domain Authority**: Quality and reputation of the publication sites
5. **Industry Focus**: Sites that focus on the relevant industry or sector

Return ONLY the JSON object, no additional text or formatting.
"""

"""
HTML extraction utilities for the website analysis pipeline.

Turns raw page HTML into ScrapedData: title, meta description, headings,
main body text, images, internal links, JSON-LD and social meta tags.

Pure functions only - no network calls. Running the extractor twice on the
same HTML and base URL gives identical results.
"""

import json
import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment

MAX_BODY_TEXT_LENGTH = 4000
MAX_IMAGES = 10
MAX_LINKS = 20
MIN_HEADING_LENGTH = 3

# Removed before body text is extracted
NOISE_TAGS = ['script', 'style', 'nav', 'header', 'footer']

# Preferred containers for body text, in addition to div.content / div.main
CONTENT_TAGS = ['main', 'article', 'section']
CONTENT_CLASS_PATTERN = re.compile(r'content|main', re.I)

# Social meta tags: (attribute, value) -> output key
SOCIAL_META_TAGS = [
    ('property', 'og:title', 'ogTitle'),
    ('property', 'og:description', 'ogDescription'),
    ('property', 'og:image', 'ogImage'),
    ('name', 'twitter:title', 'twitterTitle'),
    ('name', 'twitter:description', 'twitterDescription'),
]


@dataclass(frozen=True)
class ScrapedData:
    """Structured extraction of one web page."""
    title: str = ''
    meta_description: str = ''
    headings: Tuple[str, ...] = ()
    body_text: str = ''
    images: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()
    structured_data: Tuple = ()
    social_media: Dict[str, str] = field(default_factory=dict)

    def with_extra_text(self, extra_text: str) -> 'ScrapedData':
        """Return a copy with text from secondary pages appended to body_text."""
        if not extra_text:
            return self
        return replace(self, body_text=self.body_text + '\n\n' + extra_text)

    def to_dict(self) -> dict:
        return {
            'title': self.title,
            'metaDescription': self.meta_description,
            'headings': list(self.headings),
            'bodyText': self.body_text,
            'images': list(self.images),
            'links': list(self.links),
            'structuredData': list(self.structured_data),
            'socialMedia': dict(self.social_media),
        }


def _collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text or '').strip()


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or '', 'html.parser')


def extract_title(soup: BeautifulSoup) -> str:
    """Text of the first <title> tag, or '' if there is none."""
    title_tag = soup.find('title')
    if not title_tag:
        return ''
    return title_tag.get_text().strip()


def extract_meta_description(soup: BeautifulSoup) -> str:
    meta = soup.find('meta', attrs={'name': re.compile(r'^description$', re.I)})
    if not meta:
        return ''
    return (meta.get('content') or '').strip()


def extract_headings(soup: BeautifulSoup) -> List[str]:
    """
    All h1-h6 headings in document order.

    Whitespace inside each heading is collapsed; headings shorter than
    MIN_HEADING_LENGTH characters are dropped.
    """
    headings = []
    for tag in soup.find_all(re.compile(r'^h[1-6]$')):
        text = _collapse_whitespace(tag.get_text(' '))
        if len(text) >= MIN_HEADING_LENGTH:
            headings.append(text)
    return headings


def _is_content_element(tag) -> bool:
    if tag.name in CONTENT_TAGS:
        return True
    if tag.name == 'div':
        classes = tag.get('class') or []
        if isinstance(classes, str):
            classes = [classes]
        return bool(CONTENT_CLASS_PATTERN.search(' '.join(classes)))
    return False


def extract_body_text(html: str, max_length: int = MAX_BODY_TEXT_LENGTH) -> str:
    """
    Extract the main readable text of a page.

    1. Drop script, style, nav, header, footer and HTML comments.
    2. Prefer text inside main / article / section and div elements whose
       class mentions "content" or "main". Nested matches are counted once.
    3. Fall back to the whole <body> when no such element has text.
    4. Collapse whitespace and truncate to max_length characters.

    Takes raw HTML (not a soup) because the noise removal mutates the tree.
    """
    soup = _parse(html)

    for element in soup.find_all(NOISE_TAGS):
        element.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    selected = []
    selected_ids = set()
    for element in soup.find_all(_is_content_element):
        if any(id(parent) in selected_ids for parent in element.parents):
            continue
        selected.append(element)
        selected_ids.add(id(element))

    text = '\n'.join(element.get_text(' ') for element in selected)

    if not text.strip():
        container = soup.body or soup
        text = container.get_text(' ')

    return _collapse_whitespace(text)[:max_length]


def extract_images(soup: BeautifulSoup, base_url: str, limit: int = MAX_IMAGES) -> List[str]:
    """Absolute URLs of <img src> attributes, first `limit` only."""
    images = []
    for img in soup.find_all('img', src=True):
        src = img['src'].strip()
        if not src:
            continue
        try:
            images.append(urljoin(base_url, src))
        except ValueError:
            continue
        if len(images) >= limit:
            break
    return images


def extract_links(soup: BeautifulSoup, base_url: str, limit: int = MAX_LINKS) -> List[str]:
    """
    Unique internal links, in first-seen order.

    Only links whose hostname matches the base URL's hostname are kept.
    """
    base_host = urlparse(base_url).hostname
    links = []
    seen = set()

    for anchor in soup.find_all('a', href=True):
        href = anchor['href'].strip()
        if not href:
            continue
        try:
            link = urljoin(base_url, href)
            host = urlparse(link).hostname
        except ValueError:
            continue

        if not host or host != base_host or link in seen:
            continue

        seen.add(link)
        links.append(link)
        if len(links) >= limit:
            break

    return links


def extract_structured_data(soup: BeautifulSoup) -> list:
    """Parse every <script type="application/ld+json"> block. Invalid JSON is skipped."""
    items = []
    scripts = soup.find_all('script', attrs={'type': re.compile(r'^\s*application/ld\+json\s*$', re.I)})
    for script in scripts:
        raw = script.string if script.string is not None else script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            items.append(json.loads(raw))
        except ValueError:
            continue
    return items


def extract_social_meta(soup: BeautifulSoup) -> Dict[str, str]:
    """Open Graph and Twitter card tags. Only tags present on the page are returned."""
    social = {}
    for attr, value, key in SOCIAL_META_TAGS:
        meta = soup.find('meta', attrs={attr: re.compile(r'^' + re.escape(value) + r'$', re.I)})
        if meta and meta.get('content'):
            social[key] = meta['content'].strip()
    return social


def extract_scraped_data(html: str, base_url: str) -> ScrapedData:
    """Build ScrapedData for a page fetched from base_url."""
    soup = _parse(html)

    return ScrapedData(
        title=extract_title(soup),
        meta_description=extract_meta_description(soup),
        headings=tuple(extract_headings(soup)),
        body_text=extract_body_text(html),
        images=tuple(extract_images(soup, base_url)),
        links=tuple(extract_links(soup, base_url)),
        structured_data=tuple(extract_structured_data(soup)),
        social_media=extract_social_meta(soup),
    )


def is_important_page(url: str) -> bool:
    """True for pages likely to describe the product (about, product, home...)."""
    try:
        path = urlparse(url).path.lower()
    except ValueError:
        return False
    return (
        path in ('', '/')
        or 'about' in path
        or 'product' in path
        or 'service' in path
        or 'feature' in path
        or 'home' in path
    )


def select_important_pages(links, limit: int = 3) -> List[str]:
    """First `limit` links that look like about / product / home pages."""
    return [link for link in links if is_important_page(link)][:limit]

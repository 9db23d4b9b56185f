"""
Candidate publication sites, read from the Supabase `publast_sites` table.

The analysis pipeline only reads this table. The full catalog is loaded at
the start of every request, ordered by id.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from supabase import create_client

from .errors import CandidateLoadError

logger = logging.getLogger(__name__)

SITES_TABLE = 'publast_sites'
SITE_COLUMNS = 'id, name, domain, description, category'
NO_SITES_MESSAGE = 'No publication sites available. Please contact support.'


@dataclass(frozen=True)
class PublicationSite:
    """A publication target eligible for selection."""
    id: int
    name: str
    domain: str
    category: str
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> 'PublicationSite':
        return cls(
            id=int(row['id']),
            name=row.get('name') or '',
            domain=row.get('domain') or '',
            category=row.get('category') or '',
            description=row.get('description') or None,
        )


def get_supabase_client(url: str, key: str):
    """Create a Supabase client from project URL and service key."""
    return create_client(url, key)


def load_candidate_sites(client) -> Tuple[Optional[List[PublicationSite]], Optional[CandidateLoadError]]:
    """
    Load every publication site, ordered by id.

    Returns:
        (sites, None) on success, (None, CandidateLoadError) when the
        query fails or returns no rows.
    """
    try:
        resp = client.table(SITES_TABLE).select(SITE_COLUMNS).order('id').execute()
        rows = resp.data or []
        sites = [PublicationSite.from_row(row) for row in rows]
    except Exception as e:
        logger.error("Failed to load publication sites: %s", e)
        return None, CandidateLoadError(NO_SITES_MESSAGE)

    if not sites:
        logger.error("Publication site catalog is empty")
        return None, CandidateLoadError(NO_SITES_MESSAGE)

    return sites, None

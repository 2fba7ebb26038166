"""
Request payload builders

Turns the search filter state into the body of POST /api/search-licitaciones
and validates the parameters of a start request before it is sent.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from indexer_console.core.errors import ValidationFailure
from indexer_console.models.process import INDEXER_TYPES
from indexer_console.models.search import SearchFilterState

logger = logging.getLogger(__name__)

IGNORED_VALUE = 'all'

# Optional string fields, in payload order
TEXT_FIELDS = ('search', 'incluirVencidos', 'soloVigentes', 'objeto', 'agencia', 'pais', 'rubro')
DATE_FIELDS = ('apertura_fr', 'apertura_to')

INPUT_DATE_FORMAT = '%Y-%m-%d'
API_DATE_FORMAT = '%d/%m/%Y'
SINCE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _clean(value: Optional[str]) -> Optional[str]:
    """Trimmed value, or None when empty or the 'all' sentinel"""
    if value is None:
        return None
    value = value.strip()
    if not value or value == IGNORED_VALUE:
        return None
    return value


def format_date_for_api(date_str: str) -> str:
    """
    Convert YYYY-MM-DD to DD/MM/YYYY
    
    Unparseable input is returned unchanged; the server tries both formats.
    """
    try:
        return datetime.strptime(date_str, INPUT_DATE_FORMAT).strftime(API_DATE_FORMAT)
    except ValueError:
        return date_str


def format_date_for_input(date_str: str) -> str:
    """Convert DD/MM/YYYY (or YYYY-MM-DD) to YYYY-MM-DD, unchanged if neither parses"""
    for fmt in (API_DATE_FORMAT, INPUT_DATE_FORMAT):
        try:
            return datetime.strptime(date_str, fmt).strftime(INPUT_DATE_FORMAT)
        except ValueError:
            continue
    return date_str


def parse_tag_ids(text: str) -> List[int]:
    """
    Parse free-text tag input such as "12, 7, abc, 3"
    
    Non-numeric tokens are dropped silently.
    """
    ids = []
    for token in text.split(','):
        token = token.strip()
        try:
            ids.append(int(token))
        except ValueError:
            continue
    return ids


def build_search_payload(filters: SearchFilterState) -> Dict[str, Any]:
    """
    Build the search request body from a filter state
    
    Args:
        filters: Current filter state
        
    Returns:
        dict: Payload with empty, None and 'all' fields left out
    """
    payload: Dict[str, Any] = {
        'page': filters.page,
        'page_size': filters.page_size,
    }
    
    for field in TEXT_FIELDS:
        value = _clean(getattr(filters, field))
        if value is not None:
            payload[field] = value
    
    for field in DATE_FIELDS:
        value = _clean(getattr(filters, field))
        if value is not None:
            payload[field] = format_date_for_api(value)
    
    if filters.user_tag_ids:
        payload['user_tag_ids'] = list(filters.user_tag_ids)
    
    filter_mode = _clean(filters.filter_mode)
    if filter_mode is not None:
        payload['filter_mode'] = filter_mode
    
    return payload


def format_since(value: str) -> str:
    """
    Convert a datetime-local value (2024-01-15T10:00) to YYYY-MM-DD HH:MM:SS
    
    The wall-clock time is kept as entered, no timezone conversion.
    
    Raises:
        ValidationFailure: Empty or unparseable value
    """
    if not value or not value.strip():
        raise ValidationFailure("Please select a date")
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationFailure(f"Invalid date: {value}")
    return parsed.strftime(SINCE_FORMAT)


def _parse_id(value: Any, label: str) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationFailure(f"Please enter a valid {label} ID")


def build_start_params(type: str, publicacion_id: Any = None, scraper_id: Any = None,
                       since: Optional[str] = None) -> Dict[str, Any]:
    """
    Validate and build the params of a start request for the given indexer type
    
    Args:
        type: Indexer type
        publicacion_id: Publication ID (index-licitacion)
        scraper_id: Scraper ID (index-scraper-publications)
        since: datetime-local string (index-scraper-publications, sync-since)
        
    Returns:
        dict: Params for StartIndexerRequest
        
    Raises:
        ValidationFailure: Unknown type or missing/invalid field
    """
    if type not in INDEXER_TYPES:
        raise ValidationFailure(f"Invalid indexer type. Must be one of: {list(INDEXER_TYPES)}")
    
    params: Dict[str, Any] = {}
    if type == 'index-licitacion':
        params['publicacion_id'] = _parse_id(publicacion_id, 'publication')
    elif type == 'index-scraper-publications':
        params['scraper_id'] = _parse_id(scraper_id, 'scraper')
        params['since'] = format_since(since or '')
    elif type == 'sync-since':
        params['since'] = format_since(since or '')
    # index-bulk takes no params
    
    return params

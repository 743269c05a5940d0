"""
DataForSEO API client.

Thin wrappers around the DataForSEO v3 REST endpoints used by the dashboard.
Every endpoint takes a JSON array of tasks and answers with a
``tasks[].result[]`` envelope; status_code 20000 means success.

Required env vars:
    DATAFORSEO_LOGIN      account login (email)
    DATAFORSEO_PASSWORD   API password
"""
import os
import base64
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.dataforseo.com/v3'
DEFAULT_TIMEOUT = 60
DEFAULT_LOCATION_CODE = 2840  # United States
DEFAULT_LANGUAGE_CODE = 'en'
SUCCESS_CODE = 20000


class DataForSEOError(Exception):
    """Raised when a DataForSEO request fails."""


class DataForSEOCredentialsError(DataForSEOError):
    """Raised when credentials are not configured."""


def credentials_configured() -> bool:
    return bool(os.getenv('DATAFORSEO_LOGIN') and os.getenv('DATAFORSEO_PASSWORD'))


def _auth_header() -> str:
    login = os.getenv('DATAFORSEO_LOGIN')
    password = os.getenv('DATAFORSEO_PASSWORD')
    if not login or not password:
        raise DataForSEOCredentialsError(
            "DataForSEO credentials not found. Please set DATAFORSEO_LOGIN and "
            "DATAFORSEO_PASSWORD in your .env file"
        )
    token = base64.b64encode(f"{login}:{password}".encode()).decode()
    return f"Basic {token}"


def _timeout() -> float:
    try:
        return float(os.getenv('DATAFORSEO_TIMEOUT', DEFAULT_TIMEOUT))
    except ValueError:
        return DEFAULT_TIMEOUT


def dataforseo_request(endpoint: str, payload: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    POST a task array to a DataForSEO endpoint.

    Args:
        endpoint: Path below the API root, e.g. 'backlinks/summary/live'
        payload: List of task dicts

    Returns:
        Decoded JSON response

    Raises:
        DataForSEOCredentialsError: credentials missing
        DataForSEOError: transport failure, non-2xx status or API-level error
    """
    base_url = os.getenv('DATAFORSEO_API_URL', DEFAULT_API_URL).rstrip('/')
    headers = {
        'Authorization': _auth_header(),
        'Content-Type': 'application/json',
    }

    try:
        response = requests.post(
            f"{base_url}/{endpoint}",
            headers=headers,
            json=payload,
            timeout=_timeout()
        )
    except requests.RequestException as e:
        raise DataForSEOError(f"Request to {endpoint} failed: {e}") from e

    if not response.ok:
        raise DataForSEOError(
            f"API Error: {response.status_code} {response.reason} - {response.text}"
        )

    try:
        data = response.json()
    except ValueError as e:
        raise DataForSEOError(f"Invalid JSON from {endpoint}") from e

    if data.get('status_code') != SUCCESS_CODE:
        raise DataForSEOError(data.get('status_message') or 'DataForSEO API request failed')

    return data


def first_result(response: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return tasks[0].result[0] of a response, or None if any level is missing."""
    if not response:
        return None
    tasks = response.get('tasks') or []
    if not tasks or not tasks[0]:
        return None
    results = tasks[0].get('result') or []
    if not results:
        return None
    return results[0]


# =============================================================================
# BACKLINKS
# =============================================================================

def get_backlinks_summary(target: str, include_subdomains: bool = True) -> Dict[str, Any]:
    """Backlink totals, referring domains and domain rank for a target."""
    logger.info(f"Fetching backlinks summary for {target}")
    return dataforseo_request('backlinks/summary/live', [{
        'target': target,
        'include_subdomains': include_subdomains
    }])


# =============================================================================
# DATAFORSEO LABS
# =============================================================================

def get_ranked_keywords(target: str, limit: int = 15) -> Dict[str, Any]:
    """Organic keywords the target ranks for, best position first."""
    logger.info(f"Fetching ranked keywords for {target}")
    return dataforseo_request('dataforseo_labs/google/ranked_keywords/live', [{
        'target': target,
        'limit': limit,
        'load_rank_absolute': True,
        'item_types': ['organic'],
        'order_by': ['ranked_serp_element.serp_item.rank_absolute,asc']
    }])


def get_domain_rank_overview(target: str) -> Dict[str, Any]:
    """Organic and paid ranking distribution and estimated traffic."""
    logger.info(f"Fetching domain rank overview for {target}")
    return dataforseo_request('dataforseo_labs/google/domain_rank_overview/live', [{
        'target': target
    }])


def get_keyword_suggestions(
    keyword: str,
    location_code: int = DEFAULT_LOCATION_CODE,
    language_code: str = DEFAULT_LANGUAGE_CODE,
    limit: int = 50
) -> Dict[str, Any]:
    """
    Keyword suggestions containing the seed keyword.

    The seed keyword's own metrics come back in `seed_keyword_data`.
    """
    logger.info(f"Fetching keyword suggestions for '{keyword}' ({location_code}/{language_code})")
    return dataforseo_request('dataforseo_labs/google/keyword_suggestions/live', [{
        'keyword': keyword,
        'location_code': location_code,
        'language_code': language_code,
        'include_seed_keyword': True,
        'include_serp_info': True,
        'limit': limit
    }])


# =============================================================================
# SERP: GOOGLE ADS TRANSPARENCY
# =============================================================================

def get_ads_by_domain(target: str, location_code: int = DEFAULT_LOCATION_CODE) -> Dict[str, Any]:
    """Ad creatives shown for a domain, one item per creative."""
    logger.info(f"Fetching ads for domain {target}")
    return dataforseo_request('serp/google/ads_search/live/advanced', [{
        'target': target,
        'location_code': location_code,
        'platform': 'all'
    }])


def get_ads_advertisers(keyword: str, location_code: int = DEFAULT_LOCATION_CODE) -> Dict[str, Any]:
    """Advertisers matching a keyword, with approximate ad counts."""
    logger.info(f"Fetching advertisers for '{keyword}'")
    return dataforseo_request('serp/google/ads_advertisers/live/advanced', [{
        'keyword': keyword,
        'location_code': location_code
    }])

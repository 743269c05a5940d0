"""
Research workflows shared by the API routes and the CLI.

Each workflow calls DataForSEO sequentially and hands the raw results to the
normalizers in api.utils.
"""
import logging
from typing import Any, Dict, Optional

from api.dataforseo_client import (
    DataForSEOError,
    DEFAULT_LANGUAGE_CODE,
    DEFAULT_LOCATION_CODE,
    first_result,
    get_backlinks_summary,
    get_ranked_keywords,
    get_domain_rank_overview,
    get_keyword_suggestions,
    get_ads_by_domain,
    get_ads_advertisers
)
from api.utils import (
    build_domain_analytics,
    build_keyword_research,
    clean_domain,
    group_ads_by_advertiser,
    normalize_advertisers,
    top_advertisers
)

logger = logging.getLogger(__name__)

SEARCH_TYPES = ('domain', 'keyword')


def _result_or_none(label: str, fetch, *args, **kwargs) -> Optional[Dict[str, Any]]:
    """Run one provider call; log and swallow provider errors."""
    try:
        return first_result(fetch(*args, **kwargs))
    except DataForSEOError as e:
        logger.error(f"{label} error: {e}")
        return None


def run_domain_analytics(domain: str, include_subdomains: bool = True) -> Dict[str, Any]:
    """
    Backlinks, ranked keywords and rank overview for a domain, merged.

    A failing call contributes nothing; the summary is built from whatever
    succeeded.
    """
    target = clean_domain(domain)
    logger.info(f"Fetching analytics for: {target}")

    # Backlinks + domain rank first (more reliable for new domains)
    backlinks = _result_or_none('Backlinks', get_backlinks_summary, target, include_subdomains=include_subdomains)
    keywords = _result_or_none('Keywords', get_ranked_keywords, target, limit=15)
    # Only established domains have a rank overview
    rank_overview = _result_or_none('Domain rank', get_domain_rank_overview, target)

    analytics = build_domain_analytics(backlinks, keywords, rank_overview)

    logger.info(f"Data available: {analytics['dataAvailable']}")
    logger.info(f"Has keywords: {len(analytics['topKeywords'])}")
    logger.info(f"Has backlinks: {analytics['backlinks']['total'] > 0}")
    return analytics


def run_keyword_research(
    keyword: str,
    location_code: int = DEFAULT_LOCATION_CODE,
    language_code: str = DEFAULT_LANGUAGE_CODE,
    limit: int = 50
) -> Dict[str, Any]:
    """Seed keyword plus suggestions with insights. Provider errors propagate."""
    keyword = keyword.strip()
    logger.info(f"Keyword research for: {keyword}")

    response = get_keyword_suggestions(keyword, location_code, language_code, limit)
    result = build_keyword_research(first_result(response), keyword)

    logger.info(f"Returning {result['totalResults']} total keywords")
    return result


def no_ads_message(query: str, search_type: str) -> str:
    if search_type == 'domain':
        hint = ('This domain may not be running Google Ads campaigns. '
                'Try popular domains like nike.com, amazon.com, or shopify.com.')
    else:
        hint = 'Try using domain search instead.'
    return f'No ads found for "{query}". {hint}'


def run_paid_ads(query: str, search_type: str = 'domain',
                 location_code: int = DEFAULT_LOCATION_CODE) -> Dict[str, Any]:
    """
    Ads grouped by advertiser for a domain, or advertisers for a keyword.
    Provider errors propagate.
    """
    if search_type not in SEARCH_TYPES:
        raise ValueError(f"Unknown search type: {search_type}")

    query = query.strip()
    logger.info(f"Paid ads research ({search_type}) for: {query}")

    if search_type == 'domain':
        target = clean_domain(query)
        result = first_result(get_ads_by_domain(target, location_code)) or {}
        ads = group_ads_by_advertiser(result.get('items') or [], domain=target)
    else:
        result = first_result(get_ads_advertisers(query, location_code)) or {}
        ads = normalize_advertisers(result.get('items') or [])

    response = {
        'query': query,
        'searchType': search_type,
        'ads': ads,
        'totalAds': sum(ad['adCount'] for ad in ads),
        'topAdvertisers': top_advertisers(ads)
    }
    if not ads:
        response['message'] = no_ads_message(query, search_type)

    logger.info(f"Returning {len(ads)} advertisers")
    return response

import random
import re
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

NO_DATA_MESSAGE = (
    "This domain is either new, private, or has no indexed pages in Google. "
    "DataForSEO only tracks domains with search visibility."
)

TREND_MONTHS = 6
TOP_KEYWORDS_LIMIT = 10
OPPORTUNITY_MAX_DIFFICULTY = 40
OPPORTUNITY_MIN_VOLUME = 1000
SCATTER_LIMIT = 50


def _truncate(text: str, length: int) -> str:
    return f"{text[:length]}..." if len(text) > length else text


# =============================================================================
# DOMAIN ANALYTICS
# =============================================================================

def clean_domain(raw: str) -> str:
    """Strip scheme, leading www. and a trailing slash from user input."""
    domain = (raw or '').strip()
    domain = re.sub(r'^https?://', '', domain)
    domain = re.sub(r'^www\.', '', domain)
    domain = re.sub(r'/$', '', domain)
    return domain


def build_traffic_trend(etv: float, now: datetime = None, rng=None) -> List[Dict[str, Any]]:
    """
    Six monthly points ending with the current month.

    The provider calls used here return no history, so each point is the
    current estimated traffic scaled by a random factor in [0.7, 1.3].
    """
    now = now or datetime.now()
    rng = rng or random
    base = etv or 0

    trend = []
    for i in range(TREND_MONTHS):
        month_index = (now.month - 1 - (TREND_MONTHS - 1 - i)) % 12
        trend.append({
            'month': MONTHS[month_index],
            'traffic': int(round(base * (0.7 + rng.random() * 0.6)))
        })
    return trend


def build_top_keywords(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    top = []
    for item in items[:TOP_KEYWORDS_LIMIT]:
        keyword_data = item.get('keyword_data') or {}
        if not keyword_data.get('keyword'):
            continue
        serp_item = (item.get('ranked_serp_element') or {}).get('serp_item') or {}
        keyword_info = keyword_data.get('keyword_info') or {}
        top.append({
            'keyword': keyword_data['keyword'],
            'position': serp_item.get('rank_absolute') or serp_item.get('rank_group') or 0,
            'searchVolume': keyword_info.get('search_volume') or 0,
            'url': serp_item.get('url') or '#'
        })
    return top


def build_domain_analytics(
    backlinks: Optional[Dict[str, Any]],
    keywords: Optional[Dict[str, Any]],
    rank_overview: Optional[Dict[str, Any]],
    now: datetime = None,
    rng=None
) -> Dict[str, Any]:
    """
    Merge the backlinks summary, ranked keywords and rank overview results
    into one domain summary.

    Each argument is the first task result of its call, or None when the
    call failed. Absent fields default to zero or empty.
    """
    backlinks = backlinks or {}
    keyword_items = (keywords or {}).get('items') or []

    overview_items = (rank_overview or {}).get('items') or []
    organic = {}
    if overview_items:
        organic = ((overview_items[0] or {}).get('metrics') or {}).get('organic') or {}

    # Backlink attributes heuristic
    attributes = backlinks.get('referring_links_attributes') or {}
    referring_pages = backlinks.get('referring_pages') or 0
    nofollow = (attributes.get('noopener') or 0) + (attributes.get('noreferrer') or 0)
    dofollow = max(0, referring_pages - nofollow)

    has_backlink_data = (backlinks.get('backlinks') or 0) > 0
    has_keyword_data = len(keyword_items) > 0
    has_rank_data = (organic.get('count') or 0) > 0

    result = {
        'domainRank': backlinks.get('rank') or 0,
        'organicTraffic': int(round(organic.get('etv') or 0)),
        'organicKeywords': organic.get('count') or 0,
        'backlinks': {
            'total': backlinks.get('backlinks') or 0,
            'referringDomains': backlinks.get('referring_domains') or 0,
            'newBacklinks': organic.get('is_new') or 0,
            'lostBacklinks': organic.get('is_lost') or 0,
            'dofollow': dofollow,
            'nofollow': nofollow
        },
        'topKeywords': build_top_keywords(keyword_items),
        'trafficTrend': build_traffic_trend(organic.get('etv') or 0, now=now, rng=rng),
        'dataAvailable': has_backlink_data or has_keyword_data or has_rank_data
    }
    if not has_backlink_data and not has_keyword_data:
        result['message'] = NO_DATA_MESSAGE
    return result


def backlinks_distribution(analytics: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Dofollow/nofollow slices, omitting empty ones."""
    backlinks = analytics.get('backlinks') or {}
    slices = []
    if backlinks.get('dofollow', 0) > 0:
        slices.append({'name': 'Dofollow', 'value': backlinks['dofollow']})
    if backlinks.get('nofollow', 0) > 0:
        slices.append({'name': 'Nofollow', 'value': backlinks['nofollow']})
    return slices


# =============================================================================
# KEYWORD RESEARCH
# =============================================================================

def format_month(year: int, month: int) -> str:
    return f"{MONTHS[month - 1]} {year}"


def _monthly_searches(keyword_info: Dict[str, Any]) -> List[Dict[str, Any]]:
    searches = [
        ms for ms in keyword_info.get('monthly_searches') or []
        if ms and ms.get('year') and isinstance(ms.get('month'), int) and 1 <= ms['month'] <= 12
    ]
    return [
        {'month': format_month(ms['year'], ms['month']), 'volume': ms.get('search_volume') or 0}
        for ms in searches[-12:]
    ]


def normalize_keyword(item: Dict[str, Any], is_seed: bool, fallback_keyword: str = '') -> Dict[str, Any]:
    """Flatten one keyword_suggestions item (or the seed data) into a row."""
    keyword_info = item.get('keyword_info') or {}
    properties = item.get('keyword_properties') or {}
    return {
        'keyword': item.get('keyword') or fallback_keyword,
        'searchVolume': keyword_info.get('search_volume') or 0,
        'keywordDifficulty': properties.get('keyword_difficulty') or 0,
        'cpc': keyword_info.get('cpc') or 0,
        'competition': keyword_info.get('competition_level') or 'Unknown',
        'competitionValue': keyword_info.get('competition') or 0,
        'monthlySearches': _monthly_searches(keyword_info),
        'isSeed': is_seed
    }


def competition_text(level: str, value: float) -> str:
    """Provider competition level, or one derived from the 0-1 value."""
    if level and level != 'Unknown':
        return level
    if value >= 0.7:
        return 'HIGH'
    if value >= 0.4:
        return 'MEDIUM'
    return 'LOW'


def keyword_insights(keywords: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Aggregates for the keyword dashboard: averages, top keywords by volume,
    difficulty buckets, quick-win opportunities and a volume/CPC scatter.
    """
    count = len(keywords)
    if count:
        averages = {
            'searchVolume': int(round(sum(k['searchVolume'] for k in keywords) / count)),
            'keywordDifficulty': int(round(sum(k['keywordDifficulty'] for k in keywords) / count)),
            'cpc': sum(k['cpc'] for k in keywords) / count
        }
    else:
        averages = {'searchVolume': 0, 'keywordDifficulty': 0, 'cpc': 0}

    by_volume = sorted(keywords, key=lambda k: k['searchVolume'], reverse=True)

    top_by_volume = [
        {
            'keyword': _truncate(k['keyword'], 25),
            'fullKeyword': k['keyword'],
            'volume': k['searchVolume']
        }
        for k in by_volume[:TOP_KEYWORDS_LIMIT]
    ]

    difficulty_distribution = [
        {
            'range': 'Easy (0-30)',
            'count': len([k for k in keywords if k['keywordDifficulty'] <= 30])
        },
        {
            'range': 'Medium (31-60)',
            'count': len([k for k in keywords if 30 < k['keywordDifficulty'] <= 60])
        },
        {
            'range': 'Hard (61-100)',
            'count': len([k for k in keywords if k['keywordDifficulty'] > 60])
        }
    ]

    # Low difficulty + high volume
    opportunities = [
        k for k in by_volume
        if k['keywordDifficulty'] < OPPORTUNITY_MAX_DIFFICULTY and k['searchVolume'] > OPPORTUNITY_MIN_VOLUME
    ][:TOP_KEYWORDS_LIMIT]

    volume_vs_cpc = [
        {
            'volume': k['searchVolume'],
            'cpc': k['cpc'],
            'keyword': k['keyword'],
            'difficulty': k['keywordDifficulty']
        }
        for k in keywords if k['searchVolume'] > 0 and k['cpc'] > 0
    ][:SCATTER_LIMIT]

    return {
        'averages': averages,
        'topByVolume': top_by_volume,
        'difficultyDistribution': difficulty_distribution,
        'opportunities': opportunities,
        'volumeVsCpc': volume_vs_cpc
    }


def build_keyword_research(result: Optional[Dict[str, Any]], keyword: str) -> Dict[str, Any]:
    """Seed keyword first, then suggestions in provider order."""
    result = result or {}
    items = result.get('items') or []
    seed_data = result.get('seed_keyword_data')

    keywords = []
    if seed_data:
        keywords.append(normalize_keyword(seed_data, True, fallback_keyword=keyword))
    for item in items:
        keywords.append(normalize_keyword(item, False))

    return {
        'keywords': keywords,
        'seedKeyword': result.get('seed_keyword') or keyword,
        'totalResults': len(keywords),
        'insights': keyword_insights(keywords)
    }


# =============================================================================
# PAID ADS
# =============================================================================

def extract_domain(url: str) -> str:
    """Bare host of a URL, without www."""
    if not url:
        return ''
    if not url.startswith('http'):
        return url.split('/')[0]
    try:
        return re.sub(r'^www\.', '', urlparse(url).hostname)
    except (TypeError, ValueError):
        return url.split('/')[0]


def group_ads_by_advertiser(items: List[Dict[str, Any]], domain: str = '') -> List[Dict[str, Any]]:
    """
    Collapse ad creatives into one entry per advertiser_id.

    Entries keep first-seen order; adCount is the number of creatives,
    firstShown/lastShown span all of them.
    """
    groups = {}
    for item in items or []:
        if not item or item.get('type') != 'ads_search':
            continue
        advertiser_id = item.get('advertiser_id') or ''
        first_shown = item.get('first_shown') or ''
        last_shown = item.get('last_shown') or ''

        group = groups.get(advertiser_id)
        if group is None:
            preview = item.get('preview_image') or {}
            display_url = item.get('preview_url') or item.get('url') or ''
            group = {
                'advertiser': item.get('title') or 'Unknown advertiser',
                'advertiserId': advertiser_id,
                'domain': domain or extract_domain(display_url),
                'title': item.get('title') or '',
                'description': item.get('description') or '',
                'displayUrl': display_url,
                'isVerified': bool(item.get('verified')),
                'adCount': 0,
                'format': item.get('format') or 'unknown',
                'firstShown': first_shown,
                'lastShown': last_shown
            }
            if preview.get('url'):
                group['previewImage'] = preview['url']
            groups[advertiser_id] = group

        group['adCount'] += 1
        group['isVerified'] = group['isVerified'] or bool(item.get('verified'))
        if first_shown and (not group['firstShown'] or first_shown < group['firstShown']):
            group['firstShown'] = first_shown
        if last_shown and last_shown > group['lastShown']:
            group['lastShown'] = last_shown

    return list(groups.values())


def normalize_advertisers(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """One entry per advertiser returned for a keyword search."""
    ads = []
    for item in items or []:
        if not item or item.get('type') != 'ads_advertiser':
            continue
        ads.append({
            'advertiser': item.get('title') or 'Unknown advertiser',
            'advertiserId': item.get('advertiser_id') or '',
            'domain': '',
            'title': item.get('title') or '',
            'description': item.get('location') or '',
            'displayUrl': '',
            'isVerified': bool(item.get('verified')),
            'adCount': item.get('approx_ads_count') or 0,
            'format': 'mixed',
            'firstShown': '',
            'lastShown': ''
        })
    return ads


def top_advertisers(ads: List[Dict[str, Any]], n: int = 10) -> List[Dict[str, Any]]:
    ranked = sorted(ads, key=lambda ad: ad['adCount'], reverse=True)[:n]
    return [
        {
            'name': _truncate(ad['advertiser'], 20),
            'fullName': ad['advertiser'],
            'ads': ad['adCount']
        }
        for ad in ranked
    ]


# =============================================================================
# FORMATTING
# =============================================================================

def format_number(num) -> str:
    if num is None:
        return 'N/A'
    if num >= 1000000:
        return f"{num / 1000000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return f"{num:,}"


def format_currency(num) -> str:
    if num is None:
        return 'N/A'
    return f"${num:.2f}"


def format_percent(num) -> str:
    if num is None:
        return 'N/A'
    return f"{num * 100:.1f}%"

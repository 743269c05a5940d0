#!/usr/bin/env python3
"""
Execution Script: Run SEO Research

Usage:
    python execution/run_research.py domain example.com [--no-subdomains] [--json-only]
    python execution/run_research.py keyword "project management" --location 2840 --language en --limit 50 [--json-only]
    python execution/run_research.py ads asana.com [--type keyword] [--location 2840] [--json-only]

This script:
1. Calls DataForSEO for the requested research
2. Normalizes the response the same way the API does
3. Prints a short summary and the full JSON result
"""
import os
import sys
import time
import argparse
import json

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from api.dataforseo_client import DataForSEOError, DEFAULT_LANGUAGE_CODE, DEFAULT_LOCATION_CODE
from api.research import run_domain_analytics, run_keyword_research, run_paid_ads
from api.utils import (
    backlinks_distribution,
    competition_text,
    format_currency,
    format_number,
    format_percent
)


def log(msg: str):
    """Print with timestamp."""
    print(f"[{time.strftime('%H:%M:%S')}] {msg}")


def summarize_domain(result: dict):
    if not result['dataAvailable']:
        log(f"⚠ {result.get('message', 'No data available')}")
        return
    backlinks = result['backlinks']
    log(f"✓ Domain rank: {result['domainRank']}")
    log(f"  Organic traffic: {format_number(result['organicTraffic'])}")
    log(f"  Organic keywords: {format_number(result['organicKeywords'])}")
    log(f"  Backlinks: {format_number(backlinks['total'])} from "
        f"{format_number(backlinks['referringDomains'])} domains")
    for slice_ in backlinks_distribution(result):
        log(f"  {slice_['name']}: {format_number(slice_['value'])}")
    for kw in result['topKeywords']:
        log(f"  #{kw['position']:<3} {kw['keyword']} ({format_number(kw['searchVolume'])})")


def summarize_keywords(result: dict):
    insights = result['insights']
    averages = insights['averages']
    log(f"✓ {result['totalResults']} keywords for '{result['seedKeyword']}'")
    log(f"  Avg volume: {format_number(averages['searchVolume'])}")
    log(f"  Avg difficulty: {averages['keywordDifficulty']}")
    log(f"  Avg CPC: {format_currency(averages['cpc'])}")
    for bucket in insights['difficultyDistribution']:
        log(f"  {bucket['range']}: {bucket['count']}")
    if insights['opportunities']:
        log(f"  Quick wins ({len(insights['opportunities'])}):")
        for kw in insights['opportunities']:
            level = competition_text(kw['competition'], kw['competitionValue'])
            log(f"    {kw['keyword']} - {format_number(kw['searchVolume'])} / KD {kw['keywordDifficulty']} / {level} ({format_percent(kw['competitionValue'])})")


def summarize_ads(result: dict):
    if result.get('message'):
        log(f"⚠ {result['message']}")
        return
    log(f"✓ {len(result['ads'])} advertisers, {result['totalAds']} ads")
    for adv in result['topAdvertisers']:
        log(f"  {adv['fullName']}: {adv['ads']}")


def main(argv=None):
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--json-only', action='store_true', help='Print only the JSON result')

    parser = argparse.ArgumentParser(description='Run SEO research against DataForSEO')
    sub = parser.add_subparsers(dest='command', required=True)

    domain_parser = sub.add_parser('domain', parents=[common], help='Domain analytics')
    domain_parser.add_argument('domain', help='Domain to analyze')
    domain_parser.add_argument('--no-subdomains', action='store_true', help='Exclude subdomains from backlinks')

    keyword_parser = sub.add_parser('keyword', parents=[common], help='Keyword research')
    keyword_parser.add_argument('keyword', help='Seed keyword')
    keyword_parser.add_argument('--location', type=int, default=DEFAULT_LOCATION_CODE, help='Location code')
    keyword_parser.add_argument('--language', default=DEFAULT_LANGUAGE_CODE, help='Language code')
    keyword_parser.add_argument('--limit', type=int, default=50, help='Max suggestions')

    ads_parser = sub.add_parser('ads', parents=[common], help='Paid ads research')
    ads_parser.add_argument('query', help='Domain or keyword')
    ads_parser.add_argument('--type', choices=['domain', 'keyword'], default='domain', help='Search type')
    ads_parser.add_argument('--location', type=int, default=DEFAULT_LOCATION_CODE, help='Location code')

    args = parser.parse_args(argv)

    try:
        if args.command == 'domain':
            result = run_domain_analytics(args.domain, include_subdomains=not args.no_subdomains)
            summary = summarize_domain
        elif args.command == 'keyword':
            result = run_keyword_research(args.keyword, args.location, args.language, args.limit)
            summary = summarize_keywords
        else:
            result = run_paid_ads(args.query, args.type, args.location)
            summary = summarize_ads
    except DataForSEOError as e:
        log(f"❌ {e}")
        sys.exit(1)

    if not args.json_only:
        summary(result)
        print("\n" + "=" * 50)
        print("RESULT")
        print("=" * 50)
    print(json.dumps(result, indent=2))


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""
SEO Insights - Main API
Flask application serving keyword research, domain analytics and paid ads
research backed by DataForSEO.
"""
import os
import logging
from flask import Flask, jsonify, request
from flask_cors import CORS
from dotenv import load_dotenv
from api.dataforseo_client import (
    DataForSEOError,
    DEFAULT_LANGUAGE_CODE,
    DEFAULT_LOCATION_CODE,
    credentials_configured
)
from api.research import (
    SEARCH_TYPES,
    run_domain_analytics,
    run_keyword_research,
    run_paid_ads
)

# Load environment variables
load_dotenv()

# Setup logging
logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize Flask
app = Flask(__name__)
app.secret_key = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key')
CORS(app)

MAX_KEYWORD_LIMIT = 1000


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _int_field(data: dict, key: str, default: int):
    """Integer from the body, or None if it cannot be parsed."""
    value = data.get(key, default)
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

# =============================================================================
# HEALTH CHECK
# =============================================================================

@app.route('/ping')
def ping():
    """Health check endpoint."""
    return jsonify({
        'status': 'ok',
        'message': 'SEO Insights API',
        'dataforseo_configured': credentials_configured()
    })

# =============================================================================
# DOMAIN ANALYTICS
# =============================================================================

@app.route('/api/domain-analytics', methods=['POST'])
def domain_analytics():
    """Backlinks, rankings and traffic summary for a domain."""
    data = _json_body()
    domain = data.get('domain')
    include_subdomains = data.get('includeSubdomains', True)

    if not domain or not isinstance(domain, str) or not domain.strip():
        return jsonify({'error': 'Domain is required'}), 400

    if not isinstance(include_subdomains, bool):
        return jsonify({'error': 'includeSubdomains must be a boolean'}), 400

    try:
        result = run_domain_analytics(domain, include_subdomains=include_subdomains)
        return jsonify(result)
    except Exception as e:
        logger.error(f"Domain analytics error: {e}")
        return jsonify({
            'error': str(e) or 'Failed to fetch domain data',
            'dataAvailable': False
        }), 500

# =============================================================================
# KEYWORD RESEARCH
# =============================================================================

@app.route('/api/keyword-research', methods=['POST'])
def keyword_research():
    """Keyword suggestions with volume, difficulty and CPC."""
    data = _json_body()
    keyword = data.get('keyword')

    if not keyword or not isinstance(keyword, str) or not keyword.strip():
        return jsonify({'error': 'Keyword is required'}), 400

    location_code = _int_field(data, 'locationCode', DEFAULT_LOCATION_CODE)
    if location_code is None:
        return jsonify({'error': 'locationCode must be an integer'}), 400

    limit = _int_field(data, 'limit', 50)
    if limit is None or not 1 <= limit <= MAX_KEYWORD_LIMIT:
        return jsonify({'error': f'limit must be an integer between 1 and {MAX_KEYWORD_LIMIT}'}), 400

    language_code = data.get('languageCode') or DEFAULT_LANGUAGE_CODE

    try:
        result = run_keyword_research(keyword, location_code, language_code, limit)
        return jsonify(result)
    except DataForSEOError as e:
        logger.error(f"Keyword research error: {e}")
        return jsonify({'error': str(e)}), 500
    except Exception as e:
        logger.error(f"Keyword research error: {e}")
        return jsonify({'error': 'Failed to fetch keyword data'}), 500

# =============================================================================
# PAID ADS
# =============================================================================

@app.route('/api/paid-ads', methods=['POST'])
def paid_ads():
    """Advertisers and ad creatives for a domain or keyword."""
    data = _json_body()
    query = data.get('query')
    search_type = data.get('searchType', 'domain')

    if not query or not isinstance(query, str) or not query.strip():
        return jsonify({'error': 'Query is required'}), 400

    if search_type not in SEARCH_TYPES:
        return jsonify({'error': f"searchType must be one of: {', '.join(SEARCH_TYPES)}"}), 400

    location_code = _int_field(data, 'locationCode', DEFAULT_LOCATION_CODE)
    if location_code is None:
        return jsonify({'error': 'locationCode must be an integer'}), 400

    try:
        result = run_paid_ads(query, search_type, location_code)
        return jsonify(result)
    except DataForSEOError as e:
        logger.error(f"Paid ads error: {e}")
        return jsonify({'error': str(e)}), 500
    except Exception as e:
        logger.error(f"Paid ads error: {e}")
        return jsonify({'error': 'Failed to fetch ads data'}), 500


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    port = int(os.getenv('PORT', 3000))
    app.run(host='0.0.0.0', port=port, debug=True)

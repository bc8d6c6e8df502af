#!/usr/bin/env python3
"""
Flask Web Application for the industrial parts search service
"""

import logging
import time
from datetime import datetime, timezone

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from catalog_strategies import default_strategies
from config import Config
from part_search import PartSearchOrchestrator, clean_query

# Configure logging
logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
                    format='%(asctime)s %(levelname)s %(name)s: %(message)s')
logger = logging.getLogger(__name__)

START_TIME = time.time()
SEARCH_EXAMPLE = '/api/search?q=6203%20bearing'
FEATURES = ['Multi-method scraping', 'Rendered fallback', 'McMaster-Carr', 'Fastenal', 'Smart samples']


def _timestamp():
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _parse_limit(raw, config):
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return config.DEFAULT_MAX_RESULTS
    return max(1, min(limit, config.MAX_RESULTS_LIMIT))


def create_app(config=Config, orchestrator_factory=None):
    """Build the Flask app; orchestrator_factory is called once per search request"""
    app = Flask(__name__)
    app.config['RATELIMIT_ENABLED'] = config.RATELIMIT_ENABLED
    app.config['RATELIMIT_STORAGE_URI'] = config.RATELIMIT_STORAGE_URI

    if orchestrator_factory is None:
        def orchestrator_factory():
            return PartSearchOrchestrator(default_strategies(config))

    CORS(app,
         origins=config.CORS_ORIGINS + config.CORS_ORIGIN_PATTERNS,
         methods=['GET', 'OPTIONS'],
         allow_headers=['Content-Type', 'Accept'],
         supports_credentials=True)

    limiter = Limiter(get_remote_address, app=app, storage_uri=config.RATELIMIT_STORAGE_URI)
    api_limit = limiter.shared_limit(config.RATE_LIMIT, scope='api')

    @app.errorhandler(429)
    def ratelimit_handler(e):
        return jsonify({'error': 'Too many requests, please try again later'}), 429

    @app.errorhandler(Exception)
    def unhandled_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception(f"❌ Unhandled error: {e}")
        return jsonify({
            'error': 'Internal server error',
            'message': str(e),
            'timestamp': _timestamp()
        }), 500

    @app.route('/api/search', methods=['GET'])
    @api_limit
    def search():
        """Search the supplier catalogs for parts matching q"""
        query = (request.args.get('q') or '').strip()

        if len(query) < config.MIN_QUERY_LENGTH:
            return jsonify({
                'error': f'Query parameter must be at least {config.MIN_QUERY_LENGTH} characters',
                'example': SEARCH_EXAMPLE
            }), 400

        limit = _parse_limit(request.args.get('limit'), config)
        logger.info(f"🔍 API Search request: \"{query}\" (limit {limit})")

        try:
            orchestrator = orchestrator_factory()
            outcome = orchestrator.search(query, limit)

            # Give the catalogs one more chance with a cleaned-up query before settling for samples
            if outcome.synthetic:
                cleaned = clean_query(query)
                if len(cleaned) >= config.MIN_QUERY_LENGTH and cleaned != query:
                    logger.info(f"🔄 Retrying with cleaned query: \"{cleaned}\"")
                    retry = orchestrator.search(cleaned, limit)
                    if retry.is_live:
                        outcome = retry

            results = [record.to_dict() for record in outcome.records]
            return jsonify({
                'results': results,
                'query': query,
                'resultCount': len(results),
                'timestamp': _timestamp(),
                'source': results[0]['supplier'] if results else 'Multiple',
                'strategy': outcome.strategy,
                'synthetic': outcome.synthetic,
                'methods': orchestrator.method_names
            })

        except Exception as e:
            logger.exception(f"❌ Search API error: {e}")
            return jsonify({
                'error': 'Search failed',
                'message': str(e),
                'query': query,
                'timestamp': _timestamp()
            }), 500

    @app.route('/api/health', methods=['GET'])
    @api_limit
    def health():
        """Process liveness only"""
        return jsonify({
            'status': 'OK',
            'timestamp': _timestamp(),
            'uptime': round(time.time() - START_TIME, 3),
            'version': config.VERSION,
            'features': FEATURES
        })

    @app.route('/')
    def index():
        return jsonify({
            'message': 'Blue Collar AI Backend API - Multi-Scraper',
            'version': config.VERSION,
            'methods': ['Grainger Multi-Method', 'Grainger Rendered', 'McMaster-Carr', 'Fastenal', 'Smart Fallback'],
            'endpoints': {
                'search': '/api/search?q=YOUR_QUERY',
                'health': '/api/health'
            },
            'example': SEARCH_EXAMPLE
        })

    return app


app = create_app()

if __name__ == '__main__':
    logger.info(f"🚀 Parts search backend v{Config.VERSION} running on port {Config.PORT}")
    logger.info(f"📋 Health check: http://localhost:{Config.PORT}/api/health")
    logger.info(f"🔍 Search example: http://localhost:{Config.PORT}{SEARCH_EXAMPLE}")
    app.run(host='0.0.0.0', port=Config.PORT, debug=False)

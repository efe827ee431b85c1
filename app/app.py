#!/usr/bin/env python3

import atexit
import logging
from datetime import datetime
from flask import Flask, jsonify, request
from services import SyncService, SyncAlreadyRunningError, RESOURCES
from utils import parse_date_arg

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

# Initialize services; the scheduler shares this instance and its run locks
sync_service = SyncService()

def _run_sync(resource, sync):
    """Run one sync for the API and turn the outcome into a JSON response"""
    try:
        logger.info(f"API: {resource} sync requested")
        return jsonify(sync()), 200

    except SyncAlreadyRunningError as e:
        logger.warning(f"API: {e}")
        return jsonify({
            'success': False,
            'message': str(e)
        }), 409

    except Exception as e:
        logger.error(f"API: Error in {resource} sync: {e}")
        return jsonify({
            'success': False,
            'message': f'{resource.capitalize()} sync failed: {str(e)}',
            'error': str(e)
        }), 500

@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now().isoformat(),
        'service': 'zelty-sync-api'
    })

@app.route('/info', methods=['GET'])
def info():
    """Service information endpoint"""
    return jsonify({
        'service': 'Zelty Sync API',
        'version': '1.0.0',
        'description': 'Synchronizes restaurants, dishes and orders from the Zelty POS API to Supabase',
        'endpoints': {
            'health': 'GET /health - Health check',
            'sync_restaurants': 'POST /sync/restaurants - Sync all restaurants',
            'sync_dishes': 'POST /sync/dishes - Sync the dish catalog',
            'sync_orders': 'POST /sync/orders - Sync orders and items for a date range',
            'sync_status': 'GET /sync/status - Syncs currently running',
            'sync_logs': 'GET /sync/logs - Latest sync runs',
            'info': 'GET /info - Service information'
        },
        'timestamp': datetime.now().isoformat()
    })

@app.route('/sync/restaurants', methods=['POST'])
def sync_restaurants():
    """Trigger a restaurant sync"""
    return _run_sync('restaurants', lambda: sync_service.sync_restaurants(wait=False))

@app.route('/sync/dishes', methods=['POST'])
def sync_dishes():
    """Trigger a dish sync"""
    return _run_sync('dishes', lambda: sync_service.sync_dishes(wait=False))

@app.route('/sync/orders', methods=['POST'])
def sync_orders():
    """
    Trigger an order sync for a date range

    Optional JSON body:
    {
        "from_date": "2025-02-28",  # YYYY-MM-DD, default: last day of previous month
        "to_date": "2025-03-31"     # YYYY-MM-DD, default: last day of current month
    }
    """
    data = request.get_json(silent=True) or {}

    try:
        from_date = parse_date_arg(data.get('from_date'))
        to_date = parse_date_arg(data.get('to_date'))
    except (ValueError, TypeError, AttributeError):
        return jsonify({
            'success': False,
            'message': 'Invalid date format. Use YYYY-MM-DD'
        }), 400

    if from_date and to_date and from_date > to_date:
        return jsonify({
            'success': False,
            'message': 'from_date must not be after to_date'
        }), 400

    return _run_sync('orders', lambda: sync_service.sync_orders(from_date, to_date, wait=False))

@app.route('/sync/status', methods=['GET'])
def sync_status():
    """Which syncs are running right now in this process"""
    return jsonify({
        'running': {resource: sync_service.is_running(resource) for resource in RESOURCES},
        'timestamp': datetime.now().isoformat()
    })

@app.route('/sync/logs', methods=['GET'])
def sync_logs():
    """Latest sync runs recorded in Supabase"""
    limit = request.args.get('limit', 20, type=int)

    try:
        return jsonify({
            'success': True,
            'logs': sync_service.supabase_client.get_recent_sync_logs(limit)
        })
    except Exception as e:
        logger.error(f"API: Error reading sync logs: {e}")
        return jsonify({
            'success': False,
            'message': f'Internal server error: {str(e)}'
        }), 500

if __name__ == '__main__':
    from config import config
    from scheduler import SyncScheduler

    if config.scheduler_enabled:
        sync_scheduler = SyncScheduler(sync_service)
        sync_scheduler.start()
        atexit.register(sync_scheduler.stop)

    logger.info(f"Starting Zelty Sync API on {config.host}:{config.port}")
    logger.info(f"Debug mode: {config.debug}")

    app.run(
        host=config.host,
        port=config.port,
        debug=config.debug,
        use_reloader=False
    )

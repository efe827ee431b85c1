#!/usr/bin/env python3

import logging
import threading
import time
from contextlib import contextmanager
from datetime import date
from typing import Any, Callable, Dict, Iterator, List, Optional
import requests
from config import config
from mappers import map_restaurant, map_dish, map_order, map_order_item
from supabase_client import SupabaseClient
from zelty_client import ZeltyClient
from utils import default_order_date_range, format_api_date

logger = logging.getLogger(__name__)

RESOURCES = ('restaurants', 'dishes', 'orders')

class SyncAlreadyRunningError(Exception):
    """A sync of the same resource type is already in progress"""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"A {resource} sync is already running, retry later")

class SyncService:
    """Synchronizes Zelty restaurants, dishes and orders into Supabase"""

    def __init__(self, supabase_client: Optional[SupabaseClient] = None,
                 zelty_client: Optional[ZeltyClient] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 page_limit: Optional[int] = None,
                 page_delay: Optional[float] = None):
        self.supabase_client = supabase_client or SupabaseClient()
        self.zelty_client = zelty_client or ZeltyClient()
        self.sleep = sleep
        self.page_limit = page_limit or config.page_limit
        self.page_delay = config.page_delay if page_delay is None else page_delay

        # At most one in-flight run per resource type
        self._locks = {resource: threading.Lock() for resource in RESOURCES}

    @contextmanager
    def _run_lock(self, resource: str, wait: bool):
        lock = self._locks[resource]
        if not lock.acquire(blocking=wait):
            raise SyncAlreadyRunningError(resource)
        try:
            yield
        finally:
            lock.release()

    def is_running(self, resource: str) -> bool:
        return self._locks[resource].locked()

    def _iter_pages(self, path: str, envelope: str, params: Dict[str, Any]) -> Iterator[List[Dict]]:
        """
        Yield pages from a limit/offset endpoint, one request at a time.

        Stops on an empty or short page. Between two requests the generator
        pauses for page_delay seconds (rate limit of the Zelty API).
        """
        offset = 0

        while True:
            data = self.zelty_client.get(path, params={
                'limit': self.page_limit,
                'offset': offset,
                **params
            })
            records = data.get(envelope) or []

            if not records:
                return

            yield records

            if len(records) < self.page_limit:
                return

            offset += self.page_limit
            self.sleep(self.page_delay)

    def _log_failure(self, resource: str, error: Exception):
        if isinstance(error, requests.RequestException):
            status = error.response.status_code if error.response is not None else 'No response'
            logger.error(f"Failed to sync {resource}: {status} - {error}")
        else:
            logger.exception(f"Failed to sync {resource}")

    def sync_restaurants(self, wait: bool = True) -> Dict[str, Any]:
        """Sync all restaurants (single unpaginated call)"""
        with self._run_lock('restaurants', wait):
            batch_id = self.supabase_client.create_sync_log('restaurants_sync')
            total_synced = 0

            try:
                data = self.zelty_client.get('restaurants')
                restaurants = data.get('restaurants') or []

                for restaurant in restaurants:
                    self.supabase_client.upsert_restaurant(restaurant['id'], map_restaurant(restaurant))
                    total_synced += 1

            except Exception as e:
                self._log_failure('restaurants', e)
                self.supabase_client.update_sync_log(
                    batch_id, 'failed', total_synced, error_message=str(e)
                )
                raise

            self.supabase_client.update_sync_log(batch_id, 'completed', total_synced)
            logger.info(f"Successfully synced {total_synced} restaurants")

            return {
                'success': True,
                'resource': 'restaurants',
                'batch_id': batch_id,
                'records_synced': total_synced
            }

    def sync_dishes(self, wait: bool = True) -> Dict[str, Any]:
        """Sync the whole catalog, all restaurants, including hidden and disabled dishes"""
        with self._run_lock('dishes', wait):
            batch_id = self.supabase_client.create_sync_log('dishes_sync')
            total_synced = 0
            pages = 0

            try:
                for dishes in self._iter_pages('catalog/dishes', 'dishes', {
                    'show_all': 'true',
                    'all_restaurants': 'true'
                }):
                    pages += 1
                    for dish in dishes:
                        self.supabase_client.upsert_dish(dish['id'], map_dish(dish))

                    total_synced += len(dishes)
                    logger.debug(f"Synced {len(dishes)} dishes (total: {total_synced})")

            except Exception as e:
                self._log_failure('dishes', e)
                self.supabase_client.update_sync_log(
                    batch_id, 'failed', total_synced, error_message=str(e),
                    metadata={'pages_fetched': pages}
                )
                raise

            self.supabase_client.update_sync_log(
                batch_id, 'completed', total_synced, metadata={'pages_fetched': pages}
            )
            logger.info(f"Successfully synced {total_synced} dishes")

            return {
                'success': True,
                'resource': 'dishes',
                'batch_id': batch_id,
                'records_synced': total_synced,
                'pages_fetched': pages
            }

    def sync_orders(self, from_date: Optional[date] = None, to_date: Optional[date] = None,
                    wait: bool = True) -> Dict[str, Any]:
        """
        Sync orders and their items for a date range

        Args:
            from_date: First day of the range (default: last day of previous month)
            to_date: Last day of the range (default: last day of current month)
            wait: Block until a concurrent orders sync finishes instead of raising

        Returns:
            Dictionary with sync results, including one outcome per order item
        """
        default_from, default_to = default_order_date_range()
        from_date = from_date or default_from
        to_date = to_date or default_to

        with self._run_lock('orders', wait):
            metadata = {'from_date': format_api_date(from_date), 'to_date': format_api_date(to_date)}
            batch_id = self.supabase_client.create_sync_log('orders_sync', metadata)
            logger.info(f"Syncing orders from {metadata['from_date']} to {metadata['to_date']}")

            total_synced = 0
            pages = 0
            item_results: List[Dict[str, Any]] = []

            try:
                for orders in self._iter_pages('orders', 'orders', {
                    'from': metadata['from_date'],
                    'to': metadata['to_date'],
                    'expand': 'items'
                }):
                    pages += 1
                    for order in orders:
                        self.supabase_client.upsert_order(order['id'], map_order(order))

                        items = order.get('items')
                        if isinstance(items, list):
                            item_results.extend(self._sync_order_items(order['id'], items))

                    total_synced += len(orders)
                    logger.debug(f"Synced {len(orders)} orders (total: {total_synced})")

            except Exception as e:
                self._log_failure('orders', e)
                self.supabase_client.update_sync_log(
                    batch_id, 'failed', total_synced, error_message=str(e),
                    metadata={**metadata, 'pages_fetched': pages}
                )
                raise

            items_failed = sum(1 for result in item_results if not result['success'])
            self.supabase_client.update_sync_log(
                batch_id, 'completed', total_synced,
                metadata={
                    **metadata,
                    'pages_fetched': pages,
                    'items_synced': len(item_results) - items_failed,
                    'items_failed': items_failed
                }
            )

            if items_failed:
                logger.warning(f"{items_failed} order items could not be synced")
            logger.info(f"Successfully synced {total_synced} orders")

            return {
                'success': True,
                'resource': 'orders',
                'batch_id': batch_id,
                'from_date': metadata['from_date'],
                'to_date': metadata['to_date'],
                'records_synced': total_synced,
                'pages_fetched': pages,
                'items_failed': items_failed,
                'item_results': item_results
            }

    def _sync_order_items(self, order_id: int, items: List[Dict]) -> List[Dict[str, Any]]:
        """Upsert the items of one order; a failing item is logged and skipped"""
        results = []

        for item in items:
            try:
                self.supabase_client.upsert_order_item(item['id'], map_order_item(item, order_id))
                results.append({'item_id': item.get('id'), 'order_id': order_id, 'success': True, 'error': None})
            except Exception as e:
                logger.error(f"Error syncing order item {item.get('id')} of order {order_id}: {e}; "
                             f"payload: {item}")
                results.append({'item_id': item.get('id'), 'order_id': order_id, 'success': False, 'error': str(e)})

        return results

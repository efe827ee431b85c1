#!/usr/bin/env python3

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from supabase import create_client, Client
from config import config

logger = logging.getLogger(__name__)

RESTAURANTS_TABLE = 'ZeltyRestaurant'
DISHES_TABLE = 'ZeltyDish'
ORDERS_TABLE = 'ZeltyOrder'
ORDER_ITEMS_TABLE = 'ZeltyOrderItem'
SYNC_LOGS_TABLE = 'zelty_sync_logs'

# Every Zelty table is keyed by the remote identifier
ZELTY_KEY = 'zeltyId'

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

class SupabaseClient:
    """Client for managing Supabase operations for Zelty data"""

    def __init__(self, client: Optional[Client] = None):
        """Initialize Supabase client with configuration"""
        if client is not None:
            self.supabase = client
            return

        logger.info(f"Connecting to Supabase at: {config.supabase_url}")
        self.supabase: Client = create_client(config.supabase_url, config.supabase_key)
        logger.info("Supabase client initialized successfully")

    def _upsert(self, table: str, zelty_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert the row, or replace its mutable columns if zeltyId already exists"""
        record = {ZELTY_KEY: zelty_id, **data, 'updatedAt': _now_iso()}

        result = self.supabase.table(table).upsert(record, on_conflict=ZELTY_KEY).execute()
        return result.data[0] if result.data else record

    def upsert_restaurant(self, zelty_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._upsert(RESTAURANTS_TABLE, zelty_id, data)

    def upsert_dish(self, zelty_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._upsert(DISHES_TABLE, zelty_id, data)

    def upsert_order(self, zelty_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._upsert(ORDERS_TABLE, zelty_id, data)

    def upsert_order_item(self, zelty_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._upsert(ORDER_ITEMS_TABLE, zelty_id, data)

    def get_recent_sync_logs(self, limit: int = 20) -> List[Dict]:
        """Latest sync runs, newest first"""
        result = (
            self.supabase.table(SYNC_LOGS_TABLE)
            .select('*')
            .order('started_at', desc=True)
            .limit(limit)
            .execute()
        )
        return result.data or []

    def create_sync_log(self, process_type: str, metadata: Optional[Dict] = None) -> str:
        """Create a new sync log entry and return batch_id"""
        batch_id = str(uuid.uuid4())

        try:
            self.supabase.table(SYNC_LOGS_TABLE).insert({
                'batch_id': batch_id,
                'process_type': process_type,
                'status': 'running',
                'records_processed': 0,
                'metadata': metadata,
                'started_at': _now_iso()
            }).execute()

            logger.info(f"Created sync log with batch_id: {batch_id}")

        except Exception as e:
            # The run itself must not depend on the bookkeeping table
            logger.error(f"Failed to create sync log: {e}")

        return batch_id

    def update_sync_log(self, batch_id: str, status: str, records_processed: int = 0,
                        error_message: str = None, metadata: Dict = None):
        """Update sync log with completion status"""
        try:
            self.supabase.table(SYNC_LOGS_TABLE).update({
                'status': status,
                'records_processed': records_processed,
                'error_message': error_message,
                'metadata': metadata,
                'finished_at': _now_iso()
            }).eq('batch_id', batch_id).execute()
            logger.info(f"Updated sync log {batch_id} with status: {status}")

        except Exception as e:
            logger.error(f"Failed to update sync log: {e}")


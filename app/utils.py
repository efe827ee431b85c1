#!/usr/bin/env python3

from datetime import datetime, date
from typing import Optional, Tuple
from dateutil.relativedelta import relativedelta
from config import config

API_DATE_FORMAT = '%Y-%m-%d'

def get_current_time():
    """Get current time in the configured timezone"""
    return datetime.now(config.timezone)

def get_last_day_of_month(year: int, month: int) -> date:
    """Get the last day of a given month"""
    if month == 12:
        return date(year + 1, 1, 1) - relativedelta(days=1)
    else:
        return date(year, month + 1, 1) - relativedelta(days=1)

def default_order_date_range(today: Optional[date] = None) -> Tuple[date, date]:
    """
    Default window for order sync: last day of the previous month
    through the last day of the current month
    """
    if today is None:
        today = get_current_time().date()

    from_date = today.replace(day=1) - relativedelta(days=1)
    to_date = get_last_day_of_month(today.year, today.month)

    return from_date, to_date

def format_api_date(date_obj: date) -> str:
    """Format a date the way the Zelty API expects it (yyyy-MM-dd)"""
    return date_obj.strftime(API_DATE_FORMAT)

def parse_date_arg(value: Optional[str]) -> Optional[date]:
    """Parse an optional YYYY-MM-DD argument; empty values mean 'use the default'"""
    if value is None or value.strip() == '':
        return None
    return datetime.strptime(value.strip(), API_DATE_FORMAT).date()

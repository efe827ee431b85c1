#!/usr/bin/env python3

import json
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urljoin
import requests
from config import config

logger = logging.getLogger(__name__)

REDACTED = '[REDACTED]'
SENSITIVE_HEADERS = {'authorization', 'cookie', 'x-api-key'}

def sanitize_headers(headers: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Copy of the headers with credential and cookie values replaced"""
    if headers is None:
        return None

    sanitized = dict(headers)
    for key in sanitized:
        if key.lower() in SENSITIVE_HEADERS:
            sanitized[key] = REDACTED
    return sanitized

class ZeltyClient:
    """HTTP client for the Zelty POS API"""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url or config.zelty_base_url
        if not self.base_url.endswith('/'):
            self.base_url += '/'
        self.timeout = timeout if timeout is not None else config.zelty_timeout

        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f"Bearer {api_key or config.zelty_api_key}",
            'Accept': 'application/json'
        })

        logger.info(f"Zelty client initialized for {self.base_url}")

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET a resource and return the parsed JSON body"""
        url = urljoin(self.base_url, path.lstrip('/'))

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            self._log_request_error('GET', url, e)
            raise

    def _log_request_error(self, method: str, url: str, error: requests.RequestException):
        """Log a failed request with redacted request headers"""
        response = error.response
        request = error.request

        if request is not None and request.headers is not None:
            request_headers = request.headers
        else:
            request_headers = self.session.headers

        error_details = {
            'message': str(error),
            'type': type(error).__name__,
            'method': method,
            'url': url,
            'status': response.status_code if response is not None else None,
            'status_text': response.reason if response is not None else None,
            'response_data': response.text if response is not None else None,
            'request_headers': sanitize_headers(request_headers),
        }

        logger.error(
            f"Zelty request failed: {method} {url}\n"
            f"{json.dumps(error_details, indent=2, default=str)}"
        )

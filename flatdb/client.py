"""
HTTP client for the FlatDB REST API
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from flatdb.types import QueryResult
from flatdb.errors import RemoteError

logger = logging.getLogger(__name__)


class RemoteExecutor:
    """Runs commands against a database served by api.server

    Offers the same execute() call as QueryExecutor; the transaction buffer
    lives in the server's executor for that database.
    """

    def __init__(self, base_url: str, database: str,
                 session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.database = database
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/databases/{self.database}{path}"

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        logger.debug("%s %s", method, self._url(path))
        try:
            response = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise RemoteError(f"Could not reach {self.base_url}: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteError(f"Invalid response from server (HTTP {response.status_code})") from e

        if response.status_code >= 400:
            raise RemoteError(payload.get('error') or f"HTTP {response.status_code}")
        return payload

    def execute(self, command: str) -> QueryResult:
        payload = self._request('POST', '/execute', json={'query': command})
        return QueryResult.from_dict(payload)

    def execute_batch(self, commands: List[str]) -> List[QueryResult]:
        payload = self._request('POST', '/execute/batch', json={'queries': commands})
        return [QueryResult.from_dict(r) for r in payload.get('results', [])]

    def transaction_status(self) -> Dict[str, Any]:
        return self._request('GET', '/transaction').get('transaction', {})

    @classmethod
    def create_database(cls, base_url: str, database: str,
                        session: Optional[requests.Session] = None) -> 'RemoteExecutor':
        """Create the database if needed and return a client for it"""
        client = cls(base_url, database, session=session)
        try:
            response = client.session.post(f"{client.base_url}/api/databases",
                                           json={'name': database}, timeout=client.timeout)
        except requests.RequestException as e:
            raise RemoteError(f"Could not reach {client.base_url}: {e}") from e
        if response.status_code not in (200, 201, 409):
            raise RemoteError(f"Could not create database {database} (HTTP {response.status_code})")
        return client

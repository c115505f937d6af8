"""
Thin requests-based wrapper around the REST API.

Every call goes through one Session carrying the bearer token. Non-2xx
responses and network failures raise ApiError.
"""
import logging
import os

import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger('reactstock.client')

DEFAULT_BASE_URL = 'http://127.0.0.1:8000/api/v1'
DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """A failed API call. status is None when the server was never reached."""

    def __init__(self, message, status=None, payload=None):
        super().__init__(message)
        self.status = status
        self.payload = payload

    @property
    def is_network_error(self):
        return self.status is None


class ApiClient:

    def __init__(self, base_url=None, timeout=None, token=None, session=None):
        self.base_url = (base_url or os.getenv('REACTSTOCK_API_URL', DEFAULT_BASE_URL)).rstrip('/')
        self.timeout = float(timeout or os.getenv('REACTSTOCK_API_TIMEOUT', DEFAULT_TIMEOUT))
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})
        self.access_token = None
        if token:
            self.set_token(token)

    def set_token(self, token):
        self.access_token = token
        self.session.headers.update({'Authorization': f'Bearer {token}'})

    def url(self, path):
        path = path.strip('/')
        return f"{self.base_url}/{path}/"

    def request(self, method, path, params=None, json=None):
        url = self.url(path)
        try:
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {str(e)}")
            raise ApiError(f"Could not reach {url}: {e}") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text[:500]
            message = payload.get('error') if isinstance(payload, dict) and payload.get('error') else f"HTTP {response.status_code}"
            logger.warning(f"{method} {url} returned {response.status_code}: {payload}")
            raise ApiError(message, status=response.status_code, payload=payload)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {url}", status=response.status_code, payload=response.text[:500]) from e

    def get(self, path, params=None):
        return self.request('GET', path, params=params)

    def post(self, path, data=None):
        return self.request('POST', path, json=data)

    def put(self, path, data=None):
        return self.request('PUT', path, json=data)

    def delete(self, path):
        return self.request('DELETE', path)

    # Auth
    def login(self, username, password, remember_me=False):
        data = self.post('auth/login', {'username': username, 'password': password, 'remember_me': remember_me})
        self.set_token(data['access'])
        logger.info(f"Logged in as {username}")
        return data

    def get_current_user(self):
        return self.get('auth/me')

    # Items
    def get_items(self, **params):
        return self.get('items', params=params or None)

    def get_item(self, item_id):
        return self.get(f'items/{item_id}')

    def create_item(self, data):
        return self.post('items', data)

    def update_item(self, item_id, data):
        return self.put(f'items/{item_id}', data)

    def delete_item(self, item_id):
        return self.delete(f'items/{item_id}')

    def bulk_delete_items(self, item_ids):
        return self.post('items/bulk-delete', {'item_ids': list(item_ids)})

    def get_deleted_items(self):
        return self.get('items/deleted')

    def restore_item(self, item_id):
        return self.post(f'items/{item_id}/restore')

    def permanently_delete_item(self, item_id):
        return self.delete(f'items/{item_id}/permanent')

    def transfer_item(self, item_id, destination_box_id, source_box_id=None, notes=None):
        return self.post(f'items/{item_id}/transfer', {
            'destination_box_id': destination_box_id,
            'source_box_id': source_box_id,
            'notes': notes,
        })

    def bulk_transfer_items(self, item_ids, destination_box_id, notes=None):
        return self.post('items/bulk-transfer', {
            'item_ids': list(item_ids),
            'destination_box_id': destination_box_id,
            'notes': notes,
        })

    # Item transactions
    def get_transactions(self, params=None):
        return self.get('items/transactions', params=params)

    def record_transaction(self, data):
        return self.post('items/transactions', data)

    # Customers and removal reasons
    def get_customer_transactions(self, customer_id):
        return self.get(f'customers/{customer_id}/transactions')

    def get_removal_reasons(self):
        return self.get('removal-reasons')

"""HTTP client for the couple games API.

``ApiClient`` sends requests over a ``requests.Session``, attaches the
bearer token and unwraps the ``{success, data, error}`` envelope. The
first 401 from an ``/api/`` path triggers ``on_unauthorized`` once per
client, so a burst of failing calls produces a single sign-out.
"""

import logging
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)

SIGN_IN_REQUIRED_MESSAGE = 'יש להתחבר על מנת לבצע פעולה זו'
UNEXPECTED_RESPONSE_MESSAGE = 'תשובה לא צפויה מהשרת'


class ApiClientError(Exception):
    """The API answered with ``success: false`` (or not with JSON at all)."""

    def __init__(self, message, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class ApiClient:

    def __init__(self, base_url, token=None, session=None, on_unauthorized=None, timeout=10):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.session = session or requests.Session()
        self.on_unauthorized = on_unauthorized
        self.timeout = timeout
        self.unauthorized_handled = False

    def _url(self, path):
        if path.startswith(('http://', 'https://')):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self):
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _handle_unauthorized(self, path):
        if self.unauthorized_handled:
            return
        self.unauthorized_handled = True
        logger.info("Got 401 from %s, signing out", path)
        if self.on_unauthorized:
            self.on_unauthorized(SIGN_IN_REQUIRED_MESSAGE)

    def request(self, method, path, json=None, params=None):
        """Send a request and return the envelope's ``data``.

        Raises:
            ApiClientError: the envelope reports failure or is not JSON.
            requests.RequestException: the request itself failed.
        """
        url = self._url(path)
        response = self.session.request(
            method, url, json=json, params=params,
            headers=self._headers(), timeout=self.timeout,
        )

        if response.status_code == 401 and urlsplit(url).path.startswith('/api/'):
            self._handle_unauthorized(path)

        try:
            body = response.json()
        except ValueError:
            raise ApiClientError(UNEXPECTED_RESPONSE_MESSAGE, response.status_code)

        if not isinstance(body, dict) or not body.get('success'):
            error = (body.get('error') if isinstance(body, dict) else None) or {}
            raise ApiClientError(
                error.get('message', UNEXPECTED_RESPONSE_MESSAGE),
                response.status_code,
                error.get('details'),
            )
        return body.get('data')

    def get(self, path, params=None):
        return self.request('GET', path, params=params)

    def post(self, path, json=None):
        return self.request('POST', path, json=json)

    def put(self, path, json=None):
        return self.request('PUT', path, json=json)

    def delete(self, path):
        return self.request('DELETE', path)

    # Auth helpers keep ``token`` in step with the server session

    def login_email(self, email, password):
        data = self.post('/api/auth/login/email', {'email': email, 'password': password})
        self.token = data['token']
        self.unauthorized_handled = False
        return data

    def login_google(self, google_id):
        data = self.post('/api/auth/login/google', {'google_id': google_id})
        self.token = data['token']
        self.unauthorized_handled = False
        return data

    def sign_in_with_google(self, credential):
        data = self.post('/api/auth/google/session', {'credential': credential})
        self.token = data['token']
        self.unauthorized_handled = False
        return data

    def complete_google_profile(self, name, phone):
        data = self.put('/api/auth/complete-google-profile', {'name': name, 'phone': phone})
        self.token = data['token']
        return data

    def get_session(self):
        data = self.get('/api/auth/session')
        self.token = data['token']
        return data['session']

    def logout(self):
        self.token = None


class CatalogLoader:
    """Loads the public games and centers once per loader."""

    def __init__(self, client):
        self.client = client
        self.games = []
        self.centers = []
        self.loaded = False

    def load(self, force=False):
        if self.loaded and not force:
            return self
        self.games = self.client.get('/api/public/games')
        self.centers = self.client.get('/api/public/centers')
        self.loaded = True
        logger.debug("Loaded %d games and %d centers", len(self.games), len(self.centers))
        return self

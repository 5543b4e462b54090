"""
recognize.im API client

Wraps the SOAP-style account/image management service and the binary
recognition endpoint. SOAP-style calls authenticate transparently: the first
call made without a session performs ``auth`` and then the requested method,
and the caller observes a single outcome.
"""

import base64
import hashlib
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Tuple, Union

import requests

from .images import check_image_limits
from .models import CallOutcome, Credentials, OutcomeKind
from .soap import ResponseParseError, build_envelope, parse_response

logger = logging.getLogger(__name__)

AUTH_METHOD = 'auth'

Handler = Callable[[Any], None]
RecognizeCallback = Callable[[Optional[Dict[str, Any]], Optional[str]], None]

OPERATIONS = frozenset({
    'call', 'recognize',
    'user_get', 'user_delete', 'user_limits',
    'image_count', 'image_list', 'image_insert', 'image_delete', 'image_get',
    'index_build', 'index_callback', 'index_status',
    'key_get', 'mode_get', 'mode_set', 'payment_list',
})


class RecognizeClient:
    """Client for the recognize.im CLAPI service."""

    def __init__(self, host: str = 'clapi.itraff.pl', port: int = 80, timeout: int = 30,
                 http: Optional[requests.Session] = None, max_workers: int = 4):
        self.base_url = f"http://{host}" if port == 80 else f"http://{host}:{port}"
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()

        self.credentials: Optional[Credentials] = None
        self.session_cookie: Optional[str] = None

        self._handlers: Dict[OutcomeKind, Handler] = {}
        self._auth_lock = threading.Lock()
        self._executor_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._max_workers = max_workers

        logger.info(f"recognize.im client initialized for {self.base_url}")

    @classmethod
    def from_config(cls, config_manager, http: Optional[requests.Session] = None) -> "RecognizeClient":
        """Create a client from a ConfigManager, applying credentials when all are set."""
        client = cls(
            host=config_manager.api_host,
            port=config_manager.api_port,
            timeout=config_manager.api_timeout,
            http=http,
        )
        if config_manager.client_id and config_manager.api_key and config_manager.clapi_key:
            client.set_credentials(config_manager.client_id, config_manager.api_key,
                                   config_manager.clapi_key)
        else:
            logger.warning("recognize.im credentials not configured")
        return client

    # ------------------------------------------------------------------
    # Offline methods
    # ------------------------------------------------------------------

    def set_credentials(self, client_id: Union[int, str], api_key: str, clapi_key: str) -> None:
        """Set credentials for API calls."""
        self.credentials = Credentials(client_id=str(client_id), api_key=api_key, clapi_key=clapi_key)
        logger.debug(f"Credentials set for client {client_id}")

    def on(self, kind: Union[str, OutcomeKind], handler: Handler) -> bool:
        """
        Register the default handler for an outcome kind.

        Args:
            kind: 'success' or 'error'
            handler: Called with the data payload (success) or message (error)

        Returns:
            True if the handler was registered, False for an unknown kind
        """
        try:
            outcome_kind = OutcomeKind(kind)
        except ValueError:
            return False
        self._handlers[outcome_kind] = handler
        return True

    @property
    def authenticated(self) -> bool:
        return self.session_cookie is not None

    def _require_credentials(self) -> Credentials:
        if self.credentials is None:
            raise ValueError("Credentials are not set - call set_credentials() first")
        return self.credentials

    # ------------------------------------------------------------------
    # SOAP-style calls
    # ------------------------------------------------------------------

    def call(self, method: str, params: Optional[Dict[str, Any]] = None,
             on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """
        Call a SOAP method, authenticating first if there is no session.

        Args:
            method: SOAP method name, for example 'indexStatus'
            params: Method parameters in document order
            on_success: Success handler for this call only
            on_error: Error handler for this call only

        Returns:
            The single outcome of the call
        """
        self._require_credentials()

        if method != AUTH_METHOD:
            failure = self._ensure_session()
            if failure is not None:
                return self._dispatch(failure, on_success, on_error)

        return self._dispatch(self._send(method, params), on_success, on_error)

    def auth(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """Authorize the client. Called automatically when needed."""
        return self.call(AUTH_METHOD, self._auth_params(), on_success, on_error)

    def _auth_params(self) -> Dict[str, Any]:
        credentials = self._require_credentials()
        return {
            'client_id': credentials.client_id,
            'key_clapi': credentials.clapi_key,
            'ip': '',
        }

    def _ensure_session(self) -> Optional[CallOutcome]:
        """Authenticate once if needed; return the failed auth outcome, if any."""
        with self._auth_lock:
            if self.authenticated:
                return None

            logger.info("No session yet - authenticating")
            outcome = self._send(AUTH_METHOD, self._auth_params())
            if not outcome.ok:
                logger.error(f"Authentication failed: {outcome.message}")
                return outcome

            if not self.authenticated:
                logger.warning("Authentication succeeded but no session cookie was issued")
            return None

    def _send(self, method: str, params: Optional[Dict[str, Any]]) -> CallOutcome:
        """Post a SOAP document and decode the response."""
        url = f"{self.base_url}/{method}"
        headers = {'Content-Type': 'text/xml; charset=utf-8'}
        if self.session_cookie:
            headers['Cookie'] = self.session_cookie

        try:
            response = self.http.post(
                url,
                headers=headers,
                data=build_envelope(method, params),
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.error(f"API request timeout: /{method}")
            return CallOutcome.error(method, f"Request to /{method} timed out")
        except requests.exceptions.RequestException as e:
            logger.error(f"API request failed: /{method} - {e}")
            return CallOutcome.error(method, f"Request to /{method} failed: {e}")

        try:
            outcome = parse_response(method, response.content)
        except ResponseParseError as e:
            logger.error(f"Invalid response from /{method} (HTTP {response.status_code}): {e}")
            if response.status_code >= 400:
                return CallOutcome.error(method, f"HTTP {response.status_code} from /{method}")
            return CallOutcome.error(method, str(e))

        # A session starts only with a successful auth; later responses may refresh it
        cookie = _session_cookie_from(response)
        if cookie and (self.authenticated or (method == AUTH_METHOD and outcome.ok)):
            self.session_cookie = cookie

        return outcome

    def _dispatch(self, outcome: CallOutcome, on_success: Optional[Handler],
                  on_error: Optional[Handler]) -> CallOutcome:
        """Deliver an outcome to the per-call or registered handler."""
        handler = on_success if outcome.ok else on_error
        if handler is None:
            handler = self._handlers.get(outcome.kind)

        if handler is None:
            logger.warning(f"No {outcome.kind.value} callback assigned for {outcome.method}")
            return outcome

        try:
            handler(outcome.data if outcome.ok else outcome.message)
        except Exception as e:
            logger.error(f"Error in {outcome.kind.value} callback for {outcome.method}: {e}", exc_info=True)
        return outcome

    # ------------------------------------------------------------------
    # Binary recognition
    # ------------------------------------------------------------------

    def recognize(self, data: bytes, callback: Optional[RecognizeCallback] = None,
                  multi: bool = False, get_all: bool = False) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        """
        Recognize objects in a query image.

        Does not use or create a session; the request is authenticated by an
        MD5 hash of the API key and the image bytes.

        Args:
            data: JPEG image bytes
            callback: Called with (result, error)
            multi: Use multi mode instead of single mode
            get_all: Ask for all matches instead of the best one

        Returns:
            The (result, error) pair handed to the callback
        """
        credentials = self._require_credentials()

        error = check_image_limits(data, multi)
        if error:
            return self._deliver(callback, None, error)

        url = self.base_url + recognize_path(credentials.client_id, multi, get_all)
        headers = {
            'Content-Type': 'image/jpeg',
            'x-itraff-hash': recognition_hash(credentials.api_key, data),
        }

        try:
            response = self.http.post(url, headers=headers, data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Recognition request failed: {e}")
            return self._deliver(callback, None, f"Recognition request failed: {e}")

        try:
            result = response.json()
        except ValueError as e:
            logger.error(f"Invalid recognition response (HTTP {response.status_code}): {e}")
            return self._deliver(callback, None, f"Invalid recognition response (HTTP {response.status_code})")

        logger.debug(f"Recognition result: {result}")
        return self._deliver(callback, result, None)

    def _deliver(self, callback: Optional[RecognizeCallback], result: Optional[Dict[str, Any]],
                 error: Optional[str]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        if callback:
            try:
                callback(result, error)
            except Exception as e:
                logger.error(f"Error in recognize callback: {e}", exc_info=True)
        return result, error

    # ------------------------------------------------------------------
    # Account and image management
    # ------------------------------------------------------------------

    def user_get(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """Get user data."""
        return self.call('userGet', None, on_success, on_error)

    def user_delete(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """Delete user."""
        return self.call('userDelete', None, on_success, on_error)

    def user_limits(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """Get current limits for user."""
        return self.call('userLimits', None, on_success, on_error)

    def image_count(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        return self.call('imageCount', None, on_success, on_error)

    def image_list(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """List data about all user images."""
        return self.call('imageList', None, on_success, on_error)

    def image_insert(self, image_id: str, name: str, data: bytes,
                     on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """
        Insert a new reference image.

        Args:
            image_id: Identifier reported when the image is recognized
            name: Human readable image name
            data: JPEG image bytes, sent base64 encoded
        """
        params = {
            'id': image_id,
            'name': name,
            'data': base64.b64encode(data).decode('ascii'),
        }
        return self.call('imageInsert', params, on_success, on_error)

    def image_delete(self, image_id: str, on_success: Optional[Handler] = None,
                     on_error: Optional[Handler] = None) -> CallOutcome:
        return self.call('imageDelete', {'ID': image_id}, on_success, on_error)

    def image_get(self, image_id: str, on_success: Optional[Handler] = None,
                  on_error: Optional[Handler] = None) -> CallOutcome:
        """Get metadata of the image with the given ID."""
        return self.call('imageGet', {'ID': image_id}, on_success, on_error)

    def index_build(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """Apply pending image changes to the recognition index."""
        return self.call('indexBuild', None, on_success, on_error)

    def index_callback(self, callback_url: str, on_success: Optional[Handler] = None,
                       on_error: Optional[Handler] = None) -> CallOutcome:
        """Set the URL notified when an index build finishes."""
        return self.call('callback', {'callbackURL': callback_url}, on_success, on_error)

    def index_status(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """Check status of the index build process."""
        return self.call('indexStatus', None, on_success, on_error)

    def key_get(self, regenerate: bool = False, on_success: Optional[Handler] = None,
                on_error: Optional[Handler] = None) -> CallOutcome:
        """Get (or regenerate and get) the API key."""
        return self.call('keyGet', {'regenerate': bool(regenerate)}, on_success, on_error)

    def mode_get(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """Get current recognition mode."""
        return self.call('modeGet', None, on_success, on_error)

    def mode_set(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        """Toggle recognition mode between 'single' and 'multi'."""
        return self.call('modeSet', None, on_success, on_error)

    def payment_list(self, on_success: Optional[Handler] = None, on_error: Optional[Handler] = None) -> CallOutcome:
        return self.call('paymentList', None, on_success, on_error)

    # ------------------------------------------------------------------
    # Background execution
    # ------------------------------------------------------------------

    def submit(self, operation: Union[str, Callable[..., Any]], *args, **kwargs) -> Future:
        """
        Run a client operation on a worker thread.

        Args:
            operation: Operation name (e.g. 'image_list') or bound method
            *args, **kwargs: Passed to the operation

        Returns:
            Future resolving to the operation's return value
        """
        if isinstance(operation, str):
            if operation not in OPERATIONS:
                raise ValueError(f"Unknown operation: {operation}")
            operation = getattr(self, operation)

        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self._max_workers,
                                                    thread_name_prefix='recognizeim')
            executor = self._executor
        return executor.submit(operation, *args, **kwargs)

    def close(self) -> None:
        """Stop worker threads and close the HTTP session."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
        self.http.close()

    def __enter__(self) -> "RecognizeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def recognize_path(client_id: str, multi: bool = False, get_all: bool = False) -> str:
    """Build the recognition endpoint path for the given mode."""
    path = '/v2/recognize/' + ('multi/' if multi else 'single/')
    if get_all:
        path += 'all/'
    return path + str(client_id)


def recognition_hash(api_key: str, data: bytes) -> str:
    """Hex MD5 digest of the API key followed by the image bytes."""
    digest = hashlib.md5()
    digest.update(api_key.encode('ascii'))
    digest.update(data)
    return digest.hexdigest()


def _session_cookie_from(response: requests.Response) -> Optional[str]:
    """Extract a Cookie header value from a response's Set-Cookie, if any."""
    pairs = [f"{cookie.name}={cookie.value}" for cookie in response.cookies]
    if pairs:
        return '; '.join(pairs)

    raw = response.headers.get('Set-Cookie')
    if raw:
        return raw.split(';', 1)[0].strip()
    return None

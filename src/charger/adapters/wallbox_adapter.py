"""
Wallbox Charger Adapter

Adapter implementation for Wallbox chargers using the Wallbox cloud API.
The user token is cached in the blob store and fetched again when it is
missing or expired.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from blob_storage import BlobStore
from charger_config import WallboxConfig
from charging_errors import BlobNotFound, BlobStoreError, ControlActionFailed
from ..ports.charger_port import ChargerPort
from ..models.charger_status import ChargerStatus, map_to_status

TOKEN_KEY = "user_token.json"

REMOTE_ACTION_RESUME = 1
REMOTE_ACTION_PAUSE = 2


@dataclass
class UserToken:
    jwt: str
    ttl: int  # Unix seconds

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'UserToken':
        document = json.loads(raw)
        return cls(jwt=document['jwt'], ttl=int(document['ttl']))

    def is_expired(self, now: float) -> bool:
        return self.ttl < now


class WallboxChargerAdapter(ChargerPort):
    """
    Wallbox charger adapter implementing the ChargerPort interface.

    The HTTP session is injected so callers control transport settings and
    tests can substitute a double.
    """

    def __init__(self, config: WallboxConfig, session: requests.Session, store: BlobStore,
                 clock: Callable[[], float] = time.time):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.session = session
        self.store = store
        self.clock = clock
        self._token: Optional[str] = None

    @property
    def device_id(self) -> str:
        return self.config.device_id

    def get_status(self) -> ChargerStatus:
        response = self._request('GET', f"/v2/charger/{self.device_id}", "get status")
        try:
            code = response.json()['data']['chargerData']['status']
        except (ValueError, KeyError, TypeError) as e:
            raise ControlActionFailed(f"Unexpected charger status response: {e}") from e

        status = map_to_status(code)
        self.logger.info(f"Charger {self.device_id} status {code} -> {status}")
        return status

    def set_energy_cost(self, cost: float) -> None:
        self.logger.info(f"Setting energy cost to {cost:.4f}")
        self._request('POST', f"/chargers/config/{self.device_id}", "set energy cost", {'energyCost': cost})

    def unlock(self) -> None:
        self.logger.info("Unlocking charger")
        self._request('PUT', f"/v2/charger/{self.device_id}", "unlock", {'locked': 0})

    def pause(self) -> None:
        self.logger.info("Pausing charging")
        self._remote_action(REMOTE_ACTION_PAUSE, "pause")

    def resume(self) -> None:
        self.logger.info("Resuming charging")
        self._remote_action(REMOTE_ACTION_RESUME, "resume")

    def _remote_action(self, action: int, name: str) -> None:
        self._request('POST', f"/v3/chargers/{self.device_id}/remote-action", name, {'action': action})

    def _request(self, method: str, path: str, operation: str,
                 payload: Optional[Dict[str, Any]] = None) -> requests.Response:
        headers = {
            'Authorization': f"Bearer {self.get_token()}",
            'Content-Type': 'application/json',
        }
        try:
            response = self.session.request(
                method,
                f"{self.config.api_url}{path}",
                json=payload,
                headers=headers,
                timeout=self.config.request_timeout,
                verify=self.config.verify_tls,
            )
        except requests.RequestException as e:
            raise ControlActionFailed(f"{operation} failed: {e}") from e

        if response.status_code != requests.codes.ok:
            raise ControlActionFailed(f"{operation} failed", response.status_code, response.text)
        return response

    def get_token(self) -> str:
        """JWT for API calls: cached token if still valid, a fresh one otherwise."""
        if self._token is None:
            token = self._read_token()
            if token is None:
                token = self._fetch_new_token()
            self._token = token.jwt
        return self._token

    def _read_token(self) -> Optional[UserToken]:
        try:
            raw = self.store.get(TOKEN_KEY)
        except BlobNotFound:
            self.logger.debug("No cached Wallbox token")
            return None

        try:
            token = UserToken.from_bytes(raw)
        except (ValueError, KeyError, TypeError) as e:
            self.store.delete(TOKEN_KEY)
            raise BlobStoreError(f"Cached Wallbox token {TOKEN_KEY} is corrupt: {e}") from e

        if token.is_expired(self.clock()):
            self.logger.info(f"Cached Wallbox token expired at {token.ttl}, fetching a new one")
            self.store.delete(TOKEN_KEY)
            return None
        return token

    def _fetch_new_token(self) -> UserToken:
        self.logger.info("Fetching new Wallbox user token")
        try:
            response = self.session.get(
                f"{self.config.api_url}/auth/token/user",
                auth=(self.config.username, self.config.password),
                timeout=self.config.request_timeout,
                verify=self.config.verify_tls,
            )
        except requests.RequestException as e:
            raise ControlActionFailed(f"token request failed: {e}") from e

        if response.status_code != requests.codes.ok:
            raise ControlActionFailed("token request failed", response.status_code, response.text)

        raw = response.content
        try:
            token = UserToken.from_bytes(raw)
        except (ValueError, KeyError, TypeError) as e:
            raise ControlActionFailed(f"Unexpected token response: {e}") from e

        self.store.put(TOKEN_KEY, raw)
        return token

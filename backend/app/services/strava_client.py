"""Strava API access for activity proofs.

Tokens are kept as one JSON file per athlete under `settings.strava_tokens_dir`.
"""

import json
import logging
import os
import time
from typing import Optional
from urllib.parse import urlencode

import httpx

from app.core.config import settings
from app.schemas.activity import ActivityRecord

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://www.strava.com/oauth/authorize"
TOKEN_URL = "https://www.strava.com/oauth/token"
API_BASE = "https://www.strava.com/api/v3"


class StravaError(Exception):
    """Strava is unreachable, unlinked, or rejected the request."""

    def __init__(self, message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(message)


class TokenStore:
    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, athlete_id: int) -> str:
        return os.path.join(self.directory, f"{athlete_id}.json")

    def load(self, athlete_id: int) -> Optional[dict]:
        try:
            with open(self.path_for(athlete_id), "r") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError:
            logger.warning("Unreadable Strava token file for athlete %s", athlete_id)
            return None

    def save(self, athlete_id: int, tok: dict):
        os.makedirs(self.directory, exist_ok=True)
        with open(self.path_for(athlete_id), "w") as f:
            json.dump(tok, f)


def auth_url(state: Optional[str] = None) -> str:
    if not (settings.strava_client_id and settings.strava_redirect_uri):
        raise StravaError("Strava client not configured")
    params = {
        "client_id": settings.strava_client_id,
        "redirect_uri": settings.strava_redirect_uri,
        "response_type": "code",
        "approval_prompt": "auto",
        "scope": "read,activity:read_all",
    }
    if state:
        params["state"] = state
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def to_activity_record(activity: dict) -> ActivityRecord:
    """Map a Strava DetailedActivity payload to an ActivityRecord.

    `trainer` marks indoor/treadmill sessions, which count as having no GPS.
    """
    return ActivityRecord(
        distance_meters=float(activity.get("distance") or 0.0),
        moving_time_seconds=int(activity.get("moving_time") or 0),
        elevation_gain_meters=float(activity.get("total_elevation_gain") or 0.0),
        activity_type=activity.get("type"),
        has_gps=not activity.get("trainer", False),
        has_heart_rate=bool(activity.get("has_heartrate")),
        is_manual=bool(activity.get("manual")),
        source="strava",
        source_activity_id=str(activity["id"]) if activity.get("id") is not None else None,
        name=activity.get("name"),
    )


class StravaClient:
    def __init__(
        self,
        tokens: Optional[TokenStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.tokens = tokens or TokenStore(settings.strava_tokens_dir)
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.strava_timeout_seconds

    def _client(self, **kwargs) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self.transport, **kwargs)

    def _token_request(self, data: dict) -> dict:
        if not (settings.strava_client_id and settings.strava_client_secret):
            raise StravaError("Strava client not configured")
        data = {
            "client_id": settings.strava_client_id,
            "client_secret": settings.strava_client_secret,
            **data,
        }
        with self._client() as client:
            r = client.post(TOKEN_URL, data=data)
        if r.status_code != 200:
            raise StravaError(f"Strava auth failed: {r.text}")
        return r.json()

    def exchange_code(self, athlete_id: int, code: str) -> dict:
        tok = self._token_request({"code": code, "grant_type": "authorization_code"})
        self.tokens.save(athlete_id, tok)
        logger.info("Linked Strava for athlete %s", athlete_id)
        return tok

    def refresh(self, athlete_id: int, tok: dict) -> dict:
        try:
            nt = self._token_request(
                {"grant_type": "refresh_token", "refresh_token": tok.get("refresh_token")}
            )
        except StravaError:
            logger.warning("Strava token refresh failed for athlete %s", athlete_id)
            raise
        self.tokens.save(athlete_id, nt)
        return nt

    def _valid_token(self, athlete_id: int) -> dict:
        tok = self.tokens.load(athlete_id)
        if not tok:
            raise StravaError("Strava not linked. Hit /strava/auth_url first.")
        if tok.get("expires_at", 0) - int(time.time()) > 60:
            return tok
        return self.refresh(athlete_id, tok)

    def _get(self, athlete_id: int, path: str, params: Optional[dict] = None):
        tok = self._valid_token(athlete_id)
        url = f"{API_BASE}{path}"
        with self._client() as client:
            r = client.get(url, params=params, headers={"Authorization": f"Bearer {tok['access_token']}"})
            if r.status_code == 401:
                # token revoked or expired early; refresh and try once more
                tok = self.refresh(athlete_id, tok)
                r = client.get(url, params=params, headers={"Authorization": f"Bearer {tok['access_token']}"})
        if r.status_code == 404:
            raise StravaError("Activity not found or failed to fetch", status_code=404)
        if r.status_code != 200:
            raise StravaError(f"Strava request failed: {r.text}", status_code=502)
        return r.json()

    def get_activity(self, athlete_id: int, activity_id: str) -> dict:
        return self._get(athlete_id, f"/activities/{activity_id}")

    def list_activities(self, athlete_id: int, page: int = 1, per_page: int = 30) -> list[dict]:
        return self._get(athlete_id, "/athlete/activities", {"page": page, "per_page": per_page})

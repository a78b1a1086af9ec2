"""
Twitch OAuth client-credentials flow.

The catalog only needs an app access token, so there is no user
interaction, redirect URI or token file involved.
"""

import httpx

from .logger import get_logger

logger = get_logger("twitch_auth")

AUTH_URL = "https://id.twitch.tv/oauth2/token"


def get_app_access_token(
    http: httpx.Client,
    client_id: str,
    client_secret: str,
    auth_url: str = AUTH_URL,
) -> dict:
    """
    Exchange client credentials for an app access token.

    Returns the token payload:
        {"access_token": "...", "expires_in": 5011271, "token_type": "bearer"}

    Raises httpx.HTTPError if the request fails or Twitch rejects the
    credentials.
    """
    resp = http.post(
        auth_url,
        params={
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "client_credentials",
        },
        timeout=10.0,
    )
    resp.raise_for_status()
    data = resp.json()
    logger.info(f"App access token obtained (expires in {data.get('expires_in', 0) // 3600} hours)")
    return data

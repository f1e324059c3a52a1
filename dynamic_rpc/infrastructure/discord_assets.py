"""Discord Asset Resolver - turns image keys into rich presence asset ids.

Invariants:
    - Keys already in media-proxy form (mp:...) are returned unchanged
    - http(s) keys go through the external-assets endpoint and come back as mp:<path>
    - Other keys are matched by name against the application's uploaded assets
    - Every failure surfaces as AssetResolutionError; nothing is retried here

Design Decisions:
    - Uploaded asset list cached per application id: names rarely change while
      the presence is running and each build would otherwise hit the API twice
    - httpx.AsyncClient injected for tests (MockTransport), created otherwise
    - Timeout configured on the client: request timeouts are the resolver's concern
"""

import logging

import httpx

from dynamic_rpc.core.errors import AssetResolutionError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://discord.com/api/v9"
MEDIA_PROXY_PREFIX = "mp:"


class DiscordAssetResolver:
    """AssetResolver backed by the Discord HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        token: str | None = None,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._client = client or httpx.AsyncClient(
            base_url=base_url, timeout=timeout_seconds,
        )
        self._token = token
        self._asset_ids: dict[str, dict[str, str]] = {}

    async def resolve(self, app_id: str, key: str) -> str:
        if key.startswith(MEDIA_PROXY_PREFIX):
            return key
        if key.startswith(("http://", "https://")):
            return await self._resolve_external(app_id, key)
        return await self._resolve_named(app_id, key)

    async def _resolve_named(self, app_id: str, key: str) -> str:
        assets = self._asset_ids.get(app_id)
        if assets is None:
            payload = await self._request(
                "GET", f"/oauth2/applications/{app_id}/assets", app_id, key,
            )
            if not isinstance(payload, list):
                raise AssetResolutionError("unexpected assets response", app_id, key)
            assets = {
                item["name"]: item["id"]
                for item in payload
                if isinstance(item, dict) and "name" in item and "id" in item
            }
            self._asset_ids[app_id] = assets
        asset_id = assets.get(key)
        if asset_id is None:
            raise AssetResolutionError("no uploaded asset with that name", app_id, key)
        return asset_id

    async def _resolve_external(self, app_id: str, key: str) -> str:
        if not self._token:
            raise AssetResolutionError(
                "external images need a user token", app_id, key,
            )
        payload = await self._request(
            "POST", f"/applications/{app_id}/external-assets", app_id, key,
            json={"urls": [key]},
            headers={"Authorization": self._token},
        )
        if not (
            isinstance(payload, list) and payload
            and isinstance(payload[0], dict)
            and "external_asset_path" in payload[0]
        ):
            raise AssetResolutionError("unexpected external-assets response", app_id, key)
        return f"{MEDIA_PROXY_PREFIX}{payload[0]['external_asset_path']}"

    async def _request(
        self, method: str, path: str, app_id: str, key: str, **kwargs,
    ):
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Asset lookup rejected (HTTP %d)", e.response.status_code,
                extra={"app_id": app_id, "asset_key": key},
            )
            raise AssetResolutionError(
                f"HTTP {e.response.status_code}", app_id, key,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Asset lookup failed: %s", e,
                extra={"app_id": app_id, "asset_key": key},
            )
            raise AssetResolutionError(
                str(e) or type(e).__name__, app_id, key,
            ) from e
        except ValueError as e:
            raise AssetResolutionError("malformed JSON response", app_id, key) from e

    def invalidate(self, app_id: str | None = None) -> None:
        """Forget cached asset names for one application, or all of them."""
        if app_id is None:
            self._asset_ids.clear()
        else:
            self._asset_ids.pop(app_id, None)

    async def aclose(self) -> None:
        await self._client.aclose()

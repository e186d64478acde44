"""Assistant bridge client implementation.

The bridge fronts the mail provider and the deals store. This client
speaks its JSON-over-HTTP API with a bearer token and returns internal
models.

Notes:
    Reads (listing, threads) are retried on transport errors and 5xx
    responses. Mutations and sends are never retried: the optimistic store
    handles their failures by rolling back.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from inbox_triage.config import Settings
from inbox_triage.exceptions import BridgeAPIError, ConfigurationError, ValidationError
from inbox_triage.models import Item, ReplyDraft, Thread
from inbox_triage.parsing.thread import payload_to_items, payload_to_thread
from inbox_triage.utils import retry_on_failure

logger = structlog.get_logger()

MAIL_ACTIONS = frozenset({"archive", "trash", "done"})


def _is_retryable(exc: Exception) -> bool:
    if not isinstance(exc, BridgeAPIError):
        return False
    return exc.status_code is None or exc.status_code >= 500


class BridgeClient:
    """Async client for the assistant bridge.

    Example:
        >>> async with BridgeClient(settings) as bridge:
        ...     items = await bridge.fetch_items("me@example.com")
        ...     thread = await bridge.fetch_thread(items[0].id, "me@example.com")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        httpx_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the bridge client.

        Args:
            settings: Application settings. If None, uses default settings.
            httpx_client: Optional httpx AsyncClient to use. If not provided,
                one is created on context entry.

        Raises:
            ConfigurationError: If no bridge URL is configured.
        """
        from inbox_triage.config import get_settings

        self.settings = settings or get_settings()
        if not self.settings.bridge_url:
            raise ConfigurationError("Bridge URL is not configured (INBOX_TRIAGE_BRIDGE_URL)")

        self.base_url = self.settings.bridge_url.rstrip("/")
        self._external_client = httpx_client is not None
        self._httpx_client = httpx_client
        logger.info("bridge_client_initialized", base_url=self.base_url)

    async def __aenter__(self) -> BridgeClient:
        if self._httpx_client is None:
            self._httpx_client = httpx.AsyncClient(timeout=self.settings.bridge_timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self._external_client and self._httpx_client is not None:
            await self._httpx_client.aclose()
            self._httpx_client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._httpx_client is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with' context manager or "
                "call __aenter__ first."
            )
        return self._httpx_client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.bridge_secret}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        client = self._ensure_client()
        url = f"{self.base_url}{path}"

        try:
            response = await client.request(method, url, params=params, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("bridge_request_failed", method=method, path=path, error=str(exc))
            raise BridgeAPIError(f"Bridge request failed: {exc}") from exc

        if response.is_error:
            detail = ""
            try:
                body = response.json()
                if isinstance(body, dict):
                    detail = str(body.get("details") or body.get("error") or "")
            except ValueError:
                pass
            logger.warning(
                "bridge_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                detail=detail,
            )
            raise BridgeAPIError(
                detail or f"Bridge API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise BridgeAPIError("Bridge returned invalid JSON", status_code=response.status_code) from exc
        return data if isinstance(data, dict) else {}

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        fetch = retry_on_failure(
            max_retries=self.settings.max_retries,
            delay=self.settings.retry_delay,
            retry_if=_is_retryable,
        )(self._request)
        return await fetch("GET", path, params=params)

    async def list_accounts(self) -> list[str]:
        """List the account addresses the bridge can act for."""
        data = await self._get("/api/email/accounts", {})
        accounts = data.get("accounts") or []
        result = []
        for acc in accounts if isinstance(accounts, list) else []:
            email = acc.get("email") if isinstance(acc, dict) else acc
            if isinstance(email, str) and email:
                result.append(email)
        return result

    async def fetch_items(
        self,
        account: str,
        *,
        query: str | None = None,
        max_results: int | None = None,
    ) -> list[Item]:
        """Fetch the inbox listing for ``account``.

        Raises:
            BridgeAPIError: If the request fails after retries.
        """
        params = {
            "account": account,
            "query": query or self.settings.inbox_query,
            "max": max_results or self.settings.inbox_max_results,
        }
        logger.info("fetching_items", account=account, query=params["query"], max_results=params["max"])
        data = await self._get("/api/email/messages", params)
        return payload_to_items(data)

    async def fetch_thread(self, item_id: str, account: str) -> Thread:
        """Fetch every message of a thread, oldest first.

        Raises:
            BridgeAPIError: If the request fails after retries.
        """
        logger.info("fetching_thread", item_id=item_id, account=account)
        data = await self._get("/api/email/thread", {"id": item_id, "account": account})
        return payload_to_thread(item_id, data, account)

    async def mutate_item(
        self,
        item_id: str,
        account: str,
        action: str,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """Archive, trash or mark done a thread.

        Args:
            item_id: Thread ID.
            account: Account owning the thread.
            action: One of ``archive``, ``trash``, ``done``.
            metadata: Sender/subject context forwarded for learning.

        Returns:
            False if the bridge answered but reported no success.

        Raises:
            ValidationError: For an unknown action.
            BridgeAPIError: If the request fails.
        """
        if action not in MAIL_ACTIONS:
            raise ValidationError(f"Unknown mail action: {action}")

        data = await self._request(
            "POST",
            "/api/email/archive",
            json={"id": item_id, "account": account, "action": action, "email": metadata},
        )
        return data.get("success", True) is not False

    async def create_deal(self, item: Item, account: str, deal_type: str) -> bool:
        """Record a thread as a deal or a request in the deals pipeline."""
        data = await self._request(
            "POST",
            "/api/deals",
            json={
                "action": "create",
                "type": deal_type,
                "email": {
                    "id": item.id,
                    "subject": item.subject,
                    "from": item.sender,
                    "date": item.received_at,
                    "account": account,
                    "labels": item.labels,
                    "messageCount": item.message_count,
                },
            },
        )
        return data.get("success", True) is not False

    async def send_reply(self, draft: ReplyDraft) -> bool:
        """Send a reply built by build_reply_draft.

        Raises:
            BridgeAPIError: If the request fails.
        """
        payload: dict[str, Any] = {
            "account": draft.account,
            "to": draft.to,
            "subject": draft.subject,
            "body": draft.body,
            "threadId": draft.thread_id,
        }
        if draft.cc:
            payload["cc"] = draft.cc
        if draft.bcc:
            payload["bcc"] = draft.bcc
        if draft.attachments:
            payload["attachments"] = draft.attachments

        logger.info("sending_reply", account=draft.account, thread_id=draft.thread_id)
        data = await self._request("POST", "/api/email/send", json=payload)
        return data.get("success", True) is not False

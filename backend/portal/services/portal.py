"""Portal facade: the single entry point used by the UI layer and the CLI.

Wraps a PortalDataSource (chosen once at construction) and a KeyValueStore
holding session, login-attempt and bookmark state. Bookmarks live only in the
store and are merged onto resources at read time.
"""

import asyncio
import logging
from pathlib import Path

import httpx
from pydantic import ValidationError

from portal.config import Settings
from portal.errors import InvalidCredentialsError, PortalError
from portal.schemas.content import Announcement, Dashboard, QuickAccessItem, RecentActivity
from portal.schemas.members import AuthResponse, LoginPayload, MemberAccount
from portal.schemas.programs import ClinicalProgram
from portal.schemas.resources import ResourceFilters, ResourceItem
from portal.services.airtable_client import AirtableClient
from portal.services.data_source import PortalDataSource, build_data_source
from portal.services.local_store import (
    MEMBER_KEY,
    TOKEN_KEY,
    JsonFileStore,
    KeyValueStore,
    load_bookmarks,
    save_bookmarks,
)
from portal.services.member_auth import LoginAttemptGate

logger = logging.getLogger(__name__)


class PortalFacade:
    def __init__(self, data_source: PortalDataSource, store: KeyValueStore):
        self.data_source = data_source
        self.store = store
        self.login_gate = LoginAttemptGate(store)

    def is_airtable_configured(self) -> bool:
        return self.data_source.name == "airtable"

    async def close(self) -> None:
        await self.data_source.close()

    # -- Auth ----------------------------------------------------------------

    async def login(self, payload: LoginPayload) -> AuthResponse:
        """Authenticate and persist the session.

        Raises:
            RateLimitError: Too many consecutive failures; backend not contacted.
            InvalidCredentialsError: Bad email/password (counted as a failure).
        """
        self.login_gate.check()
        try:
            member = await self.data_source.authenticate(payload.email, payload.password)
        except InvalidCredentialsError:
            attempts = self.login_gate.record_failure()
            logger.info("Failed login attempt %d", attempts)
            raise

        token = self.data_source.token
        self.store.set(TOKEN_KEY, token)
        self.store.set(MEMBER_KEY, member.model_dump_json(by_alias=True))
        self.login_gate.reset()
        return AuthResponse(token=token, member=member)

    async def logout(self) -> None:
        self.store.delete(TOKEN_KEY)
        self.store.delete(MEMBER_KEY)

    def get_stored_auth(self) -> AuthResponse | None:
        token = self.store.get(TOKEN_KEY)
        member_raw = self.store.get(MEMBER_KEY)
        if not token or not member_raw:
            return None
        try:
            member = MemberAccount.model_validate_json(member_raw)
        except ValidationError:
            return None
        return AuthResponse(token=token, member=member)

    # -- Content -------------------------------------------------------------

    async def get_programs(self) -> list[ClinicalProgram]:
        return await self.data_source.get_programs()

    async def get_quick_access(self) -> list[QuickAccessItem]:
        return await self.data_source.get_quick_access()

    async def get_announcements(self) -> list[Announcement]:
        return await self.data_source.get_announcements()

    async def get_recent_activity(self) -> list[RecentActivity]:
        return await self.data_source.get_recent_activity()

    def _merge_bookmarks(self, items: list[ResourceItem]) -> list[ResourceItem]:
        bookmarks = load_bookmarks(self.store)
        return [
            item.model_copy(update={"bookmarked": item.bookmarked or item.id in bookmarks})
            for item in items
        ]

    async def get_resources(self, filters: ResourceFilters | None = None) -> list[ResourceItem]:
        """Library listing with the local bookmark set merged in.

        Paging is applied here, after the bookmark filter, so the data
        source always returns the full filtered list.
        """
        filters = filters or ResourceFilters()
        unpaged = filters.model_copy(update={"limit": None, "offset": None})
        items = self._merge_bookmarks(await self.data_source.get_resources(unpaged))

        if filters.bookmarked is not None:
            items = [it for it in items if it.bookmarked == filters.bookmarked]

        start = filters.offset or 0
        if filters.limit is not None:
            return items[start : start + filters.limit]
        return items[start:]

    async def get_resource_by_id(self, resource_id: str) -> ResourceItem:
        item = await self.data_source.get_resource_by_id(resource_id)
        return self._merge_bookmarks([item])[0]

    async def get_program_resources(self, slug: str) -> list[ResourceItem]:
        return self._merge_bookmarks(await self.data_source.get_program_resources(slug))

    async def get_bookmarked_resources(self) -> list[ResourceItem]:
        return await self.get_resources(ResourceFilters(bookmarked=True))

    def toggle_bookmark(self, resource_id: str, value: bool | None = None) -> bool:
        """Set or flip a bookmark. Returns the new state."""
        bookmarks = load_bookmarks(self.store)
        should = (resource_id not in bookmarks) if value is None else value
        if should:
            bookmarks.add(resource_id)
        else:
            bookmarks.discard(resource_id)
        save_bookmarks(self.store, bookmarks)
        return should

    async def get_dashboard(self) -> Dashboard:
        programs, quick_access, bookmarks, activity, announcements = await asyncio.gather(
            self.get_programs(),
            self.get_quick_access(),
            self.get_bookmarked_resources(),
            self.get_recent_activity(),
            self.get_announcements(),
        )
        return Dashboard(
            programs=programs,
            quick_access=quick_access,
            bookmarks=bookmarks,
            recent_activity=activity,
            announcements=announcements,
        )

    async def test_connection(self) -> dict:
        """Probe the data source by loading programs."""
        try:
            programs = await self.get_programs()
        except (PortalError, httpx.HTTPError) as e:
            logger.warning("Connection test failed: %s", e)
            return {"ok": False, "error": str(e) or "Unknown error"}
        return {"ok": isinstance(programs, list)}


def build_portal(
    settings: Settings,
    store: KeyValueStore | None = None,
    client: AirtableClient | None = None,
) -> PortalFacade:
    """Construct the facade with the data source selected from configuration."""
    return PortalFacade(
        build_data_source(settings, client),
        store or JsonFileStore(Path(settings.store_path)),
    )


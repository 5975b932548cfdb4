"""Data sources behind the portal facade.

The facade depends on the PortalDataSource interface only. The concrete
source is chosen once at startup from configuration: AirtableDataSource when
credentials are present, FixtureDataSource (static demo data) otherwise.
"""

import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from portal import fixtures
from portal.config import Settings
from portal.errors import InvalidCredentialsError, NotFoundError
from portal.schemas.content import Announcement, QuickAccessItem, RecentActivity
from portal.schemas.members import MemberAccount
from portal.schemas.programs import ClinicalProgram
from portal.schemas.resources import ResourceFilters, ResourceItem, ResourceType
from portal.services.airtable_client import AirtableClient
from portal.services.member_auth import MemberAuthenticator
from portal.services.resource_aggregator import ResourceAggregator, apply_filters

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
MIN_DEMO_PASSWORD_LENGTH = 8


class PortalDataSource(ABC):
    """Read capability consumed by PortalFacade."""

    name: str = "abstract"
    token: str = ""

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> MemberAccount: ...

    @abstractmethod
    async def get_programs(self) -> list[ClinicalProgram]: ...

    @abstractmethod
    async def get_resources(self, filters: ResourceFilters) -> list[ResourceItem]: ...

    @abstractmethod
    async def get_resource_by_id(self, resource_id: str) -> ResourceItem: ...

    @abstractmethod
    async def get_program_resources(self, slug: str) -> list[ResourceItem]: ...

    async def get_quick_access(self) -> list[QuickAccessItem]:
        return [item.model_copy() for item in fixtures.QUICK_ACCESS]

    async def get_announcements(self) -> list[Announcement]:
        return [item.model_copy() for item in fixtures.ANNOUNCEMENTS]

    async def get_recent_activity(self) -> list[RecentActivity]:
        return [item.model_copy() for item in fixtures.RECENT_ACTIVITY]

    async def close(self) -> None:
        return None


class AirtableDataSource(PortalDataSource):
    """Live catalog reads and member login against the Airtable base.

    The catalog base has no quick-access, announcement or activity tables,
    so those still come from the static dataset.
    """

    name = "airtable"
    token = "real-jwt-token"

    def __init__(self, client: AirtableClient):
        self.client = client
        self.aggregator = ResourceAggregator(client)
        self.authenticator = MemberAuthenticator(client)

    async def authenticate(self, email: str, password: str) -> MemberAccount:
        return await self.authenticator.authenticate(email, password)

    async def get_programs(self) -> list[ClinicalProgram]:
        return await self.aggregator.get_programs()

    async def get_resources(self, filters: ResourceFilters) -> list[ResourceItem]:
        return await self.aggregator.get_resources(filters)

    async def get_resource_by_id(self, resource_id: str) -> ResourceItem:
        return await self.aggregator.get_resource_by_id(resource_id)

    async def get_program_resources(self, slug: str) -> list[ResourceItem]:
        return await self.aggregator.get_program_documentation_forms(slug)

    async def close(self) -> None:
        await self.client.close()


class FixtureDataSource(PortalDataSource):
    """Static demo dataset; accepts any well-formed email with an 8+ char password."""

    name = "fixtures"
    token = fixtures.MOCK_TOKEN

    async def authenticate(self, email: str, password: str) -> MemberAccount:
        if not _EMAIL_RE.match(email) or len(password) < MIN_DEMO_PASSWORD_LENGTH:
            raise InvalidCredentialsError("Invalid email or password.")
        return fixtures.MOCK_MEMBER.model_copy(
            update={
                "email": email,
                "last_login_iso": datetime.now(timezone.utc).isoformat(),
            }
        )

    async def get_programs(self) -> list[ClinicalProgram]:
        return [p.model_copy() for p in fixtures.PROGRAMS]

    async def get_resources(self, filters: ResourceFilters) -> list[ResourceItem]:
        return apply_filters([r.model_copy() for r in fixtures.RESOURCES], filters)

    async def get_resource_by_id(self, resource_id: str) -> ResourceItem:
        for resource in fixtures.RESOURCES:
            if resource.id == resource_id:
                return resource.model_copy()
        raise NotFoundError("Resource not found")

    async def get_program_resources(self, slug: str) -> list[ResourceItem]:
        return [
            r.model_copy()
            for r in fixtures.RESOURCES
            if r.program == slug and r.type == ResourceType.DOCUMENTATION_FORMS
        ]


def build_data_source(settings: Settings, client: AirtableClient | None = None) -> PortalDataSource:
    """Pick the data source once, from configuration."""
    mode = settings.data_source
    if mode == "airtable" or (mode == "auto" and settings.airtable_configured):
        logger.info("Portal data source: airtable")
        return AirtableDataSource(client or AirtableClient.from_settings(settings))
    logger.info("Portal data source: fixtures")
    return FixtureDataSource()

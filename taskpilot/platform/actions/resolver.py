"""Entity resolver: human-readable names to Asana gids.

Lookups list every entity of a kind within a scope (cursor-paginated), match names
case-insensitively, and create the entity when it is missing and the kind allows it.
Listings and created entities are cached for the lifetime of one batch.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from taskpilot.core.exceptions import NotFoundException, RemoteApiError
from taskpilot.core.logging import ContextualLogger
from taskpilot.core.logging import logger as default_logger
from taskpilot.platform.http_client.asana_client import AsanaClient


class EntityKind(str, Enum):
    """Kinds of entities the resolver can look up."""

    TAG = "tag"
    SECTION = "section"
    USER = "user"


class ResolutionStatus(str, Enum):
    """How a lookup ended."""

    FOUND = "found"
    CREATED = "created"
    ABSENT = "absent"


@dataclass(frozen=True)
class EntityReference:
    """A resolved gid and the lookup key that produced it."""

    kind: EntityKind
    scope: str
    name: str
    gid: str


@dataclass(frozen=True)
class Resolution:
    """Result of a lookup.

    ``ABSENT`` is the soft "no such entity" outcome; hard failures raise instead.
    """

    status: ResolutionStatus
    reference: Optional[EntityReference] = None

    @property
    def gid(self) -> Optional[str]:
        """Resolved gid, or None when absent."""
        return self.reference.gid if self.reference else None

    @property
    def is_absent(self) -> bool:
        """Whether the entity does not exist."""
        return self.status == ResolutionStatus.ABSENT


@dataclass(frozen=True)
class _KindRoutes:
    list_path: str
    match_field: str
    opt_fields: str
    create_path: Optional[str] = None


_ROUTES: Dict[EntityKind, _KindRoutes] = {
    EntityKind.TAG: _KindRoutes(
        list_path="/workspaces/{scope}/tags",
        match_field="name",
        opt_fields="name",
        create_path="/tags",
    ),
    EntityKind.SECTION: _KindRoutes(
        list_path="/projects/{scope}/sections",
        match_field="name",
        opt_fields="name",
        create_path="/projects/{scope}/sections",
    ),
    EntityKind.USER: _KindRoutes(
        list_path="/workspaces/{scope}/users",
        match_field="email",
        opt_fields="email,name",
    ),
}


def _normalize(name: str) -> str:
    return name.strip().lower()


class EntityResolver:
    """Resolves tag, section and user names to gids within one batch.

    One instance per batch: its cache must never outlive the batch that built it.
    """

    def __init__(self, client: AsanaClient, logger: Optional[ContextualLogger] = None):
        """Initialize the resolver.

        Args:
            client: Gateway used for listings and creates
            logger: Optional contextual logger
        """
        self._client = client
        self.logger = logger or default_logger.with_context(component="entity_resolver")
        # (kind, scope) -> {normalized name: gid}, successful listings only
        self._listings: Dict[Tuple[EntityKind, str], Dict[str, str]] = {}
        # (kind, scope, normalized name) -> gid, entities created during this batch
        self._created: Dict[Tuple[EntityKind, str, str], str] = {}

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def lookup(self, kind: EntityKind, name: str, scope: str) -> Resolution:
        """Find an existing entity by name without creating it.

        Args:
            kind: Entity kind
            name: Name (or email, for users), matched case-insensitively
            scope: Workspace gid (tags, users) or project gid (sections)

        Returns:
            FOUND resolution, or ABSENT when no entity matches
        """
        key = _normalize(name)
        gid = self._created.get((kind, scope, key))
        if gid is None:
            mapping = await self._mapping(kind, scope)
            gid = mapping.get(key)
        if gid is None:
            return Resolution(ResolutionStatus.ABSENT)
        return Resolution(ResolutionStatus.FOUND, EntityReference(kind, scope, key, gid))

    async def resolve(self, kind: EntityKind, name: str, scope: str) -> Resolution:
        """Find an entity by name, creating it when missing and the kind allows creation.

        Args:
            kind: Entity kind
            name: Name (or email, for users)
            scope: Workspace gid (tags, users) or project gid (sections)

        Returns:
            FOUND or CREATED resolution; ABSENT only for kinds that cannot be created

        Raises:
            RemoteApiError: If the create call fails
        """
        found = await self.lookup(kind, name, scope)
        if not found.is_absent or _ROUTES[kind].create_path is None:
            return found

        gid = await self._create(kind, name.strip(), scope)
        key = _normalize(name)
        self._created[(kind, scope, key)] = gid
        return Resolution(ResolutionStatus.CREATED, EntityReference(kind, scope, key, gid))

    async def resolve_or_create(self, kind: EntityKind, name: str, scope: str) -> str:
        """Return the gid for a name, creating the entity if permitted.

        Raises:
            NotFoundException: If no entity matches and the kind cannot be created
            RemoteApiError: If the create call fails
        """
        resolution = await self.resolve(kind, name, scope)
        if resolution.is_absent:
            raise NotFoundException(f"No {kind.value} matching '{name}' in {scope}")
        return resolution.gid

    # -------------------------------------------------------------------------
    # Internal Methods
    # -------------------------------------------------------------------------

    async def _mapping(self, kind: EntityKind, scope: str) -> Dict[str, str]:
        cached = self._listings.get((kind, scope))
        if cached is not None:
            return cached

        routes = _ROUTES[kind]
        path = routes.list_path.format(scope=scope)
        mapping: Dict[str, str] = {}
        try:
            async for item in self._client.paginate(path, params={"opt_fields": routes.opt_fields}):
                if not isinstance(item, dict):
                    continue
                value = item.get(routes.match_field)
                if isinstance(value, str) and item.get("gid"):
                    # First match wins
                    mapping.setdefault(_normalize(value), item["gid"])
        except RemoteApiError as e:
            # Best effort: an unreadable listing counts as empty and is not cached
            self.logger.warning(
                f"Listing {kind.value}s in {scope} failed, treating as empty: {e}"
            )
            return {}

        self.logger.debug(f"Loaded {len(mapping)} {kind.value}(s) for scope {scope}")
        self._listings[(kind, scope)] = mapping
        return mapping

    async def _create(self, kind: EntityKind, name: str, scope: str) -> str:
        routes = _ROUTES[kind]
        body: Dict[str, Any] = {"name": name}
        if kind == EntityKind.TAG:
            body["workspace"] = scope

        envelope = await self._client.post(routes.create_path.format(scope=scope), body)
        gid = (envelope.get("data") or {}).get("gid")
        if not gid:
            raise RemoteApiError(
                f"Create {kind.value} '{name}' returned no gid",
                method="POST",
                path=routes.create_path.format(scope=scope),
            )
        self.logger.info(f"Created {kind.value} '{name}' ({gid}) in {scope}")
        return gid

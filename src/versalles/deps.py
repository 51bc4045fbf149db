"""Dependency injection singletons for Versalles."""

from versalles.campaigns.service import CampaignService
from versalles.common.config import get_settings
from versalles.common.database import DatabaseManager
from versalles.forums.service import ForumService
from versalles.guilds.service import GuildService
from versalles.identity.provider import IdentityProviderClient
from versalles.session.codec import SessionCodec
from versalles.session.resolver import SessionUserResolver
from versalles.session.routes import RouteTable
from versalles.users.service import UserService
from versalles.workshop.service import WorkshopService

_db: DatabaseManager | None = None
_codec: SessionCodec | None = None
_routes: RouteTable | None = None
_identity: IdentityProviderClient | None = None
_users: UserService | None = None
_resolver: SessionUserResolver | None = None
_campaigns: CampaignService | None = None
_guilds: GuildService | None = None
_forums: ForumService | None = None
_workshop: WorkshopService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_session_codec() -> SessionCodec:
    global _codec
    if _codec is None:
        _codec = SessionCodec.from_settings(get_settings())
    return _codec


def get_route_table() -> RouteTable:
    global _routes
    if _routes is None:
        _routes = RouteTable.default()
    return _routes


def get_identity_provider() -> IdentityProviderClient:
    global _identity
    if _identity is None:
        _identity = IdentityProviderClient.from_settings(get_settings())
    return _identity


def set_identity_provider(provider: IdentityProviderClient | None) -> None:
    """Swap the identity provider client (tests point it at a fake transport)."""
    global _identity
    _identity = provider


def get_user_service() -> UserService:
    global _users
    if _users is None:
        _users = UserService()
    return _users


def get_user_resolver() -> SessionUserResolver:
    global _resolver
    if _resolver is None:
        _resolver = SessionUserResolver(
            get_db(), get_user_service(), timeout=get_settings().store_timeout
        )
    return _resolver


def get_campaign_service() -> CampaignService:
    global _campaigns
    if _campaigns is None:
        _campaigns = CampaignService()
    return _campaigns


def get_guild_service() -> GuildService:
    global _guilds
    if _guilds is None:
        _guilds = GuildService()
    return _guilds


def get_forum_service() -> ForumService:
    global _forums
    if _forums is None:
        _forums = ForumService()
    return _forums


def get_workshop_service() -> WorkshopService:
    global _workshop
    if _workshop is None:
        _workshop = WorkshopService()
    return _workshop


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _codec, _routes, _identity, _users, _resolver
    global _campaigns, _guilds, _forums, _workshop
    _db = None
    _codec = None
    _routes = None
    _identity = None
    _users = None
    _resolver = None
    _campaigns = None
    _guilds = None
    _forums = None
    _workshop = None

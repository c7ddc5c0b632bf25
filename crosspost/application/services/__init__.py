from .audit import record_audit
from .connection_service import ConnectionService, OAuthClient, parse_provider
from .publish_service import PublishDispatcher
from .workspace_access import WorkspaceAccessService

__all__ = [
    "ConnectionService",
    "OAuthClient",
    "PublishDispatcher",
    "WorkspaceAccessService",
    "parse_provider",
    "record_audit",
]

"""Composed API server class."""

from __future__ import annotations

from .server_config import ApiConfig
from .server_core import ApiServerCoreMixin
from .server_routes import ApiServerRoutesMixin
from .server_rules import ApiServerRulesMixin
from .server_scans import ApiServerScansMixin
from .server_security import ApiServerSecurityMixin


class ApiServer(
    ApiServerCoreMixin,
    ApiServerSecurityMixin,
    ApiServerScansMixin,
    ApiServerRulesMixin,
    ApiServerRoutesMixin,
):
    """JSON API server composed from mixins."""


__all__ = ["ApiConfig", "ApiServer"]

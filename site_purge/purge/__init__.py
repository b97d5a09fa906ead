# File: site_purge/purge/__init__.py
"""site_purge.purge: удаление неиспользуемых CSS-правил по корпусу HTML."""

from site_purge.purge.models import ContentEntry, PurgeRequest, PurgeResult
from site_purge.purge.purger import CssPurger
from site_purge.purge.whitelist import Whitelist, build_whitelist, get_base_whitelist

__all__ = [
    "ContentEntry",
    "PurgeRequest",
    "PurgeResult",
    "CssPurger",
    "Whitelist",
    "build_whitelist",
    "get_base_whitelist",
]

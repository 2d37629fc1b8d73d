"""Job-board integrations for listing discovery"""

from typing import Optional

import httpx

from .base import BaseSourceClient, SourceDescriptor
from .greenhouse import GreenhouseClient
from .workable import WorkableClient

CLIENT_TYPES: dict[str, type[BaseSourceClient]] = {
    "greenhouse": GreenhouseClient,
    "workable": WorkableClient,
}


def build_client(
    descriptor: SourceDescriptor,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Optional[BaseSourceClient]:
    """Instantiate the client for a descriptor, or None if its kind has no API"""
    client_cls = CLIENT_TYPES.get(descriptor.kind)
    if client_cls is None:
        return None
    return client_cls(descriptor, http_client=http_client)


__all__ = [
    "BaseSourceClient",
    "SourceDescriptor",
    "GreenhouseClient",
    "WorkableClient",
    "CLIENT_TYPES",
    "build_client",
]

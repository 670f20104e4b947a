"""Adaptateur mirror node Hedera (consultation des associations)."""

from tokenqueue.adapters.mirror_node.client import MirrorNodeClient
from tokenqueue.adapters.mirror_node.retry import (
    MirrorNodeError,
    MirrorNodeUnavailableError,
    RateLimitError,
    request_with_retry,
)

__all__ = [
    "MirrorNodeClient",
    "MirrorNodeError",
    "MirrorNodeUnavailableError",
    "RateLimitError",
    "request_with_retry",
]

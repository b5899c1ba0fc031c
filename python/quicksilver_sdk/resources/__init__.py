"""
Resource controllers, one per API area. Each wraps the shared HttpClient.
"""

from .accounts import AccountsResource
from .admin import AdminResource
from .gateways import GatewaysResource
from .health import HealthResource
from .kyc import KycResource
from .streams import StreamsResource
from .transactions import TransactionsResource

__all__ = [
    "AccountsResource",
    "AdminResource",
    "GatewaysResource",
    "HealthResource",
    "KycResource",
    "StreamsResource",
    "TransactionsResource",
]

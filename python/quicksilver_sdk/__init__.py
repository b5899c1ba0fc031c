"""
Location: python/quicksilver_sdk/__init__.py

Summary:
    Main package initialization for quicksilver-sdk. Exports all public
    classes and functions for convenient importing.

Usage:
    from quicksilver_sdk import QuicksilverClient, StreamConnection, Action

    # Or import specific modules
    from quicksilver_sdk.builders import ConditionBuilder
    from quicksilver_sdk.transport_sse import EventSource, ReadyState

Version: 0.1.0
"""

from .client import QuicksilverClient
from .connection import StreamConnection
from .transport_sse import EventSource, EventSourceTransport, ReadyState
from .http import HttpClient
from .models import Account, Transaction
from .builders import (
    Action,
    ActionBuilder,
    ConditionBuilder,
    Product,
    ProductBuilder,
)
from .resources import (
    AccountsResource,
    AdminResource,
    GatewaysResource,
    HealthResource,
    KycResource,
    StreamsResource,
    TransactionsResource,
)
from .types import (
    AccountData,
    TransactionData,
    StreamingTransaction,
    CreateAccountPayload,
    CreateTransactionPayload,
    CreateStreamingTransactionPayload,
    StatusResponse,
    SSEStreamEvent,
    SSEBatchCreatedEvent,
    APIError,
    PaginatedResponse,
    ReconnectPolicy,
    Event,
)
from .errors import (
    QuicksilverError,
    APIErrorResponse,
    NetworkError,
    AuthenticationError,
    NotFoundError,
    ValidationError,
    RateLimitError,
    ServerError,
    InvalidStateError,
    StreamError,
    TransportError,
    StreamParseError,
    ReconnectExhaustedError,
)

__version__ = "0.1.0"

__all__ = [
    # Main client
    "QuicksilverClient",
    # Real-time
    "StreamConnection",
    "EventSource",
    "EventSourceTransport",
    "ReadyState",
    "ReconnectPolicy",
    # HTTP
    "HttpClient",
    # Active models
    "Account",
    "Transaction",
    # Builders
    "Action",
    "ActionBuilder",
    "ConditionBuilder",
    "Product",
    "ProductBuilder",
    "Event",
    # Resources
    "AccountsResource",
    "AdminResource",
    "GatewaysResource",
    "HealthResource",
    "KycResource",
    "StreamsResource",
    "TransactionsResource",
    # Types
    "AccountData",
    "TransactionData",
    "StreamingTransaction",
    "CreateAccountPayload",
    "CreateTransactionPayload",
    "CreateStreamingTransactionPayload",
    "StatusResponse",
    "SSEStreamEvent",
    "SSEBatchCreatedEvent",
    "APIError",
    "PaginatedResponse",
    # Exceptions
    "QuicksilverError",
    "APIErrorResponse",
    "NetworkError",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "ServerError",
    "InvalidStateError",
    "StreamError",
    "TransportError",
    "StreamParseError",
    "ReconnectExhaustedError",
]

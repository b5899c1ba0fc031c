"""
Location: python/quicksilver_sdk/types.py

Summary:
    Pydantic models for quicksilver-sdk. Defines the wire shapes of accounts,
    transactions and streaming transactions, request payloads, the payloads
    of real-time events, and configuration models such as ReconnectPolicy.

Usage:
    These models are used by the resources, the active-record models in
    quicksilver_sdk.models and the realtime StreamConnection. Wire models
    keep unknown fields so newer server responses round-trip untouched.
    Timestamps are ISO-8601 strings, exactly as the API sends them.

Example:
    from quicksilver_sdk.types import SSEBatchCreatedEvent

    connection.on(
        "batch_created",
        lambda data: print(SSEBatchCreatedEvent.model_validate(data).amount),
    )
"""

from enum import Enum
from typing import Any, Generic, Literal, Optional, TypeVar, Union
from pydantic import BaseModel, Field


T = TypeVar("T")

AccountType = Literal["Human", "AgentMain", "AgentDelegated"]
TransactionType = Literal["Payment", "Escrow", "Stream", "Scheduled", "Fund", "Refund"]
TransactionState = Literal["Draft", "Pending", "Executing", "Completed", "Failed", "Cancelled"]
VerificationStatus = Literal["unverified", "pending", "verified", "rejected"]

# Either a well-known code ("USD") or {"Custom": "XYZ"}
Currency = Union[str, dict[str, str]]
StreamRateUnit = Union[str, dict[str, str]]

_WIRE_CONFIG = {"populate_by_name": True, "extra": "allow"}


class AccountLimits(BaseModel):
    """Spending limits of an account. None means unlimited."""
    daily: Optional[float] = None
    per_transaction: Optional[float] = None
    total: Optional[float] = None


class KycData(BaseModel):
    document_type: Optional[str] = None
    document_number: Optional[str] = None
    verified_by: Optional[str] = None


class Verification(BaseModel):
    """
    Verification block of an account.

    Attributes:
        status: One of unverified, pending, verified, rejected
        verified_at: ISO timestamp of verification
        kyc_data: Supporting KYC data, if any
    """
    status: VerificationStatus = "unverified"
    verified_at: Optional[str] = None
    kyc_data: Optional[KycData] = None


class AccountData(BaseModel):
    """
    An account as returned by the API.

    Attributes:
        id: Account identifier
        name: Display name
        account_type: Human, AgentMain or AgentDelegated
        parent_id: Parent account for delegated agents
        meta: Free-form metadata
        limits: Spending limits
        verification: Verification status block
        children: Identifiers of delegated child accounts
    """
    id: str
    name: str
    account_type: AccountType
    parent_id: Optional[str] = None
    public_key: Optional[str] = None
    meta: dict[str, Any] = Field(default_factory=dict)
    limits: AccountLimits = Field(default_factory=AccountLimits)
    verification: Verification = Field(default_factory=Verification)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    children: list[str] = Field(default_factory=list)

    model_config = _WIRE_CONFIG


class TransactionData(BaseModel):
    """
    A transaction as returned by the API.

    `from` is a Python keyword, so the source account lives on `from_`
    and is serialized under its wire name via the alias.
    """
    id: str = ""
    transaction_type: TransactionType
    amount: float
    currency: Currency = "USD"
    from_: str = Field(alias="from")
    to: Optional[str] = None
    parent_id: Optional[str] = None
    children: list[str] = Field(default_factory=list)
    state: TransactionState = "Draft"
    conditions: Optional[list[dict[str, Any]]] = None
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    executed_at: Optional[str] = None

    model_config = _WIRE_CONFIG


class StreamingTransaction(BaseModel):
    """
    A streaming transaction: a base transaction paid out at a rate.

    Attributes:
        base: The underlying transaction
        rate: Amount per rate unit
        rate_unit: PerSecond, PerMinute, PerHour, PerWord, PerToken or {"Custom": ...}
        accumulated: Amount accrued so far
        last_batch: Timestamp of the last settled batch
    """
    base: TransactionData
    rate: float
    rate_unit: StreamRateUnit
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    accumulated: float = 0
    last_batch: Optional[str] = None

    model_config = _WIRE_CONFIG


class CreateAccountPayload(BaseModel):
    name: str
    account_type: AccountType
    parent_id: Optional[str] = None
    public_key: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    limits: Optional[AccountLimits] = None
    verification: Optional[Verification] = None


class CreateTransactionPayload(BaseModel):
    amount: float
    currency: Currency = "USD"
    transaction_type: TransactionType
    from_: str = Field(alias="from")
    to: Optional[str] = None
    parent_id: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    conditions: Optional[list[dict[str, Any]]] = None

    model_config = {"populate_by_name": True}


class CreateStreamingTransactionPayload(BaseModel):
    rate: float
    rate_unit: StreamRateUnit
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class StatusResponse(BaseModel):
    """Result of pausing, resuming or stopping a stream."""
    status: Literal["paused", "resumed", "stopped"]
    stream_id: str
    timestamp: str

    model_config = _WIRE_CONFIG


class SSEStreamEvent(BaseModel):
    """Payload of a `stream_event` frame: a stream lifecycle change."""
    stream_id: str
    event_type: Literal["streamstarted", "paused", "resumed", "stopped", "completed"]
    timestamp: str


class SSEBatchCreatedEvent(BaseModel):
    """Payload of a `batch_created` frame: a settled streaming batch."""
    stream_id: str
    batch_transaction_id: str
    amount: float
    timestamp: str


class APIError(BaseModel):
    """Structured error body returned by the API."""
    error: str
    message: str
    status_code: int
    details: Optional[dict[str, Any]] = None


class Pagination(BaseModel):
    page: int = 1
    limit: int = 0
    total: int = 0
    has_more: bool = False
    next_cursor: Optional[str] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """
    One page of a list endpoint.

    Attributes:
        data: Items on this page
        pagination: Page position and whether more pages exist
    """
    data: list[T]
    pagination: Pagination = Field(default_factory=Pagination)

    model_config = {"arbitrary_types_allowed": True}


class SystemStats(BaseModel):
    total_accounts: int
    total_transactions: int
    active_streams: int

    model_config = _WIRE_CONFIG


class GatewayInfo(BaseModel):
    name: str
    type: str
    enabled: bool
    supported_currencies: Optional[list[str]] = None

    model_config = _WIRE_CONFIG


class GatewayTransaction(BaseModel):
    id: str
    gateway: str
    status: Literal["pending", "completed", "failed"]
    amount: float
    currency: str
    external_id: Optional[str] = None
    error: Optional[str] = None
    created_at: str
    completed_at: Optional[str] = None

    model_config = _WIRE_CONFIG


class KycAddress(BaseModel):
    street: str
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str


class KycInitiatePayload(BaseModel):
    account_id: str
    first_name: str
    last_name: str
    email: str
    date_of_birth: Optional[str] = None
    address: Optional[KycAddress] = None


class KycInitiateResponse(BaseModel):
    success: bool
    verification_url: Optional[str] = None
    session_id: Optional[str] = None
    message: Optional[str] = None

    model_config = _WIRE_CONFIG


class KycStatus(BaseModel):
    account_id: str
    status: Literal["pending", "in_review", "verified", "rejected"]
    verified_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    kyc_provider: Optional[str] = None
    kyc_data: Optional[dict[str, Any]] = None

    model_config = _WIRE_CONFIG


class HealthStatus(BaseModel):
    status: Literal["healthy", "unhealthy"]
    timestamp: str
    version: Optional[str] = None
    services: Optional[dict[str, str]] = None

    model_config = _WIRE_CONFIG


class PingResponse(BaseModel):
    message: str
    timestamp: str

    model_config = _WIRE_CONFIG


class ReconnectPolicy(BaseModel):
    """
    Reconnection settings for a StreamConnection.

    Attributes:
        max_attempts: Reconnection attempts allowed before giving up
        initial_delay: Delay in seconds before the first attempt; also the
                       value the delay resets to after a successful open
        max_delay: Ceiling in seconds for the doubling delay
    """
    max_attempts: int = Field(5, ge=0)
    initial_delay: float = Field(1.0, gt=0)
    max_delay: float = Field(30.0, gt=0)


class Event(str, Enum):
    """Triggers understood by conditional logic (ConditionBuilder.when)."""
    MILESTONE_APPROVED = "milestone_approved"
    TIME_ELAPSED = "time_elapsed"
    API_CALL_SUCCESS = "api_call_success"
    API_CALL_FAILURE = "api_call_failure"
    PAYMENT_RECEIVED = "payment_received"
    STREAM_STARTED = "stream_started"
    STREAM_STOPPED = "stream_stopped"
    CUSTOM = "custom"


class ProductPricing(BaseModel):
    model: Literal["per_unit", "streaming"] = "per_unit"
    rate: float = 0
    unit: str = "item"
    currency: Currency = "USD"


class WorkflowStage(BaseModel):
    """One stage of a multi-agent product workflow."""
    name: str
    delegate_to: str = Field(alias="delegateTo")
    charge: float

    model_config = {"populate_by_name": True}


class ProductDefinition(BaseModel):
    """
    Wire form of a programmable product.

    Attributes:
        id: Product identifier
        pricing: Unit or streaming pricing
        guarantees: Service level guarantees, free-form
        workflow: Ordered workflow stages
    """
    id: str
    pricing: ProductPricing = Field(default_factory=ProductPricing)
    guarantees: dict[str, Any] = Field(default_factory=dict)
    workflow: list[WorkflowStage] = Field(default_factory=list)

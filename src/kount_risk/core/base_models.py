"""Order input, evaluation options and normalized result schemas."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Environment(str, Enum):
    """Kount deployment targets."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"


class Decision(str, Enum):
    """Normalized risk verdicts."""

    APPROVE = "APPROVE"
    DECLINE = "DECLINE"
    REVIEW = "REVIEW"
    UNKNOWN = "UNKNOWN"


class EvaluationMode(str, Enum):
    """Whether the order is evaluated before or after payment authorization."""

    PRE_AUTH = "pre_auth"
    POST_AUTH = "post_auth"


@dataclass(frozen=True)
class BearerToken:
    """
    Cached OAuth access token.

    expires_at already has the refresh buffer subtracted, so a token is
    usable while now < expires_at.
    """

    token: str
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at


class KountCredentials(BaseModel):
    """Per-company credentials resolved by the settings layer."""

    api_key: str = Field(..., min_length=1, description="API key (client secret or pre-encoded Basic value)")
    client_id: str | None = Field(default=None, description="OAuth client id, when issued separately")
    environment: Environment = Environment.SANDBOX

    def __repr__(self) -> str:
        return f"KountCredentials(environment={self.environment.value!r}, client_id={self.client_id!r})"


# =============================================================================
# Order input
# =============================================================================


class _InputModel(BaseModel):
    """Loose input record: unknown keys are ignored, numbers may arrive as strings."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class CustomerInput(_InputModel):
    id: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    ip_address: str | None = None
    date_of_birth: str | None = None
    account_type: str | None = None
    account_created_at: Any = None
    account_is_active: bool | None = None


class AddressInput(_InputModel):
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None


class PhysicalAttributes(_InputModel):
    color: str | None = None
    size: str | None = None
    weight: str | None = None
    height: str | None = None
    width: str | None = None
    depth: str | None = None


class ItemInput(_InputModel):
    id: str | None = None
    sku: str | None = None
    name: str | None = None
    description: str | None = None
    quantity: int | None = None
    price: float | None = None
    category: str | None = None
    sub_category: str | None = None
    is_digital: bool | None = None
    is_service: bool | None = None
    upc: str | None = None
    brand: str | None = None
    url: str | None = None
    image_url: str | None = None
    physical_attributes: PhysicalAttributes | None = None
    descriptors: list[str] | None = None


class PaymentInput(_InputModel):
    type: str | None = None
    token: str | None = None
    bin: str | None = None
    last4: str | None = None
    brand: str | None = None


class ShippingInput(_InputModel):
    amount: float | None = None
    provider: str | None = None
    tracking_number: str | None = None
    method: str | None = None


class StoreInput(_InputModel):
    id: str | None = None
    name: str | None = None
    address: AddressInput | None = None


class TaxInput(_InputModel):
    is_taxable: bool | None = None
    taxable_country_code: str | None = None
    tax_amount: float | None = None
    out_of_state_tax_amount: float | None = None


class VerificationResponseInput(_InputModel):
    cvv_status: str | None = None
    avs_status: str | None = None


class AuthorizationStatusInput(_InputModel):
    auth_result: str | None = None
    date_time: Any = None
    verification_response: VerificationResponseInput | None = None
    decline_code: str | None = None
    processor_auth_code: str | None = None
    processor_transaction_id: str | None = None
    acquirer_reference_number: str | None = None


class DiscountInput(_InputModel):
    percentage: float | None = None
    amount: float | None = None
    currency: str | None = None


class CreditInput(_InputModel):
    credit_type: str | None = None
    amount: float | None = None
    currency: str | None = None


class PromotionInput(_InputModel):
    id: str | None = None
    description: str | None = None
    status: str | None = None
    status_reason: str | None = None
    discount: DiscountInput | None = None
    credit: CreditInput | None = None


class LoyaltyInput(_InputModel):
    id: str | None = None
    description: str | None = None
    credit: CreditInput | None = None


class OrderInput(_InputModel):
    """
    Caller-supplied order.

    Only the required set is enforced here; blank checks on those fields
    happen in validate_order so the caller gets one deterministic cause.
    """

    order_id: str
    session_id: str
    total_amount: float = Field(..., ge=0)
    currency: str = Field(..., min_length=3, max_length=3)
    created_at: Any
    channel: str | None = None
    merchant_category_code: str | None = None

    customer: CustomerInput
    payment: PaymentInput
    items: list[ItemInput] = Field(default_factory=list)

    # Fulfillment
    shipping_address: AddressInput | None = None
    shipping: ShippingInput | None = None
    fulfillment_type: str | None = None
    fulfillment_status: str | None = None
    access_url: str | None = None
    store: StoreInput | None = None
    merchant_fulfillment_id: str | None = None

    # Transaction
    processor: str | None = None
    processor_merchant_id: str | None = None
    order_total: float | None = None
    tax: TaxInput | None = None
    billing_address: AddressInput | None = None
    transaction_status: str | None = None
    authorization_status: AuthorizationStatusInput | None = None

    # Extras
    promotions: list[PromotionInput] = Field(default_factory=list)
    loyalty: LoyaltyInput | None = None
    custom_fields: dict[str, Any] | None = None


# =============================================================================
# Options and result
# =============================================================================


class EvaluationOptions(BaseModel):
    """Per-call evaluation options."""

    model_config = ConfigDict(extra="ignore")

    risk_inquiry: bool = True
    exclude_device: bool = False
    mode: EvaluationMode = EvaluationMode.POST_AUTH


class EvaluationResult(BaseModel):
    """
    Normalized Kount decision.

    raw keeps the full provider body for audit and debugging.
    """

    decision: Decision = Field(..., description="Normalized verdict, never absent")
    risk_score: float | None = Field(default=None, description="Kount Omniscore")
    reason_codes: list[str] = Field(default_factory=list)
    transaction_id: str | None = None
    order_id: str | None = Field(default=None, description="Kount order id")
    merchant_order_id: str | None = None
    persona: Any = None
    provider_decision: str | None = Field(default=None, description="Verdict as sent by Kount")
    raw: dict[str, Any] = Field(default_factory=dict)

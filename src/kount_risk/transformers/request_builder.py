"""Maps inbound orders to the Kount v2 order request schema."""

import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..config import Settings, settings as default_settings
from ..core.base_models import (
    AddressInput,
    AuthorizationStatusInput,
    CreditInput,
    CustomerInput,
    EvaluationMode,
    ItemInput,
    LoyaltyInput,
    OrderInput,
    PromotionInput,
    StoreInput,
)
from ..core.token_cache import utc_now
from ..validators.nulls import compact
from ..validators.timestamps import format_optional_time, format_order_time

# Fulfillment types used when the caller does not send one
FULFILLMENT_TYPE_DIGITAL = "DIGITAL"
FULFILLMENT_TYPE_SHIPPED = "SHIPPED"

# Simple renames (source attribute -> Kount key) for flat sub-records
ITEM_FIELD_MAP = {
    "name": "name",
    "description": "description",
    "category": "category",
    "sub_category": "subCategory",
    "is_digital": "isDigital",
    "is_service": "isService",
    "sku": "sku",
    "upc": "upc",
    "brand": "brand",
    "url": "url",
    "image_url": "imageUrl",
    "descriptors": "descriptors",
}

ADDRESS_FIELD_MAP = {
    "address1": "line1",
    "address2": "line2",
    "city": "city",
    "region": "region",
    "country": "countryCode",
    "postal_code": "postalCode",
}

PAYMENT_FIELD_MAP = {
    "type": "type",
    "token": "paymentToken",
    "bin": "bin",
    "last4": "last4",
    "brand": "cardBrand",
}

SHIPPING_FIELD_MAP = {
    "amount": "amount",
    "provider": "provider",
    "tracking_number": "trackingNumber",
    "method": "method",
}

TAX_FIELD_MAP = {
    "is_taxable": "isTaxable",
    "taxable_country_code": "taxableCountryCode",
    "tax_amount": "taxAmount",
    "out_of_state_tax_amount": "outOfStateTaxAmount",
}

AUTHORIZATION_FIELD_MAP = {
    "auth_result": "authResult",
    "decline_code": "declineCode",
    "processor_auth_code": "processorAuthCode",
    "processor_transaction_id": "processorTransactionId",
    "acquirer_reference_number": "acquirerReferenceNumber",
}

CREDIT_FIELD_MAP = {
    "credit_type": "creditType",
    "amount": "amount",
    "currency": "currency",
}


def _rename(record: Any, field_map: dict[str, str]) -> dict[str, Any]:
    """Copy the mapped attributes of a record under their Kount names."""
    if record is None:
        return {}
    return {target: getattr(record, source) for source, target in field_map.items()}


class RequestBuilder:
    """
    Builds the Kount order request from an OrderInput.

    The output is a plain dict ready for JSON encoding. Blank values are
    dropped at every depth, so absent inputs never reach the wire as null.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.settings = settings or default_settings
        self.clock = clock
        self.id_factory = id_factory

    def build(self, order: OrderInput, mode: EvaluationMode = EvaluationMode.POST_AUTH) -> dict[str, Any]:
        """
        Build the request body.

        Args:
            order: Validated order input
            mode: pre_auth omits authorization results from the transaction

        Returns:
            Sparse request dict in Kount's camelCase schema
        """
        customer = order.customer
        request = {
            "merchantOrderId": order.order_id,
            "channel": order.channel or self.settings.default_channel,
            "deviceSessionId": order.session_id,
            "creationDateTime": format_order_time(order.created_at, self.clock()),
            "userIp": customer.ip_address,
            "account": self._build_account(customer),
            "items": [self._build_item(item) for item in order.items],
            "fulfillment": [self._build_fulfillment(order)],
            "transactions": [self._build_transaction(order, mode)],
            "promotions": [self._build_promotion(promotion) for promotion in order.promotions],
            "loyalty": self._build_loyalty(order.loyalty),
            "customFields": order.custom_fields,
            "merchantCategoryCode": order.merchant_category_code,
        }
        return compact(request)

    def _build_account(self, customer: CustomerInput) -> dict[str, Any]:
        is_active = customer.account_is_active
        return {
            "id": customer.id,
            "type": customer.account_type or self.settings.default_account_type,
            "creationDateTime": format_optional_time(customer.account_created_at),
            "username": customer.email,
            "accountIsActive": True if is_active is None else is_active,
        }

    def _build_item(self, item: ItemInput) -> dict[str, Any]:
        built = {
            "id": item.sku or item.id or self.id_factory(),
            "quantity": item.quantity,
            "price": item.price,
            **_rename(item, ITEM_FIELD_MAP),
        }
        if item.physical_attributes:
            built["physicalAttributes"] = item.physical_attributes.model_dump()
        return built

    def _build_fulfillment(self, order: OrderInput) -> dict[str, Any]:
        shipping_address = order.shipping_address
        fulfillment_type = order.fulfillment_type
        if not fulfillment_type:
            fulfillment_type = FULFILLMENT_TYPE_SHIPPED if shipping_address else FULFILLMENT_TYPE_DIGITAL

        return {
            "type": fulfillment_type,
            "shipping": _rename(order.shipping, SHIPPING_FIELD_MAP),
            "recipientPerson": self._build_person(order.customer, shipping_address),
            "status": order.fulfillment_status or self.settings.default_fulfillment_status,
            "accessUrl": order.access_url,
            "store": self._build_store(order.store),
            "merchantFulfillmentId": order.merchant_fulfillment_id,
        }

    def _build_transaction(self, order: OrderInput, mode: EvaluationMode) -> dict[str, Any]:
        transaction = {
            "processor": order.processor or self.settings.default_processor,
            "processorMerchantId": order.processor_merchant_id,
            "payment": _rename(order.payment, PAYMENT_FIELD_MAP),
            "subtotal": float(order.total_amount),
            "orderTotal": order.order_total,
            "currency": order.currency,
            "tax": _rename(order.tax, TAX_FIELD_MAP),
            "billedPerson": self._build_person(order.customer, order.billing_address),
            "merchantTransactionId": order.order_id,
        }
        # Nothing has been authorized yet before the payment call
        if mode == EvaluationMode.POST_AUTH:
            transaction["transactionStatus"] = order.transaction_status
            transaction["authorizationStatus"] = self._build_authorization(order.authorization_status)
        return transaction

    def _build_person(self, customer: CustomerInput, address: AddressInput | None) -> dict[str, Any]:
        return {
            "name": {"first": customer.first_name, "family": customer.last_name},
            "emailAddress": customer.email,
            "phoneNumber": customer.phone,
            "dateOfBirth": customer.date_of_birth,
            "address": _rename(address, ADDRESS_FIELD_MAP),
        }

    def _build_store(self, store: StoreInput | None) -> dict[str, Any] | None:
        if store is None:
            return None
        return {
            "id": store.id,
            "name": store.name,
            "address": _rename(store.address, ADDRESS_FIELD_MAP),
        }

    def _build_authorization(self, status: AuthorizationStatusInput | None) -> dict[str, Any] | None:
        if status is None:
            return None
        authorization = _rename(status, AUTHORIZATION_FIELD_MAP)
        authorization["dateTime"] = format_optional_time(status.date_time)
        if status.verification_response:
            authorization["verificationResponse"] = {
                "cvvStatus": status.verification_response.cvv_status,
                "avsStatus": status.verification_response.avs_status,
            }
        return authorization

    def _build_promotion(self, promotion: PromotionInput) -> dict[str, Any]:
        return {
            "id": promotion.id,
            "description": promotion.description,
            "status": promotion.status,
            "statusReason": promotion.status_reason,
            "discount": promotion.discount.model_dump() if promotion.discount else None,
            "credit": self._build_credit(promotion.credit),
        }

    def _build_loyalty(self, loyalty: LoyaltyInput | None) -> dict[str, Any] | None:
        if loyalty is None:
            return None
        return {
            "id": loyalty.id,
            "description": loyalty.description,
            "credit": self._build_credit(loyalty.credit),
        }

    def _build_credit(self, credit: CreditInput | None) -> dict[str, Any]:
        return _rename(credit, CREDIT_FIELD_MAP)

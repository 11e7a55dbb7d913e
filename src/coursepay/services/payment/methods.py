# coursepay/services/payment/methods.py
"""
Payment method settings administration.
"""

import logging
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from coursepay.models import PaymentMethodConfig, PaymentProvider

from . import errors

logger = logging.getLogger(__name__)

METHOD_EDITABLE_FIELDS = (
    "display_name",
    "is_enabled",
    "min_amount",
    "max_amount",
    "processing_fee",
    "account_name",
    "account_number",
    "bank_name",
    "account_title",
    "iban",
    "branch_code",
    "instructions",
)


class PaymentMethodService:
    """
    Admin CRUD for PaymentMethodConfig plus the lookups the ledger needs.

    Configs are soft-disabled (is_enabled / is_active), never deleted.
    """

    @staticmethod
    def get_available(provider: str) -> PaymentMethodConfig:
        """Enabled config for a provider, or ValidationError."""
        if provider not in PaymentProvider.values():
            raise errors.ValidationError(
                f"Unknown payment method '{provider}'.",
                details={"allowed": PaymentProvider.values()},
            )
        config = PaymentMethodConfig.objects.live().filter(provider=provider).first()
        if not config or not config.is_available:
            raise errors.ValidationError(
                f"Payment method '{provider}' is not available."
            )
        return config

    @staticmethod
    def list_enabled():
        return PaymentMethodConfig.objects.enabled().filter(is_enabled=True)

    @staticmethod
    def list_all():
        return PaymentMethodConfig.objects.live()

    @staticmethod
    def get(payment_method_id: int) -> PaymentMethodConfig:
        config = PaymentMethodConfig.objects.live().filter(pk=payment_method_id).first()
        if not config:
            raise errors.NotFound("Payment method not found.")
        return config

    @staticmethod
    def create(provider: str, admin_id: int | None = None, **data: Any) -> PaymentMethodConfig:
        if provider not in PaymentProvider.values():
            raise errors.ValidationError(f"Unknown payment method '{provider}'.")
        if PaymentMethodConfig.objects.filter(provider=provider).exists():
            raise errors.Conflict(f"Payment method '{provider}' is already configured.")

        config = PaymentMethodConfig(
            provider=provider, created_by=admin_id, updated_by=admin_id
        )
        PaymentMethodService._assign(config, data)
        PaymentMethodService._save(config)
        logger.info(f"Payment method {provider} configured by admin {admin_id}")
        return config

    @staticmethod
    @transaction.atomic
    def update(
        payment_method_id: int, admin_id: int | None = None, **data: Any
    ) -> PaymentMethodConfig:
        config = (
            PaymentMethodConfig.objects.select_for_update()
            .filter(pk=payment_method_id, is_deleted=0)
            .first()
        )
        if not config:
            raise errors.NotFound("Payment method not found.")
        PaymentMethodService._assign(config, data)
        config.updated_by = admin_id
        PaymentMethodService._save(config)
        logger.info(f"Payment method {config.provider} updated by admin {admin_id}")
        return config

    @staticmethod
    def disable(payment_method_id: int, admin_id: int | None = None) -> PaymentMethodConfig:
        config = PaymentMethodService.get(payment_method_id)
        config.is_enabled = False
        config.updated_by = admin_id
        config.save(update_fields=["is_enabled", "updated_by", "updated_at"])
        logger.info(f"Payment method {config.provider} disabled by admin {admin_id}")
        return config

    @staticmethod
    def _assign(config: PaymentMethodConfig, data: dict[str, Any]) -> None:
        unknown = set(data) - set(METHOD_EDITABLE_FIELDS)
        if unknown:
            raise errors.ValidationError(
                "These payment method fields cannot be set.",
                details={"fields": sorted(unknown)},
            )
        for field, value in data.items():
            setattr(config, field, value)

    @staticmethod
    def _save(config: PaymentMethodConfig) -> None:
        try:
            config.full_clean(exclude=["provider"])
        except DjangoValidationError as e:
            raise errors.ValidationError(
                "Invalid payment method settings.", details=e.message_dict
            ) from None
        try:
            with transaction.atomic():
                config.save()
        except IntegrityError:
            raise errors.Conflict(
                f"Payment method '{config.provider}' is already configured."
            ) from None

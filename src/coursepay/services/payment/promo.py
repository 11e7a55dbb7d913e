# coursepay/services/payment/promo.py
"""
Promo code validation, redemption and administration.

Validation is read-only. The usage counter moves only in consume(), which
runs inside the approval transaction as a single conditional UPDATE so that
concurrent approvals can never push used_count past max_uses.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import F, Q, Sum
from django.utils import timezone

from coursepay.models import PromoCode

from . import errors

logger = logging.getLogger(__name__)

PROMO_EDITABLE_FIELDS = (
    "code",
    "description",
    "discount_type",
    "discount_value",
    "applicable_type",
    "applicable_ids",
    "max_uses",
    "valid_from",
    "valid_until",
    "is_active",
)


@dataclass(frozen=True)
class PromoValidation:
    """Successful promo code check."""

    promo_code_id: int
    code: str
    discount_type: str
    discount_value: Decimal
    description: str = ""
    ok: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "promo_code_id": self.promo_code_id,
            "code": self.code,
            "discount_type": self.discount_type,
            "discount_value": str(self.discount_value),
            "description": self.description,
        }


class PromoCodeValidator:
    """
    Checks a code's applicability, validity window and usage against an item.
    """

    @staticmethod
    def validate(
        code: str,
        item_type: str,
        item_id: int,
        now: datetime | None = None,
    ) -> PromoValidation:
        """
        Validate a promo code for a course or bundle.

        Checks, in order:
        - Code exists, is active and not deleted (NotFound)
        - valid_from has passed (NotYetActive)
        - valid_until has not passed (Expired)
        - used_count is below max_uses (MaxUsesReached)
        - Code scope covers the item (NotApplicable)

        Never mutates used_count.
        """
        if not code or not str(code).strip():
            raise errors.ValidationError("Promo code is required.")

        now = now or timezone.now()
        normalized = str(code).strip()
        logger.info(f"Validating promo code '{normalized}' for {item_type} {item_id}")

        promo = PromoCode.objects.enabled().filter(code__iexact=normalized).first()
        if not promo:
            raise errors.NotFound("Invalid promo code.", details={"code": normalized})

        if promo.valid_from and now < promo.valid_from:
            raise errors.NotYetActive(
                "This promo code is not active yet.", details={"code": promo.code}
            )
        if promo.valid_until and now > promo.valid_until:
            raise errors.Expired(
                "This promo code has expired.", details={"code": promo.code}
            )
        if promo.is_exhausted:
            raise errors.MaxUsesReached(
                "This promo code has reached its usage limit.",
                details={"code": promo.code, "max_uses": promo.max_uses},
            )
        if not promo.applies_to(item_type, item_id):
            raise errors.NotApplicable(
                f"This promo code is not valid for the selected {item_type}.",
                details={"code": promo.code, "item_type": item_type, "item_id": item_id},
            )

        return PromoValidation(
            promo_code_id=promo.promo_code_id,
            code=promo.code,
            discount_type=promo.discount_type,
            discount_value=promo.discount_value,
            description=promo.description,
        )

    @staticmethod
    def consume(promo_code_id: int, redeemed_at: datetime) -> None:
        """
        Count one redemption, atomically and only while below the ceiling.

        The code must still be active and must not have expired before
        redeemed_at (the submission time). Raises MaxUsesReached or NotFound
        when the conditional UPDATE matches no row.
        """
        updated = (
            PromoCode.objects.filter(
                pk=promo_code_id,
                is_active=1,
                is_deleted=0,
            )
            .filter(Q(valid_until__isnull=True) | Q(valid_until__gte=redeemed_at))
            .filter(Q(max_uses__isnull=True) | Q(used_count__lt=F("max_uses")))
            .update(used_count=F("used_count") + 1, updated_at=timezone.now())
        )
        if updated:
            logger.info(f"Promo code {promo_code_id} redeemed")
            return

        promo = PromoCode.objects.filter(pk=promo_code_id).first()
        if promo is None or promo.is_active != 1 or promo.is_deleted != 0:
            raise errors.NotFound("The promo code on this payment is no longer active.")
        if promo.valid_until and promo.valid_until < redeemed_at:
            raise errors.Expired("The promo code had expired when this payment was made.")
        logger.warning(
            f"Promo code {promo.code} exhausted at approval "
            f"({promo.used_count}/{promo.max_uses})"
        )
        raise errors.MaxUsesReached(
            "This promo code has reached its usage limit.",
            details={"code": promo.code, "max_uses": promo.max_uses},
        )


class PromoCodeService:
    """
    Admin operations on promo codes.

    Codes are soft-disabled, never hard-deleted, and used_count is never
    writable from here.
    """

    @staticmethod
    def get(promo_code_id: int) -> PromoCode:
        promo = PromoCode.objects.live().filter(pk=promo_code_id).first()
        if not promo:
            raise errors.NotFound("Promo code not found.")
        return promo

    @staticmethod
    def list_codes(active_only: bool = False):
        queryset = PromoCode.objects.live()
        if active_only:
            queryset = queryset.filter(is_active=1)
        return queryset.order_by("-created_at")

    @staticmethod
    def create(admin_id: int | None = None, **data: Any) -> PromoCode:
        promo = PromoCode(created_by=admin_id, updated_by=admin_id)
        PromoCodeService._assign(promo, data)
        PromoCodeService._save(promo)
        logger.info(f"Promo code {promo.code} created by admin {admin_id}")
        return promo

    @staticmethod
    @transaction.atomic
    def update(promo_code_id: int, admin_id: int | None = None, **data: Any) -> PromoCode:
        promo = PromoCode.objects.select_for_update().filter(
            pk=promo_code_id, is_deleted=0
        ).first()
        if not promo:
            raise errors.NotFound("Promo code not found.")
        PromoCodeService._assign(promo, data)
        promo.updated_by = admin_id
        PromoCodeService._save(promo)
        logger.info(f"Promo code {promo.code} updated by admin {admin_id}")
        return promo

    @staticmethod
    def deactivate(promo_code_id: int, admin_id: int | None = None) -> PromoCode:
        promo = PromoCodeService.get(promo_code_id)
        promo.deactivate(user_id=admin_id)
        logger.info(f"Promo code {promo.code} deactivated by admin {admin_id}")
        return promo

    @staticmethod
    def stats(now: datetime | None = None) -> dict[str, int]:
        """Totals shown on the promo code admin page."""
        now = now or timezone.now()
        codes = PromoCode.objects.live()
        return {
            "total_promo_codes": codes.count(),
            "active_promo_codes": codes.filter(is_active=1).count(),
            "expired_promo_codes": codes.filter(valid_until__lt=now).count(),
            "total_usage": codes.aggregate(total=Sum("used_count"))["total"] or 0,
        }

    @staticmethod
    def _assign(promo: PromoCode, data: dict[str, Any]) -> None:
        unknown = set(data) - set(PROMO_EDITABLE_FIELDS)
        if unknown:
            raise errors.ValidationError(
                "These promo code fields cannot be set.",
                details={"fields": sorted(unknown)},
            )
        for field, value in data.items():
            if field == "is_active":
                value = 1 if value else 0
            setattr(promo, field, value)
        if data.get("applicable_type") == "all" and "applicable_ids" not in data:
            promo.applicable_ids = None

    @staticmethod
    def _save(promo: PromoCode) -> None:
        if promo.code:
            promo.code = promo.code.strip().upper()
        if not promo.code:
            raise errors.ValidationError("Promo code is required.")
        try:
            promo.full_clean(exclude=["code"])
        except DjangoValidationError as e:
            raise errors.ValidationError(
                "Invalid promo code.", details=e.message_dict
            ) from None

        clash = PromoCode.objects.filter(code__iexact=promo.code)
        if promo.pk:
            clash = clash.exclude(pk=promo.pk)
        if clash.exists():
            raise errors.Conflict(f"Promo code '{promo.code}' already exists.")

        try:
            with transaction.atomic():
                if promo._state.adding:
                    promo.save()
                else:
                    # used_count is owned by consume()
                    promo.save(
                        update_fields=[*PROMO_EDITABLE_FIELDS, "updated_by", "updated_at"]
                    )
        except IntegrityError:
            raise errors.Conflict(f"Promo code '{promo.code}' already exists.") from None

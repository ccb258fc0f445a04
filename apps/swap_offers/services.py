import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from kombu.exceptions import OperationalError as BrokerOperationalError

from apps.core.actors import SwapAction
from apps.core.exceptions import ConflictError, NotFoundError, ValidationError
from apps.core.utils.cache_key_manager import CacheKeyManager
from apps.core.utils.cache_manager import CacheManager
from apps.notifications.events import OFFER_CREATED, emit_swap_event
from apps.swap_offers.models import (
    OfferStatus,
    PropertyType,
    SkillLevel,
    SwapCategory,
    SwapOffer,
)
from apps.swap_offers.utils.filters import SwapOfferFilter
from apps.users.models import SwapProfile
from apps.users.services.rating_aggregator import incremental_mean
from apps.users.services.swap_profile import SwapProfileService

logger = logging.getLogger("offers_performance")

EDITABLE_FIELDS = (
    "category",
    "subcategory",
    "title",
    "description",
    "tags",
    "wants_in_return",
    "preferred_categories",
    "estimated_value_amount",
    "estimated_value_currency",
    "estimated_value_is_flexible",
    "skill_level",
    "experience",
    "available_from",
    "available_until",
    "is_recurring",
    "accommodation",
    "is_public",
)

TEXT_LIMITS = {
    "title": 200,
    "description": 2000,
    "subcategory": 100,
    "wants_in_return": 1000,
    "experience": 500,
}


class OfferValidationService:
    """Validation of offer payloads before anything is persisted."""

    @staticmethod
    def validate_accommodation(details) -> Dict[str, str]:
        errors = {}
        if not isinstance(details, dict):
            return {"accommodation": "Accommodation details are required for accommodation offers"}

        if details.get("propertyType") not in PropertyType.values:
            errors["accommodation.propertyType"] = (
                "Property type is required for accommodation offers"
            )

        max_guests = details.get("maxGuests")
        if isinstance(max_guests, bool) or not isinstance(max_guests, int) or max_guests < 1:
            errors["accommodation.maxGuests"] = (
                "Maximum guests must be at least 1 for accommodation offers"
            )

        for key in ("bedrooms", "bathrooms", "minimumStay", "maximumStay"):
            value = details.get(key)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, int) or value < 0
            ):
                errors[f"accommodation.{key}"] = f"{key} must be a non-negative whole number"

        minimum, maximum = details.get("minimumStay"), details.get("maximumStay")
        if (
            isinstance(minimum, int)
            and isinstance(maximum, int)
            and minimum > maximum
        ):
            errors["accommodation.maximumStay"] = "Maximum stay cannot be shorter than minimum stay"

        return errors

    @staticmethod
    def validate_offer(data: dict) -> Dict[str, Any]:
        """
        Check a complete offer state (after merging any update).
        Returns {"is_valid": bool, "errors": {field: message}}.
        """
        start_time = timezone.now()
        errors = {}

        for field in ("title", "description"):
            if not (data.get(field) or "").strip():
                errors[field] = f"{field.capitalize()} is required"
        for field, limit in TEXT_LIMITS.items():
            if len(data.get(field) or "") > limit:
                errors[field] = f"{field} cannot exceed {limit} characters"

        if data.get("category") not in SwapCategory.values:
            errors["category"] = "A valid category is required"
        if data.get("skill_level", SkillLevel.INTERMEDIATE) not in SkillLevel.values:
            errors["skill_level"] = "Invalid skill level"

        tags = data.get("tags") or []
        if len(tags) > settings.SWAP_SETTINGS["MAX_TAGS"]:
            errors["tags"] = f"At most {settings.SWAP_SETTINGS['MAX_TAGS']} tags are allowed"
        elif any(not isinstance(tag, str) or len(tag) > 50 for tag in tags):
            errors["tags"] = "Tags must be text of at most 50 characters"

        preferred = data.get("preferred_categories") or []
        if any(category not in SwapCategory.values for category in preferred):
            errors["preferred_categories"] = "Unknown category in preferred categories"

        amount = data.get("estimated_value_amount")
        if amount is not None:
            try:
                if Decimal(str(amount)) < 0:
                    errors["estimated_value_amount"] = "Estimated value cannot be negative"
            except InvalidOperation:
                errors["estimated_value_amount"] = "Estimated value must be a number"

        start, end = data.get("available_from"), data.get("available_until")
        if start and end and start >= end:
            errors["available_until"] = "Availability end must be after its start"

        if data.get("category") == SwapCategory.ACCOMMODATION:
            errors.update(
                OfferValidationService.validate_accommodation(data.get("accommodation"))
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Offer validation completed in {duration:.2f}ms")

        return {"is_valid": len(errors) == 0, "errors": errors}

    @staticmethod
    def clean(data: dict) -> dict:
        """Validate and normalize; raises ValidationError on any problem."""
        result = OfferValidationService.validate_offer(data)
        if not result["is_valid"]:
            raise ValidationError(result["errors"])

        cleaned = {key: data[key] for key in EDITABLE_FIELDS if key in data}
        if "tags" in cleaned:
            cleaned["tags"] = list(
                dict.fromkeys(tag.strip().lower() for tag in cleaned["tags"] if tag.strip())
            )
        if "title" in cleaned:
            cleaned["title"] = cleaned["title"].strip()
        if cleaned.get("category") != SwapCategory.ACCOMMODATION:
            cleaned["accommodation"] = None
        return cleaned


class OfferCatalogService:
    """
    Owns SwapOffer records: creation, lifecycle status, counters and
    aggregate rating. Other components go through these methods instead
    of touching offer fields directly.
    """

    @staticmethod
    def _get(offer_id, lock=False) -> SwapOffer:
        queryset = SwapOffer.objects.select_related("owner")
        if lock:
            queryset = queryset.select_for_update(of=("self",))
        try:
            return queryset.get(pk=offer_id)
        except (SwapOffer.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Swap offer not found.")

    @staticmethod
    def _invalidate(offer: SwapOffer):
        CacheManager.invalidate_on_commit("swap_offer", owner_id=offer.owner_id)

    @staticmethod
    @transaction.atomic
    def create_offer(actor, payload: dict) -> SwapOffer:
        """
        Validate and persist a new `active` offer owned by the actor, and
        bump the owner's `total_offers`.
        """
        start_time = timezone.now()
        actor.require(SwapAction.OFFER_CREATE, None, "Inactive accounts cannot list offers.")

        data = OfferValidationService.clean(payload)
        offer = SwapOffer.objects.create(
            owner_id=actor.user_id, status=OfferStatus.ACTIVE, **data
        )
        SwapProfileService.increment(actor.user_id, "total_offers")
        OfferCatalogService._invalidate(offer)
        emit_swap_event(
            OFFER_CREATED, [offer.owner_id], offer_id=offer.id, offer_title=offer.title
        )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Swap offer {offer.id} created in {duration:.2f}ms")
        return offer

    @staticmethod
    def get_offer(offer_id, actor=None, record_view=True) -> Tuple[SwapOffer, List[SwapOffer]]:
        """
        Fetch one offer plus a few other active offers by the same owner.
        Viewing someone else's offer counts a view, asynchronously.
        """
        offer = OfferCatalogService._get(offer_id)
        is_manager = actor is not None and actor.can_perform(SwapAction.OFFER_MANAGE, offer)
        if not offer.is_public and not is_manager:
            raise NotFoundError("Swap offer not found.")

        if record_view and not (actor is not None and actor.user_id == offer.owner_id):
            OfferCatalogService.schedule_view(offer.id)

        return offer, OfferCatalogService.related_offers(offer)

    @staticmethod
    def related_offers(offer: SwapOffer) -> List[SwapOffer]:
        limit = settings.SWAP_SETTINGS["RELATED_OFFERS_LIMIT"]
        cache_key = CacheKeyManager.make_key("swap_offer", "related", owner_id=offer.owner_id)

        ids = cache.get(cache_key)
        if ids is None:
            ids = list(
                SwapOffer.objects.filter(
                    owner_id=offer.owner_id, status=OfferStatus.ACTIVE, is_public=True
                )
                .order_by("-created_at")
                .values_list("id", flat=True)[: limit + 1]
            )
            cache.set(cache_key, ids, settings.SWAP_SETTINGS["CACHE_TIMEOUT_SHORT"])

        ids = [pk for pk in ids if pk != offer.id][:limit]
        offers = SwapOffer.objects.select_related("owner").in_bulk(ids)
        return [offers[pk] for pk in ids if pk in offers]

    @staticmethod
    def list_offers(actor, filters=None):
        """
        Public active offers narrowed by `filters` (category, subcategory,
        tags, search, owner, exclude_own, skill_level, sort).
        """
        queryset = SwapOffer.objects.filter(
            status=OfferStatus.ACTIVE, is_public=True
        ).select_related("owner")
        filterset = SwapOfferFilter(filters or {}, queryset=queryset, actor=actor)
        if not filterset.is_valid():
            raise ValidationError({k: list(v) for k, v in filterset.errors.items()})
        return filterset.qs

    @staticmethod
    def list_owner_offers(actor):
        """All of the actor's own offers, whatever their status."""
        return SwapOffer.objects.filter(owner_id=actor.user_id).select_related("owner")

    @staticmethod
    def schedule_view(offer_id):
        """Queue a view count without making the reader wait on it."""
        from apps.swap_offers.tasks import record_offer_view

        try:
            record_offer_view.delay(offer_id)
        except BrokerOperationalError:
            logger.warning(f"Could not queue view count for offer {offer_id}", exc_info=True)

    @staticmethod
    def record_view(offer_id) -> bool:
        """views = views + 1, as a single UPDATE."""
        updated = SwapOffer.objects.filter(pk=offer_id).update(views=F("views") + 1)
        return bool(updated)

    @staticmethod
    def record_request_opened(offer_id):
        """requests = requests + 1, once per accepted request creation."""
        updated = SwapOffer.objects.filter(pk=offer_id).update(requests=F("requests") + 1)
        if not updated:
            raise NotFoundError("Swap offer not found.")

    @staticmethod
    @transaction.atomic
    def apply_rating(offer_id, rating) -> SwapOffer:
        """Fold a new rating into the offer's running average under a row lock."""
        offer = OfferCatalogService._get(offer_id, lock=True)
        offer.rating_average, offer.rating_count = incremental_mean(
            offer.rating_average, offer.rating_count, rating
        )
        offer.save(update_fields=["rating_average", "rating_count", "updated_at"])
        logger.info(
            f"Offer {offer.id} rating now {offer.rating_average} over {offer.rating_count}"
        )
        return offer

    @staticmethod
    @transaction.atomic
    def update_offer(offer_id, actor, payload: dict) -> SwapOffer:
        """Owner or moderator edit; the merged state is validated as a whole."""
        start_time = timezone.now()
        offer = OfferCatalogService._get(offer_id, lock=True)
        actor.require(
            SwapAction.OFFER_MANAGE, offer, "Only the owner or a moderator can edit this offer."
        )

        merged = {field: getattr(offer, field) for field in EDITABLE_FIELDS}
        merged.update({k: v for k, v in payload.items() if k in EDITABLE_FIELDS})
        data = OfferValidationService.clean(merged)

        changed = [field for field, value in data.items() if getattr(offer, field) != value]
        for field in changed:
            setattr(offer, field, data[field])
        if changed:
            offer.save(update_fields=[*changed, "updated_at"])
            OfferCatalogService._invalidate(offer)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Swap offer {offer.id} updated ({len(changed)} fields) in {duration:.2f}ms")
        return offer

    @staticmethod
    @transaction.atomic
    def set_status(offer_id, actor, new_status) -> SwapOffer:
        """
        Owner or moderator may set any of the four statuses from any
        other. Only `active` offers accept new requests; requests already
        open are unaffected.
        """
        if new_status not in OfferStatus.values:
            raise ValidationError(f"Unknown offer status '{new_status}'.")

        offer = OfferCatalogService._get(offer_id, lock=True)
        actor.require(
            SwapAction.OFFER_MANAGE, offer, "Only the owner or a moderator can change this offer."
        )
        if offer.status == new_status:
            return offer

        previous = offer.status
        offer.status = new_status
        offer.save(update_fields=["status", "updated_at"])
        OfferCatalogService._invalidate(offer)
        logger.info(f"Swap offer {offer.id} status {previous} -> {new_status} by user {actor.user_id}")
        return offer

    @staticmethod
    @transaction.atomic
    def delete_offer(offer_id, actor):
        """
        Remove an offer with no live requests against it. Finished
        requests keep their history with the offer reference cleared.
        """
        from apps.swap_requests.models import ACTIVE_REQUEST_STATUSES

        offer = OfferCatalogService._get(offer_id, lock=True)
        actor.require(
            SwapAction.OFFER_MANAGE, offer, "Only the owner or a moderator can delete this offer."
        )
        if offer.swap_requests.filter(status__in=ACTIVE_REQUEST_STATUSES).exists():
            raise ConflictError("Cannot delete an offer with active swap requests.")

        owner_id = offer.owner_id
        OfferCatalogService._invalidate(offer)
        offer.delete()
        SwapProfileService.increment(owner_id, "total_offers", delta=-1)
        logger.info(f"Swap offer {offer_id} deleted by user {actor.user_id}")

    @staticmethod
    def recommendations(actor) -> List[SwapOffer]:
        """
        Offers in the actor's preferred categories, then top-rated offers,
        never the actor's own, without repeats.
        """
        start_time = timezone.now()
        swap_settings = settings.SWAP_SETTINGS
        cache_key = CacheKeyManager.make_key(
            "swap_offer", "recommendations", user_id=actor.user_id
        )

        ids = cache.get(cache_key)
        if ids is None:
            per_source = swap_settings["RECOMMENDATIONS_PER_SOURCE"]
            base = SwapOffer.objects.filter(
                status=OfferStatus.ACTIVE, is_public=True
            ).exclude(owner_id=actor.user_id)

            preferred = (
                SwapProfile.objects.filter(user_id=actor.user_id)
                .values_list("preferred_categories", flat=True)
                .first()
            ) or []

            ids = []
            if preferred:
                ids += list(
                    base.filter(category__in=preferred)
                    .order_by("-rating_average", "-views")
                    .values_list("id", flat=True)[:per_source]
                )
            ids += list(
                base.filter(rating_average__gte=swap_settings["TOP_RATED_THRESHOLD"])
                .order_by("-rating_average", "-rating_count")
                .values_list("id", flat=True)[:per_source]
            )
            ids = list(dict.fromkeys(ids))[: swap_settings["RECOMMENDATIONS_LIMIT"]]
            cache.set(cache_key, ids, swap_settings["CACHE_TIMEOUT_SHORT"])

        offers = SwapOffer.objects.select_related("owner").in_bulk(ids)
        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Recommendations for user {actor.user_id} built in {duration:.2f}ms")
        return [offers[pk] for pk in ids if pk in offers]

    @staticmethod
    def get_live_offer(offer_id, lock=False) -> Optional[SwapOffer]:
        """Offer lookup for other components; raises NotFoundError."""
        return OfferCatalogService._get(offer_id, lock=lock)

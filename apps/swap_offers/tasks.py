import logging

from celery import shared_task

from apps.core.tasks import BaseTaskWithRetry

logger = logging.getLogger("offers_performance")


@shared_task(bind=True, base=BaseTaskWithRetry)
def record_offer_view(self, offer_id):
    """Count one view of an offer. Missing offers are ignored."""
    from apps.swap_offers.services import OfferCatalogService

    if not OfferCatalogService.record_view(offer_id):
        logger.warning(f"View recorded for missing swap offer {offer_id}")
        return False
    return True

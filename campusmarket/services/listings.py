import logging
from collections.abc import Mapping
from typing import Any

from campusmarket.clients.kafka import KafkaReviewProducer
from campusmarket.schemas.listing import ListingDraft, ListingValidationOutcome
from campusmarket.services.rate_limit import RateLimiter
from campusmarket.services.validation import validate_listing_data

logger = logging.getLogger(__name__)

PROFANITY_REVIEW_REASON = 'profanity'


class ListingSubmissionService:
    def __init__(
        self,
        rate_limiter: RateLimiter,
        review_producer: KafkaReviewProducer | None = None,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.review_producer = review_producer

    async def validate(self, draft: ListingDraft | Mapping[str, Any]) -> ListingValidationOutcome:
        outcome = validate_listing_data(draft, self.rate_limiter)
        if outcome.flagged_for_review:
            await self._flag_for_review(outcome)
        return outcome

    def record_submission(self) -> None:
        self.rate_limiter.record_submission()

    async def _flag_for_review(self, outcome: ListingValidationOutcome) -> None:
        if self.review_producer is None:
            logger.info('Review producer is disabled, profanity flag kept in logs only')
            return

        try:
            await self.review_producer.send_review_flag(
                listing=outcome.sanitized_dict(),
                reason=PROFANITY_REVIEW_REASON,
            )
        except Exception:
            logger.exception('Failed to publish review flag for listing')

import asyncio

from campusmarket.services.listings import ListingSubmissionService


class _FakeReviewProducer:
    def __init__(self):
        self.sent_messages = []

    async def send_review_flag(self, listing: dict, reason: str):
        self.sent_messages.append({'listing': listing, 'reason': reason})


class _FailingReviewProducer:
    async def send_review_flag(self, listing: dict, reason: str):
        raise RuntimeError('Kafka producer is not started')


def test_validate_publishes_profanity_flag(rate_limiter, valid_listing_data):
    producer = _FakeReviewProducer()
    service = ListingSubmissionService(rate_limiter, producer)
    valid_listing_data['description'] = 'Damn fine <b>bicycle</b> for sale'

    outcome = asyncio.run(service.validate(valid_listing_data))

    assert outcome.valid is True
    assert len(producer.sent_messages) == 1
    assert producer.sent_messages[0]['reason'] == 'profanity'
    assert producer.sent_messages[0]['listing']['description'] == 'Damn fine bbicycle/b for sale'


def test_validate_clean_listing_is_not_published(rate_limiter, valid_listing_data):
    producer = _FakeReviewProducer()
    service = ListingSubmissionService(rate_limiter, producer)

    outcome = asyncio.run(service.validate(valid_listing_data))

    assert outcome.valid is True
    assert producer.sent_messages == []


def test_validate_without_producer(rate_limiter, valid_listing_data):
    service = ListingSubmissionService(rate_limiter)
    valid_listing_data['title'] = 'Crap chair, still works'

    outcome = asyncio.run(service.validate(valid_listing_data))

    assert outcome.flagged_for_review is True
    assert outcome.valid is True


def test_validate_swallows_publish_errors(rate_limiter, valid_listing_data):
    service = ListingSubmissionService(rate_limiter, _FailingReviewProducer())
    valid_listing_data['title'] = 'Crap chair, still works'

    outcome = asyncio.run(service.validate(valid_listing_data))

    assert outcome.valid is True


def test_record_submission_then_validate_is_rate_limited(rate_limiter, valid_listing_data):
    service = ListingSubmissionService(rate_limiter)

    service.record_submission()
    outcome = asyncio.run(service.validate(valid_listing_data))

    assert outcome.valid is False
    assert outcome.errors == ['Please wait 5 more minute(s) before submitting another listing.']

"""Tests for public lead capture."""

import json

import pytest

from homeleads.repositories import LeadRepository
from homeleads.services.captcha_service import CaptchaResult, CaptchaService
from homeleads.services.lead_dispatcher import SqsLeadDispatcher
from homeleads.services.lead_service import (
    LeadService,
    VisitorInfo,
    extract_utm,
    merge_multistep,
)
from homeleads.utils.exceptions import DependencyError, ValidationError


class StubCaptcha:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.tokens = []

    def verify(self, token):
        self.tokens.append(token)
        return CaptchaResult(ok=self.ok, score=0.9 if self.ok else 0.1)


@pytest.fixture
def service(dynamodb_table, fake_dispatcher):
    return LeadService(captcha=CaptchaService(secret_key=""), dispatcher=fake_dispatcher)


def _body(**overrides):
    body = {
        "domain": "tetherowhomes.com",
        "slug": "tetherow-home",
        "type": "buyer",
        "name": "Jordan",
        "email": "jordan@example.com",
    }
    body.update(overrides)
    return body


class TestMergeMultistep:
    """Tests for merge_multistep."""

    def test_flat_submission_unchanged(self):
        assert merge_multistep({"email": "a@b.co"}) == {"email": "a@b.co"}

    def test_steps_merged_in_order(self):
        merged = merge_multistep({
            "email": "a@b.co",
            "_multistepData": json.dumps({"step1": {"beds": "3"}, "step0": {"address": "1 Main"}}),
        })

        assert list(merged) == ["step0", "step1", "step2"]
        assert merged["step2"] == {"email": "a@b.co"}

    def test_step_gap_does_not_overwrite_earlier_step(self):
        merged = merge_multistep({
            "email": "a@b.co",
            "_multistepData": json.dumps({"step0": {"address": "1 Main"}, "step2": {"beds": "3"}}),
        })

        assert list(merged) == ["step0", "step2", "step3"]
        assert merged["step2"] == {"beds": "3"}
        assert merged["step3"] == {"email": "a@b.co"}

    def test_malformed_step_data_ignored(self):
        assert merge_multistep({"email": "a@b.co", "_multistepData": "{not json"}) == {"email": "a@b.co"}
        assert merge_multistep({"email": "a@b.co", "_multistepData": "[1, 2]"}) == {"email": "a@b.co"}

    def test_extract_utm(self):
        assert extract_utm({"utm_source": "fb", "utm_medium": "", "utm_campaign": 3}) == {"utm_source": "fb"}


class TestSubmit:
    """Tests for LeadService.submit."""

    def test_lead_stored_and_dispatched(self, service, domain, make_page, fake_dispatcher):
        page = make_page(domain.id, "tetherow-home")

        result = service.submit(
            _body(utm_source="facebook", recaptchaToken="tok", website=""),
            VisitorInfo(ip="203.0.113.10", user_agent="pytest", referrer="https://facebook.com"),
        )

        lead = LeadRepository().get_by_id(result.lead.id)
        assert lead.page_id == page.id
        assert lead.domain_id == domain.id
        assert lead.type == "buyer"
        assert lead.status == "new"
        assert lead.utm_source == "facebook"
        assert lead.visitor_ip == "203.0.113.10"
        assert lead.form_data == {"name": "Jordan", "email": "jordan@example.com", "utm_source": "facebook"}
        assert fake_dispatcher.submitted == [lead.id]
        assert result.queued is True

    def test_honeypot_discarded(self, service, domain, make_page, fake_dispatcher):
        make_page(domain.id, "tetherow-home")

        result = service.submit(_body(website="http://spam.example.com"))

        assert result.lead is None
        assert fake_dispatcher.submitted == []
        assert LeadRepository().list_recent()[0] == []

    def test_missing_routing_fields(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.submit(_body(slug=""))
        assert exc_info.value.message == "Missing domain, slug, or type"

    def test_unknown_domain(self, service, domain):
        with pytest.raises(ValidationError) as exc_info:
            service.submit(_body(domain="nope.example.com"))
        assert exc_info.value.message == "Unknown domain"

    def test_unpublished_page(self, service, domain, make_page):
        make_page(domain.id, "tetherow-home", status="draft")

        with pytest.raises(ValidationError) as exc_info:
            service.submit(_body())
        assert exc_info.value.message == "Unknown landing page"

    def test_unknown_type(self, service, domain, make_page):
        make_page(domain.id, "tetherow-home")

        with pytest.raises(ValidationError) as exc_info:
            service.submit(_body(type="renter"))
        assert exc_info.value.errors == [{"field": "type", "message": "Unknown lead type"}]

    def test_captcha_failure(self, dynamodb_table, domain, make_page, fake_dispatcher):
        make_page(domain.id, "tetherow-home")
        captcha = StubCaptcha(ok=False)
        service = LeadService(captcha=captcha, dispatcher=fake_dispatcher)

        with pytest.raises(DependencyError):
            service.submit(_body(recaptchaToken="bad"))

        assert captcha.tokens == ["bad"]
        assert fake_dispatcher.submitted == []

    def test_multistep_submission(self, service, domain, make_page):
        make_page(domain.id, "sell-fast", type="seller")

        result = service.submit(_body(
            slug="sell-fast",
            type="seller",
            _multistepData=json.dumps({"step0": {"address": "1 Main St"}}),
        ))

        assert result.lead.is_multistep is True
        assert result.lead.form_data["step0"] == {"address": "1 Main St"}
        assert result.lead.form_data["step1"]["email"] == "jordan@example.com"

    def test_dispatch_failure_keeps_lead(self, service, domain, make_page, fake_dispatcher):
        make_page(domain.id, "tetherow-home")
        fake_dispatcher.exc = RuntimeError("queue down")

        result = service.submit(_body())

        assert result.queued is False
        assert LeadRepository().get_by_id(result.lead.id) is not None


class TestSqsDispatcher:
    """Tests for SqsLeadDispatcher."""

    def test_message_enqueued(self, sqs_queue):
        sqs, queue_url = sqs_queue

        assert SqsLeadDispatcher(queue_url).submit("lead-1") is True

        messages = sqs.receive_message(QueueUrl=queue_url)["Messages"]
        assert json.loads(messages[0]["Body"]) == {"type": "lead_created", "lead_id": "lead-1"}

    def test_no_queue_configured(self):
        assert SqsLeadDispatcher().submit("lead-1") is False

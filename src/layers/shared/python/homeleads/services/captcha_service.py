"""reCAPTCHA v3 verification for public lead submissions."""

import os
from dataclasses import dataclass

import httpx
import structlog

logger = structlog.get_logger()

VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


@dataclass
class CaptchaResult:
    ok: bool
    score: float
    skipped: bool = False


class CaptchaService:
    """Verifies reCAPTCHA tokens against Google.

    With no secret configured every submission passes (``skipped``).
    A configured secret fails closed: a missing token, a low score or an
    unreachable verifier all reject the submission.
    """

    def __init__(
        self,
        secret_key: str | None = None,
        min_score: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.secret_key = secret_key if secret_key is not None else os.environ.get("RECAPTCHA_SECRET_KEY")
        self.min_score = min_score if min_score is not None else float(os.environ.get("RECAPTCHA_MIN_SCORE", "0.5"))
        self._transport = transport

    def verify(self, token: str | None) -> CaptchaResult:
        if not self.secret_key:
            return CaptchaResult(ok=True, score=1.0, skipped=True)

        if not token:
            logger.info("Captcha token missing")
            return CaptchaResult(ok=False, score=0.0)

        try:
            with httpx.Client(timeout=5.0, transport=self._transport) as client:
                response = client.post(VERIFY_URL, data={"secret": self.secret_key, "response": token})
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Captcha verification unavailable", error_type=type(e).__name__)
            return CaptchaResult(ok=False, score=0.0)

        score = float(data.get("score") or 0.0)
        ok = bool(data.get("success")) and score >= self.min_score
        logger.info("Captcha verified", ok=ok, score=score, error_codes=data.get("error-codes"))
        return CaptchaResult(ok=ok, score=score)

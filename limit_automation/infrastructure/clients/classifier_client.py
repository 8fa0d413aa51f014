"""HTTP implementation of EntityClassifier."""

import asyncio
from typing import Any, Dict
from uuid import UUID

import httpx
import structlog

from limit_automation.core.config import settings
from limit_automation.core.metrics import record_classifier_failure
from limit_automation.domain.entities import ClassificationResult, EntityClassification
from limit_automation.domain.exceptions import (
    ClassifierException,
    ClassifierTimeoutException,
)
from limit_automation.domain.interfaces import EntityClassifier

logger = structlog.get_logger(__name__)


class HttpEntityClassifierClient(EntityClassifier):
    """
    HTTP client for the entity-type classifier.

    Posts the debtor's entity type and parses the classification token,
    any classifier blockers and the continue flag. Retries timeouts and
    transport errors with exponential backoff; 4xx/5xx answers are final.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
    ):
        self._base_url = base_url or settings.classifier_api_url
        self._timeout = timeout or settings.classifier_api_timeout
        self._max_retries = max_retries

    async def classify(self, debtor_id: UUID, entity_type: str | None) -> ClassificationResult:
        url = f"{self._base_url}/classify"
        payload = {"debtor_id": str(debtor_id), "entity_type": entity_type}

        last_exception = None

        for attempt in range(self._max_retries):
            try:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, json=payload)

                    if response.status_code >= 400:
                        record_classifier_failure("error")
                        raise ClassifierException(
                            message=f"Entity classifier error: {response.text}",
                            status_code=response.status_code,
                        )

                    return self._parse_result(response.json())

            except httpx.TimeoutException:
                record_classifier_failure("timeout")
                last_exception = ClassifierTimeoutException()
                logger.warning(
                    "classifier_timeout",
                    debtor_id=str(debtor_id),
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                )
            except ClassifierException:
                raise
            except Exception as e:
                record_classifier_failure("error")
                last_exception = ClassifierException(
                    message=f"Unexpected error: {str(e)}",
                )
                logger.error(
                    "classifier_error",
                    debtor_id=str(debtor_id),
                    attempt=attempt + 1,
                    error=str(e),
                )

            if attempt < self._max_retries - 1:
                await asyncio.sleep(2**attempt * 0.1)

        raise last_exception or ClassifierException("Failed to classify debtor")

    def _parse_result(self, data: Dict[str, Any]) -> ClassificationResult:
        """Parse the classifier response body."""
        token = data.get("classification")
        try:
            classification = EntityClassification(token.lower()) if token else None
        except ValueError:
            raise ClassifierException(f"Unknown entity classification: {token}")

        return ClassificationResult(
            classification=classification,
            blockers=list(data.get("blockers") or []),
            continue_automation=bool(data.get("continue", True)),
        )

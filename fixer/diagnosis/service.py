import structlog
from pydantic import BaseModel

from fixer.diagnosis.llm import ReasoningClient
from fixer.diagnosis.parser import Diagnosis, parse_diagnosis
from fixer.diagnosis.prompt import build_prompt
from fixer.webhooks.schemas import FailureNotification

logger = structlog.get_logger()


class DiagnosisOutcome(BaseModel):
    """Either a parsed diagnosis or the reason the call itself failed."""

    diagnosis: Diagnosis | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.diagnosis is not None


class Diagnoser:
    def __init__(self, client: ReasoningClient):
        self.client = client

    async def diagnose(self, notification: FailureNotification) -> DiagnosisOutcome:
        """Ask the reasoning service for a fix. Never raises."""
        logger.info("diagnosis_requested", function_id=notification.function_id, run_id=notification.run_id)

        try:
            reply = await self.client.complete(build_prompt(notification))
            diagnosis = parse_diagnosis(reply)
        except Exception as exc:
            # Any failure before the record update ends the attempt
            logger.error(
                "diagnosis_failed",
                function_id=notification.function_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return DiagnosisOutcome(error=str(exc) or type(exc).__name__)

        logger.info(
            "diagnosis_complete",
            function_id=notification.function_id,
            confidence=diagnosis.confidence,
            has_fix=diagnosis.fixed_payload is not None,
        )
        return DiagnosisOutcome(diagnosis=diagnosis)

"""Parse the four-section diagnosis reply.

The model is asked to answer with::

    ANALYSIS: ...
    ROOT_CAUSE: ...
    CONFIDENCE: low|medium|high
    FIXED_PAYLOAD:
    ```json
    {...}
    ```

A section starts on the first line that begins with its marker and runs
until the next line that begins with any marker. Each section is optional;
a missing one falls back to its default instead of raising.
"""

import json
from typing import Any

import structlog
from pydantic import BaseModel

from fixer.failures.models import CONFIDENCE_LEVELS, STATUS_FAILED, STATUS_FIXED

logger = structlog.get_logger()

ANALYSIS = "ANALYSIS:"
ROOT_CAUSE = "ROOT_CAUSE:"
CONFIDENCE = "CONFIDENCE:"
FIXED_PAYLOAD = "FIXED_PAYLOAD:"
MARKERS = (ANALYSIS, ROOT_CAUSE, CONFIDENCE, FIXED_PAYLOAD)

DEFAULT_ANALYSIS = "Analysis failed"
DEFAULT_ROOT_CAUSE = "Unknown"
DEFAULT_CONFIDENCE = "low"

FENCE = "```"


class Diagnosis(BaseModel):
    analysis: str = DEFAULT_ANALYSIS
    root_cause: str = DEFAULT_ROOT_CAUSE
    confidence: str = DEFAULT_CONFIDENCE
    fixed_payload: Any | None = None

    @property
    def ai_analysis(self) -> str:
        return f"{self.analysis}\n\nRoot Cause: {self.root_cause}"

    @property
    def status(self) -> str:
        return STATUS_FIXED if self.fixed_payload is not None else STATUS_FAILED


def _clean_line(line: str) -> str:
    # Models like to decorate the markers: "**ANALYSIS:**", "## ROOT_CAUSE:"
    return line.replace("**", "").lstrip().lstrip("#").lstrip()


def split_sections(text: str) -> dict[str, str]:
    sections: dict[str, list[str]] = {}
    current: list[str] | None = None

    for raw_line in text.splitlines():
        line = _clean_line(raw_line)
        marker = next((m for m in MARKERS if line.startswith(m)), None)
        if marker is not None:
            if marker in sections:
                # Only the first occurrence of a section counts
                current = None
                continue
            current = sections[marker] = [line[len(marker):]]
        elif current is not None:
            current.append(raw_line)

    return {marker: "\n".join(lines).strip() for marker, lines in sections.items()}


def parse_confidence(value: str | None) -> str:
    if not value:
        return DEFAULT_CONFIDENCE
    words = value.split()
    word = words[0].strip("[]().,;:*'\"").lower() if words else ""
    return word if word in CONFIDENCE_LEVELS else DEFAULT_CONFIDENCE


def extract_fenced_block(section: str) -> str | None:
    """Body of the first fenced block, with any language tag dropped.

    The block may span lines or sit on one line: ```json {"data": {}} ```
    """
    start = section.find(FENCE)
    if start == -1:
        return None
    end = section.find(FENCE, start + len(FENCE))
    if end == -1:
        return None

    body = section[start + len(FENCE):end].strip()
    if body[:1].isalpha():
        parts = body.split(None, 1)
        # A lone word is the payload itself (true, null), not a tag
        if len(parts) == 2:
            body = parts[1]
    return body.strip()


def parse_fixed_payload(section: str | None) -> Any | None:
    if not section:
        return None
    block = extract_fenced_block(section)
    if block is None:
        return None
    try:
        return json.loads(block)
    except (ValueError, RecursionError) as exc:
        logger.warning("fixed_payload_unparseable", error_type=type(exc).__name__, error=str(exc)[:200])
        return None


def parse_diagnosis(text: str) -> Diagnosis:
    sections = split_sections(text or "")
    return Diagnosis(
        analysis=sections.get(ANALYSIS) or DEFAULT_ANALYSIS,
        root_cause=sections.get(ROOT_CAUSE) or DEFAULT_ROOT_CAUSE,
        confidence=parse_confidence(sections.get(CONFIDENCE)),
        fixed_payload=parse_fixed_payload(sections.get(FIXED_PAYLOAD)),
    )

import logging

import httpx

from hr_reporting.core.config import settings
from hr_reporting.core.errors import UpstreamError
from hr_reporting.schemas.report import ReportContext

logger = logging.getLogger(__name__)


def extract_report_text(payload: object) -> str:
    """Pull the generated text out of whichever shape the AI service returned.

    Accepted: ``{"data": {"reportText": ...}}``, ``{"reportText": ...}`` and
    ``{"data": "..."}``. Anything else yields an empty string.
    """
    if not isinstance(payload, dict):
        return ""
    data = payload.get("data")
    if isinstance(data, dict) and data.get("reportText"):
        return str(data["reportText"])
    if payload.get("reportText"):
        return str(payload["reportText"])
    if isinstance(data, str):
        return data
    return ""


class HttpNarrativeGenerator:
    """Posts a report context to the AI report service and returns its text."""

    def __init__(self, client: httpx.AsyncClient, path: str | None = None) -> None:
        self._client = client
        self._path = path or settings.AI_REPORT_PATH

    async def generate(self, context: ReportContext) -> str:
        body = context.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            resp = await self._client.post(self._path, json=body)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("AI report request failed: %s", exc)
            raise UpstreamError("The report writer is unavailable") from exc
        except ValueError as exc:
            raise UpstreamError("The report writer returned invalid JSON") from exc

        text = extract_report_text(payload)
        logger.info(
            "AI report generated: type=%s chars=%d", context.report_type.value, len(text)
        )
        return text

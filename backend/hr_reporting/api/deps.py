from collections.abc import AsyncIterator

from hr_reporting.clients.base import NarrativeGenerator, ReportDataSource
from hr_reporting.clients.narrative import HttpNarrativeGenerator
from hr_reporting.clients.upstream import HttpReportDataSource, build_client


async def get_data_source() -> AsyncIterator[ReportDataSource]:
    """One upstream HTTP client per request, closed when the response is done."""
    async with build_client() as client:
        yield HttpReportDataSource(client)


async def get_narrative_generator() -> AsyncIterator[NarrativeGenerator]:
    async with build_client() as client:
        yield HttpNarrativeGenerator(client)

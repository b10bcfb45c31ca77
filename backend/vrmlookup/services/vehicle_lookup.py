"""
Lookup orchestrator: fan out to every provider, then merge.

Providers run concurrently on one httpx client that lives for the request.
A provider that times out, raises or fails contributes an empty record.
"""

import asyncio
import logging
from dataclasses import dataclass, field

import httpx

from vrmlookup.config import settings
from vrmlookup.providers import get_all_providers
from vrmlookup.providers.base import BaseProvider, ProviderResult
from vrmlookup.schemas.vehicle import AttemptEntry, ProviderStatus, VehicleRecord
from vrmlookup.services.merge import merge
from vrmlookup.utils.trace import AttemptTrace, scrub

logger = logging.getLogger(__name__)


@dataclass
class LookupOutcome:
    record: VehicleRecord
    attempts: list[AttemptEntry] = field(default_factory=list)
    providers: list[ProviderStatus] = field(default_factory=list)


async def _run_provider(
    provider: BaseProvider,
    vrm: str,
    client: httpx.AsyncClient,
    trace: AttemptTrace,
) -> ProviderResult:
    """Run a single provider with an overall timeout and error handling."""
    source_name = provider.source_name
    try:
        return await asyncio.wait_for(
            provider.lookup(vrm, client, trace),
            timeout=settings.provider_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error(f"{source_name} timed out after {settings.provider_timeout_seconds}s")
        return ProviderResult.failed(source_name, f"Timed out after {settings.provider_timeout_seconds}s")
    except Exception as e:
        logger.exception(f"Error querying {source_name}: {e}")
        return ProviderResult.failed(source_name, f"{type(e).__name__}: {e}")


async def lookup_vehicle(vrm: str, providers: list[BaseProvider] | None = None) -> LookupOutcome:
    """Query all providers for an already-normalized VRM and merge the results."""
    providers = get_all_providers() if providers is None else providers
    trace = AttemptTrace(
        secrets=settings.credential_values(),
        preview_chars=settings.debug_body_preview_chars,
    )

    async with httpx.AsyncClient(timeout=settings.request_timeout_seconds) as client:
        results = await asyncio.gather(*(_run_provider(p, vrm, client, trace) for p in providers))

    statuses = []
    for result in results:
        status = "ok" if result.ok else "error"
        if not result.ok:
            logger.info(f"{result.record.source} contributed nothing for {vrm}: {result.error}")
        error = scrub(result.error, trace.secrets) if result.error else None
        statuses.append(ProviderStatus(source=result.record.source, status=status, error=error))

    record = merge(vrm, [r.record for r in results if r.ok], settings.merge_precedence)

    return LookupOutcome(record=record, attempts=trace.entries, providers=statuses)

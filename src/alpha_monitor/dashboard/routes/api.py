"""JSON API endpoints exposing the latest monitoring results."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from alpha_monitor.reporting import result_to_dict

log = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """Session summary: pairs, pass counters, settings."""
    orchestrator = request.app.state.orchestrator
    return JSONResponse(content=orchestrator.get_status())


@router.get("/results")
async def get_results(request: Request) -> JSONResponse:
    """Latest result for every monitored pair, stable pairs first."""
    results = request.app.state.orchestrator.state.latest_results.values()
    ordered = sorted(results, key=lambda r: (not r.stable, r.display_name))
    return JSONResponse(content=[result_to_dict(r) for r in ordered])


@router.get("/results/{pair}")
async def get_pair_result(pair: str, request: Request) -> JSONResponse:
    """Latest result for one pair, looked up by raw id or display name."""
    latest = request.app.state.orchestrator.state.latest_results
    key = pair.upper()
    for raw, result in latest.items():
        if key in (raw.upper(), result.display_name.upper()):
            return JSONResponse(content=result_to_dict(result))
    return JSONResponse(status_code=404, content={"error": f"no result for {pair}"})


@router.post("/refresh")
async def trigger_refresh(request: Request) -> JSONResponse:
    """Run a monitoring pass now; rejected while another pass is in flight."""
    orchestrator = request.app.state.orchestrator
    results = await orchestrator.trigger_pass()
    if results is None:
        return JSONResponse(status_code=409, content={"error": "pass already in flight"})
    log.info("dashboard_manual_refresh", evaluated=len(results))
    return JSONResponse(content=[result_to_dict(r) for r in results])


@router.get("/pairs")
async def search_pairs(request: Request, q: str = "") -> JSONResponse:
    """Search the exchange pair list by raw id or display name."""
    resolver = request.app.state.resolver
    monitored = set(request.app.state.orchestrator.pairs)
    matches = resolver.search(q) if q else resolver.available
    return JSONResponse(
        content=[
            {
                "pair": p,
                "display_name": resolver.display_name(p),
                "monitored": p in monitored,
            }
            for p in matches
        ]
    )

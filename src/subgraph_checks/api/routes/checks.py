import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from subgraph_checks.api.dependencies import get_document_resolver, get_pull_request_lookup, get_reporter
from subgraph_checks.config import Settings, get_settings
from subgraph_checks.core.errors import UnknownStrategyError
from subgraph_checks.core.pipeline import PULL_REQUEST_RULE, run_check, run_pull_request_check
from subgraph_checks.core.ports.documents import DocumentResolver
from subgraph_checks.core.ports.pull_requests import PullRequestLookup
from subgraph_checks.core.ports.reporter import CheckReporter
from subgraph_checks.core.rules.base import RuleEvaluator
from subgraph_checks.core.rules.registry import build_evaluator
from subgraph_checks.core.signature import SIGNATURE_HEADER, verify_signature
from subgraph_checks.models import CheckEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["checks"])

def _invalid_signature() -> PlainTextResponse:
    return PlainTextResponse("Signature is invalid", status_code=403)


def _evaluator(strategy: str, settings: Settings) -> RuleEvaluator:
    try:
        return build_evaluator(strategy, settings)
    except UnknownStrategyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None


async def _verified_event(request: Request, settings: Settings, check_name: str) -> CheckEvent | None:
    """Parse the event if the raw body carries a valid signature, else return ``None``."""
    raw_body = await request.body()
    if not verify_signature(raw_body, request.headers.get(SIGNATURE_HEADER), settings.hmac_secret):
        logger.warning("Rejected %s check webhook: signature is invalid", check_name)
        return None
    try:
        return CheckEvent.model_validate_json(raw_body or b"{}")
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid check event ({exc.error_count()} error(s))") from None


async def _handle_webhook(
    request: Request,
    evaluator: RuleEvaluator,
    settings: Settings,
    resolver: DocumentResolver,
    reporter: CheckReporter,
) -> PlainTextResponse:
    event = await _verified_event(request, settings, evaluator.name)
    if event is None:
        return _invalid_signature()
    await run_check(
        event,
        evaluator,
        resolver,
        reporter,
        deadline_seconds=settings.deadline_seconds,
        strict_resolution=settings.strict_resolution,
    )
    return PlainTextResponse("OK")


@router.post("/checks/pull-request", response_class=PlainTextResponse)
async def pull_request_check(
    request: Request,
    settings: Settings = Depends(get_settings),
    lookup: PullRequestLookup = Depends(get_pull_request_lookup),
    reporter: CheckReporter = Depends(get_reporter),
) -> PlainTextResponse:
    """Pass the check iff the event's git branch has a pull request."""
    event = await _verified_event(request, settings, PULL_REQUEST_RULE)
    if event is None:
        return _invalid_signature()
    await run_pull_request_check(event, lookup, reporter, deadline_seconds=settings.deadline_seconds)
    return PlainTextResponse("OK")


@router.post("/checks/{strategy}", response_class=PlainTextResponse)
async def check(
    strategy: str,
    request: Request,
    settings: Settings = Depends(get_settings),
    resolver: DocumentResolver = Depends(get_document_resolver),
    reporter: CheckReporter = Depends(get_reporter),
) -> PlainTextResponse:
    """Verify, evaluate, and report one signed check event with the named rule strategy."""
    return await _handle_webhook(request, _evaluator(strategy, settings), settings, resolver, reporter)


@router.post("/custom-lint", response_class=PlainTextResponse)
async def custom_lint(
    request: Request,
    settings: Settings = Depends(get_settings),
    resolver: DocumentResolver = Depends(get_document_resolver),
    reporter: CheckReporter = Depends(get_reporter),
) -> PlainTextResponse:
    return await _handle_webhook(request, _evaluator("lint", settings), settings, resolver, reporter)

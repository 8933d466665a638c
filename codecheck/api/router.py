# codecheck/api/router.py
from __future__ import annotations

import asyncio
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from codecheck.audit.browser import BrowserCheckRunner
from codecheck.audit.github import GitHubFetcher
from codecheck.audit.runner import RepoCheckRunner
from codecheck.audit.validator import HtmlValidator
from codecheck.config import get_settings
from codecheck.errors import CheckError, ErrorKind
from codecheck.schemas import CheckRepoRequest, RepoCheckResult

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.REPO_NOT_FOUND: 404,
    ErrorKind.NETWORK: 502,
    ErrorKind.BROWSER: 500,
    ErrorKind.UNKNOWN: 500,
}


def get_runner(request: Request) -> RepoCheckRunner:
    """One runner per request, all sharing the app's browser."""
    settings = get_settings()
    return RepoCheckRunner(
        fetcher=GitHubFetcher(settings),
        checker=BrowserCheckRunner(request.app.state.browser, settings),
        validator=HtmlValidator(settings),
    )


@router.get("/healthz")
async def healthz(request: Request):
    browser = getattr(request.app.state, "browser", None)
    return {"ok": True, "app": get_settings().APP_NAME, "browser": bool(browser and browser.is_running)}


@router.post(
    "/check",
    response_model=RepoCheckResult,
    response_model_exclude_none=True,
)
async def check_repo(body: CheckRepoRequest, runner: RepoCheckRunner = Depends(get_runner)):
    """
    Check every HTML file of a GitHub repository.
    Input: {"repoUrl": "https://github.com/<owner>/<repo>"}
    """
    timeout_s = get_settings().CHECK_TIMEOUT_S
    try:
        return await asyncio.wait_for(runner.check_repo(body.repo_url), timeout=timeout_s)
    except asyncio.TimeoutError:
        logger.error("Check timed out after %ss for %s", timeout_s, body.repo_url)
        raise HTTPException(status_code=504, detail="Repository check timed out")
    except CheckError as exc:
        logger.error("Check failed for %s [%s]: %s", body.repo_url, exc.code, exc.message)
        raise HTTPException(status_code=STATUS_BY_KIND.get(exc.kind, 500), detail=exc.to_dict())
    except Exception:
        logger.exception("Unexpected failure checking %s", body.repo_url)
        raise HTTPException(status_code=500, detail="An unexpected error occurred")

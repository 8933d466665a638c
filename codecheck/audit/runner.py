# codecheck/audit/runner.py
import logging
from typing import Iterable, List, Protocol, Tuple

from codecheck.errors import CheckError, UnknownError, is_fatal
from codecheck.schemas import (
    CategoryCount,
    CheckLabel,
    CheckResult,
    FileCheckResult,
    FileChecks,
    FileType,
    RepoCheckResult,
    RepoCheckSummary,
    RepoFile,
)
from codecheck.audit.utils import parse_github_url

logger = logging.getLogger(__name__)


class RepoFetcher(Protocol):
    async def fetch_repo(self, owner: str, repo: str) -> List[RepoFile]: ...


class FileChecker(Protocol):
    async def check_html_file(self, file_url: str, file_path: str) -> Tuple[FileCheckResult, str]: ...


class MarkupValidator(Protocol):
    async def validate(self, html: str) -> CheckResult: ...


def _count(results: List[FileCheckResult], label: CheckLabel, attr: str) -> CategoryCount:
    statuses = [getattr(r.checks, attr).status for r in results]
    return CategoryCount(
        label=label.value,
        passed=statuses.count("pass"),
        failed=statuses.count("fail"),
    )


def summarize_results(results: List[FileCheckResult]) -> RepoCheckResult:
    summary = RepoCheckSummary(
        total_files=len(results),
        h1_checks=_count(results, CheckLabel.SINGLE_H1, "single_h1"),
        image_alt_checks=_count(results, CheckLabel.IMAGE_ALTS, "image_alts"),
        w3c_validation=_count(results, CheckLabel.W3C_VALIDATION, "w3c_validation"),
        horizontal_scrollbar_checks=_count(results, CheckLabel.HORIZONTAL_SCROLLBAR, "horizontal_scrollbar"),
    )
    logger.info("Summary: %s", summary.model_dump_json(by_alias=True))
    return RepoCheckResult(summary=summary, details=list(results))


class RepoCheckRunner:
    """
    Runs every check against every HTML file of a repository, one file at a
    time, and aggregates the outcome.

    A file that cannot be checked is recorded with all four checks failed; a
    fatal error (dead browser) aborts the whole run with no partial summary.
    """

    def __init__(self, fetcher: RepoFetcher, checker: FileChecker, validator: MarkupValidator):
        self.fetcher = fetcher
        self.checker = checker
        self.validator = validator

    async def check_repo(self, repo_url: str) -> RepoCheckResult:
        owner, repo = parse_github_url(repo_url)

        try:
            logger.info("Fetching repo: %s/%s", owner, repo)
            files = await self.fetcher.fetch_repo(owner, repo)
            logger.info("Total files fetched: %s", len(files))
            return await self.check_files(files)
        except CheckError:
            raise
        except Exception as exc:
            logger.exception("Error checking repo %s/%s", owner, repo)
            raise UnknownError(f"Failed to check repository: {exc}") from exc

    async def check_files(self, files: Iterable[RepoFile]) -> RepoCheckResult:
        html_files = [f for f in files if f.type == FileType.HTML]
        logger.info("HTML files found: %s", len(html_files))

        results: List[FileCheckResult] = []
        for file in html_files:
            results.append(await self.check_file(file))

        logger.info("Total files checked: %s", len(results))
        return summarize_results(results)

    async def check_file(self, file: RepoFile) -> FileCheckResult:
        logger.info("Checking HTML file: %s, URL: %s", file.path, file.url)
        try:
            browser_result, content = await self.checker.check_html_file(file.url, file.path)
            w3c = await self.validator.validate(content)
        except Exception as exc:
            if is_fatal(exc):
                raise
            logger.error("Error checking file %s: %s", file.path, exc)
            return self.failed_file(file.path, f"Error: {exc}")

        checks = browser_result.checks.model_copy(
            update={"w3c_validation": w3c.labeled(CheckLabel.W3C_VALIDATION)}
        )
        return FileCheckResult(file_name=browser_result.file_name, checks=checks)

    @staticmethod
    def failed_file(file_name: str, message: str) -> FileCheckResult:
        return FileCheckResult(file_name=file_name, checks=FileChecks.all_failed(message))

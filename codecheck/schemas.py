from enum import Enum
from typing import List, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from codecheck.config import get_settings


class FileType(str, Enum):
    HTML = "HTML"
    CSS = "CSS"
    JAVASCRIPT = "JavaScript"


class CheckLabel(str, Enum):
    SINGLE_H1 = "Single H1"
    IMAGE_ALTS = "Image Alt Attributes"
    W3C_VALIDATION = "W3C Validation"
    HORIZONTAL_SCROLLBAR = "Horizontal Scrollbar"


class RepoFile(BaseModel):
    name: str
    path: str
    type: FileType
    url: str

    model_config = ConfigDict(frozen=True)


class CheckResult(BaseModel):
    status: Literal["pass", "fail"]
    message: Optional[str] = None
    details: Optional[List[str]] = None

    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.status == "pass"

    @classmethod
    def passing(cls, message: Optional[str] = None) -> "CheckResult":
        return cls(status="pass", message=message)

    @classmethod
    def failing(cls, message: str, details: Optional[List[str]] = None) -> "CheckResult":
        return cls(status="fail", message=message, details=details)

    def labeled(self, label: CheckLabel) -> "LabeledCheckResult":
        return LabeledCheckResult(label=label.value, **self.model_dump(exclude_none=True))


class LabeledCheckResult(CheckResult):
    label: str


class FileChecks(BaseModel):
    single_h1: LabeledCheckResult = Field(alias="singleH1")
    image_alts: LabeledCheckResult = Field(alias="imageAlts")
    w3c_validation: LabeledCheckResult = Field(alias="w3cValidation")
    horizontal_scrollbar: LabeledCheckResult = Field(alias="horizontalScrollbar")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def all(self) -> List[LabeledCheckResult]:
        return [self.single_h1, self.image_alts, self.w3c_validation, self.horizontal_scrollbar]

    @classmethod
    def all_failed(cls, message: str) -> "FileChecks":
        """Every category failed with one message, so summary counts stay consistent."""
        failed = CheckResult.failing(message)
        return cls(
            single_h1=failed.labeled(CheckLabel.SINGLE_H1),
            image_alts=failed.labeled(CheckLabel.IMAGE_ALTS),
            w3c_validation=failed.labeled(CheckLabel.W3C_VALIDATION),
            horizontal_scrollbar=failed.labeled(CheckLabel.HORIZONTAL_SCROLLBAR),
        )


class FileCheckResult(BaseModel):
    file_name: str = Field(alias="fileName")
    checks: FileChecks

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @computed_field  # type: ignore[misc]
    @property
    def passed(self) -> bool:
        return all(check.ok for check in self.checks.all())


class CategoryCount(BaseModel):
    label: str
    passed: int = 0
    failed: int = 0


class RepoCheckSummary(BaseModel):
    total_files: int = Field(alias="totalFiles")
    h1_checks: CategoryCount = Field(alias="h1Checks")
    image_alt_checks: CategoryCount = Field(alias="imageAltChecks")
    w3c_validation: CategoryCount = Field(alias="w3cValidation")
    horizontal_scrollbar_checks: CategoryCount = Field(alias="horizontalScrollbarChecks")

    model_config = ConfigDict(populate_by_name=True)

    def categories(self) -> List[CategoryCount]:
        return [self.h1_checks, self.image_alt_checks, self.w3c_validation, self.horizontal_scrollbar_checks]


class RepoCheckResult(BaseModel):
    summary: RepoCheckSummary
    details: List[FileCheckResult]

    model_config = ConfigDict(populate_by_name=True)


class CheckRepoRequest(BaseModel):
    repo_url: str = Field(alias="repoUrl")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("repo_url")
    @classmethod
    def allowed_github_url(cls, v: str) -> str:
        u = (v or "").strip()
        parsed = urlparse(u)
        allowed = [h.lower() for h in get_settings().ALLOWED_HOSTS]
        if parsed.scheme not in ("http", "https") or (parsed.hostname or "").lower() not in allowed:
            raise ValueError("Invalid GitHub URL. Please provide a valid GitHub repository URL.")
        return u

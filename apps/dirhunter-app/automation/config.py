"""
Configuration models for DirHunter.
Uses Pydantic for validation and type safety.
"""

import re
from typing import Optional, Dict, Any, List, Union
from urllib.parse import urlparse
from pydantic import BaseModel, Field, field_validator


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DESCRIPTION_MIN_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 300


def _clamp(value: int, low: int, high: Optional[int] = None) -> int:
    if value < low:
        return low
    if high is not None and value > high:
        return high
    return value


class APIKeys(BaseModel):
    """API keys configuration."""
    openai: str = ""

    class Config:
        populate_by_name = True


class SubmissionData(BaseModel):
    """
    Operator-supplied values placed into classified fields.
    Extra canonical keys (company, twitter, pricing...) are allowed.
    """
    name: str
    url: str
    email: str
    description: str
    category: str = ""
    tags: str = ""

    class Config:
        populate_by_name = True
        extra = "allow"

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Name must not be empty."""
        v = (v or "").strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """URL must be an absolute http(s) URL."""
        v = (v or "").strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"url must be an absolute http(s) URL: {v!r}")
        return v

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Email must look like an email address."""
        v = (v or "").strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError(f"email is not a valid address: {v!r}")
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Description length must be within 50-300 characters."""
        v = (v or "").strip()
        if not DESCRIPTION_MIN_LENGTH <= len(v) <= DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"description must be {DESCRIPTION_MIN_LENGTH}-{DESCRIPTION_MAX_LENGTH} "
                f"characters (got {len(v)})"
            )
        return v

    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, v: Union[str, List[str], None]) -> str:
        """Tags may be given as a list; they are stored comma-separated."""
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return ", ".join(str(t).strip() for t in v if str(t).strip())
        return str(v).strip()

    def value_for(self, key: str) -> Optional[str]:
        """Value for a canonical field key, or None when not supplied."""
        data = self.model_dump()
        value = data.get(key)
        if value is None:
            return None
        value = str(value)
        return value if value.strip() else None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class Settings(BaseModel):
    """Bot settings. Every recognized option, with its default."""
    headless: bool = Field(default=False, alias="headlessMode")
    navigation_timeout_ms: int = Field(default=30000, alias="navigationTimeoutMs")
    inter_directory_delay_ms: int = Field(default=5000, alias="interDirectoryDelayMs")
    capture_screenshot_on_error: bool = Field(default=True, alias="captureScreenshotOnError")
    settle_delay_ms: int = Field(default=2000, alias="settleDelayMs")
    captcha_wait_ms: int = Field(default=30000, alias="captchaWaitMs")
    submit_navigation_timeout_ms: int = Field(default=10000, alias="submitNavigationTimeoutMs")
    post_submit_delay_ms: int = Field(default=3000, alias="postSubmitDelayMs")
    analysis_delay_ms: int = Field(default=1000, alias="analysisDelayMs")
    csv_path: str = Field(default="directories.csv", alias="csvPath")
    site_configs_path: str = Field(default="site-configs.json", alias="siteConfigsPath")
    field_analysis_path: str = Field(default="field-analysis.json", alias="fieldAnalysisPath")
    results_path: str = Field(default="submission-results.json", alias="resultsPath")
    generated_values_path: str = Field(default="generated-values.json", alias="generatedValuesPath")
    only_unsubmitted: bool = Field(default=True, alias="onlyUnsubmitted")
    limit: Optional[int] = None
    debug: bool = False
    detailed_logs: bool = Field(default=False, alias="detailedLogs")  # Simple logs by default
    llm_model: str = Field(default="gpt-4o-mini", alias="llmModel")
    ai_enhance: bool = Field(default=False, alias="aiEnhance")

    @field_validator('navigation_timeout_ms')
    @classmethod
    def validate_navigation_timeout(cls, v: int) -> int:
        """Validate navigation timeout is within valid range (1s-300s)."""
        return _clamp(v, 1000, 300000)

    @field_validator('inter_directory_delay_ms', 'settle_delay_ms', 'captcha_wait_ms',
                     'submit_navigation_timeout_ms', 'post_submit_delay_ms', 'analysis_delay_ms')
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Delays cannot be negative."""
        return _clamp(v, 0)

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v: Optional[int]) -> Optional[int]:
        """Limit must be positive when set."""
        if v is None:
            return None
        return _clamp(v, 1)

    class Config:
        populate_by_name = True


class BotConfig(BaseModel):
    """Complete bot configuration."""
    api_keys: APIKeys = Field(default_factory=APIKeys, alias="apiKeys")
    settings: Settings = Field(default_factory=Settings)
    submission: Optional[SubmissionData] = None

    class Config:
        populate_by_name = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_file(cls, path: str) -> "BotConfig":
        """Load configuration from JSON file."""
        import json
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str):
        """Save configuration to JSON file."""
        import json
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

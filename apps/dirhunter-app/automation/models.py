"""
Data models for DirHunter.
Uses Pydantic for validation and serialization of everything that is
extracted from a page, persisted between runs, or reported back.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class SubmissionMethod(str, Enum):
    """How a directory accepts submissions."""
    FORM = "form"
    LINK = "link"
    MANUAL = "manual"


class SubmissionState(str, Enum):
    """States of the submission state machine."""
    INIT = "init"
    NAVIGATED = "navigated"
    REVEALED = "revealed"
    FILLED = "filled"
    AWAITING_CAPTCHA = "awaiting_captcha"
    SUBMITTED = "submitted"
    SUCCESS = "success"
    FAILED = "failed"
    MANUAL_REQUIRED = "manual_required"


class DirectoryRecord(BaseModel):
    """One directory site to profile and submit to. Identity is the name."""
    name: str
    url: str
    submit_url: Optional[str] = Field(default=None, alias="submitUrl")
    reveal_control: Optional[str] = Field(default=None, alias="revealControl")
    status: str = ""

    @property
    def target_url(self) -> str:
        """Explicit submit URL when present, otherwise the directory URL."""
        if self.submit_url and self.submit_url.strip():
            return self.submit_url.strip()
        return self.url

    @property
    def has_submit_url(self) -> bool:
        return bool(self.submit_url and self.submit_url.strip())

    class Config:
        populate_by_name = True
        frozen = True


# ==================== EXTRACTION ====================

class FieldOption(BaseModel):
    """One option of a select control."""
    value: str = ""
    text: str = ""


class RawFieldDescriptor(BaseModel):
    """Attributes of one form control, as extracted from the page."""
    type: str = "text"
    name: str = ""
    id: str = ""
    placeholder: str = ""
    label: str = ""
    required: bool = False
    pattern: str = ""
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    options: List[FieldOption] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class SubmitControl(BaseModel):
    """The submit control found inside a form."""
    tag: str = "button"
    type: str = ""
    id: str = ""
    class_name: str = Field(default="", alias="className")
    text: str = ""

    class Config:
        populate_by_name = True


class ExtractedForm(BaseModel):
    """One form element and the controls it contains."""
    index: int = 0
    action: str = ""
    method: str = "get"
    fields: List[RawFieldDescriptor] = Field(default_factory=list)
    submit_button: Optional[SubmitControl] = Field(default=None, alias="submitButton")

    class Config:
        populate_by_name = True


class PageLink(BaseModel):
    """An anchor found on the page."""
    text: str = ""
    href: str = ""


class PageMetadata(BaseModel):
    """Document metadata: standard meta tags, Open Graph and Twitter cards."""
    title: str = ""
    description: str = ""
    keywords: str = ""
    author: str = ""
    og_title: str = Field(default="", alias="ogTitle")
    og_description: str = Field(default="", alias="ogDescription")
    og_image: str = Field(default="", alias="ogImage")
    og_url: str = Field(default="", alias="ogUrl")
    twitter_card: str = Field(default="", alias="twitterCard")
    twitter_title: str = Field(default="", alias="twitterTitle")
    twitter_description: str = Field(default="", alias="twitterDescription")
    twitter_image: str = Field(default="", alias="twitterImage")
    favicon: str = ""
    canonical_url: str = Field(default="", alias="canonicalUrl")
    language: str = "en"

    class Config:
        populate_by_name = True


class PageExtraction(BaseModel):
    """Everything the page form extractor returns for one page."""
    url: str = ""
    title: str = ""
    forms: List[ExtractedForm] = Field(default_factory=list)
    links: List[PageLink] = Field(default_factory=list)
    has_recaptcha: bool = Field(default=False, alias="hasRecaptcha")
    has_hcaptcha: bool = Field(default=False, alias="hasHcaptcha")
    metadata: PageMetadata = Field(default_factory=PageMetadata)

    class Config:
        populate_by_name = True

    @property
    def all_fields(self) -> List[RawFieldDescriptor]:
        """Fields of every form, in document order."""
        return [field for form in self.forms for field in form.fields]

    @property
    def first_form(self) -> Optional[ExtractedForm]:
        return self.forms[0] if self.forms else None

    @property
    def requires_captcha(self) -> bool:
        return self.has_recaptcha or self.has_hcaptcha


# ==================== SITE PROFILE ====================

class FieldMappingEntry(BaseModel):
    """Where to find the control for one canonical key."""
    selector: str
    type: str = "text"
    source_name: str = Field(default="", alias="sourceName")
    source_id: str = Field(default="", alias="sourceId")
    options: Optional[List[FieldOption]] = None

    class Config:
        populate_by_name = True


class FormBlock(BaseModel):
    """The form part of a site profile."""
    index: int = 0
    action: str = ""
    method: str = "get"
    fields: Dict[str, FieldMappingEntry] = Field(default_factory=dict)
    submit_button_selector: Optional[str] = Field(default=None, alias="submitButtonSelector")
    submit_button_text: Optional[str] = Field(default=None, alias="submitButtonText")

    class Config:
        populate_by_name = True


class SiteConfig(BaseModel):
    """Reusable submission strategy for one directory site."""
    url: str
    has_form: bool = Field(default=False, alias="hasForm")
    requires_captcha: bool = Field(default=False, alias="requiresCaptcha")
    submission_method: SubmissionMethod = Field(default=SubmissionMethod.MANUAL, alias="submissionMethod")
    form: Optional[FormBlock] = None
    submission_links: Optional[List[PageLink]] = Field(default=None, alias="submissionLinks")
    recommended_link: Optional[PageLink] = Field(default=None, alias="recommendedLink")
    manual_submission_required: Optional[bool] = Field(default=None, alias="manualSubmissionRequired")
    error: Optional[str] = None

    class Config:
        populate_by_name = True

    @property
    def is_usable(self) -> bool:
        """False when profiling flagged the site for manual submission."""
        return not (self.manual_submission_required or self.error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ==================== RESULTS ====================

class SubmissionResult(BaseModel):
    """Outcome of one submission attempt for one directory."""
    success: bool = False
    message: str = ""
    requires_manual: bool = Field(default=False, alias="requiresManual")
    used_site_config: bool = Field(default=False, alias="usedSiteConfig")
    state: SubmissionState = SubmissionState.INIT
    states: List[SubmissionState] = Field(default_factory=list)
    fields_filled: List[str] = Field(default_factory=list, alias="fieldsFilled")
    fields_skipped: List[str] = Field(default_factory=list, alias="fieldsSkipped")
    screenshot: Optional[str] = None

    class Config:
        populate_by_name = True

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FieldStat(BaseModel):
    """How often one canonical field key was seen during an analysis run."""
    canonical_key: str = Field(alias="canonicalKey")
    count: int = 0
    sites: List[str] = Field(default_factory=list)
    frequency: int = 0

    class Config:
        populate_by_name = True

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

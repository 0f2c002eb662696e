from datetime import datetime
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/64.0.3282.140 Safari/537.36 Edge/17.17134"
)

MAX_IMAGES = 500


class ScrapeSettings(BaseModel):
    """Knobs for one scrape call. Defaults match the desktop app."""

    max_images: int = Field(default=MAX_IMAGES, gt=0)
    timeout: float = Field(default=15, gt=0)
    probe_timeout: float = Field(default=2, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    # Background images are only looked up on table cells
    style_selector: str = "td[style]"
    max_redirects: int = Field(default=5, ge=0)


class ScrapeTarget(BaseModel):
    """The page being scraped and the only host we are allowed to talk to."""

    model_config = ConfigDict(frozen=True)

    domain: str
    page_url: str

    @field_validator("domain")
    def domain_must_be_hostname(cls, v):
        v = v.strip()
        if not v or "/" in v or " " in v:
            raise ValueError(f"invalid domain: {v!r}")
        return v

    @field_validator("page_url")
    def page_url_must_be_absolute(cls, v):
        p = urlparse(v)
        if p.scheme not in ("http", "https") or not p.netloc:
            raise ValueError(f"page_url must be an absolute http(s) URL: {v!r}")
        return v


class ScrapeJobConfig(BaseModel):
    """
    Job contract for the headless flow.
    Everything needed to scrape one page and, optionally, save its images.
    """

    job_name: str
    environment: str = Field(default="dev", pattern="^(dev|staging|prod)$")

    # Bare host ("example.com") or full URL; the flow probes the protocol
    source_url: str

    destination_path: str = "data"
    download: bool = False
    max_workers: int = Field(default=4, gt=0)
    settings: ScrapeSettings = Field(default_factory=ScrapeSettings)

    execution_date: str = Field(
        default_factory=lambda: datetime.now().strftime("%Y-%m-%d")
    )

    @property
    def output_dir(self) -> str:
        """Where downloaded images land.

        Format: <destination_path>/<job_name>/data_captura=YYYY-MM-DD
        """
        return (
            f"{self.destination_path}/"
            f"{self.job_name}/data_captura={self.execution_date}"
        )

    @field_validator("job_name")
    def job_name_must_be_slug(cls, v):
        if " " in v:
            raise ValueError("job_name must not contain spaces")
        return v.lower()

"""Application settings models."""

from pydantic import BaseModel, ConfigDict, Field

from pipedeck.constants.defaults import LOG_LEVEL_DEFAULT, SERVER_URL_DEFAULT
from pipedeck.constants.limits import AUTOSAVE_INTERVAL_MIN, POLL_INTERVAL_MIN
from pipedeck.constants.timeouts import (
    AUTOSAVE_INTERVAL,
    SERVICE_REQUEST_TIMEOUT,
    STATUS_POLL_INTERVAL,
)
from pipedeck.constants.values import (
    FILES_BUCKET,
    PIPELINE_BUCKET,
    UNTITLED_PIPELINE,
)


class AppSettings(BaseModel):
    """Application settings model with validation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Services
    server_url: str = SERVER_URL_DEFAULT
    request_timeout: float = Field(default=SERVICE_REQUEST_TIMEOUT, gt=0)

    # Timers
    poll_interval: float = Field(default=STATUS_POLL_INTERVAL, ge=POLL_INTERVAL_MIN)  # seconds
    autosave_interval: float = Field(default=AUTOSAVE_INTERVAL, ge=AUTOSAVE_INTERVAL_MIN)  # seconds

    # Persistence layout
    pipeline_bucket: str = PIPELINE_BUCKET
    files_bucket: str = FILES_BUCKET
    untitled_title: str = UNTITLED_PIPELINE

    # Session
    last_pipeline: str = ""

    # Logging
    log_level: str = LOG_LEVEL_DEFAULT
    log_file: str = ""

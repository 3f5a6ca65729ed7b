from pathlib import Path
from pydantic_settings import BaseSettings

RESUME_MIME_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


class Settings(BaseSettings):
    data_path: Path = Path.home() / "AlumniJobBoard"
    api_prefix: str = "/api/v1"
    default_page_size: int = 12
    max_page_size: int = 100
    # Résumé metadata is checked locally before the file collaborator sees it.
    max_resume_bytes: int = 5 * 1024 * 1024  # 5 MiB
    allowed_resume_mime_types: tuple[str, ...] = RESUME_MIME_TYPES
    min_experience_chars: int = 10
    max_message_chars: int = 1000
    applied_hydration_limit: int = 500
    # "permissive" allows any status change; "strict" requires Shortlisted before Hired.
    review_transition_policy: str = "permissive"
    list_requests_per_minute: int = 120  # 0 disables the listing throttle
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def db_path(self) -> Path:
        return self.data_path / "jobboard.sqlite"

    model_config = {"env_prefix": "JOBBOARD_"}


settings = Settings()

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_password: str | None = None  # The password for protecting the API endpoints.
    log_level: str = "INFO"  # The logging level to use.
    jpeg_quality: float = Field(0.8, gt=0.0, le=1.0)  # Default quality used when encoding pixel frames.
    default_frame_rate: float = Field(25.0, gt=0.0)  # Frame rate used when a request does not specify one.
    max_frames_per_request: int = 10000  # Upper bound on frames accepted by a single encode request.

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

"""Process configuration, read from the environment once at startup."""

from collections.abc import Mapping
import os

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from core.utils.constants import (
    DEFAULT_CACHE_CONTROL,
    DEFAULT_FFMPEG_BINARY,
    DEFAULT_FFPROBE_BINARY,
    ENV_ARTIFACT_CACHE_CONTROL,
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_FFMPEG_PATH,
    ENV_FFPROBE_PATH,
    ENV_IMAGE_BUCKET_BASE_URL,
    ENV_IMAGE_BUCKET_NAME,
)


class AppConfig(BaseModel):
    """Immutable service configuration.

    Built once per process and handed explicitly to the components that
    need it (S3 adapter, artifact store, video decoder).
    """

    model_config = ConfigDict(frozen=True)

    bucket_name: StrictStr = Field(..., min_length=1)
    region: StrictStr = Field(..., min_length=1)
    base_url: StrictStr | None = None
    endpoint_url: StrictStr | None = None
    cache_control: StrictStr = DEFAULT_CACHE_CONTROL
    ffmpeg_path: StrictStr = DEFAULT_FFMPEG_BINARY
    ffprobe_path: StrictStr = DEFAULT_FFPROBE_BINARY

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Create configuration from environment variables.

        Raises:
            RuntimeError: If a required variable is missing
        """
        env = os.environ if environ is None else environ

        def required(name: str) -> str:
            value = env.get(name)
            if not value:
                raise RuntimeError(f"{name} environment variable is not set")
            return value

        return cls(
            bucket_name=required(ENV_IMAGE_BUCKET_NAME),
            region=required(ENV_AWS_REGION),
            base_url=env.get(ENV_IMAGE_BUCKET_BASE_URL) or None,
            endpoint_url=env.get(ENV_AWS_ENDPOINT_URL) or None,
            cache_control=env.get(ENV_ARTIFACT_CACHE_CONTROL) or DEFAULT_CACHE_CONTROL,
            ffmpeg_path=env.get(ENV_FFMPEG_PATH) or DEFAULT_FFMPEG_BINARY,
            ffprobe_path=env.get(ENV_FFPROBE_PATH) or DEFAULT_FFPROBE_BINARY,
        )

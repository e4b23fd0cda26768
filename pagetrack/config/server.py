"""Settings of the standalone host app process."""

from pydantic import BaseModel, Field


class ServerSettings(BaseModel):
    """How ``pagetrack serve`` binds and runs uvicorn."""

    host: str = Field(
        default="127.0.0.1",
        description="Interface the host app listens on",
    )

    port: int = Field(
        default=8000,
        description="TCP port the host app listens on",
        ge=1,
        le=65535,
    )

    workers: int = Field(
        default=1,
        description="uvicorn worker processes; more than one needs a file-backed store",
        ge=1,
        le=32,
    )

    reload: bool = Field(
        default=False,
        description="Restart on source changes (development only)",
    )

    proxy_headers: bool = Field(
        default=False,
        description="Trust X-Forwarded-For/-Proto from the addresses in forwarded_allow_ips",
    )

    forwarded_allow_ips: str = Field(
        default="127.0.0.1",
        description="Comma separated proxy addresses whose forwarded headers are trusted",
    )

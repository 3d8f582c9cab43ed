import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from .mq import DEFAULT_QUEUE

DEFAULT_PORT = 9100
DEFAULT_DIR = "/home/root/.local/share/remarkable/xochitl/"


class ReceiverConfig(BaseModel):
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    directory: str = Field(default=DEFAULT_DIR, min_length=1)
    chunk_size: int = Field(default=1024, gt=0)
    # no host = no import notifications
    mq_host: Optional[str] = None
    mq_queue: str = DEFAULT_QUEUE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReceiverConfig":
        env = os.environ if environ is None else environ
        values = {}
        for field, var in (
            ("port", "PDFSINK_PORT"),
            ("directory", "PDFSINK_DIR"),
            ("chunk_size", "PDFSINK_CHUNK_SIZE"),
            ("mq_host", "RABBITMQ_HOST"),
            ("mq_queue", "RABBITMQ_QUEUE"),
        ):
            if env.get(var):
                values[field] = env[var]
        return cls(**values)

    def with_overrides(self, **overrides) -> "ReceiverConfig":
        """Return a validated copy with every non-None override applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ReceiverConfig(**data)

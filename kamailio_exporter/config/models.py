"""Pydantic configuration models for the Kamailio exporter."""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Optional
import logging

from ..services.rtpengine_proxy import DEFAULT_RTPENGINE_METRICS_URL
from ..services.session import parse_endpoint
from ..utils.logger import LOG_FORMATS

logger = logging.getLogger(__name__)

DEFAULT_RPC_URI = "unix:///var/run/kamailio/kamailio_ctl"


def parse_dispatcher_map(entries: List[str]) -> Dict[int, str]:
    """
    Parse ``"id:name"`` entries into a set ID to name table.

    Entries that are not of that shape, or whose ID is not an integer, are
    dropped with a warning.
    """
    result = {}
    for entry in entries:
        parts = str(entry).split(":")
        if len(parts) != 2:
            logger.warning(f"Ignoring dispatcher map entry without 'id:name' shape: {entry!r}")
            continue
        set_id, name = parts
        try:
            result[int(set_id)] = name
        except ValueError:
            logger.warning(f"Ignoring dispatcher map entry with non-numeric set id: {entry!r}")
    return result


class KamailioConfig(BaseModel):
    """Connection and collector settings for one Kamailio instance."""
    rpc_uri: str = DEFAULT_RPC_URI
    timeout_seconds: float = Field(default=5.0, gt=0)
    # Set ID -> human readable name for the dispatcher collector
    dispatcher_map: Dict[int, str] = Field(default_factory=dict)
    dialog_profiles: List[str] = Field(default_factory=list)

    @field_validator('rpc_uri')
    @classmethod
    def validate_rpc_uri(cls, v: str) -> str:
        """Validate endpoint scheme and parts."""
        parse_endpoint(v)
        return v

    @field_validator('dispatcher_map', mode='before')
    @classmethod
    def parse_map_entries(cls, v):
        """Accept a list of "id:name" strings as well as a mapping."""
        if isinstance(v, (list, tuple)):
            return parse_dispatcher_map(v)
        return v


class WebConfig(BaseModel):
    """HTTP exposition settings."""
    listen_address: str = "0.0.0.0"
    listen_port: int = Field(default=9494, ge=1, le=65535)
    metrics_path: str = "/metrics"
    custom_metrics_url: Optional[str] = None
    # Extra path proxying rtpengine's own metrics page, disabled when unset
    rtp_metrics_path: Optional[str] = None
    rtpengine_metrics_url: str = DEFAULT_RTPENGINE_METRICS_URL

    @field_validator('metrics_path', 'rtp_metrics_path')
    @classmethod
    def validate_path(cls, v: Optional[str]) -> Optional[str]:
        """Paths must be absolute and not the landing page."""
        if v is None:
            return None
        if not v.startswith('/') or v == '/':
            raise ValueError('path must start with / and must not be /')
        return v

    @field_validator('rtp_metrics_path', mode='before')
    @classmethod
    def empty_path_disables(cls, v):
        return v or None

    @field_validator('custom_metrics_url')
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate URL format."""
        if not v:
            return None
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v

    @field_validator('rtpengine_metrics_url')
    @classmethod
    def validate_rtpengine_url(cls, v: str) -> str:
        """rtpengine metrics URL must be http(s)."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v

    @model_validator(mode='after')
    def validate_distinct_paths(self) -> 'WebConfig':
        """The rtpengine path must not shadow the metrics path."""
        if self.rtp_metrics_path == self.metrics_path:
            raise ValueError('rtp_metrics_path must differ from metrics_path')
        return self


class ExporterConfig(BaseModel):
    """Root configuration model for the exporter."""
    kamailio: KamailioConfig = Field(default_factory=KamailioConfig)
    # Collector name -> enabled, overriding the registry defaults
    collectors: Dict[str, bool] = Field(default_factory=dict)
    web: WebConfig = Field(default_factory=WebConfig)
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'Unknown log level: {v}')
        return level

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format name."""
        if v not in LOG_FORMATS:
            raise ValueError(f'log_format must be one of {", ".join(LOG_FORMATS)}')
        return v

"""Runtime configuration for soap-mapper."""

from dataclasses import dataclass
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class MapperConfig:
    strict: bool
    namespace: str | None
    lower_case_first: bool
    keep_nulls: bool


@dataclass(frozen=True)
class TransportConfig:
    url: str
    user_agent: str
    reconnect_interval_s: float
    max_retries: int
    request_timeout_s: float
    auto_reconnect: bool
    debug: bool


DEFAULT_USER_AGENT = "SoapMapper/1.0"


def get_mapper_config() -> MapperConfig:
    """Load mapping options from environment variables."""
    namespace = os.getenv("SOAP_MAPPER_NAMESPACE")
    return MapperConfig(
        strict=_env_bool("SOAP_MAPPER_STRICT", False),
        namespace=namespace if namespace else None,
        lower_case_first=_env_bool("SOAP_MAPPER_LOWER_CASE_FIRST", False),
        keep_nulls=_env_bool("SOAP_MAPPER_KEEP_NULLS", True),
    )


def get_transport_config() -> TransportConfig:
    """Load transport config from environment variables."""
    return TransportConfig(
        url=os.getenv("SOAP_MAPPER_URL", "ws://localhost:9001"),
        user_agent=os.getenv("SOAP_MAPPER_USER_AGENT") or DEFAULT_USER_AGENT,
        reconnect_interval_s=_env_float("SOAP_MAPPER_RECONNECT_INTERVAL_S", 0.5),
        max_retries=max(0, _env_int("SOAP_MAPPER_MAX_RETRIES", 2)),
        request_timeout_s=max(1.0, _env_float("SOAP_MAPPER_REQUEST_TIMEOUT_S", 10.0)),
        auto_reconnect=_env_bool("SOAP_MAPPER_AUTO_RECONNECT", True),
        debug=_env_bool("SOAP_MAPPER_DEBUG", False),
    )

from .version import CLIENT_VERSION
from .config import BrainClientConfig, CapabilitySettings, HeartbeatSettings, LogLevel, load_config_from_env
from .exceptions import (
    BrainClientError,
    ConfigurationError,
    DispatchError,
    EndpointNotFoundError,
    HttpStatusError,
    InvalidInputError,
    NetworkError,
    RequestTimeoutError,
    TransportError,
)
from .result import Result
from .models import (
    CapabilityEntry,
    CapabilityStatus,
    DataTypeSchema,
    EventEnvelope,
    EventReceipt,
    HubConfig,
    RegistrationResult,
    ServiceRequest,
    Severity,
    VersionInfo,
)
from .cache import CacheStore, MemoryCacheStore, RedisCacheStore, create_cache_store
from .tasks import InlineTaskSubmitter, TaskSubmitter, ThreadPoolTaskSubmitter
from .transport import HttpTransport
from .events import EventDispatcher
from .proxy import ServiceProxy
from .capabilities import CapabilityRegistry
from .catalog import HubCatalog
from .validation import LocalValidator
from .heartbeat import HeartbeatReport, HeartbeatService
from .client import BrainClient
from .standalone import StandaloneEventClient
from .logging import (
    safe_preview,
    redact_secrets,
    safe_log_value,
    BrainClientFormatter,
    BrainClientLoggerAdapter,
    setup_logging,
    get_brain_logger,
)

__all__ = [
    'CLIENT_VERSION',
    'BrainClient',
    'StandaloneEventClient',
    'BrainClientConfig',
    'CapabilitySettings',
    'HeartbeatSettings',
    'LogLevel',
    'load_config_from_env',
    'BrainClientError',
    'ConfigurationError',
    'DispatchError',
    'EndpointNotFoundError',
    'HttpStatusError',
    'InvalidInputError',
    'NetworkError',
    'RequestTimeoutError',
    'TransportError',
    'Result',
    'CapabilityEntry',
    'CapabilityStatus',
    'DataTypeSchema',
    'EventEnvelope',
    'EventReceipt',
    'HubConfig',
    'RegistrationResult',
    'ServiceRequest',
    'Severity',
    'VersionInfo',
    'CacheStore',
    'MemoryCacheStore',
    'RedisCacheStore',
    'create_cache_store',
    'TaskSubmitter',
    'InlineTaskSubmitter',
    'ThreadPoolTaskSubmitter',
    'HttpTransport',
    'EventDispatcher',
    'ServiceProxy',
    'CapabilityRegistry',
    'HubCatalog',
    'LocalValidator',
    'HeartbeatService',
    'HeartbeatReport',
    'safe_preview',
    'redact_secrets',
    'safe_log_value',
    'BrainClientFormatter',
    'BrainClientLoggerAdapter',
    'setup_logging',
    'get_brain_logger',
]

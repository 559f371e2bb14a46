"""AI request routing with family-aware parameters and a single fallback."""

from .config import RouterSettings, get_settings
from .errors import ErrorClassification, ErrorCode, ProviderCallError, RouterError, classify_error
from .families import build_call_params, build_token_params, classify_model_family
from .health import router_health
from .model_router import ModelRouter, ProviderResponse
from .orchestrator import AIRouter, RouteState, next_state
from .schemas import RouterContext, RouterMetrics, RouterRequest, RouterResult
from .selection import ModelSelection, select_models
from .validation import OutputFailure, ValidatedContent, extract_json, validate_response

__all__ = [
    "AIRouter",
    "ErrorClassification",
    "ErrorCode",
    "ModelRouter",
    "ModelSelection",
    "OutputFailure",
    "ProviderCallError",
    "ProviderResponse",
    "RouteState",
    "RouterContext",
    "RouterError",
    "RouterMetrics",
    "RouterRequest",
    "RouterResult",
    "RouterSettings",
    "ValidatedContent",
    "build_call_params",
    "build_token_params",
    "classify_error",
    "classify_model_family",
    "extract_json",
    "get_settings",
    "next_state",
    "router_health",
    "select_models",
    "validate_response",
]

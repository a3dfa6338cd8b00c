"""
Shared Thread moderation engine.
Rule-based spam scoring, trust-adjusted decisions and audit logging.
"""

from shared_thread_moderation.config import ModerationConfig, load_config
from shared_thread_moderation.services.moderation_service import ModerationEngine

__version__ = "1.0.0"

__all__ = ["ModerationConfig", "ModerationEngine", "load_config", "__version__"]

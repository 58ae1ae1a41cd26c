from .loader import load_config
from .models import EnsureUpdateConfig, StoreConfig, VCSConfig

__all__ = [
    "EnsureUpdateConfig",
    "StoreConfig",
    "VCSConfig",
    "load_config",
]

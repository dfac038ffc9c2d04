from .common import Validators
from .dates import get_current_time

__all__ = ["Validators", "get_current_time"]

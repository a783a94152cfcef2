from dev_conventions.core.time.abc import Time
from dev_conventions.core.time.real import RealTime

__all__ = [
    "RealTime",
    "Time",
]

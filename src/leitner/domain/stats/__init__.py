# Domain Stats Package
from .models import BoxCount, StatsSnapshot

__all__ = ["BoxCount", "StatsSnapshot"]

"""
Expression Pipeline Module

Handles everything after classification:
- Run-length reduction of labels into timed events
- Buffering and periodic delivery
- Lifecycle (start/stop/rebind) of the whole pipeline
"""

from .buffer import DeliveryBuffer
from .controller import ExpressionPipeline
from .reducer import ExpressionReducer
from .scheduler import DeliveryScheduler

__all__ = [
    "DeliveryBuffer",
    "DeliveryScheduler",
    "ExpressionPipeline",
    "ExpressionReducer",
]

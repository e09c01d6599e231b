"""
Detection Worker Module

Runs expression inference in a background process:
- channel: host side (spawn, frame ping-pong, listener thread)
- runtime: worker side (classifier loading, paced classification)
- classifier: pluggable inference protocol
"""

from .channel import DetectionWorkerChannel
from .classifier import ClassifierFactory, ExpressionClassifier, load_classifier_factory
from .runtime import run_worker

__all__ = [
    "ClassifierFactory",
    "DetectionWorkerChannel",
    "ExpressionClassifier",
    "load_classifier_factory",
    "run_worker",
]

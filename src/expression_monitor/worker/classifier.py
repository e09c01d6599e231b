"""
Expression Classifier Protocol - Interface for the inference running in the worker.

The worker process only knows how to call a factory with the models URL and
then ask the resulting classifier for one label per frame. The actual model
(face-api, DeepFace, ONNX, ...) lives outside this package.
"""

import importlib
from collections.abc import Callable
from typing import Any, Protocol


class ExpressionClassifier(Protocol):
    """
    Protocol for expression classifiers.

    Example:
        def make_classifier(models_url: str) -> ExpressionClassifier:
            return MyClassifier(models_url)

        classifier = make_classifier("https://cdn.example.com/models/")
        classifier.backend  # "webgl" or "cpu"
        classifier.classify(frame)  # "happy", or "" when no face is found
    """

    backend: str

    def classify(self, frame: Any) -> str | None:
        """
        Classify the dominant expression in a frame.

        Args:
            frame: Frame grabbed by the host's capture handle

        Returns:
            Expression label, or empty/None when nothing was confidently classified
        """
        ...


ClassifierFactory = Callable[[str], ExpressionClassifier]


def load_classifier_factory(target: str | ClassifierFactory) -> ClassifierFactory:
    """
    Resolve a classifier factory.

    Args:
        target: Either a callable or an import path "package.module:attribute"

    Returns:
        Factory taking the models URL

    Raises:
        ValueError: If the import path is malformed
        ImportError / AttributeError: If the target cannot be found
    """
    if callable(target):
        return target

    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Classifier must be 'module:attribute', got '{target}'")

    module = importlib.import_module(module_name)
    factory = getattr(module, attr)
    if not callable(factory):
        raise ValueError(f"Classifier '{target}' is not callable")
    return factory

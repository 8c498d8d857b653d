"""Compatibility classification of crate changes."""

from cratesmith.classifier.baseline import BaselineStore
from cratesmith.classifier.cargo_semver import CargoSemverClassifier
from cratesmith.classifier.classification import Classification, Classifier

__all__ = [
    "BaselineStore",
    "CargoSemverClassifier",
    "Classification",
    "Classifier",
]

from .link_classifier import LinkClassifier, derive_label

__all__ = ["LinkClassifier", "derive_label"]

"""Read-only vocabulary: code tables, ladders and classification labels."""

from dxcoder.vocab.labels import label_for, load_labels

__all__ = ["label_for", "load_labels"]

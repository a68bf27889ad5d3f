"""cloudprov -- lifecycle helpers for cloud control-plane resources."""

__version__ = "0.1.0"

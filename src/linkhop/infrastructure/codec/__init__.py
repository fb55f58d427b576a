from .routing_codec import RoutingCodec

__all__ = ["RoutingCodec"]

"""Short URL lifecycle engine: code generation, admission, cache-aside resolution and expiration."""

__version__ = '0.1.0'

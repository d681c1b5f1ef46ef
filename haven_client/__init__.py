"""Client core for the Harmony Haven backend.

Provides resilient access to articles, quotes and notifications:
- HTTP transport with a typed error taxonomy and fixed-delay retries
- Multi-format response decoding that tolerates unstable payload shapes
- Immutable domain entities and pure mappers
- Paginated feed state machines with deduplication and prefetching
"""

__version__ = "0.1.0"

"""System Clock — production implementation of the core Clock protocol."""

from datetime import datetime, timezone


class SystemClock:
    """Reads the wall clock. Always returns timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

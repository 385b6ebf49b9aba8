from .store import SQLABackingStore  # noqa: F401

from typing import Optional, Protocol


class SurfaceFormDictionary(Protocol):
    """Read-only mapping from surface form to canonical link."""

    def lookup(self, surface_form: str) -> Optional[str]:
        ...

    def __contains__(self, surface_form: object) -> bool:
        ...

    def __len__(self) -> int:
        ...

"""Protocol interface for artifact getters."""

from typing import Protocol, runtime_checkable

from repofetch.getter.options import Option


@runtime_checkable
class Getter(Protocol):
    """Protocol for scheme-specific artifact getters.

    A registry keyed by URL scheme dispatches to any object implementing
    ``get`` with this signature, whether it reads over HTTP, from the
    local filesystem or from an OCI registry.
    """

    def get(self, url: str, *options: Option) -> bytes:
        """Retrieve an artifact.

        Args:
            url: Location of the artifact.
            *options: Per-call options layered over the getter's own.

        Returns:
            The artifact body.

        Raises:
            GetterError: If the artifact cannot be retrieved.
        """
        ...

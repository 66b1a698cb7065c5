"""Claim token digest: fingerprint -> fixed-length hex token."""

import hashlib

from dedupguard.exceptions import GuardConfigurationError


class KeyDigest:
    """One-way hash of fingerprints.

    Tokens are stable across processes, so replicas agree on the key for the
    same request, and raw field values never reach the store's keyspace.
    """

    def __init__(self, algorithm: str = "sha256") -> None:
        """Validate the algorithm once, at startup.

        Args:
            algorithm: Any hashlib algorithm with a fixed digest size

        Raises:
            GuardConfigurationError: If the algorithm is unavailable or variable-length
        """
        try:
            probe = hashlib.new(algorithm)
        except (ValueError, TypeError) as e:
            raise GuardConfigurationError(f"Hash algorithm unavailable: {algorithm}") from e
        if probe.digest_size == 0:
            raise GuardConfigurationError(f"Hash algorithm has no fixed digest size: {algorithm}")
        self.algorithm = algorithm
        self.hex_length = probe.digest_size * 2

    def digest(self, fingerprint: str) -> str:
        """Hash a fingerprint.

        Args:
            fingerprint: Fingerprint string

        Returns:
            Lowercase hex digest
        """
        return hashlib.new(self.algorithm, fingerprint.encode("utf-8")).hexdigest()

"""Dotted version comparison for core upgrade decisions."""
from typing import List

UNKNOWN_VERSION = "unknown"


class VersionComparator:
    """Compare dotted version strings numerically.

    Segments are compared as integers ("1.10.0" > "1.2.0"); a segment that is
    not a plain integer counts as 0 and shorter versions are padded with 0.
    Malformed input never raises.

    The literal "unknown" compares equal to every version, so an installation
    whose version could not be determined is never upgraded or downgraded
    on version grounds alone.
    """

    @staticmethod
    def _parts(version: str) -> List[int]:
        parts = []
        for segment in str(version).strip().split("."):
            try:
                parts.append(int(segment))
            except ValueError:
                parts.append(0)
        return parts

    def compare(self, a: str, b: str) -> int:
        """Return -1 if a < b, 0 if equal, 1 if a > b."""
        if a == UNKNOWN_VERSION or b == UNKNOWN_VERSION:
            return 0

        a_parts, b_parts = self._parts(a), self._parts(b)
        length = max(len(a_parts), len(b_parts))
        a_parts += [0] * (length - len(a_parts))
        b_parts += [0] * (length - len(b_parts))

        if a_parts < b_parts:
            return -1
        if a_parts > b_parts:
            return 1
        return 0

    def is_older(self, installed: str, available: str) -> bool:
        return self.compare(installed, available) < 0

    def is_newer(self, installed: str, available: str) -> bool:
        return self.compare(installed, available) > 0

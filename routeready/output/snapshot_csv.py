"""
Snapshot CSV generator.
Exports the current route progress as a small downloadable CSV.
"""
import csv
import io
from typing import List

from ..models.address import OptimizedStop


class SnapshotCSVGenerator:
    """
    Generates the route snapshot file.

    Columns: Sequence (zero-based position), Address, Status (Done/Pending).
    Text fields are always quoted; the sequence number is not.
    """

    HEADER = "Sequence,Address,Status"
    FILENAME = "route-snap.csv"
    MIME = "text/csv"

    def generate(self, stops: List[OptimizedStop]) -> str:
        """
        Build the snapshot content.

        Args:
            stops: Ordered stop list

        Returns:
            CSV text (header plus one row per stop, newline-separated)
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")

        for idx, stop in enumerate(stops):
            writer.writerow([idx, stop.raw, "Done" if stop.is_completed else "Pending"])

        return self.HEADER + "\n" + buffer.getvalue().rstrip("\n")

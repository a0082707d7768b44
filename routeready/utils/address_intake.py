"""
Address intake.
Turns uploaded files and manually typed text into Address records.
"""
import logging
import uuid
from typing import List, Optional

from ..models.address import Address

logger = logging.getLogger(__name__)


class AddressIntakeError(Exception):
    """Custom exception for address intake errors."""

    pass


class AddressIntake:
    """
    Normalizes free-text address lines into Address records.

    Files are treated as plain newline-delimited text: one address per
    non-blank line, no CSV column parsing.
    """

    ACCEPTED_EXTENSIONS = ("csv", "txt")
    ENCODING = "utf-8-sig"

    def from_file(self, content: str) -> List[Address]:
        """
        Parse file content into addresses.

        Args:
            content: Full text content of the uploaded file

        Returns:
            One Address per non-blank line, in file order
        """
        lines = [line.strip() for line in content.splitlines()]
        lines = [line for line in lines if line]

        # One suffix per call; the line index keeps ids unique within it
        batch = uuid.uuid4().hex[:12]
        addresses = [
            Address(id=f"file-{idx}-{batch}", raw=line, is_valid=True, is_completed=False)
            for idx, line in enumerate(lines)
        ]
        logger.info(f"Loaded {len(addresses)} addresses from file")
        return addresses

    def from_manual_text(self, text: Optional[str]) -> Optional[Address]:
        """
        Create a single address from manually entered text.

        Args:
            text: Text typed by the user

        Returns:
            Address, or None if the text is blank
        """
        if text is None or not text.strip():
            return None

        return Address(
            id=f"manual-{uuid.uuid4().hex}",
            raw=text.strip(),
            is_valid=True,
            is_completed=False,
        )

    def from_upload(self, data: bytes, filename: str = "") -> List[Address]:
        """
        Decode an uploaded file and parse it into addresses.

        Args:
            data: Raw bytes of the uploaded file
            filename: Original file name (used for extension check)

        Returns:
            List of addresses

        Raises:
            AddressIntakeError: If the file type is not accepted or cannot be decoded
        """
        if filename:
            extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
            if extension not in self.ACCEPTED_EXTENSIONS:
                raise AddressIntakeError(
                    f"Unsupported file type '{filename}'. Expected .csv or .txt"
                )

        try:
            content = data.decode(self.ENCODING)
        except UnicodeDecodeError as e:
            raise AddressIntakeError(f"Could not read file {filename or '<upload>'}: {str(e)}")

        if "\x00" in content:
            raise AddressIntakeError(f"File {filename or '<upload>'} does not look like text")

        return self.from_file(content)

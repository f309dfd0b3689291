"""
Writer — serialize the bootstrap receipt to JSON.
"""
import json
from pathlib import Path

from dub_bootstrap.io.schema import BootstrapReceipt


def write_receipt(receipt: BootstrapReceipt, path: Path) -> Path:
    """
    Write *receipt* to *path*, creating parent directories as needed.

    Returns the path written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            receipt.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )
    return path

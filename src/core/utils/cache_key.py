"""Deterministic cache identity for transformation requests.

The canonical string lists every field in a fixed order with an explicit
empty placeholder for absent values. Changing either the order or the
placeholder invalidates every artifact stored so far.
"""

import hashlib

from core.models.media import Modality, TransformRequest

_PLACEHOLDER = ""


def _field(value: object) -> str:
    if value is None:
        return _PLACEHOLDER
    if isinstance(value, float) and value.is_integer():
        # 1.0 and 1 must share an identity
        return str(int(value))
    return str(value)


def canonicalize(request: TransformRequest) -> str:
    return "|".join(
        [
            f"url={request.source_url}",
            f"w={_field(request.width)}",
            f"h={_field(request.height)}",
            f"f={_field(request.output_format)}",
            f"q={_field(request.quality)}",
            f"c={_field(request.crop_mode)}",
            f"t={_field(request.timestamp_seconds)}",
        ]
    )


def fingerprint(request: TransformRequest) -> str:
    """Return the SHA-256 hex digest of the canonical request string."""
    return hashlib.sha256(canonicalize(request).encode("utf-8")).hexdigest()


def build_artifact_key(digest: str, extension: str, modality: Modality) -> str:
    return f"{modality.key_prefix}{digest}.{extension}"

"""Safety helpers."""

from .redact import _mask_pii, anonymize_text

__all__ = ["_mask_pii", "anonymize_text"]

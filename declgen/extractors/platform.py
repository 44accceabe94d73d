"""Platform fingerprint extractor."""

from __future__ import annotations

from ..errors import InvalidArgument, QueryError
from ..models import FilterConfig
from ..query.base import QuerySession
from ..runtime import fingerprint_from_triple
from .base import Extractor
from .formatting import quote


class SystemFingerprint(Extractor):
    """Emits ``os-arch`` for the target the headers were parsed for.

    The value is meant to be passed to :func:`declgen.runtime.require_platform`
    in the generated artifact.
    """

    name = "system_fingerprint"

    def validate(self, config: FilterConfig) -> None:
        if config.kind or config.include_patterns or config.enum_name or config.property:
            raise InvalidArgument(
                "Extractor 'system_fingerprint' takes no -w, -e, -p or -a options"
            )
        if config.expected is not None or config.before is not None or config.after is not None:
            raise InvalidArgument("Extractor 'system_fingerprint' takes no -E, -1 or -2 options")

    def evaluate(self, session: QuerySession, config: FilterConfig) -> str:
        self.validate(config)
        try:
            fingerprint = str(fingerprint_from_triple(session.target_triple()))
        except ValueError as exc:
            raise QueryError(f"Cannot derive platform fingerprint: {exc}") from exc
        return quote(fingerprint) if config.quote else fingerprint


__all__ = ["SystemFingerprint"]

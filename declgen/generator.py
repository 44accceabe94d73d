"""Generation pipeline: template in, artifact text out."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .config import DeclgenConfig
from .errors import MalformedDirective
from .extractors import Extractor, discover_extractors
from .logging import get_logger
from .models import Directive
from .query.base import QueryService
from .template import TemplateEngine


class Generator:
    """Evaluates directives against a query service and renders templates."""

    def __init__(
        self,
        config: DeclgenConfig,
        query_service: QueryService | None = None,
        extractors: Optional[Mapping[str, Extractor]] = None,
    ) -> None:
        self.config = config
        self._query_service = query_service
        self.extractors: Dict[str, Extractor] = (
            dict(extractors) if extractors is not None
            else discover_extractors(config.extractors.enabled)
        )
        self.logger = get_logger("generator")
        self._base_dir: Optional[Path] = None

    @property
    def query_service(self) -> QueryService:
        if self._query_service is None:
            # Imported lazily so that libclang is only loaded when needed.
            from .query.clang import ClangQueryService

            clang = self.config.clang
            self._query_service = ClangQueryService(
                args=clang.args,
                include_paths=clang.include_paths,
                target=clang.target,
                library_file=clang.library_file,
            )
        return self._query_service

    def generate(self, template_path: Path) -> str:
        """Render the template file at ``template_path``."""
        path = Path(template_path)
        text = path.read_text(encoding="utf-8")
        self.logger.info("Generating from %s", path)
        return self.generate_text(text, name=str(path), base_dir=path.parent)

    def generate_text(
        self, text: str, *, name: str = "<template>", base_dir: Path | None = None
    ) -> str:
        """Render template text; relative header paths resolve against ``base_dir``."""
        self._base_dir = base_dir
        try:
            engine = TemplateEngine(self.evaluate, self.config.template.markers())
            return engine.render(text, name=name)
        finally:
            self._base_dir = None

    def evaluate(self, directive: Directive) -> str:
        """Evaluate one directive in its own query session."""
        extractor = self.extractors.get(directive.module.lower())
        if extractor is None:
            known = ", ".join(sorted(self.extractors))
            raise MalformedDirective(
                f"Unknown extractor '{directive.module}' (available: {known})"
            )
        extractor.validate(directive.flags)
        defines = self._defines_for(directive)
        headers = self._resolve_headers(directive.headers)
        with self.query_service.open(headers, defines) as session:
            output = extractor.evaluate(session, directive.flags)
        self.logger.debug(
            "%s on %s emitted %d characters", directive.module, ", ".join(headers), len(output)
        )
        return output

    def _defines_for(self, directive: Directive) -> Dict[str, str]:
        defines: Dict[str, str] = {}
        if directive.flags.largefile:
            defines.update(self.config.largefile_define_map())
        defines.update(directive.defines)
        return defines

    def _resolve_headers(self, headers: Sequence[str]) -> List[str]:
        resolved: List[str] = []
        for header in headers:
            path = Path(header).expanduser()
            if not path.is_absolute() and self._base_dir is not None:
                candidate = self._base_dir / path
                if candidate.is_file():
                    resolved.append(str(candidate))
                    continue
            resolved.append(str(path) if path.is_file() else header)
        return resolved


__all__ = ["Generator"]

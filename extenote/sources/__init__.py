"""Source loaders for reading content files into vault objects."""

from extenote.models import SourceConfig

from .base import SourceLoadContext, SourceLoader, SourceLoadResult
from .local import LocalSourceLoader

__all__ = [
    "LocalSourceLoader",
    "SourceLoadContext",
    "SourceLoadResult",
    "SourceLoader",
    "get_loader",
    "load_source",
]

_LOADERS: dict[str, type[SourceLoader]] = {
    LocalSourceLoader.source_type: LocalSourceLoader,
}


def get_loader(source: SourceConfig) -> SourceLoader:
    """Get the loader for a source's type."""
    loader_cls = _LOADERS.get(source.type)
    if loader_cls is None:
        raise ValueError(f"Unsupported source type {source.type}")
    return loader_cls()


def load_source(source: SourceConfig, context: SourceLoadContext) -> SourceLoadResult:
    """Load a source, skipping it entirely when disabled."""
    if source.disabled:
        return SourceLoadResult(source_id=source.id)
    return get_loader(source).load(source, context)

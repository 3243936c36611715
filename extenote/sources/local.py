"""Local directory source - reads markdown files from disk."""

import logging
import re
from functools import lru_cache
from pathlib import Path

from extenote.errors import FrontmatterError, SourceAccessError
from extenote.markdown import extract_title, parse_markdown
from extenote.models import VISIBILITIES, SourceConfig, VaultObject, Visibility

from .base import SourceLoadContext, SourceLoader, SourceLoadResult

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE = ("**/*.md", "**/*.markdown", "**/*.mdx")
DEFAULT_EXCLUDE = ("**/node_modules/**", "**/.git/**")


@lru_cache(maxsize=None)
def _glob_regex(pattern: str) -> re.Pattern:
    """Compile a path glob where * and ? stay within one path segment.

    `**` spans any number of segments; `**/` and `/**` may also match none.
    """
    parts: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("/**", i) and i + 3 == n:
            parts.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        elif pattern[i] == "[" and "]" in pattern[i + 2:]:
            end = pattern.index("]", i + 2)
            body = pattern[i + 1:end]
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append("[" + body.replace("\\", "\\\\") + "]")
            i = end + 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts), re.DOTALL)


def _matches(rel_path: str, pattern: str) -> bool:
    return _glob_regex(pattern).fullmatch(rel_path) is not None


class LocalSourceLoader(SourceLoader):
    """Loads objects from a directory tree on the local file system."""

    source_type = "local"

    def load(self, source: SourceConfig, context: SourceLoadContext) -> SourceLoadResult:
        root = (context.cwd / source.root).resolve()
        result = SourceLoadResult(source_id=source.id)

        reason = None
        if not root.exists():
            reason = "not found"
        elif not root.is_dir():
            reason = "is not a directory"

        if reason:
            if source.required:
                raise SourceAccessError(source.id, root, reason)
            logger.warning(f"Skipping source '{source.id}': root {reason}: {root}")
            result.issues.append(self._issue(source, root, f"Configured root {reason}: {root}"))
            return result

        logger.info(f"Loading source '{source.id}' from {root}")
        for file_path in self._collect_files(root, source):
            try:
                obj = self._load_file(file_path, root, source, context)
            except (OSError, UnicodeDecodeError, FrontmatterError) as e:
                logger.warning(f"Failed to load {file_path}: {e}")
                result.issues.append(self._issue(source, file_path, f"Failed to load markdown: {e}"))
                continue

            if obj is None:
                result.issues.append(
                    self._issue(source, file_path, "Missing type in frontmatter", field="type")
                )
                continue

            result.objects.append(obj)
            if result.last_synced is None or obj.mtime > result.last_synced:
                result.last_synced = obj.mtime

        logger.info(
            f"Loaded {len(result.objects)} objects from source '{source.id}' "
            f"({len(result.issues)} issues)"
        )
        return result

    def _collect_files(self, root: Path, source: SourceConfig) -> list[Path]:
        """Files matching the include globs and none of the exclude globs."""
        include = source.include or DEFAULT_INCLUDE
        exclude = DEFAULT_EXCLUDE + source.exclude

        found: dict[str, Path] = {}
        for pattern in include:
            for file_path in root.glob(pattern):
                if not file_path.is_file():
                    continue
                rel_path = file_path.relative_to(root).as_posix()
                # Skip hidden folders
                if any(part.startswith(".") for part in rel_path.split("/")[:-1]):
                    continue
                if any(_matches(rel_path, ex) for ex in exclude):
                    continue
                found[rel_path] = file_path

        return [found[rel_path] for rel_path in sorted(found)]

    def _load_file(
        self,
        file_path: Path,
        root: Path,
        source: SourceConfig,
        context: SourceLoadContext,
    ) -> VaultObject | None:
        """Build an object from one file, or None if it declares no type."""
        mtime = file_path.stat().st_mtime
        parsed = parse_markdown(file_path.read_text(encoding="utf-8"))
        frontmatter = parsed.frontmatter

        candidate = frontmatter.get("type") or frontmatter.get("schema")
        if not isinstance(candidate, str) or not candidate.strip():
            return None
        type_name = candidate.strip()

        relative_path = file_path.relative_to(root).as_posix()
        schema = context.schemas.get(type_name)
        identity_field = schema.identity_field if schema else "slug"
        identity = frontmatter.get(identity_field)
        object_id = identity if isinstance(identity, str) and identity else file_path.stem

        return VaultObject(
            id=object_id,
            type=type_name,
            title=extract_title(frontmatter, parsed.body, file_path.stem),
            source_id=source.id,
            file_path=str(file_path),
            relative_path=relative_path,
            frontmatter=frontmatter,
            body=parsed.body,
            mtime=mtime,
            visibility=self._resolve_visibility(frontmatter, source, context),
        )

    def _resolve_visibility(
        self,
        frontmatter: dict,
        source: SourceConfig,
        context: SourceLoadContext,
    ) -> Visibility:
        value = frontmatter.get(context.visibility_field)
        if value in VISIBILITIES:
            return value
        return source.visibility or context.default_visibility

"""Export of composed projects to disk or to a zip archive."""

import io
import logging
import zipfile
from pathlib import Path

from cortexops.common.models import ProjectArtifact

logger = logging.getLogger(__name__)

# Fixed entry timestamp so identical projects produce identical archives
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def write_project(
    project: ProjectArtifact,
    output_dir: Path,
    overwrite: bool = False,
) -> list[Path]:
    """Write a composed project to disk.

    Args:
        project: ProjectArtifact to write
        output_dir: Base directory for output
        overwrite: If False, skip existing files (default: False)

    Returns:
        List of paths that were written
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written_paths: list[Path] = []

    for rel_path, content in project.files().items():
        file_path = output_dir / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)

        if file_path.exists() and not overwrite:
            logger.warning(f"Skipping existing file: {file_path}")
            continue

        file_path.write_text(content)
        written_paths.append(file_path)
        logger.debug(f"Wrote project file: {file_path}")

    logger.info(
        f"Project written to disk: output_dir={output_dir}, "
        f"files_written={len(written_paths)}"
    )

    return written_paths


def to_zip_bytes(project: ProjectArtifact, root: str = "") -> bytes:
    """Pack a composed project into a zip archive.

    Args:
        project: ProjectArtifact to pack
        root: Optional directory name to nest every entry under

    Returns:
        Archive bytes; byte-identical for identical projects
    """
    prefix = f"{root.strip('/')}/" if root else ""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for rel_path, content in project.files().items():
            info = zipfile.ZipInfo(f"{prefix}{rel_path}", date_time=ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            archive.writestr(info, content)

    data = buffer.getvalue()
    logger.debug(f"Packed project archive: entries={len(project.files())}, bytes={len(data)}")
    return data

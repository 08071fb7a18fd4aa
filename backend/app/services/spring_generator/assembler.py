"""
Project Assembler

Materializes a generated project on disk:
1. package tree under src/main/java/com/example/demo
2. static Maven scaffold copied from the template directory
3. every emitted artifact
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from app.core.exceptions import TemplateUnavailableError
from app.core.logging_config import logger
from app.services.spring_generator.emitter import PACKAGE_DIRS, SOURCE_ROOT, Artifact

# (relative path, executable)
SCAFFOLD_FILES = [
    ("pom.xml", False),
    ("mvnw", True),
    ("mvnw.cmd", False),
    (str(SOURCE_ROOT / "DemoApplication.java"), False),
]
SCAFFOLD_DIRS = [".mvn", "src/main/resources"]

EXECUTABLE_MODE = 0o755


@dataclass
class AssemblyManifest:
    """What ended up on disk, as relative POSIX paths"""
    root: Path
    scaffold_files: List[str] = field(default_factory=list)
    artifact_files: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def files(self) -> List[str]:
        return sorted(set(self.scaffold_files) | set(self.artifact_files))


class ProjectAssembler:
    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = Path(template_dir) if template_dir else None

    def assemble(self, artifacts: Iterable[Artifact], output_root: Path) -> AssemblyManifest:
        output_root = Path(output_root)
        manifest = AssemblyManifest(root=output_root)

        for package_dir in PACKAGE_DIRS:
            (output_root / package_dir).mkdir(parents=True, exist_ok=True)

        self.copy_scaffold(output_root, manifest)

        for artifact in artifacts:
            target = output_root / artifact.path
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="\n") as f:
                f.write(artifact.content)
            manifest.artifact_files.append(artifact.path.as_posix())
            logger.debug(f"[Assembler] Wrote {artifact.path}")

        return manifest

    def copy_scaffold(self, output_root: Path, manifest: AssemblyManifest) -> None:
        """
        Copy the Maven scaffold next to the generated sources.

        Missing template location or missing individual entries are
        warnings; the sources are still generated.

        Raises:
            TemplateUnavailableError: the location exists but is not a directory
        """
        template_dir = self.template_dir
        if template_dir is None or not template_dir.exists():
            self._warn(manifest, f"Template directory {template_dir} not found; generating sources only")
            return
        if not template_dir.is_dir():
            raise TemplateUnavailableError(str(template_dir), "not a directory")

        for rel_path, executable in SCAFFOLD_FILES:
            source = template_dir / rel_path
            if not source.is_file():
                self._warn(manifest, f"Scaffold file {rel_path} missing from template")
                continue
            target = output_root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            if executable:
                target.chmod(EXECUTABLE_MODE)
            manifest.scaffold_files.append(Path(rel_path).as_posix())

        for rel_dir in SCAFFOLD_DIRS:
            source = template_dir / rel_dir
            if not source.is_dir():
                self._warn(manifest, f"Scaffold directory {rel_dir} missing from template")
                continue
            shutil.copytree(source, output_root / rel_dir, dirs_exist_ok=True)
            manifest.scaffold_files.extend(
                (Path(rel_dir) / path.relative_to(source)).as_posix()
                for path in sorted(source.rglob("*"))
                if path.is_file()
            )

    def _warn(self, manifest: AssemblyManifest, message: str) -> None:
        logger.warning(f"[Assembler] {message}")
        manifest.warnings.append(message)

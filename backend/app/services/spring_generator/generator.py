"""
Spring Generator Service - class diagram in, Spring Boot project out.

Pipeline:
    load -> resolve names -> inheritance -> composition / relationships
         -> emit -> assemble -> (archive)

Inheritance edges are collected first so every class knows whether it is a
root, a child or neither before any field is added. The remaining edges are
processed in input order, which fixes the relationship suffixes.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.core.logging_config import logger
from app.schemas.diagram_model import RelationshipKind
from app.services.spring_generator.archiver import ArchiveResult, ProjectArchiver
from app.services.spring_generator.assembler import AssemblyManifest, ProjectAssembler
from app.services.spring_generator.composition import CompositionResolver
from app.services.spring_generator.descriptors import ClassDescriptor, RelationshipSequence
from app.services.spring_generator.emitter import Artifact, JavaEmitter
from app.services.spring_generator.inheritance import InheritanceResolver
from app.services.spring_generator.loader import ResolvedModel, load_diagram, resolve_names
from app.services.spring_generator.relationships import RelationshipClassifier
from app.services.spring_generator.workspace import ScratchWorkspace


@dataclass
class GenerationPlan:
    resolved: ResolvedModel
    descriptors: Dict[str, ClassDescriptor]
    dropped_edges: int = 0

    @property
    def composite_identity_count(self) -> int:
        return sum(1 for d in self.descriptors.values() if d.composite_identity)


@dataclass
class GenerationResult:
    project_dir: Path
    artifacts: List[Artifact]
    manifest: AssemblyManifest
    class_count: int
    composite_identity_count: int
    dropped_edges: int = 0
    archive: Optional[ArchiveResult] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def files(self) -> List[str]:
        return self.manifest.files


class SpringGeneratorService:
    """
    Usage:
        generator = SpringGeneratorService()
        result = generator.generate_from_model(model, Path("/tmp/out"))
    """

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        conflict_policy: Optional[str] = None,
        emitter: Optional[JavaEmitter] = None,
    ):
        self._template_dir = Path(template_dir) if template_dir else None
        self._conflict_policy = conflict_policy
        self.emitter = emitter or JavaEmitter()

    @property
    def template_dir(self) -> Path:
        return self._template_dir or settings.TEMPLATE_DIR

    @property
    def conflict_policy(self) -> str:
        return self._conflict_policy or settings.CODEGEN_CONFLICT_POLICY

    def build_plan(self, raw: Any) -> GenerationPlan:
        """Validate the model and resolve it into class descriptors"""
        diagram = load_diagram(raw)
        resolved = resolve_names(diagram)
        descriptors = {
            name: ClassDescriptor(
                name=name,
                attributes=list(resolved.attributes[name]),
                is_association_class=name in resolved.association_classes,
            )
            for name in resolved.ordered_names
        }

        sequence = RelationshipSequence()
        inheritance = InheritanceResolver(resolved, descriptors, self.conflict_policy)
        composition = CompositionResolver(resolved, descriptors, sequence, self.conflict_policy)
        classifier = RelationshipClassifier(resolved, descriptors, sequence)

        dropped = 0
        for edge in diagram.edges:
            if edge.kind == RelationshipKind.INHERITANCE.value and not inheritance.add_edge(edge):
                dropped += 1
        inheritance.apply()

        for edge in diagram.edges:
            if edge.kind == RelationshipKind.INHERITANCE.value:
                continue
            if edge.kind == RelationshipKind.COMPOSITION.value:
                handled = composition.resolve(edge)
            else:
                handled = classifier.classify(edge)
            if not handled:
                dropped += 1

        return GenerationPlan(resolved=resolved, descriptors=descriptors, dropped_edges=dropped)

    def render(self, raw: Any) -> List[Artifact]:
        """Generated source files without touching the filesystem"""
        plan = self.build_plan(raw)
        return self.emitter.emit_all(plan.descriptors.values())

    def generate_from_model(self, raw: Any, output_root: Path) -> GenerationResult:
        """Write a complete project for `raw` into `output_root`"""
        start = time.perf_counter()
        plan = self.build_plan(raw)
        artifacts = self.emitter.emit_all(plan.descriptors.values())
        manifest = ProjectAssembler(self.template_dir).assemble(artifacts, Path(output_root))

        result = GenerationResult(
            project_dir=Path(output_root),
            artifacts=artifacts,
            manifest=manifest,
            class_count=len(plan.descriptors),
            composite_identity_count=plan.composite_identity_count,
            dropped_edges=plan.dropped_edges,
            warnings=list(manifest.warnings),
        )

        duration_ms = (time.perf_counter() - start) * 1000
        logger.log_generation_event(
            "SpringGenerator",
            f"Generated {len(artifacts)} files for {result.class_count} classes",
            class_count=result.class_count,
            artifact_count=len(artifacts),
            dropped_edges=result.dropped_edges,
        )
        logger.log_performance("spring_generation", duration_ms)
        return result

    def generate_archive(
        self,
        raw: Any,
        workspace: ScratchWorkspace,
        archiver: Optional[ProjectArchiver] = None,
    ) -> GenerationResult:
        """Generate into the workspace's project directory and zip it"""
        archiver = archiver or ProjectArchiver(settings.ARCHIVE_COMPRESSION_LEVEL)
        result = self.generate_from_model(raw, workspace.project_dir)
        result.archive = archiver.create_archive(workspace.project_dir, workspace.archive_path)
        return result


# Singleton instance
spring_generator = SpringGeneratorService()

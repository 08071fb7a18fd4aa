"""Class diagram -> Spring Boot project generator"""

from app.services.spring_generator.archiver import ArchiveResult, ProjectArchiver
from app.services.spring_generator.emitter import Artifact, JavaEmitter
from app.services.spring_generator.generator import (
    GenerationPlan,
    GenerationResult,
    SpringGeneratorService,
    spring_generator,
)
from app.services.spring_generator.workspace import (
    ScratchWorkspace,
    purge_stale_workspaces,
    stream_workspace_archive,
)

__all__ = [
    "ArchiveResult",
    "Artifact",
    "GenerationPlan",
    "GenerationResult",
    "JavaEmitter",
    "ProjectArchiver",
    "ScratchWorkspace",
    "SpringGeneratorService",
    "purge_stale_workspaces",
    "spring_generator",
    "stream_workspace_archive",
]

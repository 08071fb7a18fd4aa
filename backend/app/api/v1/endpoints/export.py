"""
Export Endpoints - Spring Boot project archive and Postman collection.

POST bodies carry the diagram model either as {"model": {...}} or bare.
GET variants read the model of a persisted diagram.
"""

from contextlib import ExitStack
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import DiagramNotFoundError
from app.core.logging_config import logger, set_diagram_id
from app.models.diagram import Diagram
from app.services.postman_generator import PostmanGeneratorService, postman_generator
from app.services.spring_generator.loader import unwrap_model_payload
from app.services.spring_generator import (
    ProjectArchiver,
    ScratchWorkspace,
    SpringGeneratorService,
    spring_generator,
    stream_workspace_archive,
)

router = APIRouter(prefix="/export", tags=["Export"])

COLLECTION_FILENAME = "collection.postman_collection.json"


def get_spring_generator() -> SpringGeneratorService:
    return spring_generator


def get_postman_generator() -> PostmanGeneratorService:
    return postman_generator


def get_archiver() -> ProjectArchiver:
    return ProjectArchiver(settings.ARCHIVE_COMPRESSION_LEVEL)


async def load_diagram_model(diagram_id: str, db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(Diagram).where(Diagram.id == diagram_id, Diagram.is_active.is_(True))
    )
    diagram = result.scalar_one_or_none()
    if diagram is None:
        raise DiagramNotFoundError(diagram_id)
    set_diagram_id(diagram.id)
    return diagram.model or {}


async def build_archive_response(
    raw: Any,
    generator: SpringGeneratorService,
    archiver: ProjectArchiver,
    background_tasks: BackgroundTasks,
) -> StreamingResponse:
    """Generate into a fresh scratch workspace and stream the zip back"""
    with ExitStack() as stack:
        workspace = stack.enter_context(
            ScratchWorkspace.allocate(settings.SCRATCH_ROOT, settings.SCRATCH_PREFIX)
        )
        result = await run_in_threadpool(generator.generate_archive, raw, workspace, archiver)
        # The stream owns the workspace from here on
        stack.pop_all()

    # Covers a response that is never iterated
    background_tasks.add_task(workspace.release)

    filename = settings.ARCHIVE_FILENAME
    logger.info(
        f"[Export] Streaming {filename}: {result.archive.entry_count} entries, "
        f"{result.archive.size_bytes} bytes"
    )
    return StreamingResponse(
        stream_workspace_archive(workspace, settings.ARCHIVE_CHUNK_SIZE),
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(result.archive.size_bytes),
            "X-Archive-Entries": str(result.archive.entry_count),
        },
    )


def collection_response(document: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{COLLECTION_FILENAME}"'},
    )


@router.post("/generate-spring")
async def generate_spring_from_payload(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    generator: SpringGeneratorService = Depends(get_spring_generator),
    archiver: ProjectArchiver = Depends(get_archiver),
):
    """Generate a Spring Boot project from the posted diagram model"""
    return await build_archive_response(unwrap_model_payload(payload), generator, archiver, background_tasks)


@router.get("/generate-spring/{diagram_id}")
async def generate_spring_from_diagram(
    diagram_id: str,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    generator: SpringGeneratorService = Depends(get_spring_generator),
    archiver: ProjectArchiver = Depends(get_archiver),
):
    """Generate a Spring Boot project from a stored diagram"""
    raw = await load_diagram_model(diagram_id, db)
    return await build_archive_response(raw, generator, archiver, background_tasks)


@router.post("/postman")
async def postman_from_payload(
    payload: Dict[str, Any] = Body(...),
    generator: PostmanGeneratorService = Depends(get_postman_generator),
):
    """Postman collection for the posted diagram model"""
    return collection_response(generator.generate_collection(unwrap_model_payload(payload)))


@router.get("/postman/{diagram_id}")
async def postman_from_diagram(
    diagram_id: str,
    db: AsyncSession = Depends(get_db),
    generator: PostmanGeneratorService = Depends(get_postman_generator),
):
    """Postman collection for a stored diagram"""
    raw = await load_diagram_model(diagram_id, db)
    return collection_response(generator.generate_collection(raw))

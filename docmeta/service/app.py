"""FastAPI application exposing directive parsing and class expansion."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..annotations import AnnotationRegistry, default_registry
from ..errors import AnnotationError
from ..models import Target, TargetKind
from ..processor import AnnotationProcessor, ClassSource, ElementSource
from ..syntax import evaluate_arguments, scan_directives


class ParseRequest(BaseModel):
    text: str


class DirectiveModel(BaseModel):
    name: str
    arguments: str
    positional: List[Any]
    keyed: Dict[str, Any]


class ParseResponse(BaseModel):
    directives: List[DirectiveModel]


class MemberModel(BaseModel):
    kind: str
    name: str
    comment: str = ""
    file: Optional[str] = None
    line: Optional[int] = None


class ExpandRequest(BaseModel):
    class_name: str
    comment: str = ""
    file: Optional[str] = None
    line: Optional[int] = None
    ancestors: List[str] = Field(default_factory=list)
    members: List[MemberModel] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str


def create_app(
    registry_factory: Callable[[], AnnotationRegistry] = default_registry,
) -> FastAPI:
    """Create the FastAPI application exposing docmeta operations."""

    app = FastAPI(title="docmeta", version="0.1.0")
    registry = registry_factory()

    async def get_processor() -> AnnotationProcessor:
        # The registry is frozen, so one instance is shared by every request.
        return AnnotationProcessor(registry)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/parse", response_model=ParseResponse)
    async def parse(payload: ParseRequest) -> ParseResponse:
        directives = []
        for invocation in scan_directives(payload.text):
            parameters = evaluate_arguments(invocation.argument_text, name=invocation.name)
            directives.append(
                DirectiveModel(
                    name=invocation.name,
                    arguments=invocation.argument_text,
                    positional=parameters.positional,
                    keyed=parameters.keyed,
                )
            )
        return ParseResponse(directives=directives)

    @app.post("/expand")
    async def expand(
        payload: ExpandRequest,
        processor: AnnotationProcessor = Depends(get_processor),
    ) -> Dict[str, Any]:
        source = _class_source(payload)
        descriptor = processor.expand_class(source)
        return descriptor.to_dict()

    @app.exception_handler(AnnotationError)
    async def annotation_error_handler(_: Any, exc: AnnotationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.to_dict()})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def _class_source(payload: ExpandRequest) -> ClassSource:
    ancestors = tuple(payload.ancestors)
    members = []
    for member in payload.members:
        kind = TargetKind.parse(member.kind)
        if kind is TargetKind.CLASS:
            raise ValueError(f'Member "{member.name}" must be a method or a property')
        members.append(
            ElementSource(
                target=Target(
                    kind=kind,
                    class_name=payload.class_name,
                    name=member.name,
                    file=member.file or payload.file,
                    line=member.line,
                    ancestors=ancestors,
                ),
                comment=member.comment,
            )
        )
    target = Target.for_class(
        payload.class_name, file=payload.file, line=payload.line, ancestors=ancestors
    )
    return ClassSource(target=target, comment=payload.comment, members=members)


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)

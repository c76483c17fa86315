import asyncio
import os
import tempfile

from fastapi import APIRouter, File, Query, Request, UploadFile
from fastapi.responses import Response

from config import settings
from exceptions import BadRequestError, FileTooLargeError
from optimizers.factory import OPTIMIZER_SMART
from utils.format_detect import EXTENSIONS, MIME_TYPES

router = APIRouter()


@router.post("/optimize")
async def optimize(
    request: Request,
    file: UploadFile = File(...),
    optimizer: str = Query(OPTIMIZER_SMART),
):
    """Optimize an uploaded image with a registered optimizer.

    The upload is written to a scratch directory (keeping its extension,
    which some tools and the type guesser rely on), optimized in place,
    and returned as raw bytes with X-* headers.
    """
    # Raises OptimizerNotFoundError (404) before touching the upload
    selected = request.app.state.factory.get(optimizer)

    data = await file.read()
    if not data:
        raise BadRequestError("Uploaded file is empty")
    if len(data) > settings.max_file_size_bytes:
        raise FileTooLargeError(
            f"File size {len(data)} bytes exceeds limit of {settings.max_file_size_mb} MB",
            file_size=len(data),
            limit=settings.max_file_size_bytes,
        )

    ext = os.path.splitext(file.filename or "")[1].lower()
    with tempfile.TemporaryDirectory(prefix="imgopt-") as workdir:
        path = os.path.join(workdir, f"upload{ext}")
        await asyncio.to_thread(_write_upload, path, data)
        await selected.optimize(path)
        optimized = await asyncio.to_thread(_read_result, path)

    return _build_binary_response(data, optimized, ext, optimizer)


def _write_upload(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def _read_result(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _build_binary_response(
    original: bytes,
    optimized: bytes,
    ext: str,
    optimizer: str,
) -> Response:
    """Build raw bytes response with X-* headers."""
    original_size = len(original)
    optimized_size = len(optimized)
    reduction = round((1 - optimized_size / original_size) * 100, 1)

    fmt = EXTENSIONS.get(ext)
    return Response(
        content=optimized,
        media_type=MIME_TYPES.get(fmt, "application/octet-stream"),
        headers={
            "X-Original-Size": str(original_size),
            "X-Optimized-Size": str(optimized_size),
            "X-Reduction-Percent": str(reduction),
            "X-Optimizer": optimizer,
        },
    )

"""Title detail endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from moviefy.api.deps import get_detail_assembler
from moviefy.models.media import MediaType
from moviefy.pipeline.detail import DetailAssembler
from moviefy.schema.catalog import DetailRecord

router = APIRouter()


async def _detail_or_404(assembler: DetailAssembler, title_id: str, media_type: MediaType) -> DetailRecord:
    record = await assembler.get_detail(title_id, media_type)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Title not found")
    return record


@router.get("/movie/{title_id}", response_model=DetailRecord)
async def movie_detail(title_id: str, assembler: DetailAssembler = Depends(get_detail_assembler)) -> DetailRecord:
    return await _detail_or_404(assembler, title_id, MediaType.MOVIE)


@router.get("/tv/{title_id}", response_model=DetailRecord)
async def tv_detail(title_id: str, assembler: DetailAssembler = Depends(get_detail_assembler)) -> DetailRecord:
    return await _detail_or_404(assembler, title_id, MediaType.TV)

"""
Post endpoints.

A post records a title and description against a storage key once the
client has finished a direct upload. Posts live in memory only and are
gone after a restart.
"""

import logging
from typing import Optional

from fastapi import APIRouter, status

from ...core.posts.register import PostRecord
from ..dependencies import PostRegisterDep
from ..schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter()


class PostCreateRequest(CamelModel):
    """Metadata for a file the client already uploaded."""
    title: Optional[str] = None
    description: Optional[str] = None
    file_key: Optional[str] = None


class PostResponse(CamelModel):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    file_key: Optional[str] = None

    @classmethod
    def from_record(cls, record: PostRecord) -> "PostResponse":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            file_key=record.file_key,
        )


class PostCreatedResponse(CamelModel):
    success: bool = True
    message: str = "Post created"
    post: PostResponse


@router.post(
    "",
    response_model=PostCreatedResponse,
    status_code=status.HTTP_200_OK,
    summary="Create a post",
    description="Attach a title and description to an uploaded file key. The key is not checked.",
)
async def create_post(body: PostCreateRequest, register: PostRegisterDep) -> PostCreatedResponse:
    record = register.append(body.title, body.description, body.file_key)

    logger.info(
        "Post created",
        extra={"post_id": record.id, "file_key": record.file_key}
    )

    return PostCreatedResponse(post=PostResponse.from_record(record))


@router.get(
    "",
    response_model=list[PostResponse],
    summary="List posts",
    description="All posts in creation order.",
)
async def list_posts(register: PostRegisterDep) -> list[PostResponse]:
    return [PostResponse.from_record(record) for record in register.list()]

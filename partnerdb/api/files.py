"""
File upload / download endpoints backed by the S3-compatible file store.
"""
from fastapi import APIRouter, status
from starlette.responses import StreamingResponse

from partnerdb.api.schemas import UploadBody
from partnerdb.engine import storage as file_store

router = APIRouter(prefix="/api", tags=["files"])


@router.post("/upload", status_code=status.HTTP_201_CREATED)
def upload_endpoint(body: UploadBody):
    stored = file_store.upload_file(body.data, body.name, body.mime_type)
    return {"success": True, "data": stored.to_json()}


@router.get("/files/{key:path}")
def download_endpoint(key: str):
    obj = file_store.fetch_file(key)
    headers = {}
    if obj.etag:
        headers["ETag"] = obj.etag
    if obj.content_length is not None:
        headers["Content-Length"] = str(obj.content_length)
    return StreamingResponse(obj.iter_chunks(), media_type=obj.content_type, headers=headers)


@router.delete("/files/{key:path}")
def delete_file_endpoint(key: str):
    file_store.delete_file(key)
    return {"success": True}

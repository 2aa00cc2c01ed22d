from fastapi import APIRouter, Depends, File, UploadFile
from schemas.user import User, Role
from config.security import require_role
from services.storage_service import save_image

router = APIRouter(
    prefix="/uploads",
    tags=["uploads"]
)


@router.post("/images", status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    current_user: User = Depends(require_role(Role.vendor, Role.admin, detail="Doar furnizorii pot încărca imagini")),
):
    data = await file.read()
    url = save_image(data, file.content_type, current_user.user_id)
    return {"url": url}

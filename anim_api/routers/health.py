from fastapi import APIRouter

from anim_sdk.loader import load_catalog_version

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok", "version": load_catalog_version()}

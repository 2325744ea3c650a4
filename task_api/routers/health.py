from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ..database import SchemaInitializer

router = APIRouter()


@router.get("/health")
def health_check():
    return {"status": "healthy"}


@router.get("/health/ready")
def readiness_check(request: Request):
    """Report the schema initializer state; 503 until the tables exist."""
    initializer: SchemaInitializer = request.app.state.initializer
    status_code = status.HTTP_200_OK if initializer.ready else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=initializer.snapshot())

from fastapi.responses import JSONResponse

from app.schemas.result_schemas import ActionResult


def to_response(result: ActionResult) -> JSONResponse:
    """Render an action result with the status code matching its outcome."""
    return JSONResponse(
        status_code=result.status_code,
        content=result.model_dump(mode="json"),
    )

import sys
import logging
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from routes.document_routes import router as document_router
from routes.lesson_routes import router as lesson_router
from utils.exceptions import LessonLoomError

# Configure logging
logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler('app.log')
    ]
)

load_dotenv()

# FastAPI App
app = FastAPI(title="LessonLoom")


@app.exception_handler(LessonLoomError)
async def lessonloom_exception_handler(request: Request, exc: LessonLoomError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.error_code}] {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.error_code},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    try:
        # Try the standard encoder
        detail = jsonable_encoder(exc.errors())
    except UnicodeDecodeError:
        # Binary upload data can't be echoed back
        detail = [
            {
                "loc": ["binary_content"],
                "msg": "Binary data cannot be properly decoded as UTF-8",
                "type": "binary_data_error",
            }
        ]

    return JSONResponse(
        status_code=422,
        content={"detail": detail},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(document_router)
app.include_router(lesson_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from core.errors import TicketingError
from core.health_check import health_check
from core.log import logger
from core.responses import TicketingErrorResponse, common_response
from routes.admin import router as admin_router
from routes.auth import router as auth_router
from routes.category import router as category_router
from routes.event import router as event_router
from routes.promo_code import router as promo_code_router
from routes.registration import router as registration_router
from routes.ticket import router as ticket_router
from routes.user import router as user_router

from settings import CORS_ORIGINS, ENVIRONTMENT

if ENVIRONTMENT != "test":
    health_check()

app = FastAPI(title="Event Ticketing BE")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(event_router)
app.include_router(ticket_router)
app.include_router(registration_router)
app.include_router(promo_code_router)
app.include_router(category_router)
app.include_router(admin_router)
app.include_router(user_router)


@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    error_details = []
    for error in exc.errors():
        field = error["loc"][0] if error["loc"] else "general"
        message = error["msg"]
        error_details.append({"field": field, "message": message})

    return JSONResponse(
        status_code=422,
        content={
            "message": "Validation error on form data.",
            "errors": error_details,
        },
    )


@app.exception_handler(TicketingError)
async def ticketing_exception_handler(request: Request, exc: TicketingError):
    logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return common_response(TicketingErrorResponse(exc))


@app.get("/")
async def hello():
    logger.info("hello")
    return {"Hello": "from event ticketing BE"}


@app.get("/health")
def health():
    return {"status": "ok"}

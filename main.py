# main.py
"""
Portal Frota - Aplicação FastAPI Principal

Guias de remessa de manutenção de frota:
- Autenticação e cadastro de pessoal
- Bases, catálogo de serviços e guias
- Exportação em PDF e painel de BI

Com autenticação centralizada via JWT (cookie ou header Bearer).
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import CORS_ORIGINS, ERRO_500_MENSAGEM, SERVICE_NAME, TEMPLATES_DIR, UPLOAD_FOLDER, UPLOAD_URL_PREFIX
from database.init_db import init_database
from auth.gate import DASHBOARD_HOME
from auth.router import router as auth_router
from users.router import router as users_router
from middleware.authorization import AuthorizationGateMiddleware
from middleware.request_id import RequestIDMiddleware
from utils.exceptions import PortalFrotaError
from utils.logging_config import get_logger, setup_logging
from utils.rate_limit import limiter, rate_limit_exceeded_handler

# Import dos sistemas
from sistemas.bases.router import router as bases_router
from sistemas.service_items.router import router as service_items_router
from sistemas.repair_orders.router import (
    router as repair_orders_router,
    router_base64 as repair_orders_base64_router,
    router_servicos as repair_order_services_router,
)
from sistemas.bi.router import router as bi_router

logger = get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle events da aplicação.
    Executa na inicialização e no shutdown.
    """
    # Startup
    setup_logging()
    logger.info("Iniciando Portal Frota")
    init_database()
    yield
    # Shutdown
    logger.info("Encerrando Portal Frota")


# Cria a aplicação FastAPI
app = FastAPI(
    title="Portal Frota",
    description="Guias de remessa de manutenção de frota",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter

# Ordem: o último adicionado é o mais externo
app.add_middleware(AuthorizationGateMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Templates Jinja2 para páginas do portal
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# Fotos enviadas nas guias
UPLOAD_FOLDER.mkdir(parents=True, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(UPLOAD_FOLDER)), name="uploads")


# ==================================================
# TRATAMENTO DE ERROS
# ==================================================

def _erro(status_code: int, message: str, details=None, headers=None) -> JSONResponse:
    conteudo = {"error": True, "message": message}
    if details is not None:
        conteudo["details"] = details
    return JSONResponse(status_code=status_code, content=conteudo, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, str):
        return _erro(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))
    return _erro(
        exc.status_code, "Erro na requisição",
        details=jsonable_encoder(exc.detail), headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _erro(400, "Dados inválidos", details=jsonable_encoder(exc.errors()))


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    # Campos JSON dentro de formulários multipart são validados no handler
    erros = exc.errors(include_url=False, include_context=False)
    return _erro(400, "Dados inválidos", details=jsonable_encoder(erros))


@app.exception_handler(PortalFrotaError)
async def dominio_error_handler(request: Request, exc: PortalFrotaError):
    details = jsonable_encoder(exc.details) if exc.details is not None else None
    return _erro(exc.status_code, exc.message, details=details)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Violação de integridade", path=request.url.path, erro=str(exc.orig))
    return _erro(409, "Registro em conflito com dados existentes")


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Erro não tratado", path=request.url.path, method=request.method)
    return _erro(500, ERRO_500_MENSAGEM)


# ==================================================
# ROTAS DO PORTAL
# ==================================================

@app.get("/")
async def root():
    """Redireciona para o dashboard (o portão leva ao login se preciso)"""
    return RedirectResponse(url=DASHBOARD_HOME)


@app.get("/health")
async def health_check():
    """Health check para monitoramento"""
    return {"status": "ok", "service": SERVICE_NAME}


# ==================================================
# ROUTERS DA API
# ==================================================

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(bases_router, prefix=API_PREFIX)
app.include_router(service_items_router, prefix=API_PREFIX)
app.include_router(repair_orders_router, prefix=API_PREFIX)
app.include_router(repair_orders_base64_router, prefix=API_PREFIX)
app.include_router(repair_order_services_router, prefix=API_PREFIX)
app.include_router(bi_router, prefix=API_PREFIX)


# ==================================================
# PÁGINAS DO PORTAL (Jinja2)
# ==================================================

@app.get("/login")
async def login_page(request: Request):
    """Página de login"""
    return templates.TemplateResponse(request, "login.html")


@app.get("/register")
async def register_page(request: Request):
    """Página de cadastro"""
    return templates.TemplateResponse(request, "register.html")


@app.get("/registration-pending")
async def registration_pending_page(request: Request):
    """Aviso de cadastro aguardando aprovação"""
    return templates.TemplateResponse(request, "registration_pending.html")


@app.get("/dashboard")
async def dashboard_root():
    return RedirectResponse(url=DASHBOARD_HOME)


@app.get("/dashboard/{section}")
async def dashboard_page(request: Request, section: str):
    """Dashboard do orçamentista (guias, bases, itens, pessoal, BI)"""
    return templates.TemplateResponse(request, "dashboard.html", {"section": section})


@app.get("/repair-order")
async def repair_order_page(request: Request):
    """Lançamento de guia pelo mecânico"""
    return templates.TemplateResponse(request, "repair_order.html")


# ==================================================
# EXECUÇÃO DIRETA
# ==================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

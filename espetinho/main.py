"""
FastAPI Application Entry Point

Espetinho Maria - ordering and inventory API used by the public menu site
and the admin panel.

Endpoints:
    - /api/produtos: Product catalog (product + stock pairs)
    - /api/estoques: Standalone stock rows
    - /api/categorias: Fixed category set
    - /api/pedidos: Orders, kitchen queue and statistics
    - /api/clientes/{id}/pedidos: Order history of a customer
    - /admin/login, /admin/logout, /admin/session: Admin panel session
    - GET /api/status, GET /health: Liveness and database check

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from espetinho.core.config import get_settings, setup_logging
from espetinho.core.exceptions import NotFoundError, TransactionError, ValidationError
from espetinho.database import engine, get_db, init_db
from espetinho.schemas import (
    CategoryProducts,
    CategoryResponse,
    ErrorResponse,
    HealthResponse,
    LoginRequest,
    OrderCreate,
    OrderResponse,
    ProductCreate,
    ProductDetail,
    ProductUpdate,
    StatisticsResponse,
    StatusUpdate,
    StockCreate,
    StockDetail,
    SuccessResponse,
)
from espetinho.services import (
    CategoryRegistry,
    CustomerDirectory,
    OrderManager,
    ProductManager,
    StatisticsAggregator,
    StockManager,
)
from espetinho.services.auth import get_credential_verifier

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🍢 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    verifier = get_credential_verifier()
    logger.info(f"✅ Credential Verifier: {verifier.provider_name}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Ordering and inventory API for a skewer bar. Products and their "
        "stock rows, orders and their items are always written together."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
    return response


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_product_manager(db: AsyncSession = Depends(get_db)) -> ProductManager:
    return ProductManager(db)


def get_stock_manager(db: AsyncSession = Depends(get_db)) -> StockManager:
    return StockManager(db)


def get_order_manager(db: AsyncSession = Depends(get_db)) -> OrderManager:
    return OrderManager(db)


def get_category_registry(db: AsyncSession = Depends(get_db)) -> CategoryRegistry:
    return CategoryRegistry(db)


def require_admin(request: Request) -> None:
    """Reject requests without the cookie set by /admin/login."""
    if request.cookies.get(settings.auth_cookie_name) != "true":
        raise HTTPException(status_code=401, detail="Não autenticado")


def envelope(message: str, data: Any = None) -> dict[str, Any]:
    return SuccessResponse(message=message, data=data).model_dump(mode="json")


# =============================================================================
# STATUS & HEALTH ENDPOINTS
# =============================================================================

@app.get("/api/status", tags=["Health"])
async def api_status() -> dict[str, str]:
    """API liveness with version."""
    return {
        "status": "online",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Verify the database answers."""
    db_status = "healthy"
    try:
        await db.execute(select(1))
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {e}"
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        status="operational" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        database=db_status,
    )


# =============================================================================
# PRODUCT ENDPOINTS
# =============================================================================

@app.get("/api/produtos", response_model=List[ProductDetail], tags=["Products"])
async def list_products(
    manager: ProductManager = Depends(get_product_manager),
) -> List[ProductDetail]:
    """List all products, most recently registered first."""
    return await manager.list()


@app.post("/api/produtos", status_code=201, tags=["Products"], summary="Create Product")
async def create_product(
    data: ProductCreate,
    manager: ProductManager = Depends(get_product_manager),
) -> dict[str, Any]:
    """Create a product and its stock row in one transaction."""
    created = await manager.create(data)
    return envelope("Produto criado com sucesso", created)


@app.get("/api/produtos/{product_id}", response_model=ProductDetail, tags=["Products"])
async def get_product(
    product_id: int,
    manager: ProductManager = Depends(get_product_manager),
) -> ProductDetail:
    return await manager.get(product_id)


@app.put("/api/produtos/{product_id}", tags=["Products"], summary="Update Product")
async def update_product(
    product_id: int,
    data: ProductUpdate,
    manager: ProductManager = Depends(get_product_manager),
) -> dict[str, Any]:
    changed = await manager.update(product_id, data)
    return envelope("Produto atualizado com sucesso", {"changed": changed})


@app.delete("/api/produtos/{product_id}", tags=["Products"], summary="Delete Product")
async def delete_product(
    product_id: int,
    manager: ProductManager = Depends(get_product_manager),
) -> dict[str, Any]:
    changed = await manager.delete(product_id)
    return envelope("Produto excluído com sucesso", {"changed": changed})


# =============================================================================
# STOCK ENDPOINTS
# =============================================================================

@app.get("/api/estoques", response_model=List[StockDetail], tags=["Stock"])
async def list_stock(manager: StockManager = Depends(get_stock_manager)) -> List[StockDetail]:
    return await manager.list()


@app.post("/api/estoques", status_code=201, tags=["Stock"])
async def create_stock(
    data: StockCreate,
    manager: StockManager = Depends(get_stock_manager),
) -> dict[str, Any]:
    stock = await manager.create(data)
    return envelope("Item de estoque criado com sucesso", stock)


@app.get("/api/estoques/{stock_id}", response_model=StockDetail, tags=["Stock"])
async def get_stock(
    stock_id: int,
    manager: StockManager = Depends(get_stock_manager),
) -> StockDetail:
    return await manager.get(stock_id)


@app.put("/api/estoques/{stock_id}", tags=["Stock"])
async def update_stock(
    stock_id: int,
    data: StockCreate,
    manager: StockManager = Depends(get_stock_manager),
) -> dict[str, Any]:
    changed = await manager.update(stock_id, data)
    return envelope("Item de estoque atualizado com sucesso", {"changed": changed})


@app.delete("/api/estoques/{stock_id}", tags=["Stock"])
async def delete_stock(
    stock_id: int,
    manager: StockManager = Depends(get_stock_manager),
) -> dict[str, Any]:
    changed = await manager.delete(stock_id)
    return envelope("Item de estoque excluído com sucesso", {"changed": changed})


# =============================================================================
# CATEGORY ENDPOINTS
# =============================================================================

@app.get("/api/categorias", response_model=List[CategoryResponse], tags=["Categories"])
async def list_categories(
    registry: CategoryRegistry = Depends(get_category_registry),
) -> List[CategoryResponse]:
    categories = await registry.list()
    return [CategoryResponse.model_validate(c) for c in categories]


@app.get("/api/categorias/{category_id}", response_model=CategoryResponse, tags=["Categories"])
async def get_category(
    category_id: int,
    registry: CategoryRegistry = Depends(get_category_registry),
) -> CategoryResponse:
    return CategoryResponse.model_validate(await registry.get(category_id))


@app.get(
    "/api/categorias/{category_id}/produtos",
    response_model=CategoryProducts,
    tags=["Categories"],
)
async def category_products(
    category_id: int,
    registry: CategoryRegistry = Depends(get_category_registry),
) -> CategoryProducts:
    return await registry.products_of(category_id)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.get("/api/pedidos", response_model=List[OrderResponse], tags=["Orders"])
async def list_orders(manager: OrderManager = Depends(get_order_manager)) -> List[OrderResponse]:
    """All orders with their customer, newest first."""
    return await manager.list()


@app.post("/api/pedidos", status_code=201, tags=["Orders"], summary="Create Order")
async def create_order(
    data: OrderCreate,
    manager: OrderManager = Depends(get_order_manager),
) -> dict[str, Any]:
    """
    Record an order posted by the menu site.

    The order and all its items are saved together. If the customer cannot
    be resolved the order is saved without one.
    """
    order = await manager.create(data)
    return envelope("Pedido criado com sucesso", await manager.get(order.id))


@app.get("/api/pedidos/pendentes", response_model=List[OrderResponse], tags=["Orders"])
async def pending_orders(
    manager: OrderManager = Depends(get_order_manager),
) -> List[OrderResponse]:
    """Kitchen queue: pending orders, oldest first."""
    return await manager.pending()


@app.get("/api/pedidos/estatisticas", response_model=StatisticsResponse, tags=["Statistics"])
@app.get("/api/estatisticas", response_model=StatisticsResponse, tags=["Statistics"])
async def get_statistics(db: AsyncSession = Depends(get_db)) -> StatisticsResponse:
    """Order count and revenue over the trailing window."""
    stats = await StatisticsAggregator(db).compute()
    return StatisticsResponse(
        order_count=stats.order_count,
        revenue=stats.revenue,
        computed_at=stats.computed_at,
        window_hours=stats.window_hours,
    )


@app.get("/api/pedidos/{order_id}", response_model=OrderResponse, tags=["Orders"])
async def get_order(
    order_id: int,
    manager: OrderManager = Depends(get_order_manager),
) -> OrderResponse:
    """Order with customer and items."""
    return await manager.get(order_id)


@app.put("/api/pedidos/{order_id}/status", tags=["Orders"], summary="Update Order Status")
async def update_order_status(
    order_id: int,
    data: StatusUpdate,
    manager: OrderManager = Depends(get_order_manager),
) -> dict[str, Any]:
    changed = await manager.update_status(order_id, data.status)
    return envelope("Status do pedido atualizado com sucesso", {"changed": changed})


@app.get("/api/clientes/{customer_id}/pedidos", response_model=List[OrderResponse], tags=["Customers"])
async def customer_orders(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
) -> List[OrderResponse]:
    return await CustomerDirectory(db).orders_of(customer_id)


# =============================================================================
# ADMIN SESSION ENDPOINTS
# =============================================================================

@app.post("/admin/login", tags=["Admin"])
async def admin_login(data: LoginRequest, response: Response) -> Any:
    """Check admin credentials and set the session cookie."""
    if not get_credential_verifier().verify(data.username, data.password):
        return _error(401, "Credenciais inválidas")

    response.set_cookie(
        key=settings.auth_cookie_name,
        value="true",
        httponly=True,
        samesite="lax",
    )
    logger.info(f"Admin login: {data.username}")
    return envelope("Login realizado com sucesso")


@app.get("/admin/logout", tags=["Admin"])
async def admin_logout(response: Response) -> dict[str, Any]:
    response.delete_cookie(settings.auth_cookie_name)
    return envelope("Logout realizado com sucesso")


@app.get("/admin/session", tags=["Admin"], dependencies=[Depends(require_admin)])
async def admin_session() -> dict[str, Any]:
    return envelope("Sessão ativa", {"authenticated": True})


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _error(status_code: int, error: str, detail: Optional[Any] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, "Dados inválidos", exc.errors)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same 400 shape as business-rule violations."""
    errors = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        errors.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return _error(400, "Dados inválidos", errors)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, exc.message)


@app.exception_handler(TransactionError)
async def transaction_error_handler(request: Request, exc: TransactionError) -> JSONResponse:
    logger.error(f"Transaction failed on {request.method} {request.url.path}: {exc.__cause__}")
    return _error(
        500,
        str(exc),
        str(exc.__cause__) if settings.debug else "Operação desfeita, nenhum dado foi alterado",
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return _error(
        500,
        "Erro interno do servidor",
        str(exc) if settings.debug else "Ocorreu um erro inesperado",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "espetinho.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )

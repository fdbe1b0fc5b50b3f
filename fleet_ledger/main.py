from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fleet_ledger.core.config import settings
from fleet_ledger import models  # noqa: F401  registers every mapper
from fleet_ledger.common.error_handlers import register_error_handlers
from fleet_ledger.api.v1 import (
    auth,
    user,
    branch,
    vehicle,
    category,
    expense,
    trip,
    purchase,
    purchase_sale,
    dashboard,
    transaction,
)

app = FastAPI(title=settings.APP_NAME, version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["authentication"])
app.include_router(user.router, prefix="/api/v1/users", tags=["users"])
app.include_router(branch.router, prefix="/api/v1/branches", tags=["branches"])
app.include_router(vehicle.router, prefix="/api/v1/vehicles", tags=["vehicles"])
app.include_router(
    category.router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(expense.router, prefix="/api/v1/expenses", tags=["expenses"])
app.include_router(trip.router, prefix="/api/v1/trips", tags=["trips"])
app.include_router(
    purchase.router, prefix="/api/v1/purchases", tags=["purchases"])
app.include_router(
    purchase_sale.router, prefix="/api/v1/purchase-sales", tags=["purchase-sales"])
app.include_router(
    dashboard.router, prefix="/api/v1/dashboard", tags=["dashboard"])
app.include_router(
    transaction.router, prefix="/api/v1/transactions", tags=["transactions"])


@app.get("/")
def read_root():
    return {"message": f"Welcome to the {settings.APP_NAME} APIs!", "currency": settings.DEFAULT_CURRENCY}

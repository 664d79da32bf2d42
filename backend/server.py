"""
PRINT CRM - API Backend

CRM / ERP d'une imprimerie: leads, clients, commandes, design,
coûts, devis et calculateurs d'imposition.

Démarre avec:
    uvicorn server:app --host 0.0.0.0 --port 8001 --reload
"""

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
import logging

from config import db, CORS_ORIGINS, LOG_LEVEL, SCHEDULER_ENABLED

# Configuration logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("print_crm")

# Créer l'app
app = FastAPI(
    title="PRINT CRM",
    description="CRM de gestion d'une imprimerie (leads, commandes, devis, imposition)",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==================== IMPORT DES ROUTES ====================

from routes import (
    leads,
    lead_sources,
    interactions,
    webhooks,
    customers,
    orders,
    sales_employees,
    sales_allocation,
    product_groups,
    costing,
    quotations,
    layout,
    dashboard,
    reports,
    design_templates,
    google_drive,
    settings,
    event_log,
)

# Routes avec préfixe /api
for module in (
    leads, lead_sources, interactions, webhooks, customers, orders,
    sales_employees, sales_allocation, product_groups, costing, quotations,
    layout, dashboard, reports, design_templates, google_drive, settings, event_log,
):
    app.include_router(module.router, prefix="/api")


# ==================== ROUTE RACINE ====================

@app.get("/")
async def root():
    return {
        "name": "PRINT CRM API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/api/health")
async def health():
    return {"status": "ok"}


# ==================== STARTUP ====================

@app.on_event("startup")
async def startup():
    logger.info("PRINT CRM démarré")

    await db.leads.create_index("id", unique=True)
    await db.leads.create_index("phone")
    await db.leads.create_index("assigned_sales_id")
    await db.leads.create_index("created_at")
    await db.customers.create_index("id", unique=True)
    await db.customers.create_index("phone", unique=True)
    await db.orders.create_index("id", unique=True)
    await db.orders.create_index("order_code", unique=True)
    await db.orders.create_index("customer_id")
    await db.orders.create_index("status")
    await db.design_files.create_index("order_id")
    await db.payments.create_index("order_id")
    await db.sales_employees.create_index("id", unique=True)
    await db.lead_sources.create_index("api_key")
    await db.interaction_logs.create_index("lead_id")
    await db.event_log.create_index("created_at")

    logger.info("Index MongoDB créés")

    if SCHEDULER_ENABLED:
        from scheduler_service import task_scheduler
        task_scheduler.start()


@app.on_event("shutdown")
async def shutdown():
    if SCHEDULER_ENABLED:
        from scheduler_service import task_scheduler
        task_scheduler.stop()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)

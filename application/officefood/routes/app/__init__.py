from fastapi import APIRouter
from officefood.routes.app.users import app_router as users_router
from officefood.routes.app.menu import app_router as menu_router
from officefood.routes.app.order_sessions import app_router as order_sessions_router
from officefood.routes.app.orders import app_router as orders_router
from officefood.routes.app.billing import app_router as billing_router

app_router = APIRouter()
app_router.include_router(users_router)
app_router.include_router(menu_router)
# sessions first so /orders/sessions is not captured by /orders/{order_id}
app_router.include_router(order_sessions_router)
app_router.include_router(orders_router)
app_router.include_router(billing_router)

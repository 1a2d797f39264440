"""
Admin order management endpoints
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from storefront.core.config import config
from storefront.core.responses import ApiErrorModel, ApiResponse
from storefront.dependencies import get_order_repository
from storefront.repositories.order import OrderRepository
from storefront.schemas.order import OrderQuery, OrderStatusUpdate

router = APIRouter()


@router.get("")
async def list_orders(
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(config.admin_per_page, ge=1, le=100, description="Orders per page"),
    search: str = Query(None, description="Search order number, customer name, email and notes"),
    status: str = Query(None, description="Order status, or 'all'"),
    date_from: date = Query(None, description="Created on or after this date"),
    date_to: date = Query(None, description="Created on or before this date"),
    min_amount: float = Query(None, ge=0, description="Minimum order total"),
    max_amount: float = Query(None, ge=0, description="Maximum order total"),
    sort_by: str = Query("created_at", description="Sort field"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$", description="asc or desc"),
    repository: OrderRepository = Depends(get_order_repository),
):
    """
    List orders for the admin dashboard.
    Unknown sort fields fall back to created_at.
    """
    query = OrderQuery(
        page=page,
        per_page=per_page,
        search=search,
        status=status,
        date_from=date_from,
        date_to=date_to,
        min_amount=min_amount,
        max_amount=max_amount,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ApiResponse.success(await repository.index(query))


@router.get("/{order_number}", responses={404: {"model": ApiErrorModel}})
async def get_order(order_number: str, repository: OrderRepository = Depends(get_order_repository)):
    return ApiResponse.success(await repository.show(order_number))


@router.put(
    "/{order_number}",
    responses={404: {"model": ApiErrorModel}, 409: {"model": ApiErrorModel}, 422: {"model": ApiErrorModel}},
)
async def update_order(
    order_number: str,
    payload: OrderStatusUpdate,
    repository: OrderRepository = Depends(get_order_repository),
):
    """Change the status of an order"""
    order = await repository.update(order_number, payload)
    return ApiResponse.success(order, message=f"Order status updated to '{order.status}' successfully")


@router.delete("/{order_number}", responses={404: {"model": ApiErrorModel}, 422: {"model": ApiErrorModel}})
async def delete_order(order_number: str, repository: OrderRepository = Depends(get_order_repository)):
    """Delete an order that has not shipped"""
    order = await repository.destroy(order_number)
    return ApiResponse.success(
        message=(
            f"Order {order.order_number} has been successfully deleted "
            f"along with {order.items_count} order items."
        ),
    )

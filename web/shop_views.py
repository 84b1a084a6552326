from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from core.cart_service import add_to_cart, get_cart_count, get_user_cart, remove_from_cart
from core.catalog_service import get_product, list_products
from core.order_service import checkout_summary, list_orders, place_order
from web.deps import current_claims, current_user, get_session, optional_claims
from web.schemas import (
    CartOut,
    CatalogOut,
    CheckoutOut,
    DashboardOut,
    OrderItemOut,
    OrderOut,
    OrdersOut,
    ProductOut,
    ProductPage,
    UserOut,
)

router = APIRouter()


def _products(products):
    return [ProductOut.model_validate(p) for p in products]


def _order_out(order) -> OrderOut:
    return OrderOut(
        id=order.id,
        full_name=order.full_name,
        phone_number=order.phone_number,
        address=order.address,
        city=order.city,
        province=order.province,
        total_amount=order.total_amount,
        payment_method=order.payment_method,
        created_at=order.created_at,
        items=[
            OrderItemOut(
                product_id=item.product_id,
                name=item.product.name if item.product else "",
                quantity=item.quantity,
                price=item.price,
                subtotal=item.subtotal,
            )
            for item in order.items
        ],
    )


@router.get("/", response_model=CatalogOut)
def home(claims=Depends(optional_claims), db: Session = Depends(get_session)):
    if claims is not None:
        return RedirectResponse("/dashboard", status_code=303)
    return CatalogOut(products=_products(list_products(db)), is_logged_in=False)


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(user=Depends(current_user), db: Session = Depends(get_session)):
    return DashboardOut(
        user=UserOut.model_validate(user),
        products=_products(list_products(db)),
        cart_count=get_cart_count(db, user.id),
    )


@router.get("/view-product/{product_id}", response_model=ProductPage)
def view_product(product_id: int, user=Depends(current_user), db: Session = Depends(get_session)):
    product = get_product(db, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="No such product in the database")
    return ProductPage(user=UserOut.model_validate(user), product=ProductOut.model_validate(product))


@router.post("/add-to-cart/{product_id}")
def add_item(
    product_id: int,
    quantity: str = Form(None),
    claims=Depends(current_claims),
    db: Session = Depends(get_session),
):
    line = add_to_cart(db, claims["id"], product_id, quantity)
    if line is None:
        raise HTTPException(status_code=404, detail="No such product in the database")
    return RedirectResponse("/cart", status_code=303)


@router.get("/cart", response_model=CartOut)
def cart(user=Depends(current_user), db: Session = Depends(get_session)):
    return CartOut(user=UserOut.model_validate(user), items=get_user_cart(db, user.id))


@router.get("/remove-item/{cart_id}")
def remove_item(cart_id: int, claims=Depends(current_claims), db: Session = Depends(get_session)):
    remove_from_cart(db, claims["id"], cart_id)
    return RedirectResponse("/cart", status_code=303)


@router.get("/checkout", response_model=CheckoutOut)
def checkout(user=Depends(current_user), db: Session = Depends(get_session)):
    lines, total = checkout_summary(db, user.id)
    return CheckoutOut(user=UserOut.model_validate(user), items=lines, total=total)


@router.post("/place-order")
def submit_order(
    full_name: str = Form(""),
    phone_number: str = Form(""),
    address: str = Form(""),
    city: str = Form(""),
    province: str = Form(""),
    payment_method: str = Form(""),
    claims=Depends(current_claims),
    db: Session = Depends(get_session),
):
    shipping = {
        "full_name": full_name,
        "phone_number": phone_number,
        "address": address,
        "city": city,
        "province": province,
    }
    place_order(db, claims["id"], shipping, payment_method)
    return RedirectResponse("/orders", status_code=303)


@router.get("/orders", response_model=OrdersOut)
def orders(user=Depends(current_user), db: Session = Depends(get_session)):
    return OrdersOut(user=UserOut.model_validate(user), orders=[_order_out(o) for o in list_orders(db, user.id)])

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Depends, File, Form, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

import config
from auth import get_current_user_id, require_seller
from database import get_db, close_db
from errors import ValidationError, catch_unhandled_errors, register_exception_handlers
from media import MediaStore, get_media_store, upload_all
from repository import CartRepository, ProductRepository, now_millis
from schemas import CartUpdate, Product as ProductSchema, User as UserSchema

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("storefront")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_db()


app = FastAPI(title="Storefront API", lifespan=lifespan)

# registered first so it runs inside CORS
app.middleware("http")(catch_unhandled_errors)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# Routes
@app.get("/")
def read_root():
    return {"message": "Storefront API"}


@app.get("/api/health")
def health(db: Database = Depends(get_db)):
    response = {
        "backend": "running",
        "database": "not available",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        response["collections"] = db.list_collection_names()
        response["database"] = "available"
        response["database_name"] = db.name
        response["connection_status"] = "Connected"
    except Exception as e:
        logger.warning("Health check could not reach the database: %s", e)
        response["database"] = f"error: {str(e)[:80]}"
    return response


# User
@app.get("/api/user/data")
def user_data(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    user = CartRepository(db).get_user(user_id)
    user = UserSchema.model_validate(user).model_dump(by_alias=True)
    return {"success": True, "user": user}


# Cart
@app.get("/api/cart/get")
def get_cart(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    cart_items = CartRepository(db).get_cart(user_id)
    return {"success": True, "cartItems": cart_items}


@app.post("/api/cart/update")
def update_cart(payload: CartUpdate, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    CartRepository(db).set_quantity(user_id, payload.itemId, payload.quantity)
    return {"success": True, "message": "Cart updated successfully"}


# Products
@app.post("/api/product/add", status_code=201)
def add_product(
    name: str = Form(...),
    description: str = Form(""),
    category: str = Form(...),
    price: float = Form(..., ge=0, allow_inf_nan=False),
    offerPrice: float = Form(..., ge=0, allow_inf_nan=False),
    images: Optional[List[UploadFile]] = File(default=None),
    user_id: str = Depends(require_seller),
    store: MediaStore = Depends(get_media_store),
    db: Database = Depends(get_db),
):
    files = [(f.filename, f.file.read()) for f in images or [] if f.filename]
    if not files:
        raise ValidationError("No files uploaded.")

    urls = upload_all(store, files)

    product = ProductSchema(
        userId=user_id,
        name=name,
        description=description,
        category=category,
        price=price,
        offerPrice=offerPrice,
        image=urls,
        date=now_millis(),
    )
    new_product = ProductRepository(db).create(product)
    logger.info("Seller %s added product %s with %d image(s)", user_id, new_product["_id"], len(urls))
    return {"success": True, "message": "Product added successfully", "newProduct": new_product}


@app.get("/api/product/list")
def list_products(db: Database = Depends(get_db)):
    products = ProductRepository(db).list_all()
    return {"success": True, "products": products}


@app.get("/api/product/seller-list")
def seller_products(user_id: str = Depends(require_seller), db: Database = Depends(get_db)):
    products = ProductRepository(db).list_by_owner(user_id)
    return {"success": True, "products": products}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)

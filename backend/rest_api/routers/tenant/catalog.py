"""
Catalog endpoints: categories, products and delivery neighborhoods.
Listing is public (customer menu); mutations require the tenant admin token.
"""

from rest_api.routers.tenant._base import (
    APIRouter, Depends, status, Session, get_db,
    Establishment, current_establishment, require_tenant_admin,
    CreatedResponse, SuccessResponse,
)
from rest_api.services.domain import CategoryService, NeighborhoodService, ProductService
from shared.utils.schemas import (
    CategoryCreate,
    CategoryOutput,
    CategoryUpdate,
    NeighborhoodCreate,
    NeighborhoodOutput,
    NeighborhoodUpdate,
    ProductCreate,
    ProductOutput,
    ProductUpdate,
)


router = APIRouter(tags=["catalog"])


# =============================================================================
# Categories
# =============================================================================


@router.get("/categories", response_model=list[CategoryOutput])
def list_categories(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[CategoryOutput]:
    return CategoryService(db).list_all(establishment.id)


@router.post("/categories", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> CreatedResponse:
    return CreatedResponse(id=CategoryService(db).create(body.model_dump(), establishment.id))


@router.put("/categories/{category_id}", response_model=SuccessResponse)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    CategoryService(db).update(category_id, body.model_dump(), establishment.id)
    return SuccessResponse()


@router.delete("/categories/{category_id}", response_model=SuccessResponse)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    """Delete a category. Its products stay, without category."""
    CategoryService(db).delete(category_id, establishment.id)
    return SuccessResponse()


# =============================================================================
# Products
# =============================================================================


@router.get("/products", response_model=list[ProductOutput])
def list_products(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[ProductOutput]:
    return ProductService(db).list_all(establishment.id)


@router.post("/products", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> CreatedResponse:
    """Create a product. Fails when the plan's product limit is reached."""
    return CreatedResponse(id=ProductService(db).create(body.model_dump(), establishment.id))


@router.put("/products/{product_id}", response_model=SuccessResponse)
def update_product(
    product_id: int,
    body: ProductUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    """Update the fields present in the body."""
    ProductService(db).update(product_id, body.model_dump(exclude_unset=True), establishment.id)
    return SuccessResponse()


@router.delete("/products/{product_id}", response_model=SuccessResponse)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    ProductService(db).delete(product_id, establishment.id)
    return SuccessResponse()


# =============================================================================
# Neighborhoods (delivery zones)
# =============================================================================


@router.get("/neighborhoods", response_model=list[NeighborhoodOutput])
def list_neighborhoods(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[NeighborhoodOutput]:
    return NeighborhoodService(db).list_all(establishment.id)


@router.post("/neighborhoods", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_neighborhood(
    body: NeighborhoodCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> CreatedResponse:
    return CreatedResponse(id=NeighborhoodService(db).create(body.model_dump(), establishment.id))


@router.put("/neighborhoods/{neighborhood_id}", response_model=SuccessResponse)
def update_neighborhood(
    neighborhood_id: int,
    body: NeighborhoodUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    NeighborhoodService(db).update(neighborhood_id, body.model_dump(exclude_unset=True), establishment.id)
    return SuccessResponse()


@router.delete("/neighborhoods/{neighborhood_id}", response_model=SuccessResponse)
def delete_neighborhood(
    neighborhood_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    NeighborhoodService(db).delete(neighborhood_id, establishment.id)
    return SuccessResponse()

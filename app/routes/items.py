"""CRUD routes for the placeholder item collections."""

import logging
from typing import List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.item import ItemMixin, Scenario, Source, Style
from app.schemas.item import ItemCreate, ItemResponse, ItemUpdate

logger = logging.getLogger(__name__)


def build_item_router(model: Type[ItemMixin], prefix: str, singular: str) -> APIRouter:
    """Create list/create/update/delete routes for one item collection."""
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])

    @router.get("", response_model=List[ItemResponse])
    def list_items(db: Session = Depends(get_db)):
        """List all items, newest first."""
        return db.query(model).order_by(model.created_at.desc()).all()

    @router.post("", response_model=ItemResponse)
    def create_item(data: ItemCreate, db: Session = Depends(get_db)):
        """Create an item."""
        values = data.model_dump(exclude_none=True)
        if "id" in values and db.get(model, values["id"]) is not None:
            raise HTTPException(status_code=409, detail=f"{singular} already exists")

        item = model(**values)
        db.add(item)
        db.commit()
        db.refresh(item)

        logger.info(f"Created {singular} {item.id}")
        return item

    @router.put("", response_model=ItemResponse)
    def update_item(data: ItemUpdate, db: Session = Depends(get_db)):
        """Update the fields sent for the item identified by `id`."""
        if not data.id:
            raise HTTPException(status_code=400, detail="ID is required")

        item = db.get(model, data.id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"{singular} not found")

        for key, value in data.model_dump(exclude_unset=True, exclude={"id"}).items():
            setattr(item, key, value)
        db.commit()
        db.refresh(item)
        return item

    @router.delete("")
    def delete_item(id: Optional[str] = None, db: Session = Depends(get_db)):
        """Delete an item by `?id=`."""
        if not id:
            raise HTTPException(status_code=400, detail="ID is required")

        item = db.get(model, id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"{singular} not found")

        db.delete(item)
        db.commit()

        logger.info(f"Deleted {singular} {id}")
        return {"success": True}

    return router


sources_router = build_item_router(Source, "/sources", "Source")
styles_router = build_item_router(Style, "/styles", "Style")
scenarios_router = build_item_router(Scenario, "/scenarios", "Scenario")

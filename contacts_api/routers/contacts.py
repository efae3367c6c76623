from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from contacts_api import auth, crud, schemas
from contacts_api.db import get_db
from contacts_api.errors import NotFoundError

router = APIRouter(prefix="/contacts", tags=["contacts"], dependencies=[Depends(auth.get_current_user)])

CONTACT_NOT_FOUND = "Contact not found"
MAX_PAGE = 10**9
MAX_LIMIT = 10**9


@router.get("", response_model=List[schemas.Contact])
def get_contacts(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=MAX_LIMIT),
    favorite: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Return one page of contacts in stored order.

    :param page: 1-based page number.
    :param limit: Page size.
    :param favorite: Only favorites when true, only non-favorites when false.
    """
    return crud.get_contacts(db, skip=(page - 1) * limit, limit=limit, favorite=favorite)


@router.get("/{contact_id}", response_model=schemas.Contact)
def get_contact(contact_id: int, db: Session = Depends(get_db)):
    contact = crud.get_contact(db, contact_id)
    if contact is None:
        raise NotFoundError(CONTACT_NOT_FOUND)
    return contact


@router.post("", response_model=schemas.Contact, status_code=status.HTTP_201_CREATED)
def create_contact(contact: schemas.ContactCreate, db: Session = Depends(get_db)):
    return crud.create_contact(db, contact)


@router.put("/{contact_id}", response_model=schemas.Contact)
def update_contact(contact_id: int, contact: schemas.ContactUpdate, db: Session = Depends(get_db)):
    updated = crud.update_contact(db, contact_id, contact)
    if updated is None:
        raise NotFoundError(CONTACT_NOT_FOUND)
    return updated


@router.patch("/{contact_id}/favorite", response_model=schemas.Contact)
def update_favorite(contact_id: int, body: schemas.FavoriteUpdate, db: Session = Depends(get_db)):
    updated = crud.update_favorite(db, contact_id, body.favorite)
    if updated is None:
        raise NotFoundError(CONTACT_NOT_FOUND)
    return updated


@router.delete("/{contact_id}", response_model=schemas.MessageResponse)
def delete_contact(contact_id: int, db: Session = Depends(get_db)):
    if crud.delete_contact(db, contact_id) is None:
        raise NotFoundError(CONTACT_NOT_FOUND)
    return {"message": "Contact deleted"}

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contacts_api import models, schemas, security

MAX_ID = 2**63 - 1


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    """
    Find a user by email address.

    :param db: Database session.
    :param email: Email to look up.
    :return: The user, or None if nobody registered with that email.
    """
    return db.query(models.User).filter(models.User.email == email).first()


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    """
    Find a user by id.

    :param db: Database session.
    :param user_id: Id taken from a session token.
    :return: The user, or None if it no longer exists.
    """
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_verification_token(db: Session, token: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.verification_token == token).first()


def create_user(db: Session, user: schemas.UserCreate, verification_token: str | None = None) -> models.User:
    """
    Persist a new user with a hashed password and a gravatar avatar.

    :param db: Database session.
    :param user: Validated signup body.
    :param verification_token: Token the verification email will carry.
    :return: The stored user.
    :raises ValueError: If the email is already registered.
    """
    db_user = models.User(
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        password=security.hash_password(user.password),
        avatar_url=security.gravatar_url(user.email),
        verification_token=verification_token,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("User already exists")
    db.refresh(db_user)
    return db_user


def update_user(db: Session, user: models.User, **fields) -> models.User:
    """
    Write ``fields`` onto ``user`` and commit.

    :param db: Database session.
    :param user: User to change.
    :param fields: Column values to set.
    :return: The refreshed user.
    :raises ValueError: If the change collides with another user's email.
    """
    for key, value in fields.items():
        setattr(user, key, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Email already in use")
    db.refresh(user)
    return user


def delete_user(db: Session, user: models.User) -> None:
    """
    Remove a user, used to undo a signup whose verification email failed.

    :param db: Database session.
    :param user: User to remove.
    """
    db.delete(user)
    db.commit()


def get_contacts(db: Session, skip: int = 0, limit: int = 20, favorite: Optional[bool] = None) -> List[models.Contact]:
    """
    Return one page of contacts in insertion order.

    :param db: Database session.
    :param skip: Number of contacts to skip.
    :param limit: Maximum number of contacts to return.
    :param favorite: Filter on the favorite flag when not None.
    :return: List of contacts.
    """
    query = db.query(models.Contact)
    if favorite is not None:
        query = query.filter(models.Contact.favorite == favorite)
    return query.order_by(models.Contact.id).offset(skip).limit(limit).all()


def get_contact(db: Session, contact_id: int) -> Optional[models.Contact]:
    """
    Find a contact by id.

    :param db: Database session.
    :param contact_id: Contact id from the URL.
    :return: The contact, or None if absent. Ids outside the database integer range are never stored.
    """
    if not -MAX_ID <= contact_id <= MAX_ID:
        return None
    return db.query(models.Contact).filter(models.Contact.id == contact_id).first()


def create_contact(db: Session, contact: schemas.ContactCreate) -> models.Contact:
    """
    Store a new contact.

    :param db: Database session.
    :param contact: Validated contact body.
    :return: The created contact with its id.
    """
    db_contact = models.Contact(name=contact.name, email=contact.email, phone=contact.phone)
    db.add(db_contact)
    db.commit()
    db.refresh(db_contact)
    return db_contact


def update_contact(db: Session, contact_id: int, contact: schemas.ContactUpdate) -> Optional[models.Contact]:
    """
    Replace name, email and phone of a contact.

    :param db: Database session.
    :param contact_id: Contact id.
    :param contact: Validated contact body.
    :return: The updated contact, or None if absent.
    """
    db_contact = get_contact(db, contact_id)
    if db_contact is None:
        return None
    db_contact.name = contact.name
    db_contact.email = contact.email
    db_contact.phone = contact.phone
    db.commit()
    db.refresh(db_contact)
    return db_contact


def update_favorite(db: Session, contact_id: int, favorite: bool) -> Optional[models.Contact]:
    db_contact = get_contact(db, contact_id)
    if db_contact is None:
        return None
    db_contact.favorite = favorite
    db.commit()
    db.refresh(db_contact)
    return db_contact


def delete_contact(db: Session, contact_id: int) -> Optional[models.Contact]:
    """
    Delete a contact.

    :param db: Database session.
    :param contact_id: Contact id.
    :return: The deleted contact, or None if absent.
    """
    db_contact = get_contact(db, contact_id)
    if db_contact is None:
        return None
    db.delete(db_contact)
    db.commit()
    return db_contact

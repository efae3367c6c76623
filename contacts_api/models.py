from sqlalchemy import Column, Integer, String, Boolean

from contacts_api.db import Base

SUBSCRIPTIONS = ("starter", "pro", "business")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    subscription = Column(String, nullable=False, default="starter")
    avatar_url = Column(String)
    verify = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String, unique=True, index=True, nullable=True)
    token = Column(String, nullable=True)


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=False)
    favorite = Column(Boolean, nullable=False, default=False)

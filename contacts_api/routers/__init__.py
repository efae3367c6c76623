from contacts_api.routers import contacts, users

__all__ = ["contacts", "users"]

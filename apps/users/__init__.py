"""Users app package.

Customers and administrators of the storefront. Accounts are mirrored from
the external identity provider on first authenticated request; use
``apps.users.models.AppUser`` as the AUTH_USER_MODEL throughout the project.
"""

"""Core Business Logic Module

This module reconciles declarative user configuration against the Okta
management API, independent of any CLI or plugin framework.

Module Structure:
    - okta/             : Low-level Okta API client and services
    - schema.py         : User attribute catalog, UserData record, validation
    - delta.py          : Explicit per-field change flags (ChangeSet)
    - lifecycle.py      : Status normalization and lifecycle transitions
    - user_resource.py  : Create / read / update / delete / import of users
    - app_filter.py     : Application search filters and lookup
    - authenticators.py : Authenticator catalog
    - validators.py     : Attribute validation helpers
    - errors.py         : ProviderError, ValidationError, ReconcileError

Usage Pattern:
    Modules are not auto-imported; import explicitly when needed:
        from okta_provider.core.user_resource import create_user, update_user
        from okta_provider.core.schema import UserData
        from okta_provider.core.app_filter import build_app_filters, find_app
"""

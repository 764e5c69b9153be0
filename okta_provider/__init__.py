"""Okta user provider package.

To reconcile a user:
    from okta_provider.core.user_resource import create_user, update_user

To talk to the Okta API directly:
    from okta_provider.core.okta import OktaClient, OktaAdapter
"""

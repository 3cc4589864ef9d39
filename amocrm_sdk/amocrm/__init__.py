"""
AmoCRM integration module
REST API client and OAuth2 helpers

    from amocrm_sdk.amocrm.client import AmoCRMClient, ListOptions
    from amocrm_sdk.amocrm.auth import refresh_access_token
"""

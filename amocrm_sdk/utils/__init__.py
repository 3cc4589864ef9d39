"""
Utility modules for amoCRM SDK
URL filters, logging setup

    from amocrm_sdk.utils.urlfilters import parse_url, LeadFilter
    from amocrm_sdk.utils.logging_setup import setup_logging
"""

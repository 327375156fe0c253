# itsm_portal/backend/__init__.py

# itsm_portal/backend/app/schemas/__init__.py
